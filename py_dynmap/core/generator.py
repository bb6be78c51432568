"""
Full cell generation pipeline for one seed.

Phase 1 (map) generates attributes and raw population per chunk of cell
ids; chunks are independent and may run on a thread pool. Phase 2 (reduce)
waits for every chunk, then rebalances the population over the whole
planet and assembles the immutable Cell records.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

import numpy as np
import structlog

from .cell_attributes import AttributeOptions, CellAttributeGenerator, CellAttributes
from .constants import CELL_AREA_KM2, TOTAL_POPULATION
from .models import Cell, CellType
from .population import rebalance_population, split_population, urban_share_hundredths
from .resources import derive_resource_nodes
from .seed_stream import SeedStream
from .topology import DEFAULT_TOPOLOGY, TopologyCatalog

logger = structlog.get_logger()

DEFAULT_CHUNK_SIZE = 4096


def _chunks(total_cells: int, chunk_size: int) -> List[np.ndarray]:
    chunk_size = max(1, int(chunk_size))
    return [
        np.arange(start, min(start + chunk_size, total_cells + 1), dtype=np.int64)
        for start in range(1, total_cells + 1, chunk_size)
    ]


def generate_attributes(
    generator: CellAttributeGenerator,
    total_cells: int,
    workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> CellAttributes:
    """
    Phase 1: attributes for every cell, concatenated in id order.

    The result does not depend on ``workers`` or ``chunk_size``.
    """
    chunks = _chunks(total_cells, chunk_size)
    if not chunks:
        return generator.generate(np.zeros(0, dtype=np.int64))

    if workers > 1 and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            parts = list(executor.map(generator.generate, chunks))
    else:
        parts = [generator.generate(chunk) for chunk in chunks]

    return CellAttributes.concatenate(parts)


def build_cells(
    attributes: CellAttributes,
    populations: np.ndarray,
    stream: SeedStream,
    topology: TopologyCatalog,
) -> Tuple[Cell, ...]:
    """Assemble immutable Cell records from finished arrays."""
    split = split_population(
        populations,
        urban_share_hundredths(stream, attributes.cell_ids, attributes.is_urban),
    )

    cells = []
    for i in range(len(attributes)):
        region = topology.regions[int(attributes.region_index[i])]
        cell_type = CellType.URBAN if attributes.is_urban[i] else CellType.RURAL
        fertility = float(attributes.fertility[i])
        habitability = float(attributes.habitability[i])
        mineral_richness = float(attributes.mineral_richness[i])
        energy_potential = float(attributes.energy_potential[i])
        hundredths = int(split.urban_hundredths[i])

        cells.append(
            Cell(
                id=int(attributes.cell_ids[i]),
                area_km2=CELL_AREA_KM2,
                region_id=region.id,
                region_name=region.name,
                climate=region.climate,
                type=cell_type,
                fertility=fertility,
                habitability=habitability,
                mineral_richness=mineral_richness,
                energy_potential=energy_potential,
                population_total=int(populations[i]),
                population_urban=int(split.urban[i]),
                population_rural=int(split.rural[i]),
                urban_share=hundredths / 100,
                rural_share=(100 - hundredths) / 100,
                resource_nodes=derive_resource_nodes(
                    fertility, habitability, mineral_richness, energy_potential, cell_type
                ),
            )
        )
    return tuple(cells)


def generate_cells(
    seed: str,
    topology: Optional[TopologyCatalog] = None,
    options: Optional[AttributeOptions] = None,
    total_population: int = TOTAL_POPULATION,
    workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    stream_factory: Callable[[str], SeedStream] = SeedStream,
) -> Tuple[Cell, ...]:
    """
    Generate the whole planet for ``seed``.

    Args:
        seed: Any string; empty maps to the default seed
        topology: Region catalog, DEFAULT_TOPOLOGY if not given
        options: Attribute generation coefficients
        total_population: Exact planet population
        workers: Threads used for phase 1
        chunk_size: Cell ids per phase 1 task
        stream_factory: Builds the seed stream; swap for testing

    Returns:
        Tuple of Cell ordered by id, starting at 1
    """
    topology = topology or DEFAULT_TOPOLOGY
    stream = stream_factory(seed)
    start_time = time.perf_counter()

    logger.info(
        "Generating cells",
        seed=stream.seed,
        total_cells=topology.total_cells,
        workers=workers,
    )

    generator = CellAttributeGenerator(stream, topology, options)
    attributes = generate_attributes(generator, topology.total_cells, workers, chunk_size)

    # Phase 2 needs the complete raw vector
    populations = rebalance_population(attributes.raw_population, total_population)
    cells = build_cells(attributes, populations, stream, topology)

    logger.info(
        "Cells generated",
        seed=stream.seed,
        cells=len(cells),
        urban_cells=int(attributes.is_urban.sum()),
        elapsed_seconds=round(time.perf_counter() - start_time, 3),
    )
    return cells
