"""
Static topology catalog: the planet's regions and their share of cells.

This module implements:
- The region table with climate biases for attribute generation
- Exact cell apportionment across regions (largest remainder)
- Contiguous cell id ranges per region
- Per-region urban probability targeting the global urban ratio
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .apportionment import largest_remainder, shares_to_weights
from .constants import (
    BASE_URBAN_RATIO,
    MAX_URBAN_PROBABILITY,
    MIN_URBAN_PROBABILITY,
    TOTAL_CELLS,
)

logger = structlog.get_logger()

SHARE_TOLERANCE = 1e-6


class Climate(str, Enum):
    """Climate of a region."""

    ARID = "arid"
    TEMPERATE = "temperate"
    TROPICAL = "tropical"
    POLAR = "polar"
    OCEANIC = "oceanic"
    HIGHLAND = "highland"
    ANOMALY = "anomaly"


@dataclass(frozen=True)
class Region:
    """A named group of cells sharing a climate and a share of the planet."""

    id: int
    name: str
    climate: Climate
    declared_share: float
    fertility_base: float = 1.0     # 0.3..1.7
    habitability_base: float = 1.0  # 0.2..1.4
    mineral_base: float = 1.0       # 0.3..1.7
    energy_base: float = 1.0        # 0.3..1.7
    urbanization_pull: float = 1.0  # 0.6..1.7


DEFAULT_REGIONS: Tuple[Region, ...] = (
    # Tropical & temperate: high fertility and urbanization pull
    Region(1, "Selvas Equatoriais", Climate.TROPICAL, 0.16, 1.5, 1.2, 0.9, 1.0, 1.4),
    Region(2, "Planícies Temperadas", Climate.TEMPERATE, 0.18, 1.3, 1.3, 1.0, 1.0, 1.3),
    # Arid: poor soil, rich in energy
    Region(3, "Desertos Centrais", Climate.ARID, 0.11, 0.6, 0.8, 1.1, 1.4, 0.8),
    # Highland: minerals over habitability
    Region(4, "Cordilheiras Altas", Climate.HIGHLAND, 0.09, 0.9, 0.6, 1.5, 1.0, 0.9),
    Region(5, "Terras Polares Norte", Climate.POLAR, 0.045, 0.5, 0.5, 1.1, 1.1, 0.7),
    Region(6, "Terras Polares Sul", Climate.POLAR, 0.025, 0.5, 0.5, 1.0, 1.1, 0.7),
    Region(7, "Costas Oceânicas", Climate.OCEANIC, 0.11, 1.1, 1.2, 0.9, 1.0, 1.2),
    Region(8, "Altiplanos Temperados", Climate.HIGHLAND, 0.07, 1.0, 0.8, 1.4, 1.0, 1.0),
    Region(9, "Vales Fluviais", Climate.TEMPERATE, 0.09, 1.4, 1.3, 1.0, 1.0, 1.4),
    Region(10, "Arquipélagos Tropicais", Climate.TROPICAL, 0.07, 1.5, 1.2, 0.9, 1.1, 1.5),
    # Anomaly: rare extremes
    Region(11, "Zonas de Anomalia", Climate.ANOMALY, 0.025, 1.2, 0.9, 1.6, 1.6, 1.1),
    Region(12, "Fjords & Penínsulas", Climate.OCEANIC, 0.025, 1.0, 1.1, 1.1, 1.0, 1.1),
)


class TopologyCatalog:
    """
    Immutable partition of the planet's cells across regions.

    Regions are ordered by id; cell ids are handed out contiguously in that
    order, starting at 1.
    """

    def __init__(self, regions: Sequence[Region], total_cells: int = TOTAL_CELLS):
        """
        Initialize and apportion the catalog.

        Args:
            regions: Region definitions; shares must sum to 1
            total_cells: Number of cells on the planet

        Raises:
            ValueError: If the region table is malformed
        """
        if not regions:
            raise ValueError("Topology needs at least one region")
        if total_cells < 0:
            raise ValueError(f"total_cells must be non-negative, got {total_cells}")

        ordered = tuple(sorted(regions, key=lambda r: r.id))
        ids = [r.id for r in ordered]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate region ids in topology: {ids}")
        if any(r.declared_share < 0 for r in ordered):
            raise ValueError("Region shares must be non-negative")
        share_sum = sum(r.declared_share for r in ordered)
        if abs(share_sum - 1.0) > SHARE_TOLERANCE:
            raise ValueError(f"Region shares must sum to 1, got {share_sum}")

        self.regions: Tuple[Region, ...] = ordered
        self.total_cells = total_cells

        weights = shares_to_weights([r.declared_share for r in ordered])
        self._counts = tuple(largest_remainder(weights, total_cells))

        starts = np.cumsum((0,) + self._counts[:-1]) + 1
        self._ranges = tuple(
            (region, int(start), int(start) + count - 1)
            for region, start, count in zip(ordered, starts, self._counts)
        )

        logger.debug(
            "Topology apportioned",
            regions=len(ordered),
            total_cells=total_cells,
            counts=list(self._counts),
        )

    def __len__(self) -> int:
        return len(self.regions)

    def cell_counts(self) -> Tuple[int, ...]:
        """Cells per region, in region id order."""
        return self._counts

    def region_ranges(self) -> Tuple[Tuple[Region, int, int], ...]:
        """(region, first cell id, last cell id) per region; empty regions have last < first."""
        return self._ranges

    def region_indices(self) -> np.ndarray:
        """Index into ``regions`` for every cell, position 0 being cell id 1."""
        return np.repeat(np.arange(len(self.regions)), self._counts)

    def region_for_cell(self, cell_id: int) -> Optional[Region]:
        """Region owning ``cell_id``, or None when the id is off the planet."""
        for region, first, last in self._ranges:
            if first <= cell_id <= last:
                return region
        return None

    def get_region(self, region_id: int) -> Optional[Region]:
        for region in self.regions:
            if region.id == region_id:
                return region
        return None

    def urban_probabilities(self) -> np.ndarray:
        """
        Probability that a cell is urban, per region.

        The pull is normalized by its share-weighted mean, so without
        clipping the expected global urban fraction is BASE_URBAN_RATIO.
        """
        shares = np.array([r.declared_share for r in self.regions], dtype=np.float64)
        pulls = np.array([r.urbanization_pull for r in self.regions], dtype=np.float64)
        mean_pull = float(np.dot(shares, pulls)) / float(shares.sum())
        if mean_pull <= 0:
            return np.full(len(self.regions), BASE_URBAN_RATIO)
        return np.clip(
            BASE_URBAN_RATIO * pulls / mean_pull,
            MIN_URBAN_PROBABILITY,
            MAX_URBAN_PROBABILITY,
        )

    def region_table(self) -> List[dict]:
        """Regions with their apportioned cell counts, for display."""
        return [
            {
                "id": region.id,
                "name": region.name,
                "climate": region.climate.value,
                "declared_share": region.declared_share,
                "cell_count": count,
                "first_cell_id": first,
                "last_cell_id": last,
            }
            for (region, first, last), count in zip(self._ranges, self._counts)
        ]


DEFAULT_TOPOLOGY = TopologyCatalog(DEFAULT_REGIONS)
