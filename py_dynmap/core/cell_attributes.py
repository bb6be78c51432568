"""
Per-cell attribute generation and raw population estimate.

This module implements:
- Urban/rural type assignment from a per-region urban probability
- Climate-biased fertility, habitability, minerals and energy draws
- The unnormalized population weight used by the rebalancer

Every value depends only on (seed, cell id, region), never on another
cell, so any slice of ids can be generated on its own.
"""

from dataclasses import dataclass, fields
from typing import Optional, Sequence

import numpy as np
import structlog

from .constants import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    CELL_AREA_KM2,
    ENERGY_AMPLITUDE,
    FERTILITY_AMPLITUDE,
    FERTILITY_EXPONENT,
    GLOBAL_DENSITY,
    HABITABILITY_AMPLITUDE,
    HABITABILITY_EXPONENT,
    MINERAL_AMPLITUDE,
    RURAL_MULTIPLIER,
    URBAN_MULTIPLIER,
)
from .seed_stream import SeedStream
from .topology import TopologyCatalog

logger = structlog.get_logger()


@dataclass
class AttributeOptions:
    """Tunable coefficients for attribute and raw population generation."""

    fertility_amplitude: float = FERTILITY_AMPLITUDE
    habitability_amplitude: float = HABITABILITY_AMPLITUDE
    mineral_amplitude: float = MINERAL_AMPLITUDE
    energy_amplitude: float = ENERGY_AMPLITUDE
    attribute_min: float = ATTRIBUTE_MIN
    attribute_max: float = ATTRIBUTE_MAX
    urban_multiplier: float = URBAN_MULTIPLIER
    rural_multiplier: float = RURAL_MULTIPLIER
    habitability_exponent: float = HABITABILITY_EXPONENT
    fertility_exponent: float = FERTILITY_EXPONENT


@dataclass
class CellAttributes:
    """Struct-of-arrays for a contiguous batch of generated cells."""

    cell_ids: np.ndarray        # int64, 1-based
    region_index: np.ndarray    # index into TopologyCatalog.regions
    is_urban: np.ndarray        # bool
    fertility: np.ndarray
    habitability: np.ndarray
    mineral_richness: np.ndarray
    energy_potential: np.ndarray
    raw_population: np.ndarray

    def __len__(self) -> int:
        return len(self.cell_ids)

    @classmethod
    def concatenate(cls, parts: Sequence["CellAttributes"]) -> "CellAttributes":
        """Join batches in the given order."""
        return cls(
            **{
                f.name: np.concatenate([getattr(p, f.name) for p in parts])
                for f in fields(cls)
            }
        )


class CellAttributeGenerator:
    """Generates cell attributes for one seed over a topology."""

    def __init__(
        self,
        stream: SeedStream,
        topology: TopologyCatalog,
        options: Optional[AttributeOptions] = None,
    ):
        """
        Initialize attribute generator.

        Args:
            stream: Seed stream providing all random draws
            topology: Region catalog the cells belong to
            options: Generation coefficients
        """
        self.stream = stream
        self.topology = topology
        self.options = options or AttributeOptions()

        regions = topology.regions
        self._region_indices = topology.region_indices()
        self._urban_probability = topology.urban_probabilities()
        self._fertility_base = np.array([r.fertility_base for r in regions])
        self._habitability_base = np.array([r.habitability_base for r in regions])
        self._mineral_base = np.array([r.mineral_base for r in regions])
        self._energy_base = np.array([r.energy_base for r in regions])

    def _biased(self, cell_ids: np.ndarray, tag: str, base: np.ndarray, amplitude: float) -> np.ndarray:
        """Centre a draw on the region base and clamp into the attribute bounds."""
        u = self.stream.draw_array(cell_ids, tag)
        value = base + (u - 0.5) * 2.0 * amplitude
        value = np.clip(value, self.options.attribute_min, self.options.attribute_max)
        return np.round(value, 2)

    def generate(self, cell_ids) -> CellAttributes:
        """
        Generate attributes for the given cell ids.

        Args:
            cell_ids: 1-based cell ids, all within the topology

        Returns:
            CellAttributes for those ids, in the order given
        """
        cell_ids = np.asarray(cell_ids, dtype=np.int64)
        region_index = self._region_indices[cell_ids - 1]

        is_urban = (
            self.stream.draw_array(cell_ids, "type")
            < self._urban_probability[region_index]
        )
        fertility = self._biased(
            cell_ids, "fertility", self._fertility_base[region_index],
            self.options.fertility_amplitude,
        )
        habitability = self._biased(
            cell_ids, "habitability", self._habitability_base[region_index],
            self.options.habitability_amplitude,
        )
        mineral_richness = self._biased(
            cell_ids, "minerals", self._mineral_base[region_index],
            self.options.mineral_amplitude,
        )
        energy_potential = self._biased(
            cell_ids, "energy", self._energy_base[region_index],
            self.options.energy_amplitude,
        )

        raw_population = estimate_raw_population(
            habitability, fertility, is_urban, self.options
        )

        return CellAttributes(
            cell_ids=cell_ids,
            region_index=region_index,
            is_urban=is_urban,
            fertility=fertility,
            habitability=habitability,
            mineral_richness=mineral_richness,
            energy_potential=energy_potential,
            raw_population=raw_population,
        )


def estimate_raw_population(
    habitability: np.ndarray,
    fertility: np.ndarray,
    is_urban: np.ndarray,
    options: Optional[AttributeOptions] = None,
) -> np.ndarray:
    """
    Unnormalized population per cell.

    raw = area * density * habitability^a * fertility^b * type multiplier.
    Only the relative size matters; the rebalancer rescales to the planet
    total.
    """
    options = options or AttributeOptions()
    habitability_factor = np.power(habitability, options.habitability_exponent)
    fertility_factor = np.power(fertility, options.fertility_exponent)
    type_multiplier = np.where(is_urban, options.urban_multiplier, options.rural_multiplier)
    return (
        CELL_AREA_KM2 * GLOBAL_DENSITY
        * habitability_factor * fertility_factor * type_multiplier
    )
