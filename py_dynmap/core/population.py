"""
Global population rebalancing.

Raw per-cell estimates are floating-point weights. This module turns them
into integers that sum to exactly TOTAL_POPULATION with largest-remainder
apportionment, then splits each cell's population into urban and rural
parts with the same discipline so both parts add back to the cell total.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from .apportionment import largest_remainder
from .constants import RURAL_CELL_SHARE, TOTAL_POPULATION, URBAN_CELL_SHARE
from .seed_stream import SeedStream

logger = structlog.get_logger()

# Raw weights are scaled so the largest maps to 2**40 before rounding to ints
WEIGHT_SCALE = float(1 << 40)
SHARE_DENOMINATOR = 100


def quantize_weights(raw_population: np.ndarray) -> Optional[np.ndarray]:
    """
    Exact integer weights proportional to the raw estimates.

    Returns None when the estimates carry no usable weight (empty, not
    finite, or not positive in total); callers fall back to a uniform split.
    """
    raw = np.asarray(raw_population, dtype=np.float64)
    if raw.size == 0 or not np.all(np.isfinite(raw)):
        return None
    raw = np.maximum(raw, 0.0)
    total_raw = float(raw.sum())
    if total_raw <= 0:
        return None
    weights = np.rint(raw / raw.max() * WEIGHT_SCALE).astype(np.int64)
    if int(weights.sum()) <= 0:
        return None
    return weights


def rebalance_population(raw_population, total: int = TOTAL_POPULATION) -> np.ndarray:
    """
    Apportion ``total`` inhabitants over cells proportionally to raw weights.

    Args:
        raw_population: Raw estimates, one per cell, in cell id order
        total: Exact population to distribute

    Returns:
        int64 array of cell populations summing to ``total``
    """
    n_cells = len(raw_population)
    if n_cells == 0:
        return np.zeros(0, dtype=np.int64)

    weights = quantize_weights(raw_population)
    if weights is None:
        logger.warning("Raw population has no weight, using uniform split", cells=n_cells)
        weights = np.ones(n_cells, dtype=np.int64)

    allocation = largest_remainder(weights.tolist(), total)
    populations = np.array(allocation, dtype=np.int64)

    logger.debug(
        "Population rebalanced",
        cells=n_cells,
        total=int(populations.sum()),
        min_cell=int(populations.min()),
        max_cell=int(populations.max()),
    )
    return populations


def urban_share_hundredths(stream: SeedStream, cell_ids, is_urban) -> np.ndarray:
    """
    Urban share of each cell's population, in hundredths.

    Urban cells centre on 0.75, rural cells on 0.10, each with its own
    bounded noise from the "urban_share" stream.
    """
    u = stream.draw_array(cell_ids, "urban_share")
    is_urban = np.asarray(is_urban, dtype=bool)

    def bounded(params):
        centre, amplitude, low, high = params
        return np.clip(centre + (u - 0.5) * 2.0 * amplitude, low, high)

    share = np.where(is_urban, bounded(URBAN_CELL_SHARE), bounded(RURAL_CELL_SHARE))
    return np.rint(share * SHARE_DENOMINATOR).astype(np.int64)


@dataclass
class PopulationSplit:
    """Urban/rural breakdown for a batch of cells."""

    urban: np.ndarray
    rural: np.ndarray
    urban_hundredths: np.ndarray

    @property
    def urban_share(self) -> np.ndarray:
        return self.urban_hundredths / SHARE_DENOMINATOR

    @property
    def rural_share(self) -> np.ndarray:
        return (SHARE_DENOMINATOR - self.urban_hundredths) / SHARE_DENOMINATOR


def split_population(populations, urban_hundredths) -> PopulationSplit:
    """
    Split cell populations into urban and rural parts exactly.

    Vectorized form of largest_remainder([u, 100 - u], population) per cell:
    both parts are floored, and the single leftover unit (if any) goes to
    the part with the larger remainder, urban on ties.
    """
    populations = np.asarray(populations, dtype=np.int64)
    urban_hundredths = np.asarray(urban_hundredths, dtype=np.int64)
    rural_hundredths = SHARE_DENOMINATOR - urban_hundredths

    urban, urban_rem = np.divmod(populations * urban_hundredths, SHARE_DENOMINATOR)
    rural, rural_rem = np.divmod(populations * rural_hundredths, SHARE_DENOMINATOR)
    deficit = populations - urban - rural

    to_urban = (deficit > 0) & (urban_rem >= rural_rem)
    urban = urban + np.where(to_urban, deficit, 0)
    rural = rural + np.where(to_urban, 0, deficit)

    return PopulationSplit(urban=urban, rural=rural, urban_hundredths=urban_hundredths)
