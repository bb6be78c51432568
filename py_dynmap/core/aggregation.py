"""
Region and planet rollups over a generated cell set.

Both reductions are a single pass with integer accumulation, so the
totals reproduce the rebalanced population exactly.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from .models import Cell, CellType
from .topology import Climate


@dataclass
class RegionTotals:
    """Population and cell counts for one region."""

    region_id: int
    region_name: str
    climate: Climate
    cell_count: int = 0
    urban_cells: int = 0
    rural_cells: int = 0
    total_population: int = 0
    urban_population: int = 0
    rural_population: int = 0
    area_km2: int = 0

    @property
    def density(self) -> float:
        """Inhabitants per km²."""
        return self.total_population / self.area_km2 if self.area_km2 else 0.0


@dataclass
class GlobalTotals:
    """Population and cell counts for the whole planet."""

    cell_count: int = 0
    urban_cells: int = 0
    rural_cells: int = 0
    total: int = 0
    urban_population: int = 0
    rural_population: int = 0
    area_km2: int = 0
    # Population living in urban / rural cells, by cell type
    urban_cell_population: int = 0
    rural_cell_population: int = 0

    @property
    def density(self) -> float:
        return self.total / self.area_km2 if self.area_km2 else 0.0

    @property
    def urban_cell_fraction(self) -> float:
        return self.urban_cells / self.cell_count if self.cell_count else 0.0

    @property
    def average_urban_cell_population(self) -> float:
        return self.urban_cell_population / self.urban_cells if self.urban_cells else 0.0

    @property
    def average_rural_cell_population(self) -> float:
        return self.rural_cell_population / self.rural_cells if self.rural_cells else 0.0


def compute_region_totals(cells: Iterable[Cell]) -> List[RegionTotals]:
    """Group cells by region, ordered by region id."""
    totals: Dict[int, RegionTotals] = {}
    for cell in cells:
        region = totals.get(cell.region_id)
        if region is None:
            region = RegionTotals(cell.region_id, cell.region_name, cell.climate)
            totals[cell.region_id] = region

        region.cell_count += 1
        if cell.type is CellType.URBAN:
            region.urban_cells += 1
        else:
            region.rural_cells += 1
        region.total_population += cell.population_total
        region.urban_population += cell.population_urban
        region.rural_population += cell.population_rural
        region.area_km2 += cell.area_km2

    return [totals[region_id] for region_id in sorted(totals)]


def compute_global_totals(cells: Iterable[Cell]) -> GlobalTotals:
    """Planet-wide totals."""
    totals = GlobalTotals()
    for cell in cells:
        totals.cell_count += 1
        if cell.type is CellType.URBAN:
            totals.urban_cells += 1
            totals.urban_cell_population += cell.population_total
        else:
            totals.rural_cells += 1
            totals.rural_cell_population += cell.population_total
        totals.total += cell.population_total
        totals.urban_population += cell.population_urban
        totals.rural_population += cell.population_rural
        totals.area_km2 += cell.area_km2
    return totals
