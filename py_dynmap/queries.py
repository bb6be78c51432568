"""
Filtering and pagination over a generated cell set.

These helpers serve the map screens: contiguous id ranges, pages, and
post-hoc filters by region, type, ownership, fertility and resource
minimums. They never regenerate cells and never raise on inverted ranges;
an impossible criterion simply matches nothing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from .core.models import Cell, CellType

logger = structlog.get_logger()


class CellFilter(BaseModel):
    """Criteria a cell must meet; unset fields match everything."""

    region_id: Optional[int] = Field(None, description="Only cells of this region")
    cell_type: Optional[CellType] = Field(None, description="rural or urban")
    owned: Optional[bool] = Field(None, description="True for owned cells, False for free ones")
    fertility_min: Optional[float] = Field(None, description="Lowest fertility, inclusive")
    fertility_max: Optional[float] = Field(None, description="Highest fertility, inclusive")
    min_food: Optional[int] = Field(None, description="Minimum food capacity")
    min_energy: Optional[int] = Field(None, description="Minimum energy capacity")
    min_minerals: Optional[int] = Field(None, description="Minimum minerals capacity")
    min_tech: Optional[int] = Field(None, description="Minimum tech capacity")
    min_influence: Optional[int] = Field(None, description="Minimum influence capacity")
    search: Optional[str] = Field(None, description="Case-insensitive text in region name or climate")

    def is_empty_range(self) -> bool:
        """True when the fertility bounds are inverted."""
        return (
            self.fertility_min is not None
            and self.fertility_max is not None
            and self.fertility_min > self.fertility_max
        )

    def matches(self, cell: Cell) -> bool:
        if self.region_id is not None and cell.region_id != self.region_id:
            return False
        if self.cell_type is not None and cell.type != self.cell_type:
            return False
        if self.owned is not None and (cell.owner_state_id is not None) != self.owned:
            return False
        if self.fertility_min is not None and cell.fertility < self.fertility_min:
            return False
        if self.fertility_max is not None and cell.fertility > self.fertility_max:
            return False

        nodes = cell.resource_nodes
        minimums = (
            (self.min_food, nodes.food_capacity),
            (self.min_energy, nodes.energy_capacity),
            (self.min_minerals, nodes.minerals_capacity),
            (self.min_tech, nodes.tech_capacity),
            (self.min_influence, nodes.influence_capacity),
        )
        for minimum, capacity in minimums:
            if minimum is not None and capacity < minimum:
                return False

        if self.search:
            term = self.search.strip().lower()
            haystack = f"{cell.region_name} {cell.climate.value}".lower()
            if term and term not in haystack:
                return False
        return True


@dataclass
class Page:
    """One page of cells."""

    items: List[Cell]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def filter_cells(cells: Iterable[Cell], criteria: Optional[CellFilter] = None) -> List[Cell]:
    """Cells matching ``criteria``, in their original order."""
    if criteria is None:
        return list(cells)
    if criteria.is_empty_range():
        logger.debug("Inverted fertility range, empty result",
                     fertility_min=criteria.fertility_min,
                     fertility_max=criteria.fertility_max)
        return []
    return [cell for cell in cells if criteria.matches(cell)]


def slice_cells(cells: Sequence[Cell], start: int, end: int) -> List[Cell]:
    """Cells at 1-based positions ``start..end`` inclusive."""
    if end < start:
        return []
    return list(cells[max(start, 1) - 1:max(end, 0)])


def paginate(cells: Sequence[Cell], page: int = 1, page_size: int = 50) -> Page:
    """
    Cut ``cells`` into pages.

    Pages are 1-based; a page past the end, a page below 1, or a
    non-positive page size gives an empty page rather than an error.
    """
    total_items = len(cells)
    if page_size <= 0:
        return Page(items=[], page=page, page_size=page_size,
                    total_items=total_items, total_pages=0)

    total_pages = math.ceil(total_items / page_size)
    if page < 1:
        items: List[Cell] = []
    else:
        start = (page - 1) * page_size + 1
        items = slice_cells(cells, start, start + page_size - 1)

    return Page(items=items, page=page, page_size=page_size,
                total_items=total_items, total_pages=total_pages)
