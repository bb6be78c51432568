"""Immutable value types produced by the generation engine."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .topology import Climate


class CellType(str, Enum):
    """Settlement type of a cell."""

    RURAL = "rural"
    URBAN = "urban"


@dataclass(frozen=True)
class ResourceNodes:
    """Resource capacities of a cell (non-negative integers)."""

    food_capacity: int
    energy_capacity: int
    minerals_capacity: int
    tech_capacity: int
    influence_capacity: int


@dataclass(frozen=True)
class Cell:
    """One cell of the planet, fully generated and rebalanced."""

    id: int
    area_km2: int
    region_id: int
    region_name: str
    climate: Climate
    type: CellType

    fertility: float         # 0.2..2.0
    habitability: float      # 0.2..2.0
    mineral_richness: float  # 0.2..2.0
    energy_potential: float  # 0.2..2.0

    population_total: int
    population_urban: int
    population_rural: int

    urban_share: float
    rural_share: float

    resource_nodes: ResourceNodes
    # Ownership is assigned by game state outside the engine
    owner_state_id: Optional[str] = None

    @property
    def is_urban(self) -> bool:
        return self.type is CellType.URBAN

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view with enums flattened to their values."""
        data = asdict(self)
        data["climate"] = self.climate.value
        data["type"] = self.type.value
        return data
