"""
Resource capacities and dominant resource profile of a cell.

Rural cells lean towards food, minerals and energy; urban cells towards
tech and influence. Each capacity is a weighted mix of the cell's physical
attributes scaled by a per-type multiplier.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .models import Cell, CellType, ResourceNodes


class Resource(str, Enum):
    """Resource kinds, in profile tie-break order."""

    FOOD = "food"
    ENERGY = "energy"
    MINERALS = "minerals"
    TECH = "tech"
    INFLUENCE = "influence"


PROFILE_LABELS: Dict[Resource, str] = {
    Resource.FOOD: "Agrícola",
    Resource.ENERGY: "Energético",
    Resource.MINERALS: "Mineral",
    Resource.TECH: "Tecnológico",
    Resource.INFLUENCE: "Influente",
}

# (fertility, habitability, mineral_richness, energy_potential) weights
CAPACITY_WEIGHTS: Dict[Resource, Tuple[float, float, float, float]] = {
    Resource.FOOD: (0.8, 0.2, 0.0, 0.0),
    Resource.ENERGY: (0.0, 0.0, 0.15, 0.85),
    Resource.MINERALS: (0.0, 0.0, 0.9, 0.1),
    Resource.TECH: (0.0, 0.7, 0.0, 0.3),
    Resource.INFLUENCE: (0.2, 0.8, 0.0, 0.0),
}

TYPE_MULTIPLIERS: Dict[CellType, Dict[Resource, float]] = {
    CellType.RURAL: {
        Resource.FOOD: 1.2,
        Resource.ENERGY: 1.1,
        Resource.MINERALS: 1.2,
        Resource.TECH: 0.4,
        Resource.INFLUENCE: 0.3,
    },
    CellType.URBAN: {
        Resource.FOOD: 0.6,
        Resource.ENERGY: 0.9,
        Resource.MINERALS: 0.8,
        Resource.TECH: 1.3,
        Resource.INFLUENCE: 1.2,
    },
}

CAPACITY_SCALE = 100


@dataclass(frozen=True)
class ResourceProfile:
    """Dominant resource of a cell."""

    resource: Resource
    label: str
    capacity: int


def _round_half_up(value: float) -> int:
    return max(0, int(math.floor(value + 0.5)))


def derive_resource_nodes(
    fertility: float,
    habitability: float,
    mineral_richness: float,
    energy_potential: float,
    cell_type: CellType,
) -> ResourceNodes:
    """Compute the five capacities from raw attributes."""
    attributes = (fertility, habitability, mineral_richness, energy_potential)
    multipliers = TYPE_MULTIPLIERS[CellType(cell_type)]

    capacities = {}
    for resource, weights in CAPACITY_WEIGHTS.items():
        mix = sum(w * a for w, a in zip(weights, attributes))
        capacities[resource] = _round_half_up(CAPACITY_SCALE * mix * multipliers[resource])

    return ResourceNodes(
        food_capacity=capacities[Resource.FOOD],
        energy_capacity=capacities[Resource.ENERGY],
        minerals_capacity=capacities[Resource.MINERALS],
        tech_capacity=capacities[Resource.TECH],
        influence_capacity=capacities[Resource.INFLUENCE],
    )


def derive(cell: Cell) -> ResourceNodes:
    """Resource capacities for a generated cell."""
    return derive_resource_nodes(
        cell.fertility,
        cell.habitability,
        cell.mineral_richness,
        cell.energy_potential,
        cell.type,
    )


def capacity_of(nodes: ResourceNodes, resource: Resource) -> int:
    return getattr(nodes, f"{resource.value}_capacity")


def get_resource_profile(cell: Cell) -> ResourceProfile:
    """
    Pick the cell's dominant resource.

    The highest capacity wins; ties go to the earlier resource in
    Resource declaration order.
    """
    best = None
    best_capacity = -1
    for resource in Resource:
        capacity = capacity_of(cell.resource_nodes, resource)
        if capacity > best_capacity:
            best, best_capacity = resource, capacity
    return ResourceProfile(resource=best, label=PROFILE_LABELS[best], capacity=best_capacity)
