"""
Core planet generation functionality.
"""

from .constants import CELL_AREA_KM2, GLOBAL_DENSITY, TOTAL_CELLS, TOTAL_POPULATION
from .seed_stream import SeedStream, draw, normalize_seed
from .topology import Climate, Region, TopologyCatalog, DEFAULT_REGIONS, DEFAULT_TOPOLOGY
from .models import Cell, CellType, ResourceNodes
from .generator import generate_cells
from .resources import ResourceProfile, derive, get_resource_profile
from .aggregation import GlobalTotals, RegionTotals, compute_global_totals, compute_region_totals
from .cell_store import CellStore, generate_all_cells_rebalanced

__all__ = ['TOTAL_CELLS', 'CELL_AREA_KM2', 'GLOBAL_DENSITY', 'TOTAL_POPULATION',
           'SeedStream', 'draw', 'normalize_seed',
           'Climate', 'Region', 'TopologyCatalog', 'DEFAULT_REGIONS', 'DEFAULT_TOPOLOGY',
           'Cell', 'CellType', 'ResourceNodes', 'generate_cells',
           'ResourceProfile', 'derive', 'get_resource_profile',
           'GlobalTotals', 'RegionTotals', 'compute_global_totals', 'compute_region_totals',
           'CellStore', 'generate_all_cells_rebalanced']
