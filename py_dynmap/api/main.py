"""FastAPI read-only query surface over the cell engine."""

import logging
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import settings
from ..core.aggregation import GlobalTotals, RegionTotals, compute_global_totals, compute_region_totals
from ..core.cell_store import get_default_store
from ..core.constants import CELL_AREA_KM2, GLOBAL_DENSITY, TOTAL_CELLS, TOTAL_POPULATION
from ..core.models import Cell, CellType
from ..core.resources import get_resource_profile
from ..core.topology import DEFAULT_TOPOLOGY
from ..queries import CellFilter, filter_cells, paginate

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(
    title="Dynamic Map API",
    description="Deterministic planetary cell generation and rebalancing",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Response models
class ResourceNodesResponse(BaseModel):
    food_capacity: int
    energy_capacity: int
    minerals_capacity: int
    tech_capacity: int
    influence_capacity: int


class CellResponse(BaseModel):
    """A generated cell."""

    id: int
    area_km2: int
    region_id: int
    region_name: str
    climate: str
    type: str
    fertility: float
    habitability: float
    mineral_richness: float
    energy_potential: float
    population_total: int
    population_urban: int
    population_rural: int
    urban_share: float
    rural_share: float
    resource_nodes: ResourceNodesResponse
    owner_state_id: Optional[str] = None

    @classmethod
    def from_cell(cls, cell: Cell) -> "CellResponse":
        return cls(**cell.to_dict())


class CellPageResponse(BaseModel):
    seed: str
    page: int
    page_size: int
    total_items: int
    total_pages: int
    items: List[CellResponse]


class ProfileResponse(BaseModel):
    cell_id: int
    resource: str
    label: str
    capacity: int


class RegionResponse(BaseModel):
    id: int
    name: str
    climate: str
    declared_share: float
    cell_count: int
    first_cell_id: int
    last_cell_id: int


class RegionTotalsResponse(BaseModel):
    region_id: int
    region_name: str
    climate: str
    cell_count: int
    urban_cells: int
    rural_cells: int
    total_population: int
    urban_population: int
    rural_population: int
    area_km2: int
    density: float

    @classmethod
    def from_totals(cls, totals: RegionTotals) -> "RegionTotalsResponse":
        return cls(
            region_id=totals.region_id,
            region_name=totals.region_name,
            climate=totals.climate.value,
            cell_count=totals.cell_count,
            urban_cells=totals.urban_cells,
            rural_cells=totals.rural_cells,
            total_population=totals.total_population,
            urban_population=totals.urban_population,
            rural_population=totals.rural_population,
            area_km2=totals.area_km2,
            density=round(totals.density, 2),
        )


class GlobalTotalsResponse(BaseModel):
    seed: str
    cell_count: int
    urban_cells: int
    rural_cells: int
    total: int
    urban_population: int
    rural_population: int
    area_km2: int
    density: float
    urban_cell_fraction: float
    average_urban_cell_population: float
    average_rural_cell_population: float

    @classmethod
    def from_totals(cls, seed: str, totals: GlobalTotals) -> "GlobalTotalsResponse":
        return cls(
            seed=seed,
            cell_count=totals.cell_count,
            urban_cells=totals.urban_cells,
            rural_cells=totals.rural_cells,
            total=totals.total,
            urban_population=totals.urban_population,
            rural_population=totals.rural_population,
            area_km2=totals.area_km2,
            density=round(totals.density, 2),
            urban_cell_fraction=round(totals.urban_cell_fraction, 4),
            average_urban_cell_population=round(totals.average_urban_cell_population, 1),
            average_rural_cell_population=round(totals.average_rural_cell_population, 1),
        )


class ConstantsResponse(BaseModel):
    total_cells: int = Field(TOTAL_CELLS)
    cell_area_km2: int = Field(CELL_AREA_KM2)
    global_density: float = Field(GLOBAL_DENSITY)
    total_population: int = Field(TOTAL_POPULATION)


def _seed(seed: Optional[str]) -> str:
    return seed or settings.default_seed


def cell_filter(
    region_id: Optional[int] = Query(None),
    cell_type: Optional[CellType] = Query(None, alias="type"),
    owned: Optional[bool] = Query(None),
    fertility_min: Optional[float] = Query(None),
    fertility_max: Optional[float] = Query(None),
    min_food: Optional[int] = Query(None),
    min_energy: Optional[int] = Query(None),
    min_minerals: Optional[int] = Query(None),
    min_tech: Optional[int] = Query(None),
    min_influence: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
) -> CellFilter:
    return CellFilter(
        region_id=region_id,
        cell_type=cell_type,
        owned=owned,
        fertility_min=fertility_min,
        fertility_max=fertility_max,
        min_food=min_food,
        min_energy=min_energy,
        min_minerals=min_minerals,
        min_tech=min_tech,
        min_influence=min_influence,
        search=search,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "cached_seeds": get_default_store().cached_seeds()}


@app.get("/constants", response_model=ConstantsResponse)
async def get_constants():
    """Planet-wide constants."""
    return ConstantsResponse()


@app.get("/regions", response_model=List[RegionResponse])
async def list_regions():
    """Region catalog with apportioned cell counts."""
    return [RegionResponse(**row) for row in DEFAULT_TOPOLOGY.region_table()]


@app.get("/cells", response_model=CellPageResponse)
def list_cells(
    seed: Optional[str] = Query(None, description="Generation seed"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    criteria: CellFilter = Depends(cell_filter),
):
    """Filtered, paginated cells for a seed."""
    seed = _seed(seed)
    page_size = min(page_size or settings.default_page_size, settings.max_page_size)

    cells = get_default_store().get(seed)
    result = paginate(filter_cells(cells, criteria), page, page_size)

    logger.info("Cells listed", seed=seed, page=page, matched=result.total_items)
    return CellPageResponse(
        seed=seed,
        page=result.page,
        page_size=result.page_size,
        total_items=result.total_items,
        total_pages=result.total_pages,
        items=[CellResponse.from_cell(cell) for cell in result.items],
    )


def _get_cell_or_404(seed: str, cell_id: int) -> Cell:
    cell = get_default_store().get_cell(seed, cell_id)
    if cell is None:
        raise HTTPException(status_code=404, detail=f"Cell {cell_id} not found")
    return cell


@app.get("/cells/{cell_id}", response_model=CellResponse)
def get_cell(cell_id: int, seed: Optional[str] = Query(None)):
    """A single cell by id."""
    return CellResponse.from_cell(_get_cell_or_404(_seed(seed), cell_id))


@app.get("/cells/{cell_id}/profile", response_model=ProfileResponse)
def get_cell_profile(cell_id: int, seed: Optional[str] = Query(None)):
    """Dominant resource of a cell."""
    profile = get_resource_profile(_get_cell_or_404(_seed(seed), cell_id))
    return ProfileResponse(
        cell_id=cell_id,
        resource=profile.resource.value,
        label=profile.label,
        capacity=profile.capacity,
    )


@app.get("/totals/regions", response_model=List[RegionTotalsResponse])
def get_region_totals(seed: Optional[str] = Query(None)):
    """Per-region population and cell counts."""
    cells = get_default_store().get(_seed(seed))
    return [RegionTotalsResponse.from_totals(t) for t in compute_region_totals(cells)]


@app.get("/totals/global", response_model=GlobalTotalsResponse)
def get_global_totals(seed: Optional[str] = Query(None)):
    """Planet-wide population and cell counts."""
    seed = _seed(seed)
    cells = get_default_store().get(seed)
    return GlobalTotalsResponse.from_totals(seed, compute_global_totals(cells))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
