"""Tests for the full generation pipeline and its invariants."""

import numpy as np
import pytest

from py_dynmap.core.constants import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    CELL_AREA_KM2,
    TOTAL_CELLS,
    TOTAL_POPULATION,
)
from py_dynmap.core.generator import _chunks, generate_cells
from py_dynmap.core.models import CellType
from py_dynmap.core.seed_stream import SeedStream
from py_dynmap.core.topology import DEFAULT_TOPOLOGY, Climate, Region, TopologyCatalog


@pytest.fixture(scope="module")
def planet():
    return generate_cells("TOI-700")


@pytest.fixture(scope="module")
def small_topology():
    return TopologyCatalog(
        [
            Region(1, "North", Climate.POLAR, 0.3, 0.5, 0.5, 1.1, 1.1, 0.7),
            Region(2, "Plains", Climate.TEMPERATE, 0.25, 1.3, 1.3, 1.0, 1.0, 1.3),
            Region(3, "Sands", Climate.ARID, 0.2, 0.6, 0.8, 1.1, 1.4, 0.8),
            Region(4, "Peaks", Climate.HIGHLAND, 0.15, 0.9, 0.6, 1.5, 1.0, 0.9),
            Region(5, "Isles", Climate.TROPICAL, 0.1, 1.5, 1.2, 0.9, 1.1, 1.5),
        ],
        total_cells=2000,
    )


class TestPlanetInvariants:
    """Test invariants that hold for every seed."""

    def test_cell_count(self, planet):
        assert len(planet) == TOTAL_CELLS
        assert [c.id for c in planet[:3]] == [1, 2, 3]
        assert planet[-1].id == TOTAL_CELLS

    def test_exact_population(self, planet):
        assert sum(c.population_total for c in planet) == TOTAL_POPULATION

    def test_split_invariant(self, planet):
        for cell in planet:
            assert cell.population_urban + cell.population_rural == cell.population_total
            assert cell.population_urban >= 0 and cell.population_rural >= 0

    def test_attribute_bounds(self, planet):
        for cell in planet:
            for value in (cell.fertility, cell.habitability,
                          cell.mineral_richness, cell.energy_potential):
                assert ATTRIBUTE_MIN <= value <= ATTRIBUTE_MAX

    def test_region_counts(self, planet):
        counts = {}
        for cell in planet:
            counts[cell.region_id] = counts.get(cell.region_id, 0) + 1
        expected = dict(zip([r.id for r in DEFAULT_TOPOLOGY.regions], DEFAULT_TOPOLOGY.cell_counts()))
        assert counts == expected

    def test_region_fields_match_catalog(self, planet):
        for cell in planet[::997]:
            region = DEFAULT_TOPOLOGY.region_for_cell(cell.id)
            assert cell.region_id == region.id
            assert cell.region_name == region.name
            assert cell.climate is region.climate

    def test_shares_are_complementary(self, planet):
        for cell in planet[::101]:
            assert cell.urban_share + cell.rural_share == pytest.approx(1.0)
            if cell.type is CellType.URBAN:
                assert cell.urban_share >= 0.6
            else:
                assert cell.rural_share >= 0.75

    def test_unowned_and_area(self, planet):
        assert all(c.owner_state_id is None for c in planet)
        assert all(c.area_km2 == CELL_AREA_KM2 for c in planet)

    def test_urban_cells_are_denser(self, planet):
        urban = [c.population_total for c in planet if c.type is CellType.URBAN]
        rural = [c.population_total for c in planet if c.type is CellType.RURAL]
        assert 0.18 < len(urban) / len(planet) < 0.22
        assert np.mean(urban) > 3 * np.mean(rural)
        # Documented targets are ~766k and ~157k per cell
        assert 600_000 < np.mean(urban) < 1_000_000
        assert 120_000 < np.mean(rural) < 220_000


class TestDeterminism:
    """Test that generation is a pure function of the seed."""

    def test_idempotent(self, planet):
        again = generate_cells("TOI-700")
        assert again == planet

    def test_seed_sensitivity(self, small_topology):
        a = generate_cells("A", topology=small_topology)
        b = generate_cells("B", topology=small_topology)
        assert any(x.fertility != y.fertility for x, y in zip(a, b))
        assert any(x.population_total != y.population_total for x, y in zip(a, b))
        for cells in (a, b):
            assert len(cells) == 2000
            assert sum(c.population_total for c in cells) == TOTAL_POPULATION

    def test_empty_seed_uses_default(self, small_topology):
        assert generate_cells("", topology=small_topology) == generate_cells(
            "TOI-700", topology=small_topology
        )

    @pytest.mark.parametrize("workers,chunk_size", [(1, 2000), (4, 37), (3, 1), (8, 512)])
    def test_parallel_chunks_are_identical(self, small_topology, workers, chunk_size):
        """Worker count and chunking never change the result."""
        reference = generate_cells("chunks", topology=small_topology)
        result = generate_cells(
            "chunks", topology=small_topology, workers=workers, chunk_size=chunk_size
        )
        assert result == reference

    def test_injected_stream(self, small_topology):
        """A custom stream factory drives every draw."""

        class ConstantStream(SeedStream):
            def draw_array(self, cell_ids, tag):
                return np.full(len(np.atleast_1d(cell_ids)), 0.5)

        cells = generate_cells("x", topology=small_topology, stream_factory=ConstantStream)
        # u = 0.5 puts every attribute on its region base and every cell rural
        assert all(c.type is CellType.RURAL for c in cells)
        assert cells[0].fertility == 0.5
        assert sum(c.population_total for c in cells) == TOTAL_POPULATION

    def test_custom_total_population(self, small_topology):
        cells = generate_cells("total", topology=small_topology, total_population=1_234_567)
        assert sum(c.population_total for c in cells) == 1_234_567


class TestChunking:
    """Test the phase 1 id partition."""

    @pytest.mark.parametrize("chunk_size", [1, 3, 4, 7, 10, 11, 4096])
    def test_chunks_cover_ids_once(self, chunk_size):
        chunks = _chunks(10, chunk_size)
        ids = np.concatenate(chunks)
        np.testing.assert_array_equal(ids, np.arange(1, 11))
        assert all(len(chunk) <= chunk_size for chunk in chunks)

    def test_small_chunks(self):
        assert [c.tolist() for c in _chunks(10, 4)] == [[1, 2, 3, 4], [5, 6, 7, 8], [9, 10]]

    def test_default_chunks_cover_planet(self):
        ids = np.concatenate(_chunks(TOTAL_CELLS, 4096))
        assert len(ids) == TOTAL_CELLS
        assert len(np.unique(ids)) == TOTAL_CELLS
        assert ids[0] == 1 and ids[-1] == TOTAL_CELLS

    def test_no_cells(self):
        assert _chunks(0, 4096) == []
