"""Tests for the topology catalog."""

import numpy as np
import pytest

from py_dynmap.core.constants import BASE_URBAN_RATIO, TOTAL_CELLS
from py_dynmap.core.topology import (
    DEFAULT_REGIONS,
    DEFAULT_TOPOLOGY,
    Climate,
    Region,
    TopologyCatalog,
)


def five_regions():
    shares = [0.3, 0.25, 0.2, 0.15, 0.1]
    climates = [Climate.TEMPERATE, Climate.TROPICAL, Climate.ARID, Climate.HIGHLAND, Climate.POLAR]
    return [
        Region(i + 1, f"Region {i + 1}", climate, share)
        for i, (climate, share) in enumerate(zip(climates, shares))
    ]


class TestApportionment:
    """Test region cell counts."""

    def test_five_region_example(self):
        """Shares without fractional remainder apportion exactly."""
        catalog = TopologyCatalog(five_regions(), total_cells=35900)
        assert catalog.cell_counts() == (10770, 8975, 7180, 5385, 3590)

    def test_default_topology_counts(self):
        """Half-cell remainders go to the lowest region ids."""
        assert DEFAULT_TOPOLOGY.cell_counts() == (
            5744, 6462, 3949, 3231, 1616, 898, 3949, 2513, 3231, 2513, 897, 897
        )

    def test_counts_within_one_of_declared_share(self):
        counts = DEFAULT_TOPOLOGY.cell_counts()
        assert sum(counts) == TOTAL_CELLS
        for region, count in zip(DEFAULT_TOPOLOGY.regions, counts):
            assert abs(count - region.declared_share * TOTAL_CELLS) <= 1

    def test_region_order_does_not_matter(self):
        """Regions are sorted by id before apportioning."""
        shuffled = list(reversed(five_regions()))
        catalog = TopologyCatalog(shuffled, total_cells=1001)
        assert [r.id for r in catalog.regions] == [1, 2, 3, 4, 5]
        assert catalog.cell_counts() == TopologyCatalog(five_regions(), 1001).cell_counts()

    def test_odd_total(self):
        catalog = TopologyCatalog(five_regions(), total_cells=1001)
        # ideals 300.3, 250.25, 200.2, 150.15, 100.1 -> one leftover to region 1
        assert catalog.cell_counts() == (301, 250, 200, 150, 100)


class TestCellRanges:
    """Test contiguous id assignment."""

    def test_ranges_are_contiguous(self):
        ranges = DEFAULT_TOPOLOGY.region_ranges()
        assert ranges[0][1] == 1
        assert ranges[-1][2] == TOTAL_CELLS
        for (_, _, last), (_, next_first, _) in zip(ranges, ranges[1:]):
            assert next_first == last + 1

    def test_region_indices(self):
        indices = DEFAULT_TOPOLOGY.region_indices()
        assert len(indices) == TOTAL_CELLS
        assert np.all(np.diff(indices) >= 0)
        np.testing.assert_array_equal(
            np.bincount(indices), np.array(DEFAULT_TOPOLOGY.cell_counts())
        )

    def test_region_for_cell(self):
        catalog = TopologyCatalog(five_regions(), total_cells=35900)
        assert catalog.region_for_cell(1).id == 1
        assert catalog.region_for_cell(10770).id == 1
        assert catalog.region_for_cell(10771).id == 2
        assert catalog.region_for_cell(35900).id == 5
        assert catalog.region_for_cell(0) is None
        assert catalog.region_for_cell(35901) is None

    def test_get_region(self):
        assert DEFAULT_TOPOLOGY.get_region(3).name == "Desertos Centrais"
        assert DEFAULT_TOPOLOGY.get_region(99) is None


class TestUrbanProbability:
    """Test per-region urban probabilities."""

    def test_expected_global_fraction(self):
        """Share-weighted probability matches the target ratio."""
        probabilities = DEFAULT_TOPOLOGY.urban_probabilities()
        shares = np.array([r.declared_share for r in DEFAULT_TOPOLOGY.regions])
        assert float(np.dot(shares, probabilities)) == pytest.approx(BASE_URBAN_RATIO)

    def test_pull_orders_probability(self):
        probabilities = DEFAULT_TOPOLOGY.urban_probabilities()
        pulls = [r.urbanization_pull for r in DEFAULT_TOPOLOGY.regions]
        assert probabilities[int(np.argmax(pulls))] == probabilities.max()
        assert probabilities[int(np.argmin(pulls))] == probabilities.min()

    def test_uniform_pull(self):
        catalog = TopologyCatalog(five_regions(), total_cells=100)
        np.testing.assert_allclose(catalog.urban_probabilities(), BASE_URBAN_RATIO)


class TestValidation:
    """Test malformed catalogs."""

    def test_shares_must_sum_to_one(self):
        regions = five_regions()[:-1]
        with pytest.raises(ValueError, match="sum to 1"):
            TopologyCatalog(regions)

    def test_duplicate_ids(self):
        regions = five_regions()
        regions[1] = Region(1, "Dup", Climate.ARID, 0.25)
        with pytest.raises(ValueError, match="Duplicate"):
            TopologyCatalog(regions)

    def test_negative_share(self):
        regions = [
            Region(1, "A", Climate.ARID, 1.1),
            Region(2, "B", Climate.POLAR, -0.1),
        ]
        with pytest.raises(ValueError):
            TopologyCatalog(regions)

    def test_empty(self):
        with pytest.raises(ValueError):
            TopologyCatalog([])

    def test_default_regions_are_frozen(self):
        with pytest.raises(Exception):
            DEFAULT_REGIONS[0].declared_share = 0.5

    def test_region_table(self):
        table = DEFAULT_TOPOLOGY.region_table()
        assert len(table) == 12
        assert sum(row["cell_count"] for row in table) == TOTAL_CELLS
        assert table[0]["climate"] == "tropical"
