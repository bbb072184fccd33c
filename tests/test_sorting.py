"""Tests for the sort engine."""
import pytest
from bandwidth_core.aggregator import fold
from bandwidth_core.config import AssetKind, SortField
from bandwidth_core.record_parser import RequestRecord
from bandwidth_core.sorting import sort_rows, sort_value


@pytest.fixture
def tables():
    return fold([
        RequestRecord("/images/p/d/bbb-1x1.png", 0, 300),
        RequestRecord("/images/p/d/aaa-1x1.JPG", 0, 100),
        RequestRecord("/images/p/d/aaa-1x1.JPG", 0, 100),
        RequestRecord("/files/p/d/ccc.pdf", 0, 250),
        RequestRecord("/files/p/d/ccc.pdf", 0, 250),
        RequestRecord("/files/p/d/ccc.pdf", 0, 250),
        RequestRecord("/files/p/d/ccc.pdf", 0, 250),
        RequestRecord("/images/p/d/ddd-1x1.gif", 0, 50),
        RequestRecord("/images/p/d/ddd-1x1.gif", 0, 50),
        RequestRecord("/images/p/d/ddd-1x1.gif", 0, 50),
    ])


def labels(rows):
    return [row.label for row in rows]


class TestSortRows:
    """Test ordering by each column."""

    def test_by_id(self, tables):
        assert labels(sort_rows(tables.asset_rows(), SortField.ID)) == ["aaa", "bbb", "ccc", "ddd"]

    def test_by_extension_case_insensitive(self, tables):
        rows = sort_rows(tables.asset_rows(), SortField.EXT)
        assert [row.extension for row in rows] == ["gif", "jpg", "pdf", "png"]

    def test_by_requests_descending(self, tables):
        rows = sort_rows(tables.asset_rows(), SortField.REQUESTS, descending=True)
        assert labels(rows) == ["ccc", "ddd", "aaa", "bbb"]

    def test_by_average_size(self, tables):
        rows = sort_rows(tables.asset_rows(), SortField.AVG_SIZE)
        assert labels(rows) == ["ddd", "aaa", "ccc", "bbb"]

    def test_by_bandwidth(self, tables):
        rows = sort_rows(tables.asset_rows(), SortField.BANDWIDTH, descending=True)
        assert [row.total_bandwidth for row in rows] == [1000, 300, 200, 150]

    def test_reversing_direction_reverses_rows(self, tables):
        """Test the same column in the other direction gives the reverse order."""
        for field in SortField:
            ascending = sort_rows(tables.asset_rows(), field)
            descending = sort_rows(tables.asset_rows(), field, descending=True)
            assert labels(descending) == list(reversed(labels(ascending))), field

    def test_does_not_mutate_input(self, tables):
        rows = tables.asset_rows()
        before = list(rows)
        sort_rows(rows, SortField.BANDWIDTH, descending=True)
        assert rows == before


class TestTieBreak:
    """Test equal primary values fall back to ascending id."""

    def test_ties_ascending_by_id_in_both_directions(self):
        tables = fold([
            RequestRecord("/files/p/d/zeta.bin", 0, 10),
            RequestRecord("/files/p/d/alpha.bin", 0, 10),
            RequestRecord("/files/p/d/mid.bin", 0, 10),
            RequestRecord("/files/p/d/big.bin", 0, 99),
        ])
        asc = sort_rows(tables.asset_rows(), SortField.BANDWIDTH)
        desc = sort_rows(tables.asset_rows(), SortField.BANDWIDTH, descending=True)
        assert labels(asc) == ["alpha", "mid", "zeta", "big"]
        assert labels(desc) == ["big", "alpha", "mid", "zeta"]

    def test_extension_rows_tie_break_on_extension(self):
        tables = fold([
            RequestRecord("/images/p/d/a-1x1.png", 0, 5),
            RequestRecord("/images/p/d/b-1x1.jpg", 0, 5),
            RequestRecord("/images/p/d/c-1x1.gif", 0, 5),
        ])
        rows = sort_rows(tables.extension_rows(AssetKind.IMAGE), SortField.REQUESTS, descending=True)
        assert [row.extension for row in rows] == ["gif", "jpg", "png"]

    def test_repeat_sorts_are_stable(self, tables):
        first = sort_rows(tables.asset_rows(), SortField.EXT)
        second = sort_rows(first, SortField.EXT)
        assert first == second


class TestSortValue:
    def test_average_is_derived(self, tables):
        row = tables.assets[("image", "p", "d", "aaa")]
        assert sort_value(row, SortField.AVG_SIZE) == 100.0
        assert sort_value(row, SortField.ID) == "p/d/aaa"
