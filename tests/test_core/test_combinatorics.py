"""
Tests for subset enumeration helpers.
"""

import pytest
from pokerroom.core.combinatorics import subsets, subset_count, best_subset


class TestSubsets:

    def test_seven_choose_five(self):
        """7 items give 21 five-item subsets, all distinct."""
        result = list(subsets(range(7), 5))
        assert len(result) == 21
        assert len(set(result)) == 21
        assert all(len(s) == 5 for s in result)

    def test_lexicographic_order(self):
        assert list(subsets("abc", 2)) == [("a", "b"), ("a", "c"), ("b", "c")]

    def test_edge_sizes(self):
        assert list(subsets([1, 2, 3], 0)) == [()]
        assert list(subsets([1, 2, 3], 3)) == [(1, 2, 3)]

    @pytest.mark.parametrize("k", [-1, 4])
    def test_out_of_range(self, k):
        with pytest.raises(ValueError):
            subsets([1, 2, 3], k)

    def test_subset_count(self):
        assert subset_count(7, 5) == 21
        assert subset_count(6, 5) == 6
        assert subset_count(5, 5) == 1


class TestBestSubset:

    def test_picks_maximum(self):
        best, value = best_subset([3, 9, 1, 7], 2, key=sum)
        assert sorted(best) == [7, 9]
        assert value == 16

    def test_first_maximum_wins_ties(self):
        best, value = best_subset([1, 1, 1], 2, key=sum)
        assert best == (1, 1)
        assert value == 2
