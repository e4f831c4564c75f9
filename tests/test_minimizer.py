"""
Tests for Minimizer Records and the Minimizer List
"""

import math

import pytest
from ivmin.bounds.interval import Interval
from ivmin.minimizer import Minimizer, MinimizerList, ObjectiveContractError


def make(lb: float, ub: float = None, tag: float = 0.0) -> Minimizer:
    """Minimizer whose x-interval records a tag to identify it."""
    return Minimizer(Interval.point(tag), Interval(0.0, 1.0), lb, lb if ub is None else ub)


class TestMinimizer:
    """Test the minimizer record."""

    def test_creation(self):
        m = Minimizer(Interval(0.0, 0.5), Interval(1.0, 1.5), -1.0, 2.0)
        assert m.x == Interval(0.0, 0.5)
        assert m.y == Interval(1.0, 1.5)
        assert m.lower_bound == -1.0
        assert m.upper_bound == 2.0

    def test_immutable(self):
        m = make(1.0, 2.0)
        with pytest.raises(AttributeError):
            m.lower_bound = 0.0

    def test_inconsistent_bounds(self):
        with pytest.raises(ObjectiveContractError):
            make(2.0, 1.0)

    def test_nan_bounds(self):
        with pytest.raises(ObjectiveContractError):
            make(math.nan, 1.0)

    def test_contract_error_is_value_error(self):
        assert issubclass(ObjectiveContractError, ValueError)

    def test_contains(self):
        m = Minimizer(Interval(0.0, 0.5), Interval(1.0, 1.5), 0.0, 1.0)
        assert m.contains(0.25, 1.25)
        assert m.contains(0.5, 1.0)
        assert not m.contains(0.75, 1.25)

    def test_repr(self):
        m = Minimizer(Interval(0.0, 0.5), Interval(1.0, 1.5), -1.0, 2.0)
        assert repr(m) == "{([0.0, 0.5], [1.0, 1.5]), [-1.0, 2.0]}"


class TestMinimizerList:
    """Test the ordered multiset of minimizers."""

    def test_empty(self):
        ml = MinimizerList()
        assert len(ml) == 0
        assert ml.best() is None
        assert ml.lower_bound == math.inf
        assert list(ml) == []

    def test_sorted_by_lower_bound(self):
        ml = MinimizerList()
        for lb in [3.0, 1.0, 4.0, 1.5, 9.0, 2.0]:
            ml.insert(make(lb))
        assert [m.lower_bound for m in ml] == [1.0, 1.5, 2.0, 3.0, 4.0, 9.0]
        assert ml.best().lower_bound == 1.0
        assert ml.lower_bound == 1.0

    def test_ties_keep_insertion_order(self):
        ml = MinimizerList()
        ml.insert(make(1.0, tag=1.0))
        ml.insert(make(0.5, tag=0.0))
        ml.insert(make(1.0, tag=2.0))
        ml.insert(make(1.0, tag=3.0))
        assert [m.x.lo for m in ml] == [0.0, 1.0, 2.0, 3.0]

    def test_duplicates_kept(self):
        ml = MinimizerList()
        m = make(1.0)
        ml.insert(m)
        ml.insert(m)
        assert len(ml) == 2

    def test_evict_from(self):
        ml = MinimizerList()
        for lb in [0.0, 1.0, 2.0, 2.0, 3.0]:
            ml.insert(make(lb))
        removed = ml.evict_from(2.0)
        assert removed == 3
        assert [m.lower_bound for m in ml] == [0.0, 1.0]

    def test_evict_nothing(self):
        ml = MinimizerList()
        ml.insert(make(1.0))
        assert ml.evict_from(5.0) == 0
        assert len(ml) == 1

    def test_evict_everything(self):
        ml = MinimizerList()
        for lb in [1.0, 2.0]:
            ml.insert(make(lb))
        assert ml.evict_from(-math.inf) == 2
        assert len(ml) == 0

    def test_indexing_and_clear(self):
        ml = MinimizerList()
        ml.insert(make(2.0))
        ml.insert(make(1.0))
        assert ml[0].lower_bound == 1.0
        assert ml[-1].lower_bound == 2.0
        ml.clear()
        assert len(ml) == 0

    def test_iteration_is_a_snapshot(self):
        ml = MinimizerList()
        ml.insert(make(1.0))
        it = iter(ml)
        ml.insert(make(0.0))
        assert [m.lower_bound for m in it] == [1.0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
