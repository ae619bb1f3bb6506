import logging

import pytest
from lazy import Lazy
from utils import Naturals


class TestLazyEvaluation:
    """Test deferred execution and traversal independence"""

    def test_construction_does_not_traverse(self, counting_source):
        """Building a chain must not ask the source for an iterator"""
        pipeline = (
            Lazy.from_iterable(counting_source)
            .filter(lambda x: x > 2)
            .map(lambda x: x * 2)
            .flat()
            .concat([100])
            .take(3)
        )
        assert counting_source.traversals == 0
        assert counting_source.pulls == 0

        assert pipeline.to_list() == [6, 8, 10]
        assert counting_source.traversals == 1

    def test_deferred_execution(self):
        """Transforms run only when elements are requested"""
        call_count = 0

        def track_calls(x):
            nonlocal call_count
            call_count += 1
            return x * 2

        lazy_seq = Lazy(range(10)).map(track_calls)
        assert call_count == 0, "Operations should not execute during definition"

        result = lazy_seq.take(3).to_list()
        assert call_count == 3, f"Expected exactly 3 calls, got {call_count}"
        assert result == [0, 2, 4]

    def test_iterator_steps_one_element_at_a_time(self, counting_source):
        """Each step pulls exactly one upstream element"""
        iterator = iter(Lazy(counting_source).map(lambda x: x * 3))
        assert next(iterator) == 0
        assert counting_source.pulls == 1
        assert next(iterator) == 3
        assert counting_source.pulls == 2

    def test_exhaustion_signal(self):
        iterator = iter(Lazy([1, 2, 3]).map(lambda x: x * 3))
        assert next(iterator) == 3
        assert next(iterator) == 6
        assert next(iterator) == 9
        with pytest.raises(StopIteration):
            next(iterator)

    def test_multiple_consumption(self):
        """A chain over a re-iterable source can be traversed repeatedly"""
        lazy_seq = Lazy([1, 2, 3, 4, 5]).filter(lambda x: x % 2 == 1).map(lambda x: x * 10)

        result1 = lazy_seq.to_list()
        result2 = lazy_seq.to_list()

        assert result1 == result2 == [10, 30, 50]

    def test_independent_concurrent_iterators(self):
        """Two cursors over the same chain do not share progress"""
        lazy_seq = Lazy(range(5)).map(lambda x: x + 1)
        first = iter(lazy_seq)
        second = iter(lazy_seq)

        assert next(first) == 1
        assert next(first) == 2
        assert next(second) == 1
        assert list(first) == [3, 4, 5]
        assert list(second) == [2, 3, 4, 5]

    def test_reiteration_over_unbounded_source(self):
        squares = Lazy(Naturals()).map(lambda n: n * n).take(4)
        assert squares.to_list() == [0, 1, 4, 9]
        assert squares.to_list() == [0, 1, 4, 9]

    def test_one_shot_source_stays_one_shot(self, one_shot_source):
        """Wrapping a started iterator does not make it re-iterable"""
        lazy_seq = Lazy.from_iterable(one_shot_source).map(lambda x: x * 2)

        assert lazy_seq.to_list() == [2, 4, 6]
        assert lazy_seq.to_list() == []
        assert lazy_seq.empty()

    def test_one_shot_source_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="lazy")
        Lazy.from_iterable(x for x in range(3))
        assert "one-shot" in caplog.text

    def test_list_source_is_not_reported_as_one_shot(self, caplog):
        caplog.set_level(logging.DEBUG, logger="lazy")
        Lazy.from_iterable([1, 2, 3])
        assert "one-shot" not in caplog.text

    def test_abandoned_traversal_needs_no_cleanup(self, unbounded_source):
        lazy_seq = Lazy(unbounded_source).filter(lambda x: x % 2 == 0)
        iterator = iter(lazy_seq)
        assert next(iterator) == 0
        assert next(iterator) == 2
        del iterator

        assert lazy_seq.take(3).to_list() == [0, 2, 4]

    def test_callback_error_aborts_traversal(self):
        """Errors propagate out of the step that raised them"""
        lazy_seq = Lazy([1, 2, 0, 4]).map(lambda x: 10 // x)

        with pytest.raises(ZeroDivisionError):
            lazy_seq.to_list()

        # a fresh traversal starts over and fails at the same element
        iterator = iter(lazy_seq)
        assert next(iterator) == 10
        assert next(iterator) == 5
        with pytest.raises(ZeroDivisionError):
            next(iterator)

    def test_generic_subscription(self):
        assert Lazy[int]([1, 2]).to_list() == [1, 2]
