import pytest

from helpers import timed
from intervals import (
    HistoryOrderError,
    apply_per_interval,
    check_most_recent_first,
    earliest_timestamp,
    interval_starts,
)


def count(scrobbles):
    return len(scrobbles)


def timestamps(scrobbles):
    return sorted(s.timestamp for s, _ in scrobbles)


def step(n):
    return lambda ts: ts + n


def test_empty_history():
    def first_boundary(_):
        raise AssertionError("not called for an empty history")

    assert apply_per_interval(count, step(10), first_boundary, 100, []) == []


def test_first_boundary_at_or_after_now():
    history = timed([(100, 1)])
    assert apply_per_interval(count, step(10), earliest_timestamp, 100, history) == []
    assert apply_per_interval(count, step(10), earliest_timestamp, 50, history) == []


def test_intervals_are_contiguous_and_end_at_now():
    history = timed([(0, 1), (5, 1), (25, 1)])
    results = apply_per_interval(count, step(10), earliest_timestamp, 27, history)
    assert [interval for interval, _ in results] == [(0, 10), (10, 20), (20, 27)]
    assert [value for _, value in results] == [2, 0, 1]


def test_last_interval_clamped_when_now_is_on_a_boundary():
    results = apply_per_interval(count, step(10), earliest_timestamp, 20, timed([(0, 1)]))
    assert [interval for interval, _ in results] == [(0, 10), (10, 20)]


def test_boundaries_are_half_open():
    history = timed([(0, 1), (9, 1), (10, 1), (19, 1), (20, 1)])
    results = apply_per_interval(timestamps, step(10), earliest_timestamp, 20, history)
    assert results == [((0, 10), [0, 9]), ((10, 20), [10, 19])]


def test_scrobbles_before_first_boundary_are_excluded():
    history = timed([(3, 1), (15, 1)])
    results = apply_per_interval(timestamps, step(10), lambda _: 10, 30, history)
    assert results == [((10, 20), [15]), ((20, 30), [])]


def test_every_scrobble_lands_in_exactly_one_interval():
    history = timed([(ts, 1) for ts in range(0, 1000, 7)])
    results = apply_per_interval(timestamps, step(33), earliest_timestamp, 1000, history)
    seen = [ts for _, values in results for ts in values]
    assert seen == list(range(0, 1000, 7))
    for (start, end), values in results:
        assert all(start <= ts < end for ts in values)
    for ((start, end), _), ((next_start, _), _) in zip(results, results[1:]):
        assert start < end == next_start
    assert results[-1][0][1] == 1000


def test_equal_timestamps_are_allowed():
    history = timed([(5, 1), (5, 2)])
    assert apply_per_interval(count, step(10), earliest_timestamp, 10, history) == [((5, 10), 2)]


def test_oldest_first_history_is_rejected():
    history = list(reversed(timed([(0, 1), (10, 1)])))
    with pytest.raises(HistoryOrderError):
        apply_per_interval(count, step(10), earliest_timestamp, 100, history)
    with pytest.raises(ValueError):
        check_most_recent_first(history)


def test_boundary_must_advance():
    with pytest.raises(ValueError, match="did not advance"):
        list(interval_starts(0, lambda ts: ts, 10))


def test_interval_starts():
    assert list(interval_starts(0, step(3), 10)) == [0, 3, 6, 9]
    assert list(interval_starts(10, step(3), 10)) == []
