import pytest

from calendar_math import from_calendar, to_calendar
from helpers import timed
from windows import (
    POLICIES,
    SEASON_DATES,
    first_in_season,
    get_lengths_per,
    get_lengths_per_from,
    get_month_lengths,
    get_season_lengths,
    next_month,
    next_season,
    season_start,
    total_length,
)

DAY = 86400


def at(year, month, day, hour=0):
    return from_calendar(year, month, day) + hour * 3600


def test_total_length():
    assert total_length(timed([(1, 100), (2, 200)])) == 300
    assert total_length([]) == 0


def test_next_month():
    assert next_month(at(2024, 5, 17, 13)) == at(2024, 6, 1)
    assert next_month(at(2024, 1, 1)) == at(2024, 2, 1)


def test_next_month_wraps_december():
    assert next_month(at(2023, 12, 31, 23)) == at(2024, 1, 1)


def test_next_season_wraps_year():
    assert next_season(at(2023, 12, 25, 8)) == at(2024, 3, 20)


@pytest.mark.parametrize(
    "date, expected",
    [
        ((2024, 1, 10), (2024, 3, 20)),
        ((2024, 3, 19), (2024, 3, 20)),
        ((2024, 3, 20), (2024, 6, 21)),
        ((2024, 6, 21), (2024, 9, 22)),
        ((2024, 9, 22), (2024, 12, 21)),
        ((2024, 12, 21), (2025, 3, 20)),
    ],
)
def test_next_season_is_strictly_after(date, expected):
    assert to_calendar(next_season(at(*date, hour=6))) == expected


@pytest.mark.parametrize(
    "date, expected",
    [
        ((2024, 3, 20), (2024, 3, 20)),
        ((2024, 5, 1), (2024, 3, 20)),
        ((2024, 12, 20), (2024, 9, 22)),
        ((2024, 12, 31), (2024, 12, 21)),
        ((2024, 3, 19), (2023, 12, 21)),
        ((2024, 1, 1), (2023, 12, 21)),
    ],
)
def test_season_start(date, expected):
    assert to_calendar(season_start(at(*date, hour=18))) == expected


def test_season_dates_are_sorted():
    assert list(SEASON_DATES) == sorted(SEASON_DATES)


def test_fixed_step_lengths():
    history = timed([(0, 100), (DAY - 1, 50), (DAY, 200), (3 * DAY, 25)])
    results = get_lengths_per(DAY, 2 * DAY + 10, history)
    assert results == [((0, DAY), 150), ((DAY, 2 * DAY), 200), ((2 * DAY, 2 * DAY + 10), 0)]


def test_fixed_step_must_be_positive():
    with pytest.raises(ValueError):
        get_lengths_per(0, 100, timed([(0, 1)]))


def test_month_lengths():
    first = at(2023, 11, 15, 20)
    history = timed([
        (first, 200),
        (at(2023, 11, 30, 23), 100),
        (at(2023, 12, 1), 300),
        (at(2024, 1, 31, 12), 400),
    ])
    now = at(2024, 2, 10)
    results = get_month_lengths(now, history)
    assert results == [
        ((first, at(2023, 12, 1)), 300),
        ((at(2023, 12, 1), at(2024, 1, 1)), 300),
        ((at(2024, 1, 1), at(2024, 2, 1)), 400),
        ((at(2024, 2, 1), now), 0),
    ]


def test_season_lengths():
    history = timed([
        (at(2024, 1, 5), 100),
        (at(2024, 3, 20), 200),
        (at(2024, 6, 20, 23), 300),
    ])
    now = at(2024, 7, 1)
    results = get_season_lengths(now, history)
    assert results == [
        ((at(2023, 12, 21), at(2024, 3, 20)), 100),
        ((at(2024, 3, 20), at(2024, 6, 21)), 500),
        ((at(2024, 6, 21), now), 0),
    ]


def test_first_in_season_uses_earliest_scrobble():
    history = timed([(at(2024, 8, 1), 1), (at(2024, 4, 2), 1)])
    assert first_in_season(history) == at(2024, 3, 20)


def test_empty_history_has_no_windows():
    assert get_month_lengths(at(2024, 1, 1), []) == []
    assert get_season_lengths(at(2024, 1, 1), []) == []
    assert get_lengths_per(DAY, at(2024, 1, 1), []) == []


@pytest.mark.parametrize("name", sorted(POLICIES))
def test_calendar_windows_cover_history(name):
    next_boundary, first_boundary = POLICIES[name]
    history = timed([(at(2022, 1, 1) + i * 5 * DAY + i * 997, 60) for i in range(150)])
    now = at(2024, 2, 1)
    results = get_lengths_per_from(next_boundary, first_boundary, now, history)
    assert results[-1][0][1] == now
    for ((start, end), _), ((next_start, _), _) in zip(results, results[1:]):
        assert start < end == next_start
    assert sum(value for _, value in results) == 60 * 150
