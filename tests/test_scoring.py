import logging
from datetime import date

from scoring import (
    build_scores_map,
    calc_week_range,
    event_points,
    last_n_week_starts,
    prev_week_points_map,
    prev_week_range,
)
from schemas import MetricScore

from conftest import TODAY, TZ, WEEK_END, WEEK_START, make_event


def test_build_scores_map_accepts_models_and_dicts():
    rows = [
        MetricScore(metric_key="calls", points_per_unit=1),
        {"metric_key": "meetings_set", "points_per_unit": 5},
        {"metric_key": "", "points_per_unit": 9},
    ]
    assert build_scores_map(rows) == {"calls": 1, "meetings_set": 5}


def test_later_score_rows_win():
    rows = [{"metric_key": "calls", "points_per_unit": 1}, {"metric_key": "calls", "points_per_unit": 2}]
    assert build_scores_map(rows) == {"calls": 2}


def test_unscored_metric_is_worth_zero(scores_map):
    assert event_points(make_event("a1", "referrals", 3, WEEK_START), scores_map) == 0
    assert event_points(make_event("a1", "meetings_set", 3, WEEK_START), scores_map) == 15


def test_week_range_from_monday():
    week = calc_week_range("2026-01-12", TZ, today=TODAY)
    assert week.week_start == WEEK_START
    assert week.week_end == WEEK_END
    assert week.next_week_start == date(2026, 1, 19)


def test_week_range_defaults_to_today():
    assert calc_week_range(None, TZ, today=TODAY).week_start == WEEK_START


def test_non_monday_anchor_snaps_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="scoring"):
        week = calc_week_range("2026-01-16", TZ, today=TODAY)
    assert week.week_start == WEEK_START
    assert "not a Monday" in caplog.text


def test_malformed_anchor_falls_back_to_today(caplog):
    with caplog.at_level(logging.WARNING, logger="scoring"):
        week = calc_week_range("16/01/2026", TZ, today=date(2026, 2, 4))
    assert week.week_start == date(2026, 2, 2)
    assert "malformed" in caplog.text


def test_prev_week_range():
    prev = prev_week_range(WEEK_START)
    assert (prev.week_start, prev.week_end, prev.next_week_start) == (
        date(2026, 1, 5), date(2026, 1, 11), WEEK_START,
    )


def test_last_n_week_starts_most_recent_first():
    assert last_n_week_starts(TODAY, 3) == [date(2026, 1, 12), date(2026, 1, 5), date(2025, 12, 29)]


def test_prev_week_points_map_only_counts_the_previous_week(scores_map):
    events = [
        make_event("a1", "calls", 10, date(2026, 1, 5)),
        make_event("a1", "meetings_set", 1, date(2026, 1, 11), hour=23),
        make_event("a1", "calls", 50, WEEK_START),
        make_event("a2", "calls", 4, date(2026, 1, 9)),
    ]
    assert prev_week_points_map(events, scores_map, prev_week_range(WEEK_START), TZ) == {"a1": 15, "a2": 4}
