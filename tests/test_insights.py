from datetime import date

import pytest

from insights import (
    build_rhythm_coach,
    calculate_insight,
    daily_motivation_state,
    required_daily_average,
    risk_reason_label,
    select_daily_tier,
    weekly_motivation_message,
)
from schemas import OkrTier

from conftest import TODAY, WEEK_START, make_stats


@pytest.mark.parametrize("points,days,expected", [(40, 3, 14), (10, 0, 10), (0, 0, 0), (0, 3, 0)])
def test_required_daily_average(points, days, expected):
    assert required_daily_average(points, days) == expected


def test_insight_for_low_rhythm():
    insight = calculate_insight(make_stats("a1", 30, days=2, projection=75.0), 125, 5, WEEK_START, TODAY)
    assert insight.points_remaining == 95
    assert insight.days_remaining == 2
    assert insight.required_daily_avg == 48
    assert insight.risk_reason == "low_rhythm"


def test_insight_without_activity():
    insight = calculate_insight(make_stats("a1"), 125, 5, WEEK_START, TODAY)
    assert insight.risk_reason == "no_activity"
    assert insight.required_daily_avg == 63


def test_insight_on_track_after_goal_met():
    insight = calculate_insight(make_stats("a1", 140, days=2, projection=350.0), 125, 5, WEEK_START, TODAY)
    assert insight.points_remaining == 0
    assert insight.required_daily_avg == 0
    assert insight.risk_reason == "on_track"


def test_risk_reason_ignores_calendar_days_left():
    # Weekend: no business days left, but the reason still comes from activity
    insight = calculate_insight(make_stats("a1", 30, days=2, projection=75.0), 125, 5, WEEK_START, date(2026, 1, 17))
    assert insight.days_remaining == 0
    assert insight.required_daily_avg == 95
    assert insight.risk_reason == "low_rhythm"


def test_risk_reason_labels():
    assert risk_reason_label("no_activity") == "No activity"
    assert risk_reason_label("something_else") == "something_else"


def test_rhythm_coach_short_of_goal():
    coach = build_rhythm_coach({WEEK_START: 20, date(2026, 1, 13): 10}, TODAY, 5, 125, 30)
    assert coach.projection == 75
    assert coach.current_rhythm == 15.0
    assert coach.days_with_activity == 2
    assert coach.status_message == "At this rhythm you'd close at 75 pts. Short of the goal."
    assert coach.action_message == "You need to average 32 pts a day for the rest of the week."


def test_rhythm_coach_on_track_has_no_action():
    coach = build_rhythm_coach({WEEK_START: 40, date(2026, 1, 13): 40}, TODAY, 5, 125, 80)
    assert coach.status_message.endswith("On track.")
    assert coach.action_message is None


def test_rhythm_coach_without_entries():
    coach = build_rhythm_coach({}, TODAY, 5, 125, 0)
    assert coach.projection == 0
    assert coach.action_message is None
    assert coach.status_message.startswith("No entries yet")


@pytest.mark.parametrize("points,level", [
    (0, "inactive"),
    (12, "starting"),
    (20, "almost"),
    (25, "expected"),
    (35, "high"),
])
def test_daily_motivation_levels(points, level):
    assert daily_motivation_state(points, 25).level == level


def test_daily_motivation_counts_points_to_go():
    assert daily_motivation_state(20, 25).message == "5 pts from the expected day."


@pytest.mark.parametrize("percent,level", [
    (float("nan"), "inactive"),
    (-5, "inactive"),
    (0, "inactive"),
    (50, "building"),
    (85, "on_track"),
    (100, "solid"),
    (130, "high"),
])
def test_weekly_motivation_levels(percent, level):
    assert weekly_motivation_message(percent).level == level


TIERS = [
    OkrTier(key="warmup", min=10, max=39, label="Warming up", message="m"),
    OkrTier(key="momentum", min=40, max=79, label="In rhythm", message="m"),
    OkrTier(key="overdrive", min=120, max=1000, label="High performance", message="m"),
]


@pytest.mark.parametrize("points,key", [
    (15, "warmup"),
    (40, "momentum"),
    (5, "warmup"),
    (5000, "overdrive"),
    (100, "warmup"),
])
def test_daily_tier_by_points(points, key):
    assert select_daily_tier(points, TIERS, 25).key == key


@pytest.mark.parametrize("points,key", [(0, "warmup"), (10, "momentum"), (25, "expected"), (60, "expected")])
def test_daily_tier_fallback_without_configuration(points, key):
    assert select_daily_tier(points, [], 25).key == key


def test_daily_tier_fallback_counts_points_to_go():
    assert select_daily_tier(10, [], 25).message == "15 pts from the expected day."
