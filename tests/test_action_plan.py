from datetime import date

import pytest

from action_plan import PlanState, build_fulfillment_plan, build_today_plan, plan_step

from conftest import TODAY, WEEK_END


def test_kickstart_prefers_calls_over_higher_scoring_metrics():
    plan = build_today_plan(30, "no_activity", {"calls": 5, "meetings_set": 8})
    assert plan.is_kickstart
    assert plan.label == "1 Calls (Kickstart)"
    assert [(item.metric_key, item.units) for item in plan.items] == [("calls", 1)]
    assert plan.distribution == {"calls": 1, "meetings_set": 0, "proposals_presented": 0}
    assert plan.skipped_metrics == ["meetings_set", "proposals_presented"]


def test_kickstart_without_calls_uses_best_scoring_metric():
    plan = build_today_plan(30, "no_activity", {"meetings_set": 8, "proposals_presented": 10})
    assert plan.label == "1 Proposals presented (Kickstart)"


def test_kickstart_with_nothing_scored():
    plan = build_today_plan(30, "no_activity", {})
    assert plan.label == "No metrics configured"
    assert plan.is_kickstart
    assert plan.items == []


def test_nothing_required_means_maintain(scores_map):
    plan = build_today_plan(0, "low_rhythm", scores_map)
    assert plan.label == "Maintain"
    assert plan.items == []
    assert not plan.is_kickstart


def test_points_are_split_60_30_10(scores_map):
    plan = build_today_plan(30, "low_rhythm", scores_map)
    assert plan.label == "18 Calls · 2 Meetings set · 1 Proposals presented"
    assert plan.distribution == {"calls": 18, "meetings_set": 2, "proposals_presented": 1}
    assert plan.skipped_metrics == []


def test_weights_renormalize_over_scored_metrics():
    plan = build_today_plan(30, "low_rhythm", {"calls": 1, "meetings_set": 5})
    # 2/3 and 1/3 of 30
    assert plan.distribution == {"calls": 20, "meetings_set": 2, "proposals_presented": 0}
    assert plan.skipped_metrics == ["proposals_presented"]


def test_normal_plan_without_scored_metrics():
    plan = build_today_plan(30, "low_rhythm", {"referrals": 4})
    assert plan.label == "No metrics configured"
    assert plan.skipped_metrics == ["calls", "meetings_set", "proposals_presented"]


def test_plan_step_meets_the_day_exactly():
    required, state = plan_step(PlanState(40, 3))
    assert required == 14
    assert state == PlanState(26, 2)


def test_fulfillment_plan_spreads_remaining_points(scores_map):
    plan = build_fulfillment_plan(40, 3, "low_rhythm", scores_map, TODAY, WEEK_END)
    assert [row.day_label for row in plan.rows] == ["Today", "Tomorrow", "Fri 16"]
    assert [row.required_daily_avg for row in plan.rows] == [14, 13, 13]
    assert sum(row.required_daily_avg for row in plan.rows) == 40
    assert plan.points_left == 0
    assert plan.tomorrow_required == 13


def test_only_today_carries_the_real_risk_reason(scores_map):
    plan = build_fulfillment_plan(40, 3, "no_activity", scores_map, TODAY, WEEK_END)
    assert plan.rows[0].plan_label == "1 Calls (Kickstart)"
    assert "Kickstart" not in plan.rows[1].plan_label


@pytest.mark.parametrize("points,days", [(0, 3), (40, 0)])
def test_fulfillment_plan_with_nothing_left(scores_map, points, days):
    plan = build_fulfillment_plan(points, days, "on_track", scores_map, TODAY, WEEK_END)
    assert len(plan.rows) == 1
    assert plan.rows[0].plan_label == "Maintain"
    assert plan.tomorrow_required is None


def test_fulfillment_plan_stops_at_week_end(scores_map):
    plan = build_fulfillment_plan(30, 3, "low_rhythm", scores_map, date(2026, 1, 17), WEEK_END)
    assert [row.day for row in plan.rows] == [date(2026, 1, 17), WEEK_END]
    assert plan.points_left == 10


@pytest.mark.parametrize("points,days", [(125, 5), (97, 4), (1, 1), (7, 3)])
def test_simulated_days_close_the_gap(scores_map, points, days):
    plan = build_fulfillment_plan(points, days, "low_rhythm", scores_map, date(2026, 1, 12), WEEK_END)
    assert plan.points_left == 0
    assert sum(row.required_daily_avg for row in plan.rows) == points
