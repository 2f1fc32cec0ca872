import config
from advisor_profile import classify

MINIMUMS = config.resolve_weekly_minimums()

ACTIVE_WEEK = {
    "calls": 40,
    "meetings_set": 12,
    "meetings_held": 9,
    "proposals_presented": 6,
}


def test_all_push_metrics_zero_without_points_is_inactive():
    minimums = {k: v for k, v in MINIMUMS.items() if k != "referrals"}
    profile = classify(0, 0.0, 1, {"calls": 0, "referrals": 3}, minimums)
    assert profile.key == "inactive"
    assert profile.tone == "danger"
    assert profile.reasons == ["0 points this week"]


def test_points_from_non_push_metrics_is_still_inactive():
    profile = classify(10, 0.08, 1, {"webinars": 5}, MINIMUMS)
    assert profile.key == "inactive"
    assert profile.reasons == ["No activity events"]


def test_few_active_days_is_intermittent():
    profile = classify(50, 0.4, 2, ACTIVE_WEEK, MINIMUMS)
    assert profile.key == "intermittent"
    assert profile.reasons == [
        "2 days with activity",
        "Meets 4/7 minimums",
        "1 Applications submitted short of the minimum",
    ]
    # ties keep the push-metric order
    assert [m.metric_key for m in profile.missing] == ["applications_submitted", "referrals"]


def test_few_minimums_met_is_intermittent():
    profile = classify(30, 0.24, 4, {"calls": 40, "meetings_set": 12}, MINIMUMS)
    assert profile.key == "intermittent"
    assert "Meets 2/7 minimums" in profile.reasons


def test_activity_without_conversion_is_growing():
    metrics = dict(ACTIVE_WEEK, referrals=30)
    profile = classify(90, 0.5, 4, metrics, MINIMUMS)
    assert profile.key == "growing"
    assert profile.reasons == ["Meets 4/4 key activity metrics", "1 applications short of the minimum"]


def test_activity_with_conversion_is_productive():
    metrics = dict(ACTIVE_WEEK, referrals=30, applications_submitted=2)
    profile = classify(130, 0.9, 4, metrics, MINIMUMS)
    assert profile.key == "productive"
    assert profile.tone == "success"
    assert profile.reasons == ["Meets key activity metrics", "Meets applications minimum (2)"]
    assert [m.metric_key for m in profile.missing] == ["policies_paid"]


def test_goal_alone_counts_as_conversion():
    metrics = dict(ACTIVE_WEEK, referrals=30)
    profile = classify(110, 0.88, 4, metrics, MINIMUMS)
    assert profile.key == "productive"
    assert profile.reasons[-1] == "Weekly goal: 88%"


def test_partial_key_activity_falls_back_to_growing():
    metrics = {"calls": 40, "meetings_set": 12, "referrals": 30, "applications_submitted": 1}
    profile = classify(95, 0.76, 4, metrics, MINIMUMS)
    assert profile.key == "growing"
    assert profile.reasons == ["Meets 2/4 key metrics", "Conversion needs work"]


def test_everything_else_falls_back_to_intermittent():
    metrics = {"calls": 40, "referrals": 30, "applications_submitted": 1, "policies_paid": 1}
    profile = classify(80, 0.64, 4, metrics, MINIMUMS)
    assert profile.key == "intermittent"
    assert profile.reasons == ["Irregular rhythm", "Meets 4/7 minimums"]


def test_missing_minimums_count_as_met():
    profile = classify(10, None, 3, {"calls": 1}, {})
    assert profile.key == "growing"
    assert profile.reasons == ["Meets 4/4 key activity metrics"]
    assert profile.missing == []


def test_unknown_days_active_skips_the_day_rule():
    metrics = dict(ACTIVE_WEEK, referrals=30)
    assert classify(90, 0.5, None, metrics, MINIMUMS).key == "growing"


def test_classification_ignores_metric_order():
    metrics = dict(ACTIVE_WEEK, referrals=30, applications_submitted=2)
    reversed_metrics = dict(reversed(list(metrics.items())))
    assert classify(130, 0.9, 4, metrics, MINIMUMS) == classify(130, 0.9, 4, reversed_metrics, MINIMUMS)
