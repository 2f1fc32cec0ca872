"""
Weekly advisor profile: productive, growing, intermittent or inactive.

Rules are evaluated top to bottom and the first match wins. The order and
thresholds come from sales leadership; keep them as they are.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import config
from schemas import AdvisorProfile, MissingMetric
from utils import round_half_up

RULES = config.PROFILE_RULES

PROFILE_META = {
    "productive": ("Productive", "success", "Steady activity and progress on results."),
    "growing": ("Growing", "info", "Solid activity; needs to convert into results."),
    "intermittent": ("Intermittent", "warning", "Has active days but doesn't sustain the rhythm."),
    "inactive": ("Inactive", "danger", "No activity logged this week."),
}


@dataclass(frozen=True)
class ProfileFacts:
    """Everything the rules look at, computed once per classification."""
    points_week: int
    percent_of_goal: Optional[float]
    days_active: Optional[int]
    metrics: Dict[str, int]
    minimums: Dict[str, int]
    metrics_met: int
    metrics_with_minimum: int
    all_push_zero: bool
    key_metrics_met: int
    applications_met: bool
    policies_met: bool
    missing: Tuple[MissingMetric, ...]

    @property
    def has_conversion(self) -> bool:
        goal_reached = self.percent_of_goal is not None and self.percent_of_goal >= RULES["conversion_goal_ratio"]
        return self.applications_met or self.policies_met or goal_reached

    def current(self, metric_key: str) -> int:
        return self.metrics.get(metric_key) or 0

    def minimum(self, metric_key: str) -> int:
        return self.minimums.get(metric_key) or 0

    def meets(self, metric_key: str) -> bool:
        """A metric without a configured minimum always counts as met."""
        minimum = self.minimum(metric_key)
        return minimum == 0 or self.current(metric_key) >= minimum


def _conversion_met(metrics: Dict[str, int], minimums: Dict[str, int], metric_key: str) -> bool:
    minimum = minimums.get(metric_key) or 0
    return minimum > 0 and (metrics.get(metric_key) or 0) >= minimum


def collect_facts(
    points_week: int,
    percent_of_goal: Optional[float],
    days_active: Optional[int],
    metrics: Dict[str, int],
    minimums: Dict[str, int],
) -> ProfileFacts:
    compliance = []
    for metric_key in config.PUSH_METRICS:
        current = metrics.get(metric_key) or 0
        minimum = minimums.get(metric_key) or 0
        ratio = current / minimum if minimum > 0 else 1.0
        compliance.append((metric_key, ratio, current, minimum))

    with_minimum = [c for c in compliance if c[3] > 0]
    # sorted() is stable, so ties keep push-metric order
    below_minimum = sorted((c for c in with_minimum if c[1] < 1.0), key=lambda c: c[1])
    missing = tuple(
        MissingMetric(metric_key=metric_key, current=current, min=minimum)
        for metric_key, _, current, minimum in below_minimum[:RULES["missing_metrics_limit"]]
    )

    key_metrics_met = 0
    for metric_key in config.KEY_ACTIVITY_METRICS:
        minimum = minimums.get(metric_key) or 0
        if minimum == 0 or (metrics.get(metric_key) or 0) >= minimum:
            key_metrics_met += 1

    return ProfileFacts(
        points_week=points_week,
        percent_of_goal=percent_of_goal,
        days_active=days_active,
        metrics=metrics,
        minimums=minimums,
        metrics_met=sum(1 for c in with_minimum if c[1] >= 1.0),
        metrics_with_minimum=len(with_minimum),
        all_push_zero=all((metrics.get(key) or 0) == 0 for key in config.PUSH_METRICS),
        key_metrics_met=key_metrics_met,
        applications_met=_conversion_met(metrics, minimums, "applications_submitted"),
        policies_met=_conversion_met(metrics, minimums, "policies_paid"),
        missing=missing,
    )


def _profile(key: str, facts: ProfileFacts, reasons: List[str]) -> AdvisorProfile:
    label, tone, short_help = PROFILE_META[key]
    return AdvisorProfile(
        key=key,
        label=label,
        tone=tone,
        short_help=short_help,
        reasons=reasons,
        missing=list(facts.missing),
    )


def _goal_reason(facts: ProfileFacts) -> str:
    return f"Weekly goal: {round_half_up(facts.percent_of_goal * 100)}%"


# --- Inactive ---
def _is_inactive(facts: ProfileFacts) -> bool:
    return facts.points_week == 0 or facts.all_push_zero


def _inactive(facts: ProfileFacts) -> AdvisorProfile:
    reason = "0 points this week" if facts.points_week == 0 else "No activity events"
    return _profile("inactive", facts, [reason])


# --- Intermittent ---
def _few_active_days(facts: ProfileFacts) -> bool:
    return facts.days_active is not None and facts.days_active <= RULES["intermittent_max_days"]


def _is_intermittent(facts: ProfileFacts) -> bool:
    few_minimums = (
        facts.metrics_with_minimum > 0
        and facts.metrics_met <= RULES["intermittent_max_minimums_met"]
    )
    return _few_active_days(facts) or few_minimums


def _intermittent(facts: ProfileFacts) -> AdvisorProfile:
    reasons = []
    if _few_active_days(facts):
        plural = "" if facts.days_active == 1 else "s"
        reasons.append(f"{facts.days_active} day{plural} with activity")
    if facts.metrics_with_minimum > 0:
        reasons.append(f"Meets {facts.metrics_met}/{facts.metrics_with_minimum} minimums")
    if facts.missing:
        top = facts.missing[0]
        reasons.append(f"{top.min - top.current} {config.get_metric_label(top.metric_key)} short of the minimum")
    return _profile("intermittent", facts, reasons or ["Irregular rhythm"])


# --- Growing ---
def _is_growing(facts: ProfileFacts) -> bool:
    return facts.key_metrics_met >= RULES["growing_min_key_metrics"] and not facts.has_conversion


def _growing(facts: ProfileFacts) -> AdvisorProfile:
    reasons = [f"Meets {facts.key_metrics_met}/4 key activity metrics"]
    applications_min = facts.minimum("applications_submitted")
    policies_min = facts.minimum("policies_paid")
    if applications_min > 0 and not facts.applications_met:
        short = applications_min - facts.current("applications_submitted")
        reasons.append(f"{short} applications short of the minimum")
    elif policies_min > 0 and not facts.policies_met:
        short = policies_min - facts.current("policies_paid")
        reasons.append(f"{short} policies short of the minimum")
    elif facts.percent_of_goal is not None and facts.percent_of_goal < RULES["conversion_goal_ratio"]:
        reasons.append(_goal_reason(facts))
    return _profile("growing", facts, reasons)


# --- Productive ---
def _is_productive(facts: ProfileFacts) -> bool:
    core_met = all(facts.meets(key) for key in ("calls", "meetings_set", "meetings_held"))
    return core_met and facts.has_conversion


def _productive(facts: ProfileFacts) -> AdvisorProfile:
    reasons = ["Meets key activity metrics"]
    if facts.applications_met:
        reasons.append(f"Meets applications minimum ({facts.current('applications_submitted')})")
    elif facts.policies_met:
        reasons.append(f"Meets policies minimum ({facts.current('policies_paid')})")
    elif facts.percent_of_goal is not None and facts.percent_of_goal >= RULES["conversion_goal_ratio"]:
        reasons.append(_goal_reason(facts))
    return _profile("productive", facts, reasons)


# --- Fallbacks ---
def _has_some_key_activity(facts: ProfileFacts) -> bool:
    return facts.key_metrics_met >= RULES["fallback_growing_min_key_metrics"]


def _growing_fallback(facts: ProfileFacts) -> AdvisorProfile:
    return _profile("growing", facts, [
        f"Meets {facts.key_metrics_met}/4 key metrics",
        "Conversion needs work",
    ])


def _intermittent_fallback(facts: ProfileFacts) -> AdvisorProfile:
    return _profile("intermittent", facts, [
        "Irregular rhythm",
        f"Meets {facts.metrics_met}/{facts.metrics_with_minimum} minimums",
    ])


def _always(facts: ProfileFacts) -> bool:
    return True


PROFILE_TABLE: List[Tuple[Callable[[ProfileFacts], bool], Callable[[ProfileFacts], AdvisorProfile]]] = [
    (_is_inactive, _inactive),
    (_is_intermittent, _intermittent),
    (_is_growing, _growing),
    (_is_productive, _productive),
    (_has_some_key_activity, _growing_fallback),
    (_always, _intermittent_fallback),
]


def classify(
    points_week: int,
    percent_of_goal: Optional[float],
    days_active: Optional[int],
    metrics: Dict[str, int],
    minimums: Dict[str, int],
) -> AdvisorProfile:
    """
    Classify an advisor's week.

    Args:
        points_week: Points scored this week.
        percent_of_goal: Fraction of the weekly target reached (0.8 == 80%), or None.
        days_active: Days with activity so far, or None when unknown.
        metrics: Week totals per metric_key.
        minimums: Weekly minimum units per metric_key; a missing minimum counts as met.
    """
    facts = collect_facts(points_week, percent_of_goal, days_active, metrics, minimums)
    for matches, build in PROFILE_TABLE:
        if matches(facts):
            return build(facts)
    return _intermittent_fallback(facts)
