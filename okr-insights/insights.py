import math
from datetime import date
from typing import Dict, Sequence

from schemas import AdvisorInsight, AdvisorWeekStats, MotivationState, OkrTier, RhythmCoach
from utils import business_days_elapsed, round_half_up

RISK_REASON_LABELS = {
    "no_activity": "No activity",
    "low_rhythm": "Low rhythm",
    "on_track": "On track",
}


def risk_reason_label(reason: str) -> str:
    return RISK_REASON_LABELS.get(reason, reason)


def required_daily_average(points_remaining: int, days_remaining: int) -> int:
    if days_remaining > 0:
        return math.ceil(points_remaining / days_remaining)
    if points_remaining > 0:
        return points_remaining
    return 0


def calculate_insight(
    stats: AdvisorWeekStats,
    weekly_target: int,
    weekly_days: int,
    week_start: date,
    today: date,
) -> AdvisorInsight:
    """
    Points and days left this week, plus why the advisor is (or isn't) at risk.

    days_remaining counts real business days on the calendar. risk_reason is
    based on days *with activity* and the projection instead; the two are
    intentionally not unified.
    """
    points_remaining = max(weekly_target - stats.week_points, 0)
    days_elapsed = business_days_elapsed(week_start, today, weekly_days)
    days_remaining = max(weekly_days - days_elapsed, 0)

    if stats.days_with_activity == 0:
        risk_reason = "no_activity"
    elif stats.projection < weekly_target:
        risk_reason = "low_rhythm"
    else:
        risk_reason = "on_track"

    return AdvisorInsight(
        points_remaining=points_remaining,
        days_remaining=days_remaining,
        required_daily_avg=required_daily_average(points_remaining, days_remaining),
        risk_reason=risk_reason,
    )


def build_rhythm_coach(
    day_points: Dict[date, int],
    today: date,
    weekly_days: int,
    weekly_target: int,
    current_week_points: int,
) -> RhythmCoach:
    active_days = [day for day, points in day_points.items() if day <= today and points > 0]
    days_with_activity = len(active_days)

    if days_with_activity == 0:
        return RhythmCoach(
            status_message="No entries yet this week. Log today to get your rhythm.",
        )

    current_rhythm = current_week_points / days_with_activity
    projection = current_rhythm * weekly_days

    if projection < weekly_target:
        status_message = f"At this rhythm you'd close at {round_half_up(projection)} pts. Short of the goal."
    else:
        status_message = f"At this rhythm you'd close at {round_half_up(projection)} pts. On track."

    action_message = None
    points_needed = weekly_target - current_week_points
    if points_needed > 0 and projection < weekly_target:
        days_left = max(1, weekly_days - days_with_activity)
        action_message = (
            f"You need to average {round_half_up(points_needed / days_left)} pts a day for the rest of the week."
        )

    return RhythmCoach(
        status_message=status_message,
        action_message=action_message,
        projection=round_half_up(projection),
        current_rhythm=round_half_up(current_rhythm * 10) / 10,
        days_with_activity=days_with_activity,
    )


def daily_motivation_state(points: int, target: int) -> MotivationState:
    if points < 10:
        return MotivationState(level="inactive", color="gray", message="One action changes the day.")
    if points < target * 0.7:
        return MotivationState(level="starting", color="orange", message="You're already moving.")
    if points < target:
        return MotivationState(level="almost", color="yellow", message=f"{target - points} pts from the expected day.")
    if points < target * 1.4:
        return MotivationState(level="expected", color="green", message="Well done. You hit the expected day.")
    return MotivationState(level="high", color="purple", message="High-performance day.")


def weekly_motivation_message(progress_percent: float) -> MotivationState:
    # NaN, inf and negatives all read as "no progress"
    percent = progress_percent if math.isfinite(progress_percent) and progress_percent >= 0 else 0

    if percent == 0:
        return MotivationState(level="inactive", color="gray", message="Start logging your activity this week")
    if percent < 80:
        return MotivationState(level="building", color="gray", message="Week in progress")
    if percent < 100:
        return MotivationState(level="on_track", color="yellow", message="You're on track")
    if percent < 120:
        return MotivationState(level="solid", color="green", message="Solid week", icon="✅")
    return MotivationState(level="high", color="purple", message="High-performance week", icon="🔥")


def _fallback_tier(points: int, base_target: int) -> OkrTier:
    if points == 0:
        return OkrTier(
            key="warmup", min=0, max=max(base_target - 1, 0),
            label="First action", message="Take the first action: 1 call.",
            tone="neutral", color="slate",
        )
    if points >= base_target:
        return OkrTier(
            key="expected", min=base_target, max=base_target * 2,
            label="Goal met", message="Excellent. You're at the day's standard.",
            tone="success", color="green",
        )
    return OkrTier(
        key="momentum", min=1, max=base_target - 1,
        label="On the way", message=f"{base_target - points} pts from the expected day.",
        tone="info", color="blue",
    )


def select_daily_tier(points: int, tiers: Sequence[OkrTier], base_target: int) -> OkrTier:
    """
    Tier whose [min, max] points band holds today's points.

    Points below every band get the lowest tier and points above every band
    the highest. Without configured tiers a three-step fallback based on the
    daily target is used.
    """
    if not tiers:
        return _fallback_tier(points, base_target)

    for tier in tiers:
        if tier.min <= points <= tier.max:
            return tier

    ordered = sorted(tiers, key=lambda tier: tier.min)
    if points < ordered[0].min:
        return ordered[0]
    if points > ordered[-1].max:
        return ordered[-1]
    # gap between two bands
    return tiers[0]
