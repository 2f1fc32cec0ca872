from datetime import date
from typing import Dict, List, Optional, Sequence

import config
from insights import calculate_insight, risk_reason_label
from schemas import (
    AdvisorHistoryStats,
    AdvisorWeekStats,
    CoachingQueueItem,
    ManagerInsightSummary,
    TeamAlert,
    TeamMetricProgress,
)
from utils import round_half_up


def _coaching_priority(item: CoachingQueueItem):
    # no_activity first, then the heaviest daily requirement, then the biggest gap
    return (
        0 if item.risk_reason == "no_activity" else 1,
        -item.required_daily_avg,
        -item.points_remaining,
    )


def build_coaching_queue(
    week_stats: Sequence[AdvisorWeekStats],
    weekly_target: int,
    weekly_days: int,
    week_start: date,
    today: date,
    prev_week_points: Optional[Dict[str, int]] = None,
) -> ManagerInsightSummary:
    """
    Team totals over at-risk advisors and the top advisors to coach today.

    delta_vs_prev is filled for every advisor present in prev_week_points,
    a previous week of 0 points included; absent advisors get None.
    """
    if not week_stats:
        return ManagerInsightSummary()

    insights = [
        (stats, calculate_insight(stats, weekly_target, weekly_days, week_start, today))
        for stats in week_stats
    ]
    at_risk = [(stats, insight) for stats, insight in insights if insight.risk_reason != "on_track"]

    queue = []
    for stats, insight in at_risk:
        advisor_id = stats.advisor.user_id
        delta_vs_prev = None
        if prev_week_points is not None and advisor_id in prev_week_points:
            delta_vs_prev = stats.week_points - prev_week_points[advisor_id]
        queue.append(CoachingQueueItem(
            advisor_id=advisor_id,
            name=stats.advisor.name,
            risk_reason=insight.risk_reason,
            risk_label=risk_reason_label(insight.risk_reason),
            points_remaining=insight.points_remaining,
            days_remaining=insight.days_remaining,
            required_daily_avg=insight.required_daily_avg,
            week_points=stats.week_points,
            delta_vs_prev=delta_vs_prev,
        ))
    queue.sort(key=_coaching_priority)

    return ManagerInsightSummary(
        team_points_remaining=sum(insight.points_remaining for _, insight in at_risk),
        team_required_today=sum(insight.required_daily_avg for _, insight in at_risk),
        at_risk_count=len(at_risk),
        no_activity_count=sum(1 for _, insight in insights if insight.risk_reason == "no_activity"),
        low_rhythm_count=sum(1 for _, insight in insights if insight.risk_reason == "low_rhythm"),
        coaching_queue=queue[:config.OKR_DEFAULTS["coaching_queue_size"]],
    )


def _advisors(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def build_team_alerts(
    week_stats: Sequence[AdvisorWeekStats],
    history_stats: Sequence[AdvisorHistoryStats],
    weekly_target: int,
) -> List[TeamAlert]:
    alerts: List[TeamAlert] = []
    if not week_stats:
        return alerts

    no_activity = sum(1 for s in week_stats if s.days_with_activity == 0)
    if no_activity > 0:
        alerts.append(TeamAlert(
            key="no_activity",
            severity="risk",
            text=f"{_advisors(no_activity, 'advisor', 'advisors')} with no activity this week",
        ))

    # zero-activity advisors were already reported above
    low_threshold = weekly_target * config.ALERT_CONFIG["low_projection_ratio"]
    low_projection = sum(
        1 for s in week_stats
        if s.days_with_activity > 0 and s.projection < low_threshold
    )
    if low_projection > 0:
        alerts.append(TeamAlert(
            key="low_projection",
            severity="warn",
            text=f"{_advisors(low_projection, 'advisor', 'advisors')} projecting below 80% of the goal",
        ))

    excellent = [s for s in week_stats if s.status == "excellent"]
    if excellent:
        top = max(excellent, key=lambda s: s.week_points)
        alerts.append(TeamAlert(
            key="top_excellent",
            severity="good",
            text=f"Top 1: {top.advisor.name} is having an excellent week",
        ))

    average = round_half_up(sum(s.week_points for s in week_stats) / len(week_stats))
    alerts.append(TeamAlert(key="avg_points", severity="info", text=f"Team average: {average} pts"))

    consistent = sum(1 for s in history_stats if s.average_points >= weekly_target)
    if consistent > 0:
        alerts.append(TeamAlert(
            key="consistent",
            severity="info",
            text=f"Consistent (12w avg >= goal): {consistent}",
        ))

    return alerts


def build_team_metric_progress(
    units_by_metric: Dict[str, int],
    minimums: Dict[str, int],
    advisor_count: int,
) -> List[TeamMetricProgress]:
    """Team week totals per push metric against minimum x advisors."""
    rows = []
    for metric_key in config.PUSH_METRICS:
        if metric_key not in units_by_metric and metric_key not in minimums:
            continue
        total = units_by_metric.get(metric_key, 0)
        minimum = minimums.get(metric_key) or 0
        team_target = minimum * advisor_count
        rows.append(TeamMetricProgress(
            metric_key=metric_key,
            label=config.get_metric_label(metric_key),
            label_short=config.get_metric_label(metric_key, "short"),
            total=total,
            minimum_per_advisor=minimum,
            team_target=team_target,
            progress_percent=min(100.0, total / team_target * 100) if team_target > 0 else 0.0,
        ))
    return rows
