"""
Per-advisor aggregation of activity events.

- Weekly stats: points, rhythm (points per active day so far) and projection.
- Historical rollup: weekly sums over the history window.
- Week detail: per-metric breakdown and a Monday-Sunday timeline.

Events are bucketed by the local calendar day of `recorded_at` in the
evaluation timezone. Returning None for an advisor without events is the
documented sentinel; callers substitute zero_week_stats / zero_history_stats.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional

import config
from schemas import (
    Advisor,
    AdvisorHistoryStats,
    AdvisorWeekStats,
    DailyTimelineRow,
    MetricBreakdownRow,
)
from scoring import field_value, event_points
from utils import TzLike, add_days, day_label, round_half_up, to_local_date, week_start_for


def _advisor_events(events: Iterable, advisor_id: str) -> list:
    return [e for e in events if field_value(e, "actor_user_id") == advisor_id]


def _is_scorable(event) -> bool:
    return bool(field_value(event, "recorded_at") and field_value(event, "metric_key") and field_value(event, "value"))


def week_status(percent_of_target: float, projection: float, weekly_target: int) -> str:
    thresholds = config.STATUS_THRESHOLDS
    if percent_of_target >= thresholds["excellent"]:
        return "excellent"
    if percent_of_target >= thresholds["completed"]:
        return "completed"
    if projection >= weekly_target:
        return "on_track"
    return "at_risk"


def daily_points(
    events: Iterable,
    scores_map: Dict[str, int],
    week_start: date,
    week_end: date,
    tz: TzLike = config.TIMEZONE,
) -> Dict[date, int]:
    """local day -> points, restricted to [week_start, week_end]."""
    per_day: Dict[date, int] = {}
    for event in events:
        if not _is_scorable(event):
            continue
        day = to_local_date(field_value(event, "recorded_at"), tz)
        if day < week_start or day > week_end:
            continue
        per_day[day] = per_day.get(day, 0) + event_points(event, scores_map)
    return per_day


def compute_week_stats(
    events: Iterable,
    advisor_id: str,
    scores_map: Dict[str, int],
    weekly_target: int,
    weekly_days: int,
    today: date,
    week_start: date,
    week_end: date,
    tz: TzLike = config.TIMEZONE,
) -> Optional[AdvisorWeekStats]:
    advisor_events = _advisor_events(events, advisor_id)
    if not advisor_events:
        return None

    per_day = daily_points(advisor_events, scores_map, week_start, week_end, tz)
    week_points = sum(per_day.values())

    # Rhythm never looks past today; the weekly tally may include catch-up entries.
    until_today = [points for day, points in per_day.items() if day <= today]
    week_points_until_today = sum(until_today)
    active_days = len(until_today)

    current_rhythm = 0.0
    projection = 0.0
    if active_days > 0:
        # per real active day; only the reported count is capped
        current_rhythm = week_points_until_today / active_days
        projection = current_rhythm * weekly_days

    percent_of_target = (week_points / weekly_target) * 100 if weekly_target > 0 else 0.0

    return AdvisorWeekStats(
        advisor=Advisor(user_id=advisor_id),
        week_points=week_points,
        week_points_until_today=week_points_until_today,
        days_with_activity=min(active_days, weekly_days),
        current_rhythm=current_rhythm,
        projection=projection,
        percent_of_target=percent_of_target,
        status=week_status(percent_of_target, projection, weekly_target),
    )


def zero_week_stats(advisor: Advisor) -> AdvisorWeekStats:
    return AdvisorWeekStats(advisor=advisor)


def group_events_by_week(
    events: Iterable,
    scores_map: Dict[str, int],
    tz: TzLike = config.TIMEZONE,
) -> Dict[date, int]:
    """Monday of each event's local week -> points."""
    week_totals: Dict[date, int] = {}
    for event in events:
        if not _is_scorable(event):
            continue
        monday = week_start_for(to_local_date(field_value(event, "recorded_at"), tz))
        week_totals[monday] = week_totals.get(monday, 0) + event_points(event, scores_map)
    return week_totals


def compute_history_stats(
    events: Iterable,
    advisor_id: str,
    scores_map: Dict[str, int],
    weekly_target: int,
    tz: TzLike = config.TIMEZONE,
) -> Optional[AdvisorHistoryStats]:
    advisor_events = _advisor_events(events, advisor_id)
    if not advisor_events:
        return None

    weekly_sums = list(group_events_by_week(advisor_events, scores_map, tz).values())
    if not weekly_sums:
        return AdvisorHistoryStats(advisor=Advisor(user_id=advisor_id))

    return AdvisorHistoryStats(
        advisor=Advisor(user_id=advisor_id),
        weeks_completed=sum(1 for points in weekly_sums if points >= weekly_target),
        average_points=round_half_up(sum(weekly_sums) / len(weekly_sums)),
        best_week=max(weekly_sums),
    )


def zero_history_stats(advisor: Advisor) -> AdvisorHistoryStats:
    return AdvisorHistoryStats(advisor=advisor)


def metric_totals(
    events: Iterable,
    advisor_id: str,
    week_start: date,
    week_end: date,
    tz: TzLike = config.TIMEZONE,
) -> Dict[str, int]:
    """metric_key -> units logged by the advisor within the week."""
    totals: Dict[str, int] = {}
    for event in _advisor_events(events, advisor_id):
        if not _is_scorable(event):
            continue
        day = to_local_date(field_value(event, "recorded_at"), tz)
        if day < week_start or day > week_end:
            continue
        metric_key = field_value(event, "metric_key")
        totals[metric_key] = totals.get(metric_key, 0) + field_value(event, "value")
    return totals


def build_metric_breakdown(units_by_metric: Dict[str, int], scores_map: Dict[str, int]) -> List[MetricBreakdownRow]:
    scored = []
    for metric_key, units in units_by_metric.items():
        points_per_unit = scores_map.get(metric_key) or None
        scored.append((metric_key, units, units * points_per_unit if points_per_unit else 0, points_per_unit))

    total_points = sum(points for _, _, points, _ in scored)
    rows = [
        MetricBreakdownRow(
            metric_key=metric_key,
            metric_label=config.get_metric_label(metric_key),
            units=units,
            points=points,
            percent_of_total=(points / total_points) * 100 if total_points > 0 else 0.0,
            points_per_unit=points_per_unit,
        )
        for metric_key, units, points, points_per_unit in scored
    ]
    return sorted(rows, key=lambda row: row.points, reverse=True)


def build_daily_timeline(
    events: Iterable,
    scores_map: Dict[str, int],
    week_start: date,
    tz: TzLike = config.TIMEZONE,
) -> List[DailyTimelineRow]:
    """Seven rows, Monday to Sunday, with points and the top three metrics by units."""
    units_by_day: Dict[date, Dict[str, int]] = {}
    for event in events:
        if not _is_scorable(event):
            continue
        day = to_local_date(field_value(event, "recorded_at"), tz)
        day_units = units_by_day.setdefault(day, {})
        metric_key = field_value(event, "metric_key")
        day_units[metric_key] = day_units.get(metric_key, 0) + field_value(event, "value")

    rows = []
    for offset in range(7):
        day = add_days(week_start, offset)
        day_units = units_by_day.get(day)
        if not day_units:
            rows.append(DailyTimelineRow(day_label=day_label(day), day=day))
            continue

        points = sum(units * scores_map.get(metric_key, 0) for metric_key, units in day_units.items())
        top_metrics = sorted(day_units.items(), key=lambda item: item[1], reverse=True)[:3]
        rows.append(DailyTimelineRow(
            day_label=day_label(day),
            day=day,
            points=points,
            activity=" · ".join(f"{units} {config.get_metric_label(key)}" for key, units in top_metrics),
            status="Active" if points > 0 else "0 pts",
        ))
    return rows
