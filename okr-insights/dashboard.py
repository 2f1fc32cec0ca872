"""
Composes engine outputs into the payloads served to dashboards.

Everything here works on data that has already been fetched; the router
decides where that data comes from.
"""
from datetime import date
from typing import Dict, Optional, Sequence

import config
from action_plan import build_fulfillment_plan, build_today_plan
from advisor_profile import classify
from insights import (
    build_rhythm_coach,
    calculate_insight,
    daily_motivation_state,
    select_daily_tier,
    weekly_motivation_message,
)
from schemas import (
    Advisor,
    AdvisorRow,
    AdvisorWeekDetail,
    OkrSettings,
    TeamDashboard,
    WeekRange,
)
from stats import (
    build_daily_timeline,
    build_metric_breakdown,
    compute_history_stats,
    compute_week_stats,
    daily_points,
    metric_totals,
    zero_history_stats,
    zero_week_stats,
)
from scoring import field_value
from team import build_coaching_queue, build_team_alerts, build_team_metric_progress
from utils import TzLike


def build_advisor_row(
    advisor: Advisor,
    events_week: Sequence,
    events_history: Sequence,
    scores_map: Dict[str, int],
    settings: OkrSettings,
    minimums: Dict[str, int],
    week_range: WeekRange,
    today: date,
    tz: TzLike = config.TIMEZONE,
) -> AdvisorRow:
    weekly_target = settings.weekly_target
    week = compute_week_stats(
        events_week, advisor.user_id, scores_map, weekly_target, settings.weekly_days,
        today, week_range.week_start, week_range.week_end, tz,
    )
    week = week.model_copy(update={"advisor": advisor}) if week else zero_week_stats(advisor)

    history = compute_history_stats(events_history, advisor.user_id, scores_map, weekly_target, tz)
    history = history.model_copy(update={"advisor": advisor}) if history else zero_history_stats(advisor)

    profile = classify(
        points_week=week.week_points,
        percent_of_goal=week.percent_of_target / 100,
        days_active=week.days_with_activity,
        metrics=metric_totals(events_week, advisor.user_id, week_range.week_start, week_range.week_end, tz),
        minimums=minimums,
    )
    return AdvisorRow(week=week, history=history, profile=profile)


def build_team_dashboard(
    advisors: Sequence[Advisor],
    events_week: Sequence,
    events_history: Sequence,
    scores_map: Dict[str, int],
    settings: OkrSettings,
    minimums: Dict[str, int],
    week_range: WeekRange,
    today: date,
    prev_week_points: Optional[Dict[str, int]] = None,
    tz: TzLike = config.TIMEZONE,
    minimums_source: str = "default",
) -> TeamDashboard:
    rows = [
        build_advisor_row(advisor, events_week, events_history, scores_map, settings, minimums, week_range, today, tz)
        for advisor in advisors
    ]
    rows.sort(key=lambda row: row.week.week_points, reverse=True)

    week_stats = [row.week for row in rows]
    history_stats = [row.history for row in rows]

    team_units: Dict[str, int] = {}
    for advisor in advisors:
        units = metric_totals(events_week, advisor.user_id, week_range.week_start, week_range.week_end, tz)
        for metric_key, count in units.items():
            team_units[metric_key] = team_units.get(metric_key, 0) + count

    return TeamDashboard(
        week_range=week_range,
        today=today,
        daily_target=settings.daily_target,
        weekly_days=settings.weekly_days,
        weekly_target=settings.weekly_target,
        advisors=rows,
        summary=build_coaching_queue(
            week_stats, settings.weekly_target, settings.weekly_days,
            week_range.week_start, today, prev_week_points,
        ),
        alerts=build_team_alerts(week_stats, history_stats, settings.weekly_target),
        metric_progress=build_team_metric_progress(team_units, minimums, len(advisors)),
        minimums_source=minimums_source,
    )


def build_advisor_week_detail(
    advisor: Advisor,
    events_week: Sequence,
    scores_map: Dict[str, int],
    settings: OkrSettings,
    minimums: Dict[str, int],
    week_range: WeekRange,
    today: date,
    prev_week_points: Optional[int] = None,
    tz: TzLike = config.TIMEZONE,
) -> AdvisorWeekDetail:
    weekly_target = settings.weekly_target
    advisor_events = [e for e in events_week if field_value(e, "actor_user_id") == advisor.user_id]

    row = build_advisor_row(advisor, advisor_events, [], scores_map, settings, minimums, week_range, today, tz)
    stats = row.week
    insight = calculate_insight(stats, weekly_target, settings.weekly_days, week_range.week_start, today)

    per_day = daily_points(advisor_events, scores_map, week_range.week_start, week_range.week_end, tz)
    units_by_metric = metric_totals(advisor_events, advisor.user_id, week_range.week_start, week_range.week_end, tz)
    today_points = per_day.get(today, 0)

    return AdvisorWeekDetail(
        week_range=week_range,
        today=today,
        weekly_target=weekly_target,
        stats=stats,
        insight=insight,
        profile=row.profile,
        today_plan=build_today_plan(insight.required_daily_avg, insight.risk_reason, scores_map),
        fulfillment_plan=build_fulfillment_plan(
            points_remaining=insight.points_remaining,
            days_remaining=insight.days_remaining,
            risk_reason=insight.risk_reason,
            scores_map=scores_map,
            today=today,
            week_end=week_range.week_end,
        ),
        breakdown=build_metric_breakdown(units_by_metric, scores_map),
        timeline=build_daily_timeline(advisor_events, scores_map, week_range.week_start, tz),
        rhythm_coach=build_rhythm_coach(
            per_day, today, settings.weekly_days, weekly_target, stats.week_points_until_today,
        ),
        motivation=weekly_motivation_message(stats.percent_of_target),
        today_points=today_points,
        daily_motivation=daily_motivation_state(today_points, settings.daily_target),
        daily_tier=select_daily_tier(today_points, settings.tiers, settings.daily_target),
        delta_vs_prev=stats.week_points - prev_week_points if prev_week_points is not None else None,
    )
