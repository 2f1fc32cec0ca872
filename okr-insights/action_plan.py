import math
from datetime import date
from typing import Dict, List, NamedTuple, Optional, Tuple

import config
from insights import required_daily_average
from schemas import FulfillmentPlan, FulfillmentPlanRow, TodayPlan, TodayPlanItem
from utils import add_days, day_label

MAINTAIN_LABEL = "Maintain"
NO_METRICS_LABEL = "No metrics configured"


def _empty_distribution() -> Dict[str, int]:
    return {metric_key: 0 for metric_key in config.PLAN_METRICS}


def _kickstart_metric(scores_map: Dict[str, int]) -> Optional[Tuple[str, int]]:
    """Calls when they score, otherwise the best-scoring default metric."""
    preferred = config.KICKSTART_PREFERRED_METRIC
    if scores_map.get(preferred, 0) > 0:
        return preferred, scores_map[preferred]

    best = None
    for metric_key in config.PLAN_METRICS:
        points_per_unit = scores_map.get(metric_key, 0)
        if points_per_unit > 0 and (best is None or points_per_unit > best[1]):
            best = (metric_key, points_per_unit)
    return best


def build_today_plan(required_daily_avg: int, risk_reason: str, scores_map: Dict[str, int]) -> TodayPlan:
    if required_daily_avg <= 0:
        return TodayPlan(label=MAINTAIN_LABEL, distribution=_empty_distribution())

    if risk_reason == "no_activity":
        kickstart = _kickstart_metric(scores_map)
        if kickstart is None:
            return TodayPlan(
                label=NO_METRICS_LABEL,
                is_kickstart=True,
                required_daily_avg_points=required_daily_avg,
                distribution=_empty_distribution(),
                skipped_metrics=list(config.PLAN_METRICS),
            )
        metric_key, points_per_unit = kickstart
        distribution = _empty_distribution()
        distribution[metric_key] = 1
        return TodayPlan(
            label=f"1 {config.get_metric_label(metric_key)} (Kickstart)",
            items=[TodayPlanItem(metric_key=metric_key, units=1, points_per_unit=points_per_unit)],
            is_kickstart=True,
            required_daily_avg_points=required_daily_avg,
            distribution=distribution,
            skipped_metrics=[m for m in config.PLAN_METRICS if m != metric_key],
        )

    available = [m for m in config.PLAN_METRICS if scores_map.get(m, 0) > 0]
    skipped = [m for m in config.PLAN_METRICS if m not in available]
    if not available:
        return TodayPlan(
            label=NO_METRICS_LABEL,
            required_daily_avg_points=required_daily_avg,
            distribution=_empty_distribution(),
            skipped_metrics=skipped,
        )

    # Re-normalize the weights over the metrics that actually score.
    total_weight = sum(config.PLAN_DISTRIBUTION.get(m, 0) for m in available)
    items: List[TodayPlanItem] = []
    distribution = _empty_distribution()
    for metric_key in available:
        if total_weight > 0:
            share = config.PLAN_DISTRIBUTION.get(metric_key, 0) / total_weight
        else:
            share = 1 / len(available)
        points = required_daily_avg * share
        if points <= 0:
            continue
        points_per_unit = scores_map[metric_key]
        # float noise from the re-normalized weights must not cost an extra unit
        units = math.ceil(round(points / points_per_unit, 9))
        items.append(TodayPlanItem(metric_key=metric_key, units=units, points_per_unit=points_per_unit))
        distribution[metric_key] = units

    label = " · ".join(f"{item.units} {config.get_metric_label(item.metric_key)}" for item in items)
    return TodayPlan(
        label=label or "No plan",
        items=items,
        required_daily_avg_points=required_daily_avg,
        distribution=distribution,
        skipped_metrics=skipped,
    )


class PlanState(NamedTuple):
    points: int
    days: int


def plan_step(state: PlanState) -> Tuple[int, PlanState]:
    """Requirement for the next day and the state after meeting it exactly."""
    day_required = required_daily_average(state.points, state.days)
    return day_required, PlanState(
        points=max(state.points - day_required, 0),
        days=max(state.days - 1, 0),
    )


def _fulfillment_day_label(offset: int, day: date) -> str:
    if offset == 0:
        return "Today"
    if offset == 1:
        return "Tomorrow"
    return day_label(day)


def build_fulfillment_plan(
    points_remaining: int,
    days_remaining: int,
    risk_reason: str,
    scores_map: Dict[str, int],
    today: date,
    week_end: date,
) -> FulfillmentPlan:
    """
    Day-by-day plan from today through week_end.

    Each row assumes the previous days were met exactly, so the requirement
    is re-spread over what is left. Only today carries the real risk reason;
    later days are simulated as on track.
    """
    if days_remaining <= 0 or points_remaining <= 0:
        return FulfillmentPlan(rows=[FulfillmentPlanRow(
            day_label="Today",
            day=today,
            required_daily_avg=0,
            plan_label=MAINTAIN_LABEL,
        )])

    rows = []
    state = PlanState(points_remaining, days_remaining)
    offset = 0
    while state.days > 0:
        day = add_days(today, offset)
        if day > week_end:
            break
        day_required, next_state = plan_step(state)
        plan = build_today_plan(day_required, risk_reason if offset == 0 else "on_track", scores_map)
        rows.append(FulfillmentPlanRow(
            day_label=_fulfillment_day_label(offset, day),
            day=day,
            required_daily_avg=day_required,
            plan_label=plan.label,
        ))
        state = next_state
        offset += 1

    # "If you hit today's number, tomorrow only needs X"
    _, after_today = plan_step(PlanState(points_remaining, days_remaining))
    tomorrow_required = None
    if after_today.days > 0 or after_today.points > 0:
        tomorrow_required = required_daily_average(after_today.points, after_today.days)

    return FulfillmentPlan(rows=rows, tomorrow_required=tomorrow_required, points_left=state.points)
