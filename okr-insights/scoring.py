import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Union

import config
from schemas import WeekRange
from utils import (
    TzLike,
    add_days,
    parse_ymd,
    to_local_date,
    today_local,
    week_start_for,
)

logger = logging.getLogger(__name__)


def field_value(row, name: str):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def build_scores_map(scores: Iterable) -> Dict[str, int]:
    """metric_key -> points_per_unit from MetricScore rows (objects or dicts)."""
    scores_map = {}
    for row in scores:
        metric_key = field_value(row, "metric_key")
        if not metric_key:
            continue
        scores_map[metric_key] = field_value(row, "points_per_unit") or 0
    return scores_map


def event_points(event, scores_map: Dict[str, int]) -> int:
    return (field_value(event, "value") or 0) * scores_map.get(field_value(event, "metric_key"), 0)


def calc_week_range(
    anchor: Union[str, date, None] = None,
    tz: TzLike = config.TIMEZONE,
    today: Optional[date] = None,
) -> WeekRange:
    """
    ISO week (Monday-Sunday) containing `anchor`, in local-calendar terms.

    The anchor is expected to be a Monday; anything else is tolerated with a
    warning. An unparseable anchor falls back to today.
    """
    if today is None:
        today = today_local(tz)

    anchor_day = today
    if anchor is not None:
        parsed = parse_ymd(anchor)
        if parsed is None:
            logger.warning("Ignoring malformed week anchor %r; using %s", anchor, today)
        else:
            anchor_day = parsed
            if parsed.weekday() != 0:
                logger.warning("Week anchor %s is not a Monday; using the Monday before it", parsed)

    week_start = week_start_for(anchor_day)
    return WeekRange(
        week_start=week_start,
        week_end=add_days(week_start, 6),
        next_week_start=add_days(week_start, 7),
    )


def prev_week_range(week_start: date) -> WeekRange:
    prev_start = add_days(week_start, -7)
    return WeekRange(
        week_start=prev_start,
        week_end=add_days(prev_start, 6),
        next_week_start=week_start,
    )


def last_n_week_starts(anchor: date, n: int) -> List[date]:
    """Mondays of the last n weeks including the anchor's, most recent first."""
    current = week_start_for(anchor)
    return [add_days(current, -7 * i) for i in range(n)]


def prev_week_points_map(
    events: Iterable,
    scores_map: Dict[str, int],
    prev_range: WeekRange,
    tz: TzLike = config.TIMEZONE,
) -> Dict[str, int]:
    """advisor id -> points scored in the previous week."""
    totals: Dict[str, int] = {}
    for event in events:
        recorded_at = field_value(event, "recorded_at")
        if not recorded_at:
            continue
        day = to_local_date(recorded_at, tz)
        if day < prev_range.week_start or day > prev_range.week_end:
            continue
        advisor_id = field_value(event, "actor_user_id")
        totals[advisor_id] = totals.get(advisor_id, 0) + event_points(event, scores_map)
    return totals
