import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

import config
import okr_queries
from dashboard import build_advisor_week_detail, build_team_dashboard
from database import get_db
from schemas import ActivityEvent, Advisor, AdvisorWeekDetail, MetricScore, OkrSettings, TeamDashboard
from scoring import build_scores_map, calc_week_range, last_n_week_starts, prev_week_points_map, prev_week_range
from utils import today_local

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/okr")

# --- Pydantic Models ---
class EvaluateRequest(BaseModel):
    events: List[ActivityEvent] = []
    scores: List[MetricScore] = []
    advisors: Optional[List[Advisor]] = None
    minimums: Optional[Dict[str, Optional[int]]] = None
    settings: OkrSettings = Field(default_factory=OkrSettings)
    today: Optional[date] = None
    week_start: Optional[str] = None


def _history_from(week_start: date) -> date:
    return last_n_week_starts(week_start, config.OKR_DEFAULTS["history_weeks"])[-1]


# --- API Endpoints ---
@router.get("/team-dashboard", response_model=TeamDashboard, tags=["OKR"])
def get_team_dashboard(
    manager_id: Optional[str] = None,
    owner_id: Optional[str] = None,
    week_start: Optional[str] = None,
    db: Session = Depends(get_db),
):
    today = today_local(config.TIMEZONE)
    week_range = calc_week_range(week_start, config.TIMEZONE, today)

    advisors = okr_queries.get_scoped_advisors(db, manager_id)
    logger.debug("Team dashboard manager=%s advisors=%d week=%s", manager_id, len(advisors), week_range.week_start)

    scores_map = build_scores_map(okr_queries.get_metric_scores(db))
    settings = okr_queries.get_okr_settings(db, owner_id)
    minimums, minimums_source = okr_queries.get_weekly_minimums(db, owner_id, today)

    advisor_ids = [advisor.user_id for advisor in advisors]
    events_week = okr_queries.list_events_in_range(
        db, advisor_ids, week_range.week_start, week_range.next_week_start, config.TIMEZONE,
    )
    events_history = okr_queries.list_events_in_range(
        db, advisor_ids, _history_from(week_range.week_start), week_range.next_week_start, config.TIMEZONE,
    )
    prev_points = prev_week_points_map(
        events_history, scores_map, prev_week_range(week_range.week_start), config.TIMEZONE,
    )

    return build_team_dashboard(
        advisors, events_week, events_history, scores_map, settings, minimums,
        week_range, today, prev_points, config.TIMEZONE, minimums_source,
    )


@router.get("/advisors/{advisor_id}/week", response_model=AdvisorWeekDetail, tags=["OKR"])
def get_advisor_week(
    advisor_id: str,
    owner_id: Optional[str] = None,
    week_start: Optional[str] = None,
    db: Session = Depends(get_db),
):
    advisor = okr_queries.get_advisor(db, advisor_id)
    if advisor is None:
        raise HTTPException(status_code=404, detail="Advisor not found")

    today = today_local(config.TIMEZONE)
    week_range = calc_week_range(week_start, config.TIMEZONE, today)
    prev_range = prev_week_range(week_range.week_start)
    logger.debug("Week detail advisor=%s week=%s", advisor_id, week_range.week_start)

    scores_map = build_scores_map(okr_queries.get_metric_scores(db))
    settings = okr_queries.get_okr_settings(db, owner_id)
    minimums, _ = okr_queries.get_weekly_minimums(db, owner_id, today)

    events = okr_queries.list_events_in_range(
        db, [advisor_id], prev_range.week_start, week_range.next_week_start, config.TIMEZONE,
    )
    prev_points = prev_week_points_map(events, scores_map, prev_range, config.TIMEZONE).get(advisor_id)

    return build_advisor_week_detail(
        advisor, events, scores_map, settings, minimums,
        week_range, today, prev_points, config.TIMEZONE,
    )


@router.post("/evaluate", response_model=TeamDashboard, tags=["OKR"])
def evaluate(request: EvaluateRequest):
    """
    Runs the engine over the posted data without touching the database.

    Advisors default to every actor found in the events.
    """
    today = request.today or today_local(config.TIMEZONE)
    week_range = calc_week_range(request.week_start, config.TIMEZONE, today)

    advisors = request.advisors
    if advisors is None:
        actor_ids = sorted({event.actor_user_id for event in request.events})
        advisors = [Advisor(user_id=actor_id) for actor_id in actor_ids]

    scores_map = build_scores_map(request.scores)
    prev_points = prev_week_points_map(
        request.events, scores_map, prev_week_range(week_range.week_start), config.TIMEZONE,
    )

    return build_team_dashboard(
        advisors,
        request.events,
        request.events,
        scores_map,
        request.settings,
        config.resolve_weekly_minimums(request.minimums),
        week_range,
        today,
        prev_points,
        config.TIMEZONE,
    )
