"""
Read-only queries that feed the insights engine.

Only counted events leave this module (not voided, manual source). Settings
and weekly minimums fall back to the documented defaults when nothing is
configured or the read fails.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from models import ActivityEvent as ActivityEventRow
from models import EventSource, MetricScoreGlobal, OkrSettingsGlobal, Profile, WeeklyMinimumTarget
from schemas import ActivityEvent, Advisor, MetricScore, OkrSettings, OkrTier
from utils import TzLike, ensure_timezone_aware, local_day_start_utc

logger = logging.getLogger(__name__)


def list_events_in_range(
    db: Session,
    advisor_ids: Sequence[str],
    from_day: date,
    to_day_exclusive: date,
    tz: TzLike = config.TIMEZONE,
) -> List[ActivityEvent]:
    """Counted events recorded in [from_day, to_day_exclusive) of the local calendar."""
    if not advisor_ids:
        return []

    rows = (
        db.query(ActivityEventRow)
        .filter(
            ActivityEventRow.actor_user_id.in_(list(advisor_ids)),
            ActivityEventRow.is_void.is_(False),
            ActivityEventRow.source == EventSource.manual,
            ActivityEventRow.recorded_at >= local_day_start_utc(from_day, tz),
            ActivityEventRow.recorded_at < local_day_start_utc(to_day_exclusive, tz),
        )
        .order_by(ActivityEventRow.recorded_at.asc())
        .all()
    )
    return [
        ActivityEvent(
            recorded_at=ensure_timezone_aware(row.recorded_at),
            metric_key=row.metric_key,
            value=row.value or 0,
            actor_user_id=row.actor_user_id,
        )
        for row in rows
    ]


def get_metric_scores(db: Session) -> List[MetricScore]:
    rows = db.query(MetricScoreGlobal).order_by(MetricScoreGlobal.metric_key).all()
    return [MetricScore(metric_key=row.metric_key, points_per_unit=row.points_per_unit or 0) for row in rows]


def _parse_tiers(raw) -> List[OkrTier]:
    if not isinstance(raw, list):
        return []
    tiers = []
    for entry in raw:
        try:
            tiers.append(OkrTier.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed OKR tier %r", entry)
    return tiers


def get_okr_settings(db: Session, owner_user_id: Optional[str] = None) -> OkrSettings:
    """
    Settings for an owner, else the global row (no owner, oldest first),
    else the defaults.
    """
    defaults = OkrSettings(
        daily_target=config.OKR_DEFAULTS["daily_target"],
        weekly_days=config.OKR_DEFAULTS["weekly_days"],
        tiers=config.DEFAULT_DAILY_TIERS,
    )
    try:
        row = None
        if owner_user_id:
            row = (
                db.query(OkrSettingsGlobal)
                .filter(OkrSettingsGlobal.owner_user_id == owner_user_id)
                .order_by(OkrSettingsGlobal.id.desc())
                .first()
            )
        if row is None:
            row = (
                db.query(OkrSettingsGlobal)
                .filter(OkrSettingsGlobal.owner_user_id.is_(None))
                .order_by(OkrSettingsGlobal.id.asc())
                .first()
            )
    except SQLAlchemyError:
        logger.exception("Could not read OKR settings; using defaults")
        return defaults

    if row is None:
        return defaults
    return OkrSettings(
        daily_target=row.daily_expected_points or defaults.daily_target,
        weekly_days=row.weekly_days or defaults.weekly_days,
        tiers=_parse_tiers(row.tiers),
    )


def get_weekly_minimums(
    db: Session,
    owner_user_id: Optional[str],
    today: date,
) -> Tuple[Dict[str, int], str]:
    """
    Weekly minimums in effect today for an owner's advisors.

    Returns (targets, source) where source is "db" or "default". Partial
    configuration is completed with defaults.
    """
    if not owner_user_id:
        return config.resolve_weekly_minimums(), "default"

    try:
        rows = (
            db.query(WeeklyMinimumTarget)
            .filter(
                WeeklyMinimumTarget.owner_user_id == owner_user_id,
                WeeklyMinimumTarget.role == "advisor",
                WeeklyMinimumTarget.effective_from <= today,
                or_(WeeklyMinimumTarget.effective_to.is_(None), WeeklyMinimumTarget.effective_to >= today),
            )
            .order_by(WeeklyMinimumTarget.metric_key, WeeklyMinimumTarget.effective_from)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Could not read weekly minimums for owner=%s; using defaults", owner_user_id)
        return config.resolve_weekly_minimums(), "default"

    if not rows:
        return config.resolve_weekly_minimums(), "default"

    # latest effective_from wins per metric
    overrides = {row.metric_key: row.target_units for row in rows}
    return config.resolve_weekly_minimums(overrides), "db"


def get_scoped_advisors(db: Session, manager_id: Optional[str] = None) -> List[Advisor]:
    query = db.query(Profile).filter(Profile.role == "advisor")
    if manager_id:
        query = query.filter(Profile.manager_user_id == manager_id)
    rows = query.order_by(Profile.full_name, Profile.display_name).all()
    return [
        Advisor(user_id=row.user_id, full_name=row.full_name, display_name=row.display_name, role=row.role)
        for row in rows
    ]


def get_advisor(db: Session, advisor_id: str) -> Optional[Advisor]:
    row = db.query(Profile).filter(Profile.user_id == advisor_id).first()
    if row is None:
        return None
    return Advisor(user_id=row.user_id, full_name=row.full_name, display_name=row.display_name, role=row.role)
