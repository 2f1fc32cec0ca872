"""Shared fixtures for the OKR insights test suite."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from schemas import ActivityEvent, Advisor, AdvisorWeekStats

TZ = "America/Monterrey"

# Wednesday of the week 2026-01-12 .. 2026-01-18
TODAY = date(2026, 1, 14)
WEEK_START = date(2026, 1, 12)
WEEK_END = date(2026, 1, 18)

SCORES = {
    "calls": 1,
    "meetings_set": 5,
    "meetings_held": 5,
    "proposals_presented": 10,
    "applications_submitted": 15,
    "policies_paid": 25,
}


def local_instant(day: date, hour: int = 10, minute: int = 0) -> datetime:
    """UTC instant for a Monterrey wall-clock time."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=ZoneInfo(TZ)).astimezone(timezone.utc)


def make_event(advisor_id, metric_key, value, day, hour=10):
    return ActivityEvent(
        recorded_at=local_instant(day, hour),
        metric_key=metric_key,
        value=value,
        actor_user_id=advisor_id,
    )


def make_stats(advisor_id, week_points=0, days=0, projection=0.0, status="at_risk", name=None, until_today=None):
    return AdvisorWeekStats(
        advisor=Advisor(user_id=advisor_id, full_name=name),
        week_points=week_points,
        week_points_until_today=week_points if until_today is None else until_today,
        days_with_activity=days,
        current_rhythm=projection / 5 if days else 0.0,
        projection=projection,
        percent_of_target=week_points / 125 * 100,
        status=status,
    )


# ── Calendar ────────────────────────────────────────────────────────────

@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def scores_map():
    return dict(SCORES)


@pytest.fixture
def week_events():
    """a1: 20 pts Mon, 10 pts Tue, 10 pts Thu (after today)."""
    return [
        make_event("a1", "calls", 20, WEEK_START),
        make_event("a1", "meetings_set", 2, date(2026, 1, 13)),
        make_event("a1", "proposals_presented", 1, date(2026, 1, 15)),
    ]


# ── Database ────────────────────────────────────────────────────────────

@pytest.fixture
def db_session():
    """In-memory SQLite shared across threads so TestClient sees the same data."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()
