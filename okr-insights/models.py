# models.py
import enum
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class EventSource(enum.Enum):
    manual = "manual"
    import_ = "import"
    system = "system"

class ActivityEvent(Base):
    __tablename__ = 'activity_events'

    id = Column(Integer, primary_key=True, index=True)
    actor_user_id = Column(String, nullable=False, index=True)
    metric_key = Column(String, nullable=False)
    value = Column(Integer, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, index=True)
    source = Column(Enum(EventSource, values_callable=lambda e: [m.value for m in e]), nullable=False, default=EventSource.manual)
    is_void = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class MetricScoreGlobal(Base):
    __tablename__ = 'okr_metric_scores_global'

    metric_key = Column(String, primary_key=True)
    points_per_unit = Column(Integer, nullable=False, default=0)

class OkrSettingsGlobal(Base):
    __tablename__ = 'okr_settings_global'

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(String, nullable=True, index=True)
    daily_expected_points = Column(Integer, nullable=False, default=25)
    weekly_days = Column(Integer, nullable=False, default=5)
    tiers = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class WeeklyMinimumTarget(Base):
    __tablename__ = 'okr_weekly_minimum_targets'

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False, default="advisor")
    metric_key = Column(String, nullable=False)
    target_units = Column(Integer, nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)

class Profile(Base):
    __tablename__ = 'profiles'

    user_id = Column(String, primary_key=True)
    full_name = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="advisor")
    manager_user_id = Column(String, nullable=True, index=True)
