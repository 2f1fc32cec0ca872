# okr-insights/schemas.py
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WeekStatus = Literal["excellent", "completed", "on_track", "at_risk"]
RiskReason = Literal["no_activity", "low_rhythm", "on_track"]
ProfileKey = Literal["productive", "growing", "intermittent", "inactive"]
ProfileTone = Literal["success", "info", "warning", "danger"]
AlertSeverity = Literal["info", "warn", "risk", "good"]


class Snapshot(BaseModel):
    """Immutable engine output."""
    model_config = ConfigDict(frozen=True)


# --- Inputs ---
class ActivityEvent(Snapshot):
    recorded_at: datetime
    metric_key: str
    value: Optional[int] = Field(default=0, ge=0)
    actor_user_id: str


class MetricScore(Snapshot):
    metric_key: str
    points_per_unit: int = Field(ge=0)


class Advisor(Snapshot):
    user_id: str
    full_name: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "advisor"

    @property
    def name(self) -> str:
        return (self.full_name or "").strip() or (self.display_name or "").strip() or "Advisor"


class OkrTier(Snapshot):
    """Daily points band with the label and nudge shown for it."""
    key: str
    min: int
    max: int
    label: str
    message: str
    tone: str = "neutral"
    color: str = "slate"


class OkrSettings(Snapshot):
    daily_target: int = 25
    weekly_days: int = Field(default=5, ge=1, le=7)
    tiers: List[OkrTier] = []

    @property
    def weekly_target(self) -> int:
        return self.daily_target * self.weekly_days


# --- Calendar ---
class WeekRange(Snapshot):
    week_start: date
    week_end: date
    next_week_start: date


# --- Per-advisor stats ---
class AdvisorWeekStats(Snapshot):
    advisor: Advisor
    week_points: int = 0
    week_points_until_today: int = 0
    days_with_activity: int = 0
    current_rhythm: float = 0.0
    projection: float = 0.0
    percent_of_target: float = 0.0
    status: WeekStatus = "at_risk"


class AdvisorHistoryStats(Snapshot):
    advisor: Advisor
    weeks_completed: int = 0
    average_points: int = 0
    best_week: int = 0


class AdvisorInsight(Snapshot):
    points_remaining: int
    days_remaining: int
    required_daily_avg: int
    risk_reason: RiskReason


class MissingMetric(Snapshot):
    metric_key: str
    current: int
    min: int


class AdvisorProfile(Snapshot):
    key: ProfileKey
    label: str
    tone: ProfileTone
    short_help: str
    reasons: List[str]
    missing: List[MissingMetric] = []


# --- Plans ---
class TodayPlanItem(Snapshot):
    metric_key: str
    units: int
    points_per_unit: int


class TodayPlan(Snapshot):
    label: str
    items: List[TodayPlanItem] = []
    is_kickstart: bool = False
    required_daily_avg_points: int = 0
    distribution: Dict[str, int] = {}
    skipped_metrics: List[str] = []


class FulfillmentPlanRow(Snapshot):
    day_label: str
    day: date
    required_daily_avg: int
    plan_label: str


class FulfillmentPlan(Snapshot):
    rows: List[FulfillmentPlanRow]
    tomorrow_required: Optional[int] = None
    points_left: int = 0


# --- Team ---
class CoachingQueueItem(Snapshot):
    advisor_id: str
    name: str
    risk_reason: RiskReason
    risk_label: str
    points_remaining: int
    days_remaining: int
    required_daily_avg: int
    week_points: int
    delta_vs_prev: Optional[int] = None


class ManagerInsightSummary(Snapshot):
    team_points_remaining: int = 0
    team_required_today: int = 0
    at_risk_count: int = 0
    no_activity_count: int = 0
    low_rhythm_count: int = 0
    coaching_queue: List[CoachingQueueItem] = []


class TeamAlert(Snapshot):
    key: str
    severity: AlertSeverity
    text: str


class TeamMetricProgress(Snapshot):
    metric_key: str
    label: str
    label_short: str
    total: int
    minimum_per_advisor: int
    team_target: int
    progress_percent: float


# --- Week detail ---
class MetricBreakdownRow(Snapshot):
    metric_key: str
    metric_label: str
    units: int
    points: int
    percent_of_total: float
    points_per_unit: Optional[int] = None


class DailyTimelineRow(Snapshot):
    day_label: str
    day: date
    points: int = 0
    activity: str = ""
    status: str = "0 pts"


class RhythmCoach(Snapshot):
    status_message: Optional[str] = None
    action_message: Optional[str] = None
    projection: int = 0
    current_rhythm: float = 0.0
    days_with_activity: int = 0


class MotivationState(Snapshot):
    level: str
    message: str
    color: str
    icon: Optional[str] = None


# --- Dashboards ---
class AdvisorRow(Snapshot):
    week: AdvisorWeekStats
    history: AdvisorHistoryStats
    profile: AdvisorProfile


class TeamDashboard(Snapshot):
    week_range: WeekRange
    today: date
    daily_target: int
    weekly_days: int
    weekly_target: int
    advisors: List[AdvisorRow]
    summary: ManagerInsightSummary
    alerts: List[TeamAlert]
    metric_progress: List[TeamMetricProgress] = []
    minimums_source: str = "default"


class AdvisorWeekDetail(Snapshot):
    week_range: WeekRange
    today: date
    weekly_target: int
    stats: AdvisorWeekStats
    insight: AdvisorInsight
    profile: AdvisorProfile
    today_plan: TodayPlan
    fulfillment_plan: FulfillmentPlan
    breakdown: List[MetricBreakdownRow]
    timeline: List[DailyTimelineRow]
    rhythm_coach: RhythmCoach
    motivation: MotivationState
    today_points: int = 0
    daily_motivation: MotivationState
    daily_tier: OkrTier
    delta_vs_prev: Optional[int] = None
