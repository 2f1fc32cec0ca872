# okr-insights/config.py

"""
Central configuration for the OKR insights engine.
-- Scoring policy, weekly minimums and dashboard defaults --
"""
import os

from dotenv import load_dotenv

load_dotenv()

# --- Evaluation Timezone ---
# Every "which day does this event count toward" decision is made here,
# never in the host's local timezone.
TIMEZONE = os.getenv("OKR_TIMEZONE", "America/Monterrey")

# --- OKR Defaults ---
OKR_DEFAULTS = {
    "daily_target": int(os.getenv("OKR_DAILY_TARGET", "25")),
    "weekly_days": int(os.getenv("OKR_WEEKLY_DAYS", "5")),
    "history_weeks": 12,
    "coaching_queue_size": 5,
}

# --- Metric Vocabulary ---
PUSH_METRICS = (
    "calls",
    "meetings_set",
    "meetings_held",
    "proposals_presented",
    "applications_submitted",
    "referrals",
    "policies_paid",
)

KEY_ACTIVITY_METRICS = ("calls", "meetings_set", "meetings_held", "proposals_presented")

METRIC_LABELS = {
    "calls": "Calls",
    "meetings_set": "Meetings set",
    "meetings_held": "Meetings held",
    "proposals_presented": "Proposals presented",
    "applications_submitted": "Applications submitted",
    "referrals": "Referrals",
    "policies_paid": "Policies paid",
}

METRIC_LABELS_SHORT = {
    "calls": "Calls",
    "meetings_set": "Meetings",
    "meetings_held": "Held",
    "proposals_presented": "Proposals",
    "applications_submitted": "Applications",
    "referrals": "Referrals",
    "policies_paid": "Policies",
}

# --- Weekly Minimums (per advisor) ---
DEFAULT_WEEKLY_MINIMUMS = {
    "calls": 30,
    "meetings_set": 10,
    "meetings_held": 8,
    "proposals_presented": 5,
    "applications_submitted": 1,
    "referrals": 30,
    "policies_paid": 1,
}

# --- Daily Tiers (points bands, used when none are configured) ---
DEFAULT_DAILY_TIERS = [
    {
        "key": "warmup", "min": 0, "max": 39,
        "label": "Warming up",
        "message": "Start with a small win: 1 call + 1 follow-up.",
        "tone": "neutral", "color": "slate",
    },
    {
        "key": "momentum", "min": 40, "max": 79,
        "label": "In rhythm",
        "message": "Going well. One more push: book 1 meeting today.",
        "tone": "info", "color": "blue",
    },
    {
        "key": "expected", "min": 80, "max": 119,
        "label": "Expected activity",
        "message": "Excellent. You're at the day's standard.",
        "tone": "success", "color": "green",
    },
    {
        "key": "overdrive", "min": 120, "max": 1000,
        "label": "High performance",
        "message": "Unstoppable day. Repeat this and your week takes off.",
        "tone": "special", "color": "amber",
    },
]

# --- Weekly Status Thresholds (percent of target) ---
STATUS_THRESHOLDS = {
    "excellent": 120,
    "completed": 100,
}

# --- Profile Classifier Policy ---
PROFILE_RULES = {
    "intermittent_max_days": 2,
    "intermittent_max_minimums_met": 2,
    "growing_min_key_metrics": 3,
    "fallback_growing_min_key_metrics": 2,
    "conversion_goal_ratio": 0.8,
    "missing_metrics_limit": 2,
}

# --- Today Plan Distribution ---
PLAN_METRICS = ("calls", "meetings_set", "proposals_presented")

PLAN_DISTRIBUTION = {
    "calls": 0.6,
    "meetings_set": 0.3,
    "proposals_presented": 0.1,
}

KICKSTART_PREFERRED_METRIC = "calls"

# --- Team Alerts ---
ALERT_CONFIG = {
    "low_projection_ratio": 0.8,
}


def get_metric_label(metric_key: str, variant: str = "long") -> str:
    labels = METRIC_LABELS_SHORT if variant == "short" else METRIC_LABELS
    return labels.get(metric_key, metric_key)


def resolve_weekly_minimums(overrides: dict = None) -> dict:
    """Two-tier lookup: configured override first, then the hardcoded default."""
    resolved = dict(DEFAULT_WEEKLY_MINIMUMS)
    for metric_key, units in (overrides or {}).items():
        if units is not None:
            resolved[metric_key] = units
    return resolved
