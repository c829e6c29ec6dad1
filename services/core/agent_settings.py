"""
Agent Configuration Settings
Single source of truth for process settings, config keys & defaults
"""
import os


# =========================
# Process settings (env)
# =========================

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./finops.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() == "true"
LOG_FILE = os.getenv("LOG_FILE") or None

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173,http://localhost:8000"
).split(",")

SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"

# Resource analysis cron (hour field); every 6 hours by default
ANALYSIS_CRON_HOURS = os.getenv("ANALYSIS_CRON_HOURS", "*/6")

# Prod Mode window. Bounds spend on the external LLM + retrieval calls
# made while Prod Mode is on.
PROD_MODE_DURATION_SECONDS = int(os.getenv("PROD_MODE_DURATION_SECONDS", "30"))

# How often the scheduler persists the "off" flag for an expired window
PROD_MODE_REVERT_CHECK_SECONDS = int(os.getenv("PROD_MODE_REVERT_CHECK_SECONDS", "5"))


# =========================
# Persisted config keys
# =========================

KEY_AUTONOMOUS_MODE = "agent.autonomous_mode"
KEY_MAX_AUTONOMOUS_RISK_LEVEL = "agent.max_autonomous_risk_level"
KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS = "agent.approval_required_above_savings"
KEY_AUTO_EXECUTE_TYPES = "agent.auto_execute_types"
KEY_PROD_MODE = "agent.prod_mode"
KEY_PROD_MODE_ACTIVATED_AT = "agent.prod_mode_activated_at"
KEY_SIMULATION_MODE = "agent.simulation_mode"


# =========================
# Defaults
# =========================

# Savings are stored integer-scaled (x1000): 10_000_000 == $10,000
SAVINGS_SCALE = 1000

DEFAULT_AUTONOMOUS_MODE = False
DEFAULT_MAX_AUTONOMOUS_RISK_LEVEL = 5.0
DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS = 10_000 * SAVINGS_SCALE
DEFAULT_AUTO_EXECUTE_TYPES = ("resize", "storage-class")

RISK_LEVEL_MIN = 0.0
RISK_LEVEL_MAX = 100.0

SYSTEM_ACTOR = "system"

# key -> (stored default, description)
CONFIG_DEFAULTS = {
    KEY_AUTONOMOUS_MODE: (
        "false",
        "Enable autonomous execution of recommendations without human approval",
    ),
    KEY_MAX_AUTONOMOUS_RISK_LEVEL: (
        "5.0",
        "Maximum risk level (percentage) for autonomous execution",
    ),
    KEY_APPROVAL_REQUIRED_ABOVE_SAVINGS: (
        str(DEFAULT_APPROVAL_REQUIRED_ABOVE_SAVINGS),
        "Annual savings (USD x1000) above which approval is required even in autonomous mode",
    ),
    KEY_AUTO_EXECUTE_TYPES: (
        ",".join(DEFAULT_AUTO_EXECUTE_TYPES),
        "Comma-separated list of recommendation types that can be executed autonomously",
    ),
    KEY_PROD_MODE: (
        "false",
        "Use AI-assisted (LLM + RAG) analysis instead of heuristics; auto-reverts",
    ),
    KEY_SIMULATION_MODE: (
        "false",
        "Drive the dashboard from synthetic resource data",
    ),
}

# Keys whose values must parse as non-negative numbers
NUMERIC_KEY_MARKERS = ("risk_level", "savings")

CONFIG_DESCRIPTIONS = {key: description for key, (_, description) in CONFIG_DEFAULTS.items()}
CONFIG_DESCRIPTIONS[KEY_PROD_MODE_ACTIVATED_AT] = "UTC timestamp of the last Prod Mode activation"
