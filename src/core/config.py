"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("CHRONOBOT_DB_PATH", PROJECT_ROOT / "data" / "db" / "chronobot.db"))
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# TIMESHEET CONFIGURATION
# =============================================================================

STANDARD_DAY_HOURS = 8

# Calendar days are bucketed in this single timezone (IANA name)
REFERENCE_TIMEZONE_NAME = os.environ.get("CHRONOBOT_TIMEZONE", "UTC")
REFERENCE_TIMEZONE = ZoneInfo(REFERENCE_TIMEZONE_NAME)

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

SUMMARY_HEADERS = ["Employee", "Total Hours", "Overtime Hours", "Status", "Last Action"]
DAILY_HEADERS = ["Employee", "Date", "Hours", "Overtime", "Events"]

# =============================================================================
# LLM CONFIGURATION (from environment)
# =============================================================================

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_API_URL = os.environ.get(
    "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta"
)
LLM_TIMEOUT_SECONDS = float(os.environ.get("LLM_TIMEOUT_SECONDS", "15"))

# =============================================================================
# API CONFIGURATION
# =============================================================================

CHRONOBOT_API_KEY = os.environ.get("CHRONOBOT_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
SEED_DEMO_DATA = os.environ.get("SEED_DEMO_DATA", "true").lower() == "true"
API_VERSION = "1.0.0"
