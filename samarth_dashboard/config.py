"""
Configuration: storage locations, collection names, scoring policy, constants.

Deployment-specific values (database URL, bucket directory, log level) are
read from the environment, optionally via a local .env file.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Paths and connections (overridable through the environment)
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

DATABASE_URL = os.getenv(
    "SAMARTH_DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'samarth.db'}",
)
BUCKET_DIR = Path(os.getenv("SAMARTH_BUCKET_DIR", str(BASE_DIR / "storage")))
LOG_LEVEL = os.getenv("SAMARTH_LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# Bucket layout
# ---------------------------------------------------------------------------
INCOMING_PREFIX = "incoming_reports/"
PROCESSED_PREFIX = "processed_reports/"
ERROR_PREFIX = "error_reports/"

# Variant outcomes live beside processed files with a marker prefix
UNSUPPORTED_MARKER = "unsupported_"
EMPTY_MARKER = "empty_"

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")

# ---------------------------------------------------------------------------
# Document collections
# ---------------------------------------------------------------------------
DISTRICTS_COLLECTION = "districts"
SUMMARY_COLLECTION = "summary"
SUMMARY_DOC_ID = "live_stats"
INSIGHTS_COLLECTION = "ai_insights"
INSIGHTS_DOC_ID = "latest"
HISTORICAL_COLLECTION = "historical_data"
OFFICERS_COLLECTION = "officers"
FEEDBACK_COLLECTION = "feedback"

# Largest number of writes committed in one atomic batch
MAX_BATCH_WRITES = 450

# ---------------------------------------------------------------------------
# Report row vocabulary
# ---------------------------------------------------------------------------
# Header names tried in order when resolving a row's district
DISTRICT_NAME_FIELDS = ("name", "District", "district_name")

NUMERIC_FIELDS = (
    "hps_score",
    "nbws_executed",
    "conviction_ratio",
    "drug_seizure_kg",
    "cases_solved",
    "recognitions",
)

DEFAULT_ZONE = "Unassigned"

# ---------------------------------------------------------------------------
# Scoring policy
# ---------------------------------------------------------------------------
# Districts with a conviction ratio strictly below this are flagged at risk.
# One threshold is used for every trigger.
RISK_CONVICTION_THRESHOLD = 40.0

LEADERBOARD_SIZE = 3

# Estimated street value used for the recovered-value figure (INR per kg)
DRUG_VALUE_PER_KG_INR = 5_000_000

KEY_TOPICS = [
    "NBW Execution Rate",
    "Narcotics Enforcement",
    "Conviction Ratio",
    "HPS Score",
]

STABLE_ALERT = "Overall performance is stable."

# ---------------------------------------------------------------------------
# Citizen feedback
# ---------------------------------------------------------------------------
FEEDBACK_TYPES = ("compliment", "complaint", "suggestion")
FEEDBACK_STATUSES = ("pending", "reviewed", "resolved")
RATING_RANGE = (1, 5)

# Rank or designation that marks a district's Superintendent of Police
SUPERINTENDENT_RANK = "SP"
