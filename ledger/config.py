"""
Ledger configuration: paths, defaults, vocabulary constants.

Every value can be overridden from the environment (or a .env file).
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("LEDGER_DATA_DIR", str(PROJECT_ROOT / "data" / "store")))
SEED_PATH = Path(os.getenv("LEDGER_SEED_PATH", str(PROJECT_ROOT / "data" / "seed.json")))

# ---------------------------------------------------------------------------
# Aggregation windows
# ---------------------------------------------------------------------------
HISTORY_MONTHS = int(os.getenv("LEDGER_HISTORY_MONTHS", "12"))
ROLLING_MONTHS = int(os.getenv("LEDGER_ROLLING_MONTHS", "3"))
TOP_HINTS = 3
BUDGET_WARN_PCT = 85

# ---------------------------------------------------------------------------
# Categories and budgets
# ---------------------------------------------------------------------------
INCOME_CATEGORY = "Income"
FALLBACK_CATEGORY = "Other"

CATEGORIES = [
    "Groceries",
    "Fuel",
    "Restaurants",
    "Housing",
    "Telecom",
    "Health/Sport",
    "Transport",
    "Leisure",
    "Software/Subscriptions",
    FALLBACK_CATEGORY,
]

DEFAULT_BUDGETS = {
    "Groceries": 1200,
    "Fuel": 380,
    "Restaurants": 600,
    "Housing": 2500,
    "Telecom": 200,
    "Health/Sport": 300,
    "Transport": 200,
    "Leisure": 400,
    "Software/Subscriptions": 252,
    FALLBACK_CATEGORY: 300,
}

DEFAULT_EXPECTED_INCOME = float(os.getenv("LEDGER_EXPECTED_INCOME", "14000"))

# ---------------------------------------------------------------------------
# Storage keys (one blob per key)
# ---------------------------------------------------------------------------
KEY_ENTRIES = "pf_tx"
KEY_BUDGETS = "pf_budgets"
KEY_GOALS = "pf_goals"
KEY_EXPECTED_INCOME = "pf_expected_income"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LEDGER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
