"""
Django settings for distro_project.

Values come from the environment (optionally a .env file beside manage.py).
"""
import os
import sys
from decimal import Decimal
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

from .logging_config import get_logging_config

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "changeme")
DEBUG = os.getenv("DJANGO_DEBUG", "False") == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",")

TESTING = "PYTEST_CURRENT_TEST" in os.environ or "test" in sys.argv

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "ledger_core.apps.LedgerCoreConfig",
]

MIDDLEWARE = []

# =============================================================================
# Database
# =============================================================================
# Storage calls are bounded; a timeout surfaces as OperationalError
# and rolls back the whole posting.
LEDGER_DB_TIMEOUT = int(os.getenv("LEDGER_DB_TIMEOUT", "20"))

DATABASES = {
    "default": dj_database_url.config(
        env="DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
    )
}
_db_options = DATABASES["default"].setdefault("OPTIONS", {})
if DATABASES["default"]["ENGINE"].endswith("sqlite3"):
    _db_options.setdefault("timeout", LEDGER_DB_TIMEOUT)
elif DATABASES["default"]["ENGINE"].endswith("postgresql"):
    _db_options.setdefault(
        "options", f"-c statement_timeout={LEDGER_DB_TIMEOUT * 1000}"
    )

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# Ledger engine
# =============================================================================
# Money is fixed-point Decimal (2 places) so debits must equal credits exactly
LEDGER_BALANCE_TOLERANCE = Decimal(os.getenv("LEDGER_BALANCE_TOLERANCE", "0.00"))
LEDGER_REPORT_TOLERANCE = Decimal(os.getenv("LEDGER_REPORT_TOLERANCE", "0.01"))
# Cost share assumed for sales returns when the true cost is not supplied
LEDGER_RETURN_COST_RATIO = Decimal(os.getenv("LEDGER_RETURN_COST_RATIO", "0.70"))
LEDGER_CONFLICT_RETRIES = int(os.getenv("LEDGER_CONFLICT_RETRIES", "3"))
LEDGER_JOURNAL_PREFIX = os.getenv("LEDGER_JOURNAL_PREFIX", "JE")

# =============================================================================
# Celery
# =============================================================================
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", str(TESTING)) == "True"
CELERY_TIMEZONE = TIME_ZONE

LOGGING = get_logging_config(DEBUG)
