"""
HotelSphere – Django Settings (Infrastructure Only)
=====================================================
Django serves as the framework container for the local store.
It provides the ORM, migrations and transactions; there are no views.

Domain configuration (tax rate, agents, room types) is data held in
the settings table, not here. This module only wires infrastructure.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("HOTELSPHERE_SECRET_KEY", "hotelsphere-dev-key")

DEBUG = os.environ.get("HOTELSPHERE_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── HotelSphere Modules ──────────────────────────────
    "core.local_store",
    "core.sync",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite: the store is process-local by nature.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get(
            "HOTELSPHERE_DB_PATH", str(BASE_DIR / "hotelsphere.sqlite3"),
        ),
    }
}

# ── Hosted Replica ────────────────────────────────────────────
# Empty URL = no replica configured; sync commands refuse to run.
HOTELSPHERE_REPLICA = {
    "URL": os.environ.get("HOTELSPHERE_REPLICA_URL", ""),
    "KEY": os.environ.get("HOTELSPHERE_REPLICA_KEY", ""),
    "TIMEOUT": float(os.environ.get("HOTELSPHERE_REPLICA_TIMEOUT", "10")),
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "hotelsphere": {
            "handlers": ["console"],
            "level": os.environ.get("HOTELSPHERE_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
