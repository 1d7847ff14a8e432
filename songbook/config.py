"""
Songbook - Configuration
All settings loaded from environment variables with sensible defaults.
"""

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
_ = load_dotenv()

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = os.getenv("DEBUG", "true").lower() == "true"
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")

if APP_ENV == "production" and SECRET_KEY == "change-me-in-production":
    raise RuntimeError(
        "SECRET_KEY must be changed from the default value in production. "
        "Set the SECRET_KEY environment variable to a random secret."
    )

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

DATA_DIR = Path(os.getenv("DATA_DIR", os.path.join(tempfile.gettempdir(), "songbook")))
DB_PATH = Path(os.getenv("DB_PATH", os.path.join(DATA_DIR, "songbook.db")))

TEMPLATES_DIR = BASE_DIR / "templates"

# ---------------------------------------------------------------------------
# Logging — stdout only
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ---------------------------------------------------------------------------
# Flash messages (signed cookie, read once)
# ---------------------------------------------------------------------------
FLASH_COOKIE_NAME = os.getenv("FLASH_COOKIE_NAME", "songbook_flash")
FLASH_MAX_AGE = int(os.getenv("FLASH_MAX_AGE", "300"))

# ---------------------------------------------------------------------------
# Song form constraints
# ---------------------------------------------------------------------------
TITLE_MAX_LENGTH = 255


def ensure_directories() -> None:
    """Create the local directories needed by the database."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
