# salon_app/config.py

import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (existing env vars win)
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Salons without a configured timezone (or with a bad one) use this
DEFAULT_SALON_TIMEZONE = os.getenv("DEFAULT_SALON_TIMEZONE", "Asia/Ho_Chi_Minh")

# Grid step for generated booking slots
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
