"""Configuration module for the classroom tracker backend.

This module provides centralized configuration management, including directory
paths, API server settings, database, SMTP transport and authentication
settings. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/classroom.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- SMTP Configuration ---

SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "465"))
SMTP_SECURE: bool = os.getenv("SMTP_SECURE", "false").lower() == "true"
SMTP_USER: str = os.getenv("SMTP_USER", "")
SMTP_PASS: str = os.getenv("SMTP_PASS", "")
SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", "30"))

# Display name used for mail sent on behalf of the system rather than a teacher
MAIL_SYSTEM_NAME: str = os.getenv("MAIL_SYSTEM_NAME", "Ödev Sistemi")

# --- Notification Configuration ---

# Shared secret for the overdue reminder job. When unset the endpoint is open.
ASSIGNMENT_NOTIFY_API_KEY: Optional[str] = os.getenv("ASSIGNMENT_NOTIFY_API_KEY")

# Number of whole UTC days the overdue scanner looks back (1 = due yesterday)
OVERDUE_LOOKBACK_DAYS: int = int(os.getenv("OVERDUE_LOOKBACK_DAYS", "1"))

# Default page size for listing endpoints
DEFAULT_LIST_LIMIT: int = int(os.getenv("DEFAULT_LIST_LIMIT", "10"))

# --- Authentication Configuration ---

# Tokens are issued by the hosted auth platform; we only verify them.
AUTH_JWT_SECRET: str = os.getenv("AUTH_JWT_SECRET", "change-me-in-production")
AUTH_JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_AUDIENCE: Optional[str] = os.getenv("AUTH_JWT_AUDIENCE") or None


def get_smtp_settings():
    """Build the SMTP settings from the environment-derived values.

    Returns:
        SmtpSettings instance with the transport profile already selected.

    Note:
        Uses a lazy import so that ``utils.mail`` can be imported without
        pulling configuration at module load.
    """
    from utils.mail import SmtpSettings

    return SmtpSettings.build(
        host=SMTP_HOST,
        port=SMTP_PORT,
        secure=SMTP_SECURE,
        username=SMTP_USER,
        password=SMTP_PASS,
        timeout=SMTP_TIMEOUT,
        system_name=MAIL_SYSTEM_NAME,
    )
