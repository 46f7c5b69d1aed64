import os


class Config:
    """Base configuration loaded from environment variables."""

    # --- General ---
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
    LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
    TZ = os.getenv("TZ", "Asia/Seoul")

    # --- Meeting calendar ---
    TARGET_YEAR = int(os.getenv("TARGET_YEAR", "2026"))

    # --- Remote spreadsheet endpoint ---
    SETTINGS_FILE = os.getenv(
        "SETTINGS_FILE", os.path.join(os.path.dirname(__file__), "instance", "settings.json")
    )
    SCRIPT_URL = os.getenv("SCRIPT_URL", "")
    # unset means the transport default (no client-side timeout)
    REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT")) if os.getenv("REQUEST_TIMEOUT") else None

    # --- Members ---
    ALLOW_MEMBER_REMOVAL = os.getenv("ALLOW_MEMBER_REMOVAL", "False").lower() == "true"

    # --- Demo dataset ---
    SEED_RANDOM = int(os.getenv("SEED_RANDOM")) if os.getenv("SEED_RANDOM") else None

    # --- Misc ---
    DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
