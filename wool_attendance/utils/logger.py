import logging
import os

# per-request chatter from the dev server and the gateway's HTTP client
NOISY_LOGGERS = ("werkzeug", "urllib3")


def init_logging(app):
    """Configure global logging for the attendance service."""
    log_dir = app.config.get("LOG_DIR") or os.path.join(os.path.dirname(__file__), "..", "..", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    log_level = app.config.get("LOG_LEVEL", "DEBUG").upper()
    numeric_level = getattr(logging, log_level, logging.DEBUG)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )

    quiet_level = max(numeric_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    app.logger = logging.getLogger("wool_attendance")
    app.logger.setLevel(numeric_level)
    app.logger.info(
        "Logging initialized at %s level (%s capped at %s)",
        log_level,
        ", ".join(NOISY_LOGGERS),
        logging.getLevelName(quiet_level),
    )
