import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from app.base.config import settings

# === Configurable via ENV (level, JSON output and environment come from settings) ===
LOG_DIR = Path(os.getenv("LOG_DIR", "./logs"))
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
SERVICE_NAME = os.getenv("SERVICE_NAME", "interview-scheduler")
SENTRY_DSN = os.getenv("SENTRY_DSN", "")


def get_formatter(use_json: bool, service: str) -> logging.Formatter:
    if use_json:
        return JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level"},
            static_fields={"service": service, "environment": settings.ENVIRONMENT},
        )
    return logging.Formatter(
        fmt=f"%(asctime)s | %(levelname)s | %(name)s | [svc={service}] | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


_sentry_initialized = False


def _init_sentry(logger: logging.Logger) -> None:
    global _sentry_initialized
    if _sentry_initialized:
        return

    import sentry_sdk
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_logging = LoggingIntegration(
        level=logging.ERROR,
        event_level=logging.ERROR
    )
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        integrations=[sentry_logging],
        traces_sample_rate=0.05,
        send_default_pii=False
    )
    _sentry_initialized = True
    logger.info("[Logging] Sentry integration initialized.")


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[int] = None,
    use_json: Optional[bool] = None,
    service: str = SERVICE_NAME
) -> logging.Logger:
    """
    Sets up a logger with stream handler and, when LOG_TO_FILE is on, a rotating file handler.

    Child loggers (``<name>.<component>``) propagate into the handlers attached here.
    """
    if level is None:
        level = settings.LOG_LEVEL_NUMERIC
    if use_json is None:
        use_json = settings.ENABLE_JSON_LOGS

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False  # Avoid double logging in root

    # Clear old handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = get_formatter(use_json, service)

    # === Stream Handler (STDOUT) ===
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    # === File Handler (Rotating) ===
    if log_file and LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_path = LOG_DIR / log_file
        file_handler = RotatingFileHandler(str(file_path), maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # === Sentry Integration (Optional) ===
    if SENTRY_DSN:
        _init_sentry(logger)

    return logger


# === Preconfigured loggers ===
app_logger = setup_logger("app", log_file="app.log")
scheduler_logger = setup_logger("interview_scheduler", log_file="scheduler.log")
notification_logger = setup_logger("notifications", log_file="notifications.log")
