"""Loguru setup for the API and the offline sync job.

Every module logs through ``get_logger(name)``; stdlib loggers (uvicorn,
sqlalchemy, httpx, alembic) are routed into the same sinks. ERROR records
are also posted to Slack when ``SLACK_WEBHOOK_URL`` is set, so a failed
sync or a dead ledger store pages someone.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from savings.core.config import settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}"
LOG_FILE = Path("logs") / "savings.log"

_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
_VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

# Third-party loggers that drown the ledger logs at INFO
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

_configured = False


class InterceptHandler(logging.Handler):
    """Redirect stdlib logs to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_name == "emit":
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


class SlackAlertSink:
    """Loguru sink posting one Slack message per record."""

    def __init__(self, webhook_url: str, environment: str):
        self.webhook_url = webhook_url
        self.environment = environment

    def __call__(self, message: Any) -> None:
        record = message.record
        name = record["extra"].get("name", "savings")
        text = (
            f"[{self.environment}] {record['level'].name} in {name}:{record['function']}:{record['line']}\n"
            f"{record['message']}"
        )
        try:
            httpx.post(self.webhook_url, json={"text": text}, timeout=5.0)
        except httpx.HTTPError:
            # Logging here would feed straight back into this sink
            pass


def resolve_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    level = _LEVEL_ALIASES.get(level, level)
    return level if level in _VALID_LEVELS else "INFO"


def configure_logging() -> None:
    global _configured
    if _configured:
        return
    _configured = True

    level = resolve_level(settings.effective_log_level)

    logger.remove()
    logger.configure(extra={"name": "savings"})
    logger.add(sys.stdout, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)

    if settings.LOG_TO_FILE:
        LOG_FILE.parent.mkdir(exist_ok=True)
        logger.add(
            LOG_FILE,
            level=level,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    if settings.SLACK_WEBHOOK_URL:
        logger.add(SlackAlertSink(settings.SLACK_WEBHOOK_URL, settings.ENV), level="ERROR", enqueue=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # uvicorn installs its own handlers; replace them so nothing is printed twice
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logger.__class__:
    return logger.bind(name=name)


configure_logging()
