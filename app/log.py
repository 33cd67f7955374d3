"""
Application logging.

- Format: time [level] [request_id] module.func:line - message
- request_id travels in a ContextVar (set by the HTTP middleware or a cron run)
- Modules use get_logger(__name__); handlers live on the root logger only

Usage:
    from app.log import get_logger, request_ctx
    logger = get_logger(__name__)
    logger.info("event=mission.assigned | user_id=%s", user_id)

    with request_ctx("cron-reminders"):
        ...
"""
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

from app.config import get_settings

_request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_FMT = "%(asctime)s [%(levelname)-5s] [%(request_id)s] %(name)s.%(funcName)s:%(lineno)d - %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_HANDLER_MARKER = "_is_app_log_handler"


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


@contextmanager
def request_ctx(request_id: Optional[str] = None) -> Generator[str, None, None]:
    """Scope a request id to a block (background jobs, cron runs)."""
    token = _request_id_var.set(str(request_id or "").strip()[:16] or new_request_id())
    try:
        yield _request_id_var.get()
    finally:
        _request_id_var.reset(token)


class _RequestIdFilter(logging.Filter):
    """Inject request_id into every record for %(request_id)s."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_var.get()
        return True


def setup_logging() -> None:
    """Register the app handler on the root logger (idempotent under uvicorn --reload)."""
    root = logging.getLogger()
    if any(getattr(h, _HANDLER_MARKER, False) for h in root.handlers):
        return

    level = logging.getLevelName(get_settings().log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FMT, datefmt=_DATE_FMT))
    handler.setLevel(level)
    handler.addFilter(_RequestIdFilter())
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
