"""
SportsMeet Logging Configuration
Structured, keyword-context logging for the API and the ledger services.

    log = get_logger("orders")
    log.info("Order paid", order_number=number, activity_id=7)

emits one JSON object per line (or a single readable line with
SPORTSMEET_LOG_FORMAT=text).
"""
import json
import logging
import os
import sys
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional

# ============================================================
# CONFIGURATION
# ============================================================

LOG_LEVEL = os.environ.get("SPORTSMEET_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("SPORTSMEET_LOG_FORMAT", "json")  # json or text
SLOW_CALL_MS = float(os.environ.get("SPORTSMEET_SLOW_CALL_MS", "500"))

# Context keys too noisy for the one-line text format
_TEXT_HIDDEN = frozenset({"traceback"})


# ============================================================
# FORMATTERS
# ============================================================

def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; context keys are merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "context", {}))
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Readable single-line output for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, color: Optional[bool] = None):
        super().__init__()
        self.color = sys.stdout.isatty() if color is None else color

    def format(self, record: logging.LogRecord) -> str:
        stamp = _record_time(record).strftime("%H:%M:%S")
        line = f"[{stamp}] [{record.levelname}] {record.name}: {record.getMessage()}"

        context = getattr(record, "context", {})
        shown = " ".join(f"{k}={v}" for k, v in context.items() if k not in _TEXT_HIDDEN)
        if shown:
            line = f"{line} ({shown})"

        if self.color and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.RESET}"
        return line


def _build_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if LOG_FORMAT == "json" else TextFormatter())
    return handler


# ============================================================
# STRUCTURED LOGGER
# ============================================================

class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` taking context as keyword arguments.

    ``bind()`` returns a logger that adds fixed context to every record,
    e.g. ``log.bind(activity_id=3).info("Seat taken")``.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.context = dict(context or {})
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
            self.logger.addHandler(_build_handler())
            self.logger.propagate = False

    def bind(self, **context) -> "StructuredLogger":
        return StructuredLogger(self.name, {**self.context, **context})

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra={"context": {**self.context, **context}})

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error is not None:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            context["traceback"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        self._log(logging.ERROR, message, context)


# ============================================================
# TIMING
# ============================================================

def timed(logger: StructuredLogger, slow_ms: float = SLOW_CALL_MS):
    """Log how long the wrapped call took; calls slower than ``slow_ms`` log a warning."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            outcome = "completed"
            try:
                return func(*args, **kwargs)
            except Exception as e:
                outcome = f"raised {type(e).__name__}"
                raise
            finally:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log = logger.warning if duration_ms >= slow_ms else logger.debug
                log(
                    f"{func.__qualname__} {outcome}",
                    function=func.__qualname__,
                    duration_ms=duration_ms,
                )

        return wrapper

    return decorator


# ============================================================
# LOGGER INSTANCES
# ============================================================

api_logger = StructuredLogger("sportsmeet.api")
service_logger = StructuredLogger("sportsmeet.services")
db_logger = StructuredLogger("sportsmeet.db")


def get_logger(name: str) -> StructuredLogger:
    """Logger under the ``sportsmeet`` namespace"""
    return StructuredLogger(f"sportsmeet.{name}")
