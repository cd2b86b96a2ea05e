"""
Blog API Logging Configuration
Structured logging with keyword context

Context values whose key looks like a credential (OAuth tokens, session
tokens, PKCE verifiers, cookies) are masked before they reach a handler.
"""
import logging
import sys
import json
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from functools import wraps
import time
import os

# ============================================================
# LOG LEVELS
# ============================================================

LOG_LEVEL = os.environ.get("BLOG_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("BLOG_LOG_FORMAT", "json")  # json or text

SENSITIVE_KEYS = {
    "access_token",
    "refresh_token",
    "token",
    "session_token",
    "code",
    "code_verifier",
    "client_secret",
    "cookie",
    "session_secret",
}
REDACTED = "***"


def redact(context: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``context`` with credential-like values masked."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_KEYS and value else value
        for key, value in context.items()
    }


# ============================================================
# STRUCTURED LOGGING
# ============================================================

class StructuredLogger:
    """Logger that attaches keyword context to every record"""

    def __init__(self, name: str, **bound):
        self.name = name
        self.bound = bound
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        self.logger.propagate = False

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(StructuredFormatter() if LOG_FORMAT == "json" else TextFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context) -> "StructuredLogger":
        """Logger sharing this one's handlers that adds ``context`` to each record."""
        return StructuredLogger(self.name, **{**self.bound, **context})

    def _log(self, level: int, message: str, **context):
        if not self.logger.isEnabledFor(level):
            return
        extra = {
            "context": redact({**self.bound, **context}),
            "logger_name": self.name,
        }
        self.logger.log(level, message, extra=extra)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            context["traceback"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        self._log(logging.ERROR, message, **context)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": getattr(record, "logger_name", record.name),
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "context", {}))
        return json.dumps(log_data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Coloured single-line output for local development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
    }
    DIM = "\033[90m"
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S")
        line = f"{color}[{timestamp}] [{record.levelname}]{self.RESET} {record.getMessage()}"

        context = getattr(record, "context", {})
        pairs = " ".join(f"{k}={v}" for k, v in context.items() if k != "traceback")
        if pairs:
            line += f" {self.DIM}({pairs}){self.RESET}"
        if "traceback" in context:
            line += "\n" + context["traceback"].rstrip()
        return line


# ============================================================
# FUNCTION TIMING DECORATOR
# ============================================================

def timed(logger: StructuredLogger, slow_ms: float = 500):
    """Log how long the wrapped call took; warn when it exceeds ``slow_ms``"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{func.__qualname__} failed",
                    error=e,
                    function=func.__qualname__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise

            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            if duration_ms >= slow_ms:
                logger.warning(f"{func.__qualname__} slow", function=func.__qualname__, duration_ms=duration_ms)
            else:
                logger.debug(f"{func.__qualname__} completed", function=func.__qualname__, duration_ms=duration_ms)
            return result

        return wrapper

    return decorator


# ============================================================
# LOGGER INSTANCES
# ============================================================

api_logger = StructuredLogger("blog.api")
auth_logger = StructuredLogger("blog.auth")
db_logger = StructuredLogger("blog.db")
worker_logger = StructuredLogger("blog.worker")
