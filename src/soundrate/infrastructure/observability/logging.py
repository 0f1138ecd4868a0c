"""Logging setup: JSON or compact text output, correlation ids on every record."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# Hey future me, every request gets a correlation id that follows it through all logs and
# async tasks. contextvars are asyncio-safe: each task sees its own value, so two concurrent
# requests never mix ids. The default "" covers startup logs and anything outside a request.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# Third-party loggers that are chatty at INFO. uvicorn.access duplicates what
# RequestLoggingMiddleware already logs.
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "aiosqlite", "uvicorn.access")

# LogRecord attribute → JSON key
_JSON_FIELDS = {
    "levelname": "level",
    "name": "logger",
    "module": "module",
    "funcName": "function",
    "lineno": "line",
}


def get_correlation_id() -> str:
    """Correlation id of the current request ("" outside of one)."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating a UUID4 when None."""
    value = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Text formatter that prints exception chains compactly, root cause first.

    Only frames from our own package are shown, e.g.:

    ERROR   │ soundrate.application.services.rating_service:104 │ Rating hook failed
    ╰─► OperationalError: database is locked
        File "repositories.py", line 371, in add_favorite_artist
          await self.session.flush()
    """

    package_marker = "soundrate"

    def _own_frames(self, exc: BaseException) -> list[str]:
        lines: list[str] = []
        for frame in traceback.extract_tb(exc.__traceback__):
            if "/site-packages/" in frame.filename or self.package_marker not in frame.filename:
                continue
            lines.append(
                f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
            )
            if frame.line:
                lines.append(f"      {frame.line.strip()}")
        return lines

    def formatException(self, ei: Any) -> str:
        exc_value = ei[1]
        chain: list[BaseException] = []
        while exc_value is not None and exc_value not in chain:
            chain.append(exc_value)
            exc_value = exc_value.__cause__ or exc_value.__context__

        lines: list[str] = []
        for exc in reversed(chain):
            lines.append(f"╰─► {type(exc).__name__}: {exc}")
            if exc.__traceback__ is not None:
                lines.extend(self._own_frames(exc))
        return "\n".join(lines)


class CustomJsonFormatter(JsonFormatter):
    """One JSON object per line with source location and correlation id."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        for attribute, key in _JSON_FIELDS.items():
            log_record[key] = getattr(record, attribute)

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)


def _build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    return CompactExceptionFormatter(
        fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
        datefmt="%H:%M:%S",
    )


# Listen future me, call this ONCE at startup (the app lifespan does). It replaces the root
# logger's handlers, so calling it again in tests is safe.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "soundrate",
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_level: Level name; unknown names fall back to INFO
        json_format: JSON lines (production) instead of the compact text format
        app_name: Included in the startup log line
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(_build_formatter(json_format))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"app_name": app_name, "log_level": log_level, "json_format": json_format},
    )
