# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across scans, backends and API
# CREATED: 06 OCT 2026
# ============================================================================
"""
Structured Logging

Every record carries the catalog context it was emitted in:
- backend: "local" or "blob"
- location: container path or key prefix being examined
- operation: scan, extract, fetch, list_catalog
- request_id: set by the request middleware on its access-log line only;
  scan and fetch records from threadpool workers do not carry it

Usage:
    from core.logging import get_logger, log_context, timed

    logger = get_logger(__name__, ComponentType.DISCOVERY)

    with log_context(backend="local", location="/data/dbs/foo.zip"):
        logger.warning("Skipping container")

    with timed(logger, "scan") as timing:
        ...
    timing.elapsed_seconds
"""

import json
import logging
import os
import sys
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    DISCOVERY = "discovery"
    BACKEND = "backend"
    CACHE = "cache"
    API = "api"
    INFRASTRUCTURE = "infrastructure"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Contextual fields attached to every record emitted inside log_context."""
    backend: Optional[str] = None
    location: Optional[str] = None
    operation: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, extras flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_local = threading.local()


def _stack() -> List[LogContext]:
    stack = getattr(_local, "stack", None)
    if stack is None:
        stack = _local.stack = []
    return stack


def get_current_context() -> LogContext:
    """Innermost context on this thread (empty outside any log_context)."""
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**kwargs) -> Iterator[LogContext]:
    """
    Push context fields for the current thread.

    Unset fields are inherited from the enclosing context; extra dicts
    are merged.
    """
    parent = get_current_context()
    extra = {**parent.extra, **kwargs.pop("extra", {})}
    context = replace(parent, extra=extra, **kwargs)

    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def new_request_id() -> str:
    """Short id correlating the log lines of one HTTP request."""
    return uuid.uuid4().hex[:8]


# ============================================================================
# TIMING
# ============================================================================

@dataclass
class Timing:
    """Filled in when the timed block exits."""
    operation: str
    elapsed_seconds: float = 0.0


@contextmanager
def timed(logger: logging.LoggerAdapter, operation: str, level: int = logging.DEBUG) -> Iterator[Timing]:
    """
    Time a block and log its duration.

    Failures are logged at WARNING with the duration and re-raised.
    """
    timing = Timing(operation)
    start = time.monotonic()
    try:
        yield timing
    except Exception:
        timing.elapsed_seconds = time.monotonic() - start
        logger.warning(f"{operation} failed after {timing.elapsed_seconds:.2f}s")
        raise
    timing.elapsed_seconds = time.monotonic() - start
    logger.log(level, f"{operation} took {timing.elapsed_seconds:.2f}s")


# ============================================================================
# FORMATTERS
# ============================================================================

def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return dict(getattr(record, "catalog", None) or {})


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation.

    Context fields are top-level keys so they can be queried directly.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_record_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for development, context inline."""

    CONTEXT_KEYS = ("request_id", "backend", "location")
    LABELS = {"request_id": "req"}

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        data = _record_fields(record)

        parts = [
            f"{self.LABELS.get(key, key)}={data[key]}"
            for key in self.CONTEXT_KEYS
            if data.get(key)
        ]
        context_str = f" [{', '.join(parts)}]" if parts else ""

        result = f"{timestamp} {record.levelname:<8} {record.name}{context_str}: {record.getMessage()}"
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Attaches the thread's LogContext and the component to each record."""

    def process(self, msg, kwargs):
        data = get_current_context().to_dict()
        data.update(kwargs.get("extra") or {})

        component = self.extra.get("component") if self.extra else None
        if component is not None:
            data.setdefault("component", component.value)

        kwargs["extra"] = {"catalog": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (usually __name__)
        component: Component type for categorization
    """
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: JSON lines instead of the human format
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    # Azure SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(max(level, logging.WARNING))


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "Timing",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "new_request_id",
    "timed",
]
