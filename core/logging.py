# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - RELEASE RECONCILIATION
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across all components
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Log lines carry the package, release and job they concern, taken from
the innermost log_context() block. Context lives in a ContextVar, so
packages reconciled concurrently on one event loop keep separate context.

Output is either one JSON object per line (LOG_FORMAT=json) or a
single human-readable line:

    2026-10-18 12:00:00 INFO     services.build_scheduler [pkg=com.example.widgets, rel=com.example.widgets@1.0.0]: Enqueued ...

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(package_name="com.example.widgets", operation="build_package"):
        logger.info("Reconciling releases")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    SERVICE = "service"
    REPOSITORY = "repository"
    MESSAGING = "messaging"
    INFRASTRUCTURE = "infrastructure"
    TOOL = "tool"


@dataclass(frozen=True)
class LogContext:
    """Contextual fields attached to every log record."""
    package_name: Optional[str] = None
    release: Optional[str] = None
    job_id: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, extra merged in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


# Shown inline by HumanFormatter as key=value
_INLINE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("package_name", "pkg"),
    ("release", "rel"),
    ("job_id", "job"),
)

_current_context: ContextVar[LogContext] = ContextVar("log_context", default=LogContext())


def get_current_context() -> LogContext:
    """Get current logging context."""
    return _current_context.get()


@contextmanager
def log_context(**kwargs):
    """
    Add fields to the logging context for the duration of the block.

    Unset fields are inherited from the enclosing block; extra dicts merge.

    Example:
        with log_context(package_name="com.example.widgets", operation="reconcile"):
            logger.info("Evicting stale releases")
    """
    parent = get_current_context()
    extra = {**parent.extra, **kwargs.pop("extra", {})}
    new_context = replace(parent, extra=extra, **kwargs)

    token = _current_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_context.reset(token)


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _record_time(record).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context_dict = get_current_context().to_dict()
        if context_dict:
            log_data["context"] = context_dict

        data = getattr(record, "data", None)
        if data:
            log_data["data"] = data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line formatter for terminals, context fields inline."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = _record_time(record).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = [
            f"{label}={getattr(context, name)}"
            for name, label in _INLINE_FIELDS
            if getattr(context, name)
        ]
        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        data = getattr(record, "data", None) or {}
        inline = {name for name, _ in _INLINE_FIELDS}
        data = {k: v for k, v in data.items() if k not in inline}
        data_str = f" {data}" if data else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}{data_str}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that attaches the current context to each record.

    Keyword extra={...} is kept and exposed to formatters as record.data
    together with the component this logger was created for.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        data = {**extra.pop("data", {}), **extra}
        if self.extra.get("component") is not None:
            data.setdefault("component", self.extra["component"])
        data.update(get_current_context().to_dict())
        kwargs["extra"] = {"data": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "services.build_scheduler")
        component: Optional component type for categorization
    """
    value = component.value if component is not None else None
    return ContextLogger(logging.getLogger(name), {"component": value})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure root logging for a process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format; LOG_FORMAT=json has the same effect
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Service Bus and identity clients are chatty at INFO
    for noisy in ("azure", "uamqp"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
) -> None:
    """
    Log a named checkpoint.

    Checkpoints mark the stages of one package's reconciliation run
    ("tags_filtered", "jobs_scheduled") so a run can be followed end to end.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    checkpoint_data: Dict[str, Any] = {"checkpoint": name}

    context = get_current_context()
    if context.package_name:
        checkpoint_data["package_name"] = context.package_name
    if context.operation:
        checkpoint_data["operation"] = context.operation
    if data:
        checkpoint_data.update(data)

    logger.info(f"CHECKPOINT: {name}", extra={"data": checkpoint_data})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
