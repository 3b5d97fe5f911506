# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across checks, aggregator and gate
# CREATED: 02 OCT 2026
# ============================================================================
"""
Structured Logging

Every health module logs through get_logger(), tagged with the component
it belongs to. log_context() attaches the service, check or target under
evaluation, so a failing readiness line says which check failed without
repeating it in the message.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("health.checker", ComponentType.CHECKER)

    with log_context(service="gateway", check="redis"):
        logger.warning("Check failed")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, asdict, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    CHECKER = "checker"
    CHECK = "check"
    AGGREGATOR = "aggregator"
    DEPENDENCY_GATE = "dependency_gate"
    API = "api"


@dataclass(frozen=True)
class LogContext:
    """What is being evaluated when a line is logged."""
    service: Optional[str] = None
    check: Optional[str] = None
    target: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Set fields only."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    """Innermost context on this thread."""
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**fields):
    """
    Push a context for the duration of the block.

    Fields not given are inherited from the enclosing context. Unknown
    field names raise TypeError.
    """
    stack = _stack()
    stack.append(replace(get_current_context(), **fields))
    try:
        yield stack[-1]
    finally:
        stack.pop()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict()
        if context:
            log_data["context"] = context

        # Fields attached by ContextLogger
        if getattr(record, "extra", None):
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line output with context inline, for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = _utcnow().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        parts = [
            f"{key}={getattr(context, key)}"
            for key in ("service", "check", "target")
            if getattr(context, key)
        ]
        context_str = f" [{', '.join(parts)}]" if parts else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}"
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that copies the current context and the logger's component
    onto every record as record.extra.
    """

    def process(self, msg, kwargs):
        extra = get_current_context().to_dict()
        component = (self.extra or {}).get("component")
        if component:
            extra["component"] = component
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """Context-aware logger, optionally tagged with a component."""
    component_value = component.value if component is not None else None
    return ContextLogger(logging.getLogger(name), {"component": component_value})


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        level: Log level name or number
        json_output: JSON lines; also enabled by LOG_FORMAT=json
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


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named checkpoint such as "dependencies_ready".

    Checkpoints mark startup milestones and can be queried by name.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")
    elif isinstance(logger, logging.LoggerAdapter):
        # The payload below is the whole extra; skip the adapter's wrapping
        logger = logger.logger

    payload: Dict[str, Any] = {"checkpoint": name, "timestamp": _utcnow().isoformat()}
    payload.update(get_current_context().to_dict())
    if data:
        payload["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": payload})


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
