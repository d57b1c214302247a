# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - SCHEMA RECONCILIATION
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across reconciler components
# CREATED: 07 OCT 2026
# ============================================================================
"""
Structured Logging

Reconciliation runs log one line per planned or executed statement, so
every record carries where it came from: the schema and table being
reconciled, the operation kind and (abbreviated) statement text.

Output is human-readable by default, JSON with LOG_FORMAT=json.

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.RECONCILER)

    with log_context(schema="app", table="users"):
        logger.info("Reconciling table", extra={"operations": 5})
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

# Statements in log context are cut to this many characters
MAX_STATEMENT_CHARS = 240

# Driver loggers that are too chatty at INFO
_QUIET_LOGGERS = ("psycopg", "psycopg.pool")


class ComponentType(str, Enum):
    """Component tags attached by get_logger()."""
    RECONCILER = "reconciler"
    CATALOG = "catalog"
    EMITTER = "emitter"
    REPOSITORY = "repository"
    CLI = "cli"


def abbreviate(statement: Optional[str], limit: int = MAX_STATEMENT_CHARS) -> Optional[str]:
    """Single-line statement text, cut to limit characters."""
    if statement is None:
        return None
    text = " ".join(statement.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


@dataclass(frozen=True)
class LogContext:
    """
    Fields describing what the current thread is reconciling.

    Contexts nest; an inner context inherits every field it does not set.
    """
    schema: Optional[str] = None
    table: Optional[str] = None
    operation: Optional[str] = None
    statement: Optional[str] = None
    dry_run: Optional[bool] = None
    component: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, **kwargs) -> "LogContext":
        extra = {**self.extra, **kwargs.pop("extra", {})}
        if "statement" in kwargs:
            kwargs["statement"] = abbreviate(kwargs["statement"])
        return replace(self, extra=extra, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with extra flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Push a logging context for the enclosed block.

    Args:
        **kwargs: LogContext fields (schema, table, operation, statement,
            dry_run, component) and an optional extra dict

    Example:
        with log_context(table="users", operation="AddColumn"):
            logger.info("Applying operation")
    """
    context = get_current_context().merged(**kwargs)
    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# ============================================================================
# FORMATTERS
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def __init__(self, include_context: bool = True):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        data = getattr(record, "extra", None)
        if data:
            log_data["data"] = data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Console formatter.

    2026-10-07 12:00:00 INFO     infrastructure.ddl_emitter [schema=app, table=users, op=AddColumn]: ...
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        parts = []
        if context.schema:
            parts.append(f"schema={context.schema}")
        if context.table:
            parts.append(f"table={context.table}")
        if context.operation:
            parts.append(f"op={context.operation}")
        if context.dry_run:
            parts.append("dry-run")
        context_str = f" [{', '.join(parts)}]" if parts else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter stamping records with component and current context.

    The merged fields are stored on the record as a single "extra"
    attribute, which the formatters read.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        component = self.extra.get("component")
        if component is not None:
            extra["component"] = component.value
        extra.update(get_current_context().to_dict())
        kwargs["extra"] = {"extra": extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """Context-aware logger for a module, optionally tagged with a component."""
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name or number
        json_output: Use JSON output (also enabled by LOG_FORMAT=json)
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

    if level > logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named milestone of a reconciliation run.

    Checkpoints: reconcile_started, reconcile_planned, reconcile_applied.
    The record's extra carries the checkpoint name, schema/table from the
    current context and the optional data.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    context = get_current_context()
    checkpoint_data: Dict[str, Any] = {"checkpoint": name, "timestamp": _utc_timestamp()}
    if context.schema:
        checkpoint_data["schema"] = context.schema
    if context.table:
        checkpoint_data["table"] = context.table
    if data:
        checkpoint_data["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint_data})


__all__ = [
    "ComponentType",
    "LogContext",
    "MAX_STATEMENT_CHARS",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "abbreviate",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
