"""
Run-scoped logging.

FlowExecutor.execute() puts flow_id and flow_run_id into ``trace_context``;
PieceExecutor.handle() adds step_name. Every record emitted while a step runs,
including records from action code, is formatted with those fields.

Two output modes: one JSON object per line (production) or a colored line
prefixed with the run and step (development).
"""

import json
import logging
import os
import re
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from stepflow.config import get_log_level

trace_context: ContextVar[dict[str, Any] | None] = ContextVar("trace_context", default=None)

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

# ``extra=`` keys copied onto JSON entries
EXTRA_FIELDS = ("attempt", "verdict")


def strip_ansi_codes(text: str) -> str:
    return ANSI_ESCAPE_PATTERN.sub("", text)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, then run context, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": strip_ansi_codes(record.getMessage()),
            **(trace_context.get() or {}),
        }
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exception"] = strip_ansi_codes(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        context = trace_context.get() or {}
        labels = []
        if context.get("flow_run_id"):
            labels.append(f"run:{context['flow_run_id'][-8:]}")
        if context.get("step_name"):
            labels.append(f"step:{context['step_name']}")
        where = f"[{' | '.join(labels)}] " if labels else ""

        color = self.LEVEL_COLORS.get(record.levelno, "")
        line = f"{color}[{record.levelname:<8}]{self.RESET} {where}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str | None = None, format: str = "auto") -> None:
    """
    Install a single root handler.

    Args:
        level: Log level name; defaults to the configured STEPFLOW_LOG_LEVEL
        format: "json", "human", or "auto" (json when LOG_FORMAT=json or
            ENV=production)
    """
    if format == "auto":
        wants_json = (
            os.getenv("LOG_FORMAT", "").lower() == "json"
            or os.getenv("ENV", "").lower() == "production"
        )
        format = "json" if wants_json else "human"

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if format == "json" else HumanReadableFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or get_log_level()).upper())


def set_trace_context(**fields: Any) -> None:
    """Merge ``fields`` into the context of the current task."""
    trace_context.set({**(trace_context.get() or {}), **fields})


def get_trace_context() -> dict[str, Any]:
    return dict(trace_context.get() or {})


def clear_trace_context() -> None:
    trace_context.set(None)
