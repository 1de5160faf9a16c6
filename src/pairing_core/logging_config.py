"""Process-wide logging setup for pairing runs.

Log lines can carry a context (the inputs of the run, the stream being read).
The text format appends it as ``key=value`` pairs, the JSON format as a
``context`` object.
"""

from __future__ import annotations

import contextvars
import json
import logging
import time
from typing import Any

LOG_FORMATS = ("text", "json")

_CONFIGURED = False

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "pairing_log_context", default=None
)


def get_log_context() -> dict[str, Any]:
    ctx = _log_context.get()
    return dict(ctx) if ctx else {}


def set_log_context(**fields: Any) -> None:
    """Replace the context attached to every following log line."""
    _log_context.set(dict(fields))


def clear_log_context() -> None:
    _log_context.set({})


class LogContext:
    """Add fields to the log context for the duration of a ``with`` block."""

    def __init__(self, **fields: Any):
        self.fields = fields
        self.token: contextvars.Token | None = None

    def __enter__(self) -> LogContext:
        self.token = _log_context.set({**get_log_context(), **self.fields})
        return self

    def __exit__(self, *args: Any) -> None:
        if self.token is not None:
            _log_context.reset(self.token)


class TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = get_log_context()
        if not context:
            return line
        fields = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} | {fields}"


class JsonFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__()
        self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_log_context()
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def resolve_level(level: str | int | None, *, verbose: bool = False) -> int:
    """Numeric level for ``level``; ``verbose`` lowers it to DEBUG."""
    if isinstance(level, int):
        numeric = level
    elif level is None:
        numeric = logging.INFO
    else:
        numeric = logging._nameToLevel.get(str(level).upper(), logging.INFO)
    if verbose:
        return min(numeric, logging.DEBUG)
    return numeric


def configure_logging(*, level: str | int | None = None, fmt: str = "text", verbose: bool = False) -> None:
    """Set the root level; the stderr handler is installed on the first call only."""
    global _CONFIGURED
    root = logging.getLogger()
    root.setLevel(resolve_level(level, verbose=verbose))
    if _CONFIGURED:
        return

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter() if fmt.lower() == "json" else TextFormatter())
        root.addHandler(handler)

    _CONFIGURED = True


def add_logging_args(parser: Any) -> None:
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO; DEBUG with -v)",
    )
    parser.add_argument(
        "--log-format",
        default="text",
        choices=LOG_FORMATS,
        help="Logging format (default: text)",
    )
