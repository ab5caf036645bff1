"""
JSON-lines logging for the README generator.

Two context variables tag each line: ``request_id`` (set by the HTTP
middleware) and ``repository`` (set by the handler once the URL has been
parsed). Both are inherited by the tasks of the GitHub fan-out, so a single
request can be followed through every outbound call.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import uuid
from datetime import datetime, timezone

request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="-"
)
repository_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "repository", default=None
)

# These log one line per outbound call at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_ctx.get(),
        }
        repository = repository_ctx.get()
        if repository:
            entry["repository"] = repository
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Replace the root handlers with a single stdout JSON handler."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]
