"""Logging setup shared by the service and the client.

Task operations log with a small context (``task``, ``op``, ``phase``) passed
as ``extra``; :func:`log_context` builds it. Records that carry no context,
such as third-party ones, render the missing fields as ``-``.
"""

import logging
import os
from typing import Any, Optional

CONTEXT_FIELDS = ("task", "op", "phase")
LOG_FORMAT = "%(levelname)s %(name)s [%(op)s/%(phase)s task=%(task)s] %(message)s"

_CONFIGURED = False


def log_context(task: Optional[str] = None, op: Optional[str] = None, phase: Optional[str] = None) -> dict[str, Any]:
    return {"task": task or "-", "op": op or "-", "phase": phase or "-"}


class SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "-")
        return super().format(record)


def configure_logging(level: Optional[str] = None) -> None:
    """Install one stderr handler on the root logger; later calls do nothing."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    name = (level or os.getenv("TASKBOARD_LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(SafeFormatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(resolved)

    for uvicorn_logger in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(uvicorn_logger).setLevel(resolved)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))

    _CONFIGURED = True
