"""
Structured JSON logging for cropwatch.

Provides a JSON formatter, an ``AuditLogger`` with domain-specific helpers
for alerts, claim decisions and batch failures, and a cached ``get_logger``.

Audit loggers inherit their level from the ``cropwatch`` logger that
``configure_logging`` sets up (INFO by default). The
``CROPWATCH_LOG_LEVEL`` environment variable pins them to a fixed level.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message"}

logger = logging.getLogger(__name__)

_logger_cache: Dict[str, "AuditLogger"] = {}
_cache_lock = threading.Lock()


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        data: Dict[str, Any] = {
            "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def _resolve_level(level: Optional[str], default: Optional[int] = None) -> Optional[int]:
    """
    Level from ``level`` or ``CROPWATCH_LOG_LEVEL``.

    Returns ``default`` when neither is set or the name is not a known level.
    """
    name = level or os.environ.get("CROPWATCH_LOG_LEVEL")
    if not name:
        return default
    if not isinstance(name, str):
        return int(name)
    resolved = logging.getLevelName(name.upper())
    if not isinstance(resolved, int):
        logger.warning("Unknown log level %r, ignoring it", name)
        return default
    return resolved


class AuditLogger:
    """
    Logger wrapper with domain events for the insurance pipeline.

    Every helper attaches its fields as structured extras so they appear as
    top-level keys in JSON output.
    """

    def __init__(self, name: str, level: Optional[str] = None):
        self._logger = logging.getLogger(name)
        resolved = _resolve_level(level)
        if resolved is not None:
            self._logger.setLevel(resolved)

    @property
    def name(self) -> str:
        return self._logger.name

    def alert_raised(self, farm_id: int, severity: str, drop_percentage: float,
                     cause: Optional[str] = None) -> None:
        self._logger.warning(
            "Alert raised for farm %s: %s (%.1f%% NDVI drop)", farm_id, severity, drop_percentage,
            extra={"event": "alert_raised", "farm_id": farm_id, "severity": severity,
                   "drop_percentage": round(drop_percentage, 2), "cause": cause},
        )

    def claim_created(self, claim_id: str, farm_id: int, payout: int,
                      alert_id: Optional[str] = None) -> None:
        self._logger.info(
            "Claim %s created for farm %s (payout %s)", claim_id, farm_id, payout,
            extra={"event": "claim_created", "claim_id": claim_id, "farm_id": farm_id,
                   "payout": payout, "alert_id": alert_id},
        )

    def claim_reviewed(self, claim_id: str, status: str, officer: str,
                       notes: Optional[str] = None) -> None:
        self._logger.info(
            "Claim %s %s by %s", claim_id, status, officer,
            extra={"event": "claim_reviewed", "claim_id": claim_id, "status": status,
                   "officer": officer, "notes": notes},
        )

    def batch_error(self, operation: str, farm_id: Optional[int], error: str) -> None:
        self._logger.error(
            "%s failed for farm %s: %s", operation, farm_id, error,
            extra={"event": "batch_error", "operation": operation, "farm_id": farm_id},
        )

    def info(self, message: str, **fields: Any) -> None:
        self._logger.info(message, extra=fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._logger.warning(message, extra=fields)

    def error(self, message: str, **fields: Any) -> None:
        self._logger.error(message, extra={k: v for k, v in fields.items() if v is not None})


def get_logger(name: str = "cropwatch", level: Optional[str] = None) -> AuditLogger:
    """Return a cached AuditLogger for ``name``."""
    with _cache_lock:
        if name not in _logger_cache:
            _logger_cache[name] = AuditLogger(name, level=level)
        return _logger_cache[name]


def configure_logging(level: Optional[str] = None, fmt: str = "json", stream=None) -> logging.Handler:
    """
    Install a single stream handler on the ``cropwatch`` logger.

    Args:
        level: Level for the cropwatch logger tree, falls back to
            CROPWATCH_LOG_LEVEL and then INFO
        fmt: "json" for structured output, anything else for plain text
        stream: Output stream (defaults to stderr)

    Returns:
        The installed handler
    """
    root = logging.getLogger("cropwatch")
    for handler in list(root.handlers):
        if getattr(handler, "_cropwatch", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"))
    handler._cropwatch = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(_resolve_level(level, logging.INFO))
    return handler
