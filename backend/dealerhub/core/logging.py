"""Logging configuration with contextual dimensions.

Every log line can carry structured dimensions such as request_id,
organization_id or component. Loggers are derived with `with_context`, which
returns a new logger and leaves the original untouched:

    ctx_logger = logger.with_context(request_id=request_id, organization_id=org_id)
    ctx_logger.info("Resolved feature flags")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping, Optional, Tuple
from uuid import UUID

from dealerhub.core.config import settings

_STANDARD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message"}


class JSONFormatter(logging.Formatter):
    """Render records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, merging contextual dimensions into the payload."""
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter used in local development."""

    def format(self, record: logging.LogRecord) -> str:
        """Append contextual dimensions to the message."""
        base = super().format(record)
        dimensions = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if dimensions:
            rendered = " ".join(f"{k}={v}" for k, v in dimensions.items())
            return f"{base} [{rendered}]"
        return base


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches a fixed set of dimensions to each record."""

    def __init__(self, logger: logging.Logger, dimensions: Optional[dict] = None):
        """Initialize the adapter.

        Args:
            logger: Underlying stdlib logger
            dimensions: Key/value pairs added to every record
        """
        super().__init__(logger, dimensions or {})
        self.dimensions = dict(dimensions or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping]:
        """Merge the adapter dimensions into the record's `extra`."""
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions."""
        merged = dict(self.dimensions)
        merged.update({k: _stringify(v) for k, v in dimensions.items() if v is not None})
        return ContextualLogger(self.logger, merged)


def _stringify(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if hasattr(value, "value") and not isinstance(value, (str, int, float, bool)):
        return value.value
    return value


def _configure_root_logger() -> logging.Logger:
    base = logging.getLogger(settings.PROJECT_NAME)
    if base.handlers:
        return base

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOCAL_DEVELOPMENT:
        handler.setFormatter(
            ContextualFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    else:
        handler.setFormatter(JSONFormatter())

    base.addHandler(handler)
    base.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    base.propagate = False
    return base


def create_contextual_logger(
    request_id: Optional[str] = None,
    organization_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    **dimensions: Any,
) -> ContextualLogger:
    """Create a logger carrying the standard request dimensions."""
    return logger.with_context(
        request_id=request_id,
        organization_id=organization_id,
        user_id=user_id,
        **dimensions,
    )


logger = ContextualLogger(_configure_root_logger())
