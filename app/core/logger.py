"""
Application logging.
Every record carries a correlation id so a single request can be traced end to end.
"""
import json
import logging
import sys
from typing import Any, Dict, Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Guarantees the correlation_id attribute exists so the formatter never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def _build_logger(name: str) -> logging.Logger:
    app_logger = logging.getLogger(name)
    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        app_logger.addHandler(handler)
    app_logger.setLevel(settings.LOG_LEVEL.upper())
    app_logger.propagate = False
    return app_logger


logger = _build_logger("loan_api")
audit_logger = _build_logger("loan_api.audit")


def get_logger_with_correlation(correlation_id: str) -> logging.LoggerAdapter:
    """Returns a logger that stamps every record with the given correlation id."""
    return logging.LoggerAdapter(logger, {"correlation_id": correlation_id})


def audit_log(action: str, user: str, resource: str, details: Optional[Dict[str, Any]] = None) -> None:
    """
    Emits a structured audit entry.
    Details are JSON-encoded so downstream collectors can parse them.
    """
    details = details or {}
    audit_logger.info(
        f"AUDIT action={action} user={user} resource={resource} details={json.dumps(details, default=str)}",
        extra={"correlation_id": details.get("correlation_id", "-")}
    )
