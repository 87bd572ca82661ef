import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from perfeval.core.config import settings

# Correlation id of the request being served; empty outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_FORMAT = "%(timestamp) %(level) %(name) %(message)"


class EvaluationLogFormatter(jsonlogger.JsonFormatter):
    """JSON records tagged with the service, its environment and the current request id."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["service"] = settings.app_name
        log_record["environment"] = settings.environment

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id


def setup_logging(level: Optional[str] = None) -> logging.Handler:
    """
    Route root logging through one JSON stream handler.

    Safe to call more than once: a handler installed by an earlier call is
    replaced rather than duplicated.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing.formatter, EvaluationLogFormatter):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setFormatter(EvaluationLogFormatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())

    # Chatty libraries
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return handler
