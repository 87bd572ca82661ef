import json
import logging

from perfeval.core.config import settings
from perfeval.core.logging import EvaluationLogFormatter, LOG_FORMAT, request_id_var, setup_logging

def _format(message="Evaluation saved"):
    record = logging.LogRecord("perfeval.test", logging.INFO, __file__, 1, message, None, None)
    return json.loads(EvaluationLogFormatter(LOG_FORMAT).format(record))

def test_record_carries_service_fields():
    data = _format()
    assert data["message"] == "Evaluation saved"
    assert data["level"] == "INFO"
    assert data["name"] == "perfeval.test"
    assert data["service"] == settings.app_name
    assert data["environment"] == settings.environment
    assert data["timestamp"]
    assert "request_id" not in data

def test_record_carries_request_id():
    token = request_id_var.set("req-42")
    try:
        assert _format()["request_id"] == "req-42"
    finally:
        request_id_var.reset(token)

def test_setup_logging_does_not_stack_handlers():
    root = logging.getLogger()
    original_level = root.level
    try:
        first = setup_logging("debug")
        second = setup_logging()
        ours = [h for h in root.handlers if isinstance(h.formatter, EvaluationLogFormatter)]
        assert ours == [second]
        assert first not in root.handlers
        assert root.level == logging.getLevelName(settings.log_level.upper())
    finally:
        root.setLevel(original_level)
