import pytest
import requests
from datetime import date

from perfeval.core.exceptions import ConfigurationError, UpstreamServiceError
from perfeval.services import activation
from perfeval.services.activation import ActivationClient, activation_payload

FLOW_URL = "https://flows.example.test/activation"

class FakeResponse:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

@pytest.fixture
def sent(monkeypatch):
    """Captures outbound posts and answers with the queued response."""
    calls = []
    state = {"response": FakeResponse(202)}

    def fake_post(url, json=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        if isinstance(state["response"], Exception):
            raise state["response"]
        return state["response"]

    monkeypatch.setattr(activation.requests, "post", fake_post)
    return calls, state

def test_payload_fields(juan, evaluator):
    payload = activation_payload(juan, evaluator)
    assert payload == {
        "employee_id": juan.id,
        "employee_name": "Juan Pérez",
        "employee_document_id": "123456789",
        "employee_email": "juan.perez@contoso.com",
        "evaluator_name": "Evaluador Demo",
        "evaluator_email": "evaluador.demo@contoso.com",
        "contract_end_date": date(2025, 1, 15).isoformat(),
        "probation_end_date": date(2022, 4, 15).isoformat(),
    }

def test_missing_dates_are_empty_strings(evaluator):
    from perfeval.schemas.records import EmployeeRecord
    payload = activation_payload(EmployeeRecord(id="x"), evaluator)
    assert payload["contract_end_date"] == ""
    assert payload["probation_end_date"] == ""

def test_successful_request(sent, juan, evaluator):
    calls, _ = sent
    status = ActivationClient(FLOW_URL, timeout=5).request_activation(juan, evaluator)
    assert status == 202
    assert calls[0]["url"] == FLOW_URL
    assert calls[0]["timeout"] == 5
    assert calls[0]["json"]["employee_id"] == juan.id

def test_upstream_failure_is_passed_through(sent, juan, evaluator):
    calls, state = sent
    state["response"] = FakeResponse(502, "boom")
    with pytest.raises(UpstreamServiceError) as exc_info:
        ActivationClient(FLOW_URL).request_activation(juan, evaluator)
    assert exc_info.value.status_code == 502
    assert exc_info.value.body == "boom"
    # no retry
    assert len(calls) == 1

def test_empty_upstream_body_gets_default_message(sent, juan, evaluator):
    _, state = sent
    state["response"] = FakeResponse(500, "")
    with pytest.raises(UpstreamServiceError) as exc_info:
        ActivationClient(FLOW_URL).request_activation(juan, evaluator)
    assert exc_info.value.body == activation.DEFAULT_FAILURE_BODY

def test_connection_error_is_bad_gateway(sent, juan, evaluator):
    _, state = sent
    state["response"] = requests.ConnectionError("refused")
    with pytest.raises(UpstreamServiceError) as exc_info:
        ActivationClient(FLOW_URL).request_activation(juan, evaluator)
    assert exc_info.value.status_code == 502

def test_missing_flow_url(sent, juan, evaluator):
    calls, _ = sent
    with pytest.raises(ConfigurationError):
        ActivationClient(flow_url="").request_activation(juan, evaluator)
    assert calls == []
