"""
Outbound activation request to the workflow-automation endpoint.

A single POST with no retry. Non-success answers are handed back to the
caller with the upstream status and body untouched.
"""
import logging
from typing import Any, Dict, Optional

import requests

from perfeval.core.config import settings
from perfeval.core.exceptions import ConfigurationError, UpstreamServiceError
from perfeval.schemas.records import EmployeeRecord
from perfeval.services.identity import CurrentEvaluator

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_BODY = "The activation request could not be sent."


def _iso(value) -> str:
    return value.isoformat() if value else ""


def activation_payload(employee: EmployeeRecord, evaluator: CurrentEvaluator) -> Dict[str, Any]:
    return {
        "employee_id": employee.id,
        "employee_name": employee.full_name or "",
        "employee_document_id": employee.document_id or "",
        "employee_email": employee.email or "",
        "evaluator_name": evaluator.employee.full_name or "",
        "evaluator_email": evaluator.employee.email or evaluator.identifier or "",
        "contract_end_date": _iso(employee.contract_end_date),
        "probation_end_date": _iso(employee.probation_end_date),
    }


class ActivationClient:

    def __init__(self, flow_url: Optional[str] = None, timeout: Optional[float] = None):
        self.flow_url = flow_url if flow_url is not None else settings.activation.flow_url
        self.timeout = timeout if timeout is not None else settings.activation.timeout_seconds

    def request_activation(self, employee: EmployeeRecord, evaluator: CurrentEvaluator) -> int:
        """
        Send the activation request. Returns the upstream status code on success.

        Raises:
            ConfigurationError: no flow URL is configured.
            UpstreamServiceError: the endpoint answered with a non-2xx status or could not be reached.
        """
        if not self.flow_url:
            raise ConfigurationError("The activation workflow URL is not configured.")

        payload = activation_payload(employee, evaluator)
        try:
            response = requests.post(self.flow_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Activation request for employee {employee.id} failed: {e}")
            raise UpstreamServiceError(502, DEFAULT_FAILURE_BODY) from e

        body = response.text
        if not response.ok:
            logger.warning(
                f"Activation workflow answered {response.status_code}",
                extra={"status_code": response.status_code, "response_body": body},
            )
            raise UpstreamServiceError(response.status_code, body if body.strip() else DEFAULT_FAILURE_BODY)

        logger.info(
            f"Activation request sent for employee {employee.id}",
            extra={"status_code": response.status_code},
        )
        return response.status_code
