"""
Identity resolution for requests arriving through the platform authentication proxy.

The proxy forwards the signed-in principal as a base64 JSON document in
X-MS-CLIENT-PRINCIPAL. The email-like identifier is taken from the first
claim extractor that yields a value, then matched against employee records.
"""
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from perfeval.core.exceptions import NotAuthorizedError
from perfeval.repositories.base import EvaluationRepository
from perfeval.schemas.records import EmployeeRecord

logger = logging.getLogger(__name__)

EMAIL_CLAIM_URI = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress"
UPN_CLAIM_URI = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/upn"
# Key under which the plain principal-name header is exposed as a claim
PRINCIPAL_NAME_CLAIM = "principal_name"

ClaimExtractor = Callable[[Mapping[str, str]], Optional[str]]


def _first_of(*claim_types: str) -> ClaimExtractor:
    def extract(claims: Mapping[str, str]) -> Optional[str]:
        for claim_type in claim_types:
            value = claims.get(claim_type)
            if value:
                return value
        return None
    return extract


# Tried in order; the first non-blank value wins
CLAIM_EXTRACTORS: List[Tuple[str, ClaimExtractor]] = [
    ("preferred_username", _first_of("preferred_username")),
    ("email", _first_of("email", EMAIL_CLAIM_URI)),
    ("upn", _first_of("upn", UPN_CLAIM_URI)),
    ("principal_name", _first_of(PRINCIPAL_NAME_CLAIM)),
]


def email_from_claims(claims: Mapping[str, str]) -> Optional[str]:
    for name, extractor in CLAIM_EXTRACTORS:
        value = extractor(claims)
        if isinstance(value, str) and value.strip():
            logger.debug(f"Principal identified via {name} claim")
            return value.strip()
    return None


def decode_client_principal(encoded: str) -> Dict[str, str]:
    """
    Decode the proxy principal header into a {claim type: value} mapping.
    When a claim type repeats, the first value is kept.
    """
    try:
        document = json.loads(base64.b64decode(encoded, validate=False))
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Malformed client principal header: {e}")
        return {}

    if not isinstance(document, dict):
        logger.warning("Client principal header is not a JSON object")
        return {}

    claims: Dict[str, str] = {}
    entries = document.get("claims")
    for claim in entries if isinstance(entries, list) else []:
        if not isinstance(claim, dict):
            continue
        claim_type = claim.get("typ")
        value = claim.get("val")
        if isinstance(claim_type, str) and isinstance(value, str) and claim_type not in claims:
            claims[claim_type] = value
    return claims


def claims_from_headers(headers: Mapping[str, str], principal_header: str, name_header: str) -> Dict[str, str]:
    claims: Dict[str, str] = {}
    encoded = headers.get(principal_header)
    if encoded:
        claims.update(decode_client_principal(encoded))
    name = headers.get(name_header)
    if name:
        claims.setdefault(PRINCIPAL_NAME_CLAIM, name)
    return claims


@dataclass
class CurrentEvaluator:
    employee: EmployeeRecord
    identifier: str

    @property
    def key(self) -> str:
        """Evaluator reference stored on evaluations and used for team lookups."""
        return self.employee.email or self.identifier

    @property
    def is_super_admin(self) -> bool:
        return self.employee.is_super_admin


def resolve_current_evaluator(repo: EvaluationRepository, claims: Mapping[str, str]) -> CurrentEvaluator:
    """Map the principal to an employee record. No match means the caller is not an evaluator."""
    identifier = email_from_claims(claims)
    if not identifier:
        logger.warning("Access refused: no usable identity claim on the principal")
        raise NotAuthorizedError()

    employee = repo.get_employee_by_email(identifier)
    if employee is None:
        logger.warning(f"Access refused: {identifier} is not a registered evaluator")
        raise NotAuthorizedError()

    return CurrentEvaluator(employee=employee, identifier=identifier)
