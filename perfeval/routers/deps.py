"""
Request-scoped dependencies.

The repository is chosen once per request: the shared in-memory store kept on
app.state when no database is configured, a session-bound SQL repository
otherwise. Every API route resolves the current evaluator before doing
anything else.
"""
from typing import Dict, Iterator

from fastapi import Depends, Request

from perfeval.core.config import settings
from perfeval.core.exceptions import NotAuthorizedError
from perfeval.database import SessionLocal
from perfeval.repositories.base import EvaluationRepository
from perfeval.repositories.sql import SqlEvaluationRepository
from perfeval.services.activation import ActivationClient
from perfeval.services.employee_service import EmployeeService
from perfeval.services.evaluation_service import EvaluationLifecycleManager
from perfeval.services.identity import CurrentEvaluator, claims_from_headers, resolve_current_evaluator


def get_repository(request: Request) -> Iterator[EvaluationRepository]:
    memory_repo = getattr(request.app.state, "memory_repository", None)
    if memory_repo is not None:
        yield memory_repo
        return

    db = SessionLocal()
    try:
        yield SqlEvaluationRepository(db)
    finally:
        db.close()


def get_principal_claims(request: Request) -> Dict[str, str]:
    return claims_from_headers(request.headers, settings.principal_header, settings.principal_name_header)


def get_current_evaluator(
    claims: Dict[str, str] = Depends(get_principal_claims),
    repo: EvaluationRepository = Depends(get_repository),
) -> CurrentEvaluator:
    return resolve_current_evaluator(repo, claims)


def require_super_admin(evaluator: CurrentEvaluator = Depends(get_current_evaluator)) -> CurrentEvaluator:
    if not evaluator.is_super_admin:
        raise NotAuthorizedError("Super administrator access required")
    return evaluator


def get_evaluation_manager(repo: EvaluationRepository = Depends(get_repository)) -> EvaluationLifecycleManager:
    return EvaluationLifecycleManager(repo)


def get_employee_service(repo: EvaluationRepository = Depends(get_repository)) -> EmployeeService:
    return EmployeeService(repo)


def get_activation_client() -> ActivationClient:
    return ActivationClient()
