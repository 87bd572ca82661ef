from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from perfeval.routers.deps import (
    get_activation_client,
    get_current_evaluator,
    get_employee_service,
    get_evaluation_manager,
)
from perfeval.schemas.employee import ActivationRequest, ActivationResult, EmployeeSummary
from perfeval.schemas.evaluation import EmployeeFolder
from perfeval.services.activation import ActivationClient
from perfeval.services.employee_service import EmployeeService
from perfeval.services.evaluation_service import EvaluationLifecycleManager
from perfeval.services.identity import CurrentEvaluator

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
    dependencies=[Depends(get_current_evaluator)],
)


@router.get("", response_model=List[EmployeeSummary])
def list_team(
    document_id: Optional[str] = Query(None, description="Substring of the document id"),
    evaluator: CurrentEvaluator = Depends(get_current_evaluator),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.team_for(evaluator, document_id)


@router.get("/{employee_id}/folder", response_model=EmployeeFolder)
def employee_folder(employee_id: str, manager: EvaluationLifecycleManager = Depends(get_evaluation_manager)):
    return manager.employee_folder(employee_id)


@router.post("/activation-requests", response_model=ActivationResult)
def request_activation(
    request: ActivationRequest,
    evaluator: CurrentEvaluator = Depends(get_current_evaluator),
    service: EmployeeService = Depends(get_employee_service),
    client: ActivationClient = Depends(get_activation_client),
):
    """Ask the workflow-automation endpoint to open an evaluation for the employee."""
    upstream_status = service.request_activation(request.employee_id, evaluator, client)
    return ActivationResult(message="Activation request sent.", upstream_status=upstream_status)
