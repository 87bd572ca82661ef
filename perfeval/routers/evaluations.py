from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from perfeval.routers.deps import get_current_evaluator, get_evaluation_manager
from perfeval.schemas.evaluation import (
    ActionPlanSubmission,
    EvaluationForm,
    EvaluationListItem,
    EvaluationReport,
    EvaluationSubmission,
    FollowUpTarget,
    LevelSelection,
    PlanRow,
    SaveResult,
)
from perfeval.services.action_plan import ActionPlanManager
from perfeval.services.evaluation_service import EvaluationLifecycleManager
from perfeval.services.identity import CurrentEvaluator

router = APIRouter(
    prefix="/evaluations",
    tags=["evaluations"],
    dependencies=[Depends(get_current_evaluator)],
)


@router.get("", response_model=List[EvaluationListItem])
def list_evaluations(
    evaluator: CurrentEvaluator = Depends(get_current_evaluator),
    manager: EvaluationLifecycleManager = Depends(get_evaluation_manager),
):
    """Evaluations recorded by the current evaluator, newest first."""
    return manager.list_for_evaluator(evaluator.key)


@router.get("/new/{employee_id}", response_model=LevelSelection)
def start_evaluation(employee_id: str, manager: EvaluationLifecycleManager = Depends(get_evaluation_manager)):
    """Auto-assign the level from the employee's form type, or list the levels to choose from."""
    return manager.start_evaluation(employee_id)


@router.get("/form", response_model=EvaluationForm)
def new_form(
    employee_id: str = Query(...),
    level_id: str = Query(...),
    origin_evaluation_id: Optional[str] = Query(None),
    manager: EvaluationLifecycleManager = Depends(get_evaluation_manager),
):
    return manager.forms.new_form(employee_id, level_id, origin_evaluation_id)


@router.get("/{evaluation_id}/edit", response_model=EvaluationForm)
def edit_form(evaluation_id: str, manager: EvaluationLifecycleManager = Depends(get_evaluation_manager)):
    return manager.forms.edit_form(evaluation_id)


@router.post("", response_model=SaveResult)
def save_evaluation(
    submission: EvaluationSubmission,
    evaluator: CurrentEvaluator = Depends(get_current_evaluator),
    manager: EvaluationLifecycleManager = Depends(get_evaluation_manager),
):
    """Create (no id on the form) or update an evaluation. action="finalize" closes it."""
    return manager.save(submission.form, submission.action, evaluator)


@router.get("/{evaluation_id}/follow-up", response_model=FollowUpTarget)
def follow_up(evaluation_id: str, manager: EvaluationLifecycleManager = Depends(get_evaluation_manager)):
    return manager.resolve_for_follow_up(evaluation_id)


@router.get("/{evaluation_id}/report", response_model=EvaluationReport)
def report(evaluation_id: str, manager: EvaluationLifecycleManager = Depends(get_evaluation_manager)):
    return manager.build_report(evaluation_id)


@router.put("/{evaluation_id}/action-plan", response_model=List[PlanRow])
def save_action_plan(
    evaluation_id: str,
    submission: ActionPlanSubmission,
    manager: EvaluationLifecycleManager = Depends(get_evaluation_manager),
):
    """Replace the action plan. Rows without a description or behavior label are dropped."""
    saved = manager.save_action_plan(evaluation_id, submission)
    return ActionPlanManager.rows_for_display(saved)
