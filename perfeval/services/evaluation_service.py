"""
Evaluation lifecycle: create, update, follow-up chaining, action plans and reports.

Field derivation on every save:
- status is Finalized for the "finalize" action, Draft otherwise
- next evaluation date is evaluation date + 6 months for Initial evaluations only
- total is the two-stage overall average used by the report
- only behaviors with a submitted score are stored

Writes go through the repository as a single unit (evaluation, details, plan).
"""
from datetime import date
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from perfeval.core.config import settings
from perfeval.core.exceptions import FormValidationError, NotFoundError
from perfeval.repositories.base import EvaluationRepository
from perfeval.schemas.evaluation import (
    ActionPlanSubmission,
    EmployeeFolder,
    EvaluationForm,
    EvaluationListItem,
    EvaluationReport,
    FollowUpTarget,
    LevelSelection,
    SaveResult,
)
from perfeval.schemas.records import (
    DetailRecord,
    EmployeeRecord,
    EvaluationRecord,
    EvaluationStatus,
    EvaluationType,
    LevelRecord,
    PlanItemRecord,
)
from perfeval.services.action_plan import ActionPlanManager
from perfeval.services.base import BaseService
from perfeval.services.catalog import CatalogResolver, CompetencyGroup
from perfeval.services.form_assembler import FormAssembler
from perfeval.services.identity import CurrentEvaluator
from perfeval.services.level_assignment import resolve_level
from perfeval.services.scoring import aggregate, overall_score

FINALIZE_ACTION = "finalize"


def status_for_action(action: Optional[str]) -> EvaluationStatus:
    if (action or "").strip().lower() == FINALIZE_ACTION:
        return EvaluationStatus.FINALIZED
    return EvaluationStatus.DRAFT


def next_evaluation_date(evaluation_type: EvaluationType, evaluation_date: date) -> Optional[date]:
    """Initial evaluations schedule a follow-up; follow-ups never do."""
    if evaluation_type != EvaluationType.INITIAL:
        return None
    # relativedelta clamps to the month end (Aug 31 -> Feb 28/29)
    return evaluation_date + relativedelta(months=settings.follow_up_interval_months)


class EvaluationLifecycleManager(BaseService):

    def __init__(
        self,
        repo: EvaluationRepository,
        catalog: Optional[CatalogResolver] = None,
        forms: Optional[FormAssembler] = None,
    ):
        super().__init__(repo)
        self.catalog = catalog or CatalogResolver(repo)
        self.forms = forms or FormAssembler(repo, self.catalog)

    # --- Starting an evaluation ---

    def start_evaluation(self, employee_id: str) -> LevelSelection:
        """
        Pick the level for a new Initial evaluation.

        When the employee's form type maps to a catalog level the form is
        returned directly, otherwise the active levels are offered.
        """
        employee = self.repo.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        levels = self.catalog.active_levels()
        level = resolve_level(employee, levels)
        if level is not None:
            return LevelSelection(
                employee_id=employee.id,
                auto_assigned=True,
                levels=[level],
                form=self.forms.new_form(employee.id, level.id),
            )
        return LevelSelection(employee_id=employee.id, auto_assigned=False, levels=levels)

    def resolve_for_follow_up(self, evaluation_id: str) -> FollowUpTarget:
        evaluation = self._evaluation(evaluation_id)
        return FollowUpTarget(
            employee_id=evaluation.employee_id,
            level_id=evaluation.level_id,
            origin_evaluation_id=evaluation.id,
        )

    # --- Saving ---

    def save(self, form: EvaluationForm, action: str, evaluator: CurrentEvaluator) -> SaveResult:
        """Create when the form has no id, update otherwise."""
        if form.id:
            return self.update(form, action, evaluator)
        return self.create(form, action, evaluator)

    def create(self, form: EvaluationForm, action: str, evaluator: CurrentEvaluator) -> SaveResult:
        groups = self._validate(form)
        record = self._derive(form, action, evaluator, groups)
        details = self._details(form)

        evaluation_id = self.repo.create_evaluation(record, details, [])
        self.log_info(
            f"Evaluation {evaluation_id} created for employee {form.employee_id}",
            evaluation_id=evaluation_id,
            status=record.status.value,
        )
        return SaveResult(
            id=evaluation_id,
            status=record.status,
            total=record.total,
            next_evaluation_date=record.next_evaluation_date,
        )

    def update(self, form: EvaluationForm, action: str, evaluator: CurrentEvaluator) -> SaveResult:
        existing = self._evaluation(form.id)
        groups = self._validate(form)
        record = self._derive(form, action, evaluator, groups)
        record.id = existing.id
        details = self._details(form)
        plan = self.repo.list_plan_items(existing.id)

        self.repo.update_evaluation(record, details, plan)
        self.log_info(
            f"Evaluation {existing.id} updated",
            evaluation_id=existing.id,
            status=record.status.value,
            details=len(details),
        )
        return SaveResult(
            id=existing.id,
            status=record.status,
            total=record.total,
            next_evaluation_date=record.next_evaluation_date,
        )

    def save_action_plan(self, evaluation_id: str, submission: ActionPlanSubmission) -> List[PlanItemRecord]:
        """
        Replace the plan of an existing evaluation and set its next evaluation date.

        Stored detail scores are read back and written again unchanged.
        Follow-up evaluations keep a null next date whatever is submitted.
        """
        evaluation = self._evaluation(evaluation_id)
        details = self.repo.list_details(evaluation_id)
        plan = ActionPlanManager.filter_rows(evaluation_id, submission.rows)

        if evaluation.evaluation_type == EvaluationType.INITIAL:
            evaluation.next_evaluation_date = submission.next_evaluation_date
        else:
            evaluation.next_evaluation_date = None

        self.repo.update_evaluation(evaluation, details, plan)
        self.log_info(
            f"Action plan saved for evaluation {evaluation_id}",
            evaluation_id=evaluation_id,
            rows=len(plan),
            dropped=len(submission.rows) - len(plan),
        )
        return plan

    # --- Reading ---

    def build_report(self, evaluation_id: str) -> EvaluationReport:
        evaluation = self._evaluation(evaluation_id)
        employee = self.repo.get_employee(evaluation.employee_id)
        level = self.repo.get_level(evaluation.level_id)

        groups = self.catalog.competency_groups(evaluation.level_id)
        scoring = aggregate(groups, self.repo.list_details(evaluation_id))
        plan_rows = ActionPlanManager.rows_for_display(self.repo.list_plan_items(evaluation_id))

        return EvaluationReport(
            evaluation_id=evaluation.id,
            employee_id=evaluation.employee_id,
            employee_name=employee.full_name if employee else "",
            employee_document_id=employee.document_id if employee else "",
            position=employee.position if employee else None,
            division=employee.division if employee else None,
            evaluation_date=evaluation.evaluation_date,
            evaluation_type=evaluation.evaluation_type,
            status=evaluation.status,
            level_name=level.name if level else "",
            overall_average=scoring.overall_average,
            competencies=scoring.competencies,
            opportunities=scoring.opportunities,
            action_plan=plan_rows,
            observations=evaluation.observations,
            next_evaluation_date=evaluation.next_evaluation_date,
        )

    def list_for_evaluator(self, evaluator_key: str) -> List[EvaluationListItem]:
        return self._list_items(self.repo.list_evaluations_by_evaluator(evaluator_key))

    def employee_folder(self, employee_id: str) -> EmployeeFolder:
        employee = self.repo.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        return EmployeeFolder(
            employee_id=employee.id,
            employee_name=employee.full_name,
            employee_document_id=employee.document_id,
            position=employee.position,
            evaluations=self._list_items(self.repo.list_evaluations_by_employee(employee_id)),
        )

    # --- Helpers ---

    def _evaluation(self, evaluation_id: str) -> EvaluationRecord:
        evaluation = self.repo.get_evaluation(evaluation_id)
        if evaluation is None:
            raise NotFoundError("Evaluation", evaluation_id)
        return evaluation

    def _validate(self, form: EvaluationForm) -> List[CompetencyGroup]:
        """Checks run before anything is written. Returns the level's competency groups."""
        if form.evaluation_type == EvaluationType.FOLLOW_UP and not form.origin_evaluation_id:
            raise FormValidationError(
                "A follow-up evaluation must reference its origin evaluation",
                form=form,
                field="origin_evaluation_id",
            )
        if form.evaluation_type == EvaluationType.INITIAL and form.origin_evaluation_id:
            raise FormValidationError(
                "An initial evaluation cannot reference an origin evaluation",
                form=form,
                field="origin_evaluation_id",
            )
        if form.origin_evaluation_id:
            self._check_origin_chain(form)

        if self.repo.get_employee(form.employee_id) is None:
            raise NotFoundError("Employee", form.employee_id)
        level = self.catalog.get_level(form.level_id)

        groups = self.catalog.competency_groups(level.id)
        known = {b.id for group in groups for b in group.behaviors}
        foreign = sorted(
            slot.behavior_id
            for section in form.competencies
            for slot in section.behaviors
            if slot.behavior_id not in known
        )
        if foreign:
            self.log_warning(
                f"Rejected form with behaviors outside level {level.id}",
                behaviors=foreign,
            )
            raise FormValidationError(
                f"Behaviors do not belong to level {level.name or level.id}: {', '.join(foreign)}",
                form=form,
                field="competencies",
            )

        seen = set()
        repeated = set()
        for section in form.competencies:
            for slot in section.behaviors:
                if slot.behavior_id in seen:
                    repeated.add(slot.behavior_id)
                seen.add(slot.behavior_id)
        if repeated:
            raise FormValidationError(
                f"Behaviors submitted more than once: {', '.join(sorted(repeated))}",
                form=form,
                field="competencies",
            )
        return groups

    def _check_origin_chain(self, form: EvaluationForm) -> None:
        """The origin must exist and following origins from it must never lead back to this evaluation."""
        if form.id and form.origin_evaluation_id == form.id:
            raise FormValidationError(
                "An evaluation cannot be its own origin",
                form=form,
                field="origin_evaluation_id",
            )

        visited = set()
        current = self._evaluation(form.origin_evaluation_id)
        while current is not None and current.id not in visited:
            visited.add(current.id)
            if form.id and current.origin_evaluation_id == form.id:
                raise FormValidationError(
                    "The origin chain of this evaluation leads back to itself",
                    form=form,
                    field="origin_evaluation_id",
                )
            if not current.origin_evaluation_id:
                break
            current = self.repo.get_evaluation(current.origin_evaluation_id)

    def _derive(
        self,
        form: EvaluationForm,
        action: str,
        evaluator: CurrentEvaluator,
        groups: List[CompetencyGroup],
    ) -> EvaluationRecord:
        return EvaluationRecord(
            employee_id=form.employee_id,
            level_id=form.level_id,
            evaluation_date=form.evaluation_date,
            evaluation_type=form.evaluation_type,
            origin_evaluation_id=form.origin_evaluation_id,
            status=status_for_action(action),
            total=overall_score(groups, self._details(form)),
            observations=form.observations,
            next_evaluation_date=next_evaluation_date(form.evaluation_type, form.evaluation_date),
            evaluator_name=evaluator.key,
        )

    @staticmethod
    def _details(form: EvaluationForm) -> List[DetailRecord]:
        return [
            DetailRecord(behavior_id=slot.behavior_id, score=slot.score, comment=slot.comment)
            for slot in form.scored_slots()
        ]

    def _list_items(self, evaluations: List[EvaluationRecord]) -> List[EvaluationListItem]:
        employees: Dict[str, Optional[EmployeeRecord]] = {}
        levels: Dict[str, Optional[LevelRecord]] = {}
        items = []
        for evaluation in evaluations:
            if evaluation.employee_id not in employees:
                employees[evaluation.employee_id] = self.repo.get_employee(evaluation.employee_id)
            if evaluation.level_id not in levels:
                levels[evaluation.level_id] = self.repo.get_level(evaluation.level_id)
            # Placeholders are for display only
            employee = employees[evaluation.employee_id] or EmployeeRecord(id=evaluation.employee_id)
            level = levels[evaluation.level_id] or LevelRecord(id=evaluation.level_id)

            items.append(EvaluationListItem(
                id=evaluation.id,
                employee_id=evaluation.employee_id,
                evaluation_date=evaluation.evaluation_date,
                next_evaluation_date=evaluation.next_evaluation_date,
                employee_name=employee.full_name,
                employee_document_id=employee.document_id,
                level_name=level.name,
                level_code=level.code,
                evaluation_type=evaluation.evaluation_type,
                status=evaluation.status,
                total=evaluation.total,
                can_follow_up=evaluation.evaluation_type == EvaluationType.INITIAL,
            ))
        return items
