from datetime import date
from typing import Dict, Iterable, List, Optional

from perfeval.core.exceptions import NotFoundError
from perfeval.repositories.base import EvaluationRepository
from perfeval.schemas.evaluation import BehaviorSlot, CompetencySection, EvaluationForm
from perfeval.schemas.records import DetailRecord, EmployeeRecord, EvaluationType, LevelRecord
from perfeval.services.base import BaseService
from perfeval.services.catalog import CatalogResolver, CompetencyGroup


def build_sections(
    groups: Iterable[CompetencyGroup],
    details: Iterable[DetailRecord] = (),
) -> List[CompetencySection]:
    """Nested competency -> behavior slots, pre-filled from stored details when given."""
    by_behavior: Dict[str, DetailRecord] = {d.behavior_id: d for d in details}
    sections = []
    for group in groups:
        slots = []
        for behavior in group.behaviors:
            detail = by_behavior.get(behavior.id)
            slots.append(BehaviorSlot(
                behavior_id=behavior.id,
                description=behavior.description,
                score=detail.score if detail else None,
                comment=detail.comment if detail else None,
            ))
        sections.append(CompetencySection(name=group.competency.name, behaviors=slots))
    return sections


class FormAssembler(BaseService):
    """Builds the scoring form for an (employee, level) pair."""

    def __init__(self, repo: EvaluationRepository, catalog: Optional[CatalogResolver] = None):
        super().__init__(repo)
        self.catalog = catalog or CatalogResolver(repo)

    def _employee(self, employee_id: str) -> EmployeeRecord:
        employee = self.repo.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    @staticmethod
    def _header(employee: EmployeeRecord, level: LevelRecord) -> dict:
        return {
            "employee_id": employee.id,
            "level_id": level.id,
            "employee_name": employee.full_name,
            "employee_document_id": employee.document_id,
            "position": employee.position,
            "division": employee.division,
            "level_name": level.name,
        }

    def new_form(
        self,
        employee_id: str,
        level_id: str,
        origin_evaluation_id: Optional[str] = None,
    ) -> EvaluationForm:
        """Blank form. Passing an origin evaluation makes it a follow-up."""
        employee = self._employee(employee_id)
        level = self.catalog.get_level(level_id)

        return EvaluationForm(
            **self._header(employee, level),
            evaluation_date=date.today(),
            evaluation_type=EvaluationType.FOLLOW_UP if origin_evaluation_id else EvaluationType.INITIAL,
            origin_evaluation_id=origin_evaluation_id,
            competencies=build_sections(self.catalog.competency_groups(level.id)),
        )

    def edit_form(self, evaluation_id: str) -> EvaluationForm:
        """Form for an existing evaluation with its stored scores and comments."""
        evaluation = self.repo.get_evaluation(evaluation_id)
        if evaluation is None:
            raise NotFoundError("Evaluation", evaluation_id)

        employee = self._employee(evaluation.employee_id)
        level = self.catalog.get_level(evaluation.level_id)
        details = self.repo.list_details(evaluation_id)

        # The action plan is edited from the report, never from this form
        return EvaluationForm(
            id=evaluation.id,
            **self._header(employee, level),
            evaluation_date=evaluation.evaluation_date,
            evaluation_type=evaluation.evaluation_type,
            origin_evaluation_id=evaluation.origin_evaluation_id,
            observations=evaluation.observations,
            competencies=build_sections(self.catalog.competency_groups(level.id), details),
        )
