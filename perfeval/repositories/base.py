"""
Repository contract consumed by the evaluation engine.

Implemented once over SQLAlchemy and once over an in-memory store; both must
behave identically from the engine's point of view:

- employee lookups by email and by evaluator are case-insensitive
- evaluation listings are newest first
- behaviors for a level come ordered by competency order, then behavior order
- create/update write the evaluation, its details and its action plan as one unit;
  update replaces details and plan wholesale
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from perfeval.schemas.records import (
    BehaviorRecord,
    CompetencyRecord,
    DetailRecord,
    EmployeeRecord,
    EvaluationRecord,
    LevelRecord,
    PlanItemRecord,
)


class EvaluationRepository(ABC):

    # === Employees ===

    @abstractmethod
    def get_employee_by_email(self, email: str) -> Optional[EmployeeRecord]:
        ...

    @abstractmethod
    def get_employee(self, employee_id: str) -> Optional[EmployeeRecord]:
        ...

    @abstractmethod
    def list_employees(self) -> List[EmployeeRecord]:
        ...

    @abstractmethod
    def list_employees_by_evaluator(self, evaluator: str) -> List[EmployeeRecord]:
        """Employees whose evaluator reference equals `evaluator` (name or email)."""

    @abstractmethod
    def update_employee_notes(self, employee_id: str, notes: Optional[str]) -> None:
        """Unknown ids are ignored."""

    # === Levels ===

    @abstractmethod
    def list_active_levels(self) -> List[LevelRecord]:
        ...

    @abstractmethod
    def get_level(self, level_id: str) -> Optional[LevelRecord]:
        ...

    # === Competencies / behaviors ===

    @abstractmethod
    def list_competencies(self) -> List[CompetencyRecord]:
        """Ordered by `order` ascending."""

    @abstractmethod
    def list_behaviors_by_level(self, level_id: str) -> List[BehaviorRecord]:
        ...

    # === Evaluations ===

    @abstractmethod
    def list_evaluations_by_evaluator(self, evaluator: str) -> List[EvaluationRecord]:
        ...

    @abstractmethod
    def list_evaluations_by_employee(self, employee_id: str) -> List[EvaluationRecord]:
        ...

    @abstractmethod
    def get_evaluation(self, evaluation_id: str) -> Optional[EvaluationRecord]:
        ...

    @abstractmethod
    def create_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> str:
        """Persist a new evaluation with its children. Returns the evaluation id."""

    @abstractmethod
    def update_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> None:
        """Overwrite the evaluation and replace all of its details and plan items."""

    @abstractmethod
    def list_details(self, evaluation_id: str) -> List[DetailRecord]:
        ...

    @abstractmethod
    def list_plan_items(self, evaluation_id: str) -> List[PlanItemRecord]:
        ...
