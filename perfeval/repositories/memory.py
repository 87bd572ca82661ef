"""
In-memory fallback store, used when no DATABASE_URL is configured.

One instance is created at startup and shared by every request, so all
access goes through a single lock. Records are copied on the way in and out;
callers never hold references into the store.
"""
import logging
import threading
import uuid
from typing import Dict, Iterable, List, Optional

from perfeval.core.exceptions import NotFoundError
from perfeval.repositories.base import EvaluationRepository
from perfeval.schemas.records import (
    BehaviorRecord,
    CompetencyRecord,
    DetailRecord,
    EmployeeRecord,
    EvaluationRecord,
    LevelRecord,
    PlanItemRecord,
)

logger = logging.getLogger(__name__)


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return a is not None and b is not None and a.casefold() == b.casefold()


class InMemoryEvaluationRepository(EvaluationRepository):

    def __init__(
        self,
        employees: Iterable[EmployeeRecord] = (),
        levels: Iterable[LevelRecord] = (),
        competencies: Iterable[CompetencyRecord] = (),
        behaviors: Iterable[BehaviorRecord] = (),
    ):
        self._lock = threading.RLock()
        self._employees: List[EmployeeRecord] = [e.model_copy() for e in employees]
        self._levels: List[LevelRecord] = [lvl.model_copy() for lvl in levels]
        self._competencies: List[CompetencyRecord] = [c.model_copy() for c in competencies]
        self._behaviors: List[BehaviorRecord] = [b.model_copy() for b in behaviors]
        self._evaluations: Dict[str, EvaluationRecord] = {}
        self._details: List[DetailRecord] = []
        self._plans: List[PlanItemRecord] = []

    # === Employees ===

    def get_employee_by_email(self, email: str) -> Optional[EmployeeRecord]:
        with self._lock:
            found = next((e for e in self._employees if _same(e.email, email)), None)
            return found.model_copy() if found else None

    def get_employee(self, employee_id: str) -> Optional[EmployeeRecord]:
        with self._lock:
            found = next((e for e in self._employees if e.id == employee_id), None)
            return found.model_copy() if found else None

    def list_employees(self) -> List[EmployeeRecord]:
        with self._lock:
            return [e.model_copy() for e in sorted(self._employees, key=lambda e: e.full_name)]

    def list_employees_by_evaluator(self, evaluator: str) -> List[EmployeeRecord]:
        with self._lock:
            matching = [e for e in self._employees if _same(e.evaluator_name, evaluator)]
            return [e.model_copy() for e in sorted(matching, key=lambda e: e.full_name)]

    def update_employee_notes(self, employee_id: str, notes: Optional[str]) -> None:
        with self._lock:
            for e in self._employees:
                if e.id == employee_id:
                    e.notes = notes

    # === Levels ===

    def list_active_levels(self) -> List[LevelRecord]:
        with self._lock:
            return [lvl.model_copy() for lvl in self._levels if lvl.is_active]

    def get_level(self, level_id: str) -> Optional[LevelRecord]:
        with self._lock:
            found = next((lvl for lvl in self._levels if lvl.id == level_id), None)
            return found.model_copy() if found else None

    # === Competencies / behaviors ===

    def list_competencies(self) -> List[CompetencyRecord]:
        with self._lock:
            return [c.model_copy() for c in sorted(self._competencies, key=lambda c: c.order)]

    def list_behaviors_by_level(self, level_id: str) -> List[BehaviorRecord]:
        with self._lock:
            competency_order = {c.id: c.order for c in self._competencies}
            matching = [b for b in self._behaviors if b.level_id == level_id]
            matching.sort(key=lambda b: (competency_order.get(b.competency_id, 0), b.order))
            return [b.model_copy() for b in matching]

    # === Evaluations ===

    def _newest_first(self, evaluations: Iterable[EvaluationRecord]) -> List[EvaluationRecord]:
        ordered = sorted(evaluations, key=lambda e: e.evaluation_date, reverse=True)
        return [e.model_copy() for e in ordered]

    def list_evaluations_by_evaluator(self, evaluator: str) -> List[EvaluationRecord]:
        with self._lock:
            return self._newest_first(
                e for e in self._evaluations.values() if _same(e.evaluator_name, evaluator)
            )

    def list_evaluations_by_employee(self, employee_id: str) -> List[EvaluationRecord]:
        with self._lock:
            return self._newest_first(
                e for e in self._evaluations.values() if e.employee_id == employee_id
            )

    def get_evaluation(self, evaluation_id: str) -> Optional[EvaluationRecord]:
        with self._lock:
            found = self._evaluations.get(evaluation_id)
            return found.model_copy() if found else None

    def _store_children(self, evaluation_id: str, details: List[DetailRecord], plan: List[PlanItemRecord]) -> None:
        for d in details:
            self._details.append(
                d.model_copy(update={"id": d.id or str(uuid.uuid4()), "evaluation_id": evaluation_id})
            )
        for p in plan:
            self._plans.append(
                p.model_copy(update={"id": p.id or str(uuid.uuid4()), "evaluation_id": evaluation_id})
            )

    def create_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> str:
        with self._lock:
            evaluation_id = evaluation.id or str(uuid.uuid4())
            self._evaluations[evaluation_id] = evaluation.model_copy(update={"id": evaluation_id})
            self._store_children(evaluation_id, details, plan)
            logger.debug(f"Stored evaluation {evaluation_id} in memory")
            return evaluation_id

    def update_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> None:
        with self._lock:
            if evaluation.id not in self._evaluations:
                raise NotFoundError("Evaluation", evaluation.id)
            self._evaluations[evaluation.id] = evaluation.model_copy()
            self._details = [d for d in self._details if d.evaluation_id != evaluation.id]
            self._plans = [p for p in self._plans if p.evaluation_id != evaluation.id]
            self._store_children(evaluation.id, details, plan)

    def list_details(self, evaluation_id: str) -> List[DetailRecord]:
        with self._lock:
            return [d.model_copy() for d in self._details if d.evaluation_id == evaluation_id]

    def list_plan_items(self, evaluation_id: str) -> List[PlanItemRecord]:
        with self._lock:
            return [p.model_copy() for p in self._plans if p.evaluation_id == evaluation_id]
