"""
SQLAlchemy implementation of the evaluation repository.

Each write (evaluation + details + action plan) runs in one transaction:
either everything is committed or the session is rolled back.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from perfeval.core.exceptions import NotFoundError
from perfeval.models.catalog import Behavior, Competency, EvaluationLevel
from perfeval.models.employee import Employee
from perfeval.models.evaluation import ActionPlanItem, Evaluation, EvaluationDetail
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


class SqlEvaluationRepository(EvaluationRepository):

    def __init__(self, db: Session):
        self.db = db

    # === Employees ===

    def get_employee_by_email(self, email: str) -> Optional[EmployeeRecord]:
        if not email:
            return None
        row = self.db.query(Employee).filter(func.lower(Employee.email) == email.lower()).first()
        return EmployeeRecord.model_validate(row) if row else None

    def get_employee(self, employee_id: str) -> Optional[EmployeeRecord]:
        row = self.db.get(Employee, employee_id)
        return EmployeeRecord.model_validate(row) if row else None

    def list_employees(self) -> List[EmployeeRecord]:
        rows = self.db.query(Employee).order_by(Employee.full_name).all()
        return [EmployeeRecord.model_validate(r) for r in rows]

    def list_employees_by_evaluator(self, evaluator: str) -> List[EmployeeRecord]:
        if not evaluator:
            return []
        rows = (
            self.db.query(Employee)
            .filter(func.lower(Employee.evaluator_name) == evaluator.lower())
            .order_by(Employee.full_name)
            .all()
        )
        return [EmployeeRecord.model_validate(r) for r in rows]

    def update_employee_notes(self, employee_id: str, notes: Optional[str]) -> None:
        row = self.db.get(Employee, employee_id)
        if row is None:
            return
        row.notes = notes
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # === Levels ===

    def list_active_levels(self) -> List[LevelRecord]:
        rows = self.db.query(EvaluationLevel).filter(EvaluationLevel.is_active.is_(True)).all()
        return [LevelRecord.model_validate(r) for r in rows]

    def get_level(self, level_id: str) -> Optional[LevelRecord]:
        row = self.db.get(EvaluationLevel, level_id)
        return LevelRecord.model_validate(row) if row else None

    # === Competencies / behaviors ===

    def list_competencies(self) -> List[CompetencyRecord]:
        rows = self.db.query(Competency).order_by(Competency.order).all()
        return [CompetencyRecord.model_validate(r) for r in rows]

    def list_behaviors_by_level(self, level_id: str) -> List[BehaviorRecord]:
        rows = (
            self.db.query(Behavior)
            .join(Competency, Behavior.competency_id == Competency.id)
            .filter(Behavior.level_id == level_id)
            .order_by(Competency.order, Behavior.order)
            .all()
        )
        return [BehaviorRecord.model_validate(r) for r in rows]

    # === Evaluations ===

    def list_evaluations_by_evaluator(self, evaluator: str) -> List[EvaluationRecord]:
        if not evaluator:
            return []
        rows = (
            self.db.query(Evaluation)
            .filter(func.lower(Evaluation.evaluator_name) == evaluator.lower())
            .order_by(Evaluation.evaluation_date.desc())
            .all()
        )
        return [EvaluationRecord.model_validate(r) for r in rows]

    def list_evaluations_by_employee(self, employee_id: str) -> List[EvaluationRecord]:
        rows = (
            self.db.query(Evaluation)
            .filter(Evaluation.employee_id == employee_id)
            .order_by(Evaluation.evaluation_date.desc())
            .all()
        )
        return [EvaluationRecord.model_validate(r) for r in rows]

    def get_evaluation(self, evaluation_id: str) -> Optional[EvaluationRecord]:
        row = self.db.get(Evaluation, evaluation_id)
        return EvaluationRecord.model_validate(row) if row else None

    @staticmethod
    def _apply(row: Evaluation, evaluation: EvaluationRecord) -> None:
        row.employee_id = evaluation.employee_id
        row.level_id = evaluation.level_id
        row.evaluation_date = evaluation.evaluation_date
        row.evaluation_type = evaluation.evaluation_type.value
        row.origin_evaluation_id = evaluation.origin_evaluation_id
        row.status = evaluation.status.value if evaluation.status else None
        row.total = evaluation.total
        row.observations = evaluation.observations
        row.next_evaluation_date = evaluation.next_evaluation_date
        row.evaluator_name = evaluation.evaluator_name

    def _add_children(self, evaluation_id: str, details: List[DetailRecord], plan: List[PlanItemRecord]) -> None:
        for d in details:
            self.db.add(EvaluationDetail(
                id=d.id or str(uuid.uuid4()),
                evaluation_id=evaluation_id,
                behavior_id=d.behavior_id,
                score=d.score,
                comment=d.comment,
            ))
        for p in plan:
            self.db.add(ActionPlanItem(
                id=p.id or str(uuid.uuid4()),
                evaluation_id=evaluation_id,
                description=p.description,
                behavior_label=p.behavior_label,
                target_date=p.target_date,
                status=p.status,
                progress_pct=p.progress_pct,
                evaluator_comments=p.evaluator_comments,
                follow_up_comments=p.follow_up_comments,
                follow_up_date=p.follow_up_date,
            ))

    def create_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> str:
        evaluation_id = evaluation.id or str(uuid.uuid4())
        row = Evaluation(id=evaluation_id)
        self._apply(row, evaluation)
        self.db.add(row)
        try:
            # Parent first so child foreign keys resolve on strict backends
            self.db.flush()
            self._add_children(evaluation_id, details, plan)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return evaluation_id

    def update_evaluation(
        self,
        evaluation: EvaluationRecord,
        details: List[DetailRecord],
        plan: List[PlanItemRecord],
    ) -> None:
        row = self.db.get(Evaluation, evaluation.id)
        if row is None:
            raise NotFoundError("Evaluation", evaluation.id)
        try:
            self._apply(row, evaluation)
            for old in self.db.query(EvaluationDetail).filter(EvaluationDetail.evaluation_id == evaluation.id).all():
                self.db.delete(old)
            for old in self.db.query(ActionPlanItem).filter(ActionPlanItem.evaluation_id == evaluation.id).all():
                self.db.delete(old)
            # Deletes must hit the session before re-inserting rows that keep their ids
            self.db.flush()
            self._add_children(evaluation.id, details, plan)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def list_details(self, evaluation_id: str) -> List[DetailRecord]:
        rows = self.db.query(EvaluationDetail).filter(EvaluationDetail.evaluation_id == evaluation_id).all()
        return [DetailRecord.model_validate(r) for r in rows]

    def list_plan_items(self, evaluation_id: str) -> List[PlanItemRecord]:
        rows = self.db.query(ActionPlanItem).filter(ActionPlanItem.evaluation_id == evaluation_id).all()
        return [PlanItemRecord.model_validate(r) for r in rows]
