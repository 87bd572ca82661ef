"""
Domain records exchanged between the engine and the repositories.

Both repository implementations hand these out (never ORM rows), so the
services behave the same regardless of where the data lives.
"""
import enum
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class EvaluationType(str, enum.Enum):
    INITIAL = "Initial"
    FOLLOW_UP = "Follow-up"


class EvaluationStatus(str, enum.Enum):
    DRAFT = "Draft"
    FINALIZED = "Finalized"


class PlanItemStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In progress"
    COMPLETED = "Completed"
    NOT_MET = "Not met"


class EmployeeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str = ""
    document_id: str = ""
    position: Optional[str] = None
    division: Optional[str] = None
    region: Optional[str] = None
    hire_date: Optional[date] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    probation_end_date: Optional[date] = None
    email: Optional[str] = None
    evaluator_name: Optional[str] = None
    form_type: Optional[int] = None
    is_super_admin: bool = False
    notes: Optional[str] = None


class LevelRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    code: str = ""
    description: Optional[str] = None
    is_active: bool = True


class CompetencyRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    description: Optional[str] = None
    order: int = 0
    is_active: bool = True


class BehaviorRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    competency_id: str
    level_id: str
    description: str = ""
    order: int = 0
    is_active: bool = True


class EvaluationRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    employee_id: str
    level_id: str
    evaluation_date: date
    evaluation_type: EvaluationType = EvaluationType.INITIAL
    origin_evaluation_id: Optional[str] = None
    status: Optional[EvaluationStatus] = None
    total: Optional[float] = None
    observations: Optional[str] = None
    next_evaluation_date: Optional[date] = None
    evaluator_name: Optional[str] = None


class DetailRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    evaluation_id: Optional[str] = None
    behavior_id: str
    score: int
    comment: Optional[str] = None


class PlanItemRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    evaluation_id: Optional[str] = None
    description: str
    behavior_label: Optional[str] = None
    target_date: Optional[date] = None
    status: str = PlanItemStatus.PENDING.value
    progress_pct: Optional[int] = None
    evaluator_comments: Optional[str] = None
    follow_up_comments: Optional[str] = None
    follow_up_date: Optional[date] = None
