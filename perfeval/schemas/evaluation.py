from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import List, Optional

from perfeval.schemas.records import EvaluationStatus, EvaluationType, LevelRecord

# Scores are integers on a 0-100 scale
MIN_SCORE = 0
MAX_SCORE = 100


# --- Scoring form ---

class BehaviorSlot(BaseModel):
    behavior_id: str
    description: str = ""
    score: Optional[int] = Field(default=None, ge=MIN_SCORE, le=MAX_SCORE)
    comment: Optional[str] = None

class CompetencySection(BaseModel):
    name: str
    behaviors: List[BehaviorSlot] = []

class EvaluationForm(BaseModel):
    id: Optional[str] = None
    employee_id: str
    level_id: str

    employee_name: str = ""
    employee_document_id: str = ""
    position: Optional[str] = None
    division: Optional[str] = None
    level_name: str = ""

    evaluation_date: date = Field(default_factory=date.today)
    evaluation_type: EvaluationType = EvaluationType.INITIAL
    origin_evaluation_id: Optional[str] = None
    observations: Optional[str] = None

    competencies: List[CompetencySection] = []

    def scored_slots(self) -> List[BehaviorSlot]:
        return [
            slot
            for section in self.competencies
            for slot in section.behaviors
            if slot.score is not None
        ]

class EvaluationSubmission(BaseModel):
    # "finalize" closes the evaluation; anything else keeps it as a draft
    action: str = "save"
    form: EvaluationForm

class SaveResult(BaseModel):
    id: str
    status: EvaluationStatus
    total: Optional[float] = None
    next_evaluation_date: Optional[date] = None


class LevelSelection(BaseModel):
    """Answer to "start an evaluation": either an auto-assigned form, or the levels to pick from."""
    employee_id: str
    auto_assigned: bool
    levels: List[LevelRecord] = []
    form: Optional[EvaluationForm] = None

class FollowUpTarget(BaseModel):
    employee_id: str
    level_id: str
    origin_evaluation_id: str


# --- Report ---

class BehaviorResult(BaseModel):
    behavior_id: str
    description: str
    score: Optional[int] = None
    comment: Optional[str] = None

class CompetencyResult(BaseModel):
    name: str
    average: float
    behaviors: List[BehaviorResult] = []

class ImprovementOpportunity(BaseModel):
    competency: str
    behavior: str
    score: int

class ScoringResult(BaseModel):
    competencies: List[CompetencyResult] = []
    overall_average: Optional[float] = None
    opportunities: List[ImprovementOpportunity] = []

class PlanRow(BaseModel):
    """Editable action-plan row as shown in, and submitted from, the report."""
    id: Optional[str] = None
    behavior_label: Optional[str] = None
    description: Optional[str] = None
    target_date: Optional[date] = None
    status: Optional[str] = None
    progress_pct: Optional[int] = Field(default=None, ge=0, le=100)
    evaluator_comments: Optional[str] = None
    follow_up_comments: Optional[str] = None
    follow_up_date: Optional[date] = None

class EvaluationReport(BaseModel):
    evaluation_id: str
    employee_id: str
    employee_name: str = ""
    employee_document_id: str = ""
    position: Optional[str] = None
    division: Optional[str] = None

    evaluation_date: date
    evaluation_type: EvaluationType
    status: Optional[EvaluationStatus] = None
    level_name: str = ""

    overall_average: Optional[float] = None
    competencies: List[CompetencyResult] = []
    opportunities: List[ImprovementOpportunity] = []
    action_plan: List[PlanRow] = []

    observations: Optional[str] = None
    next_evaluation_date: Optional[date] = None

class ActionPlanSubmission(BaseModel):
    rows: List[PlanRow] = []
    next_evaluation_date: Optional[date] = None


# --- Listings ---

class EvaluationListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    evaluation_date: date
    next_evaluation_date: Optional[date] = None
    employee_name: str = ""
    employee_document_id: str = ""
    level_name: Optional[str] = None
    level_code: Optional[str] = None
    evaluation_type: EvaluationType
    status: Optional[EvaluationStatus] = None
    total: Optional[float] = None
    can_follow_up: bool = False

class EmployeeFolder(BaseModel):
    employee_id: str
    employee_name: str = ""
    employee_document_id: str = ""
    position: Optional[str] = None
    evaluations: List[EvaluationListItem] = []
