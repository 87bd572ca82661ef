from pydantic import BaseModel, ConfigDict
from datetime import date
from typing import Optional

class EmployeeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str = ""
    document_id: str = ""
    position: Optional[str] = None
    division: Optional[str] = None
    region: Optional[str] = None
    email: Optional[str] = None
    evaluator_name: Optional[str] = None
    contract_end_date: Optional[date] = None
    probation_end_date: Optional[date] = None
    notes: Optional[str] = None

class NotesUpdate(BaseModel):
    notes: Optional[str] = None

class ActivationRequest(BaseModel):
    employee_id: str

class ActivationResult(BaseModel):
    message: str
    upstream_status: int
