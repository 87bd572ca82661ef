from typing import List

from fastapi import APIRouter, Depends

from perfeval.routers.deps import get_employee_service, require_super_admin
from perfeval.schemas.employee import EmployeeSummary, NotesUpdate
from perfeval.services.employee_service import EmployeeService
from perfeval.services.identity import CurrentEvaluator

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_super_admin)],
)


@router.get("/employees", response_model=List[EmployeeSummary])
def list_all_employees(service: EmployeeService = Depends(get_employee_service)):
    return service.list_all()


@router.put("/employees/{employee_id}/notes", response_model=EmployeeSummary)
def update_notes(
    employee_id: str,
    update: NotesUpdate,
    admin: CurrentEvaluator = Depends(require_super_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.update_notes(admin, employee_id, update.notes)
