from typing import List, Optional

from perfeval.core.exceptions import NotFoundError
from perfeval.schemas.records import EmployeeRecord
from perfeval.services.activation import ActivationClient
from perfeval.services.base import BaseService
from perfeval.services.identity import CurrentEvaluator


class EmployeeService(BaseService):
    """Employees under an evaluator, activation requests and super-admin maintenance."""

    def team_for(self, evaluator: CurrentEvaluator, document_id: Optional[str] = None) -> List[EmployeeRecord]:
        employees = self.repo.list_employees_by_evaluator(evaluator.key)
        needle = (document_id or "").strip().lower()
        if needle:
            employees = [e for e in employees if needle in (e.document_id or "").lower()]
        return employees

    def get(self, employee_id: str) -> EmployeeRecord:
        employee = self.repo.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def request_activation(
        self,
        employee_id: str,
        evaluator: CurrentEvaluator,
        client: ActivationClient,
    ) -> int:
        employee = self.get(employee_id)
        return client.request_activation(employee, evaluator)

    # --- Super admin (access checked at the router) ---

    def list_all(self) -> List[EmployeeRecord]:
        return self.repo.list_employees()

    def update_notes(self, evaluator: CurrentEvaluator, employee_id: str, notes: Optional[str]) -> EmployeeRecord:
        employee = self.get(employee_id)
        self.repo.update_employee_notes(employee.id, notes)
        self.log_info(f"Notes updated for employee {employee.id} by {evaluator.key}", employee_id=employee.id)
        return self.get(employee_id)
