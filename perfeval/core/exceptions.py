from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class NotAuthorizedError(AppException):
    """The signed-in principal has no matching employee/evaluator record."""
    def __init__(self, message: str = "You are not registered as an evaluator"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="NOT_AUTHORIZED"
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": str(entity_id) if entity_id is not None else None}
        )

class FormValidationError(AppException):
    """
    Submitted evaluation form failed validation. The submitted form travels with
    the error so the caller gets it back unchanged for correction.
    """
    def __init__(self, message: str, form: Any = None, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_FAILED",
            details={"field": field} if field else None
        )
        self.form = form

class UpstreamServiceError(AppException):
    """A collaborator answered with a non-success status. Status and body are passed through verbatim."""
    def __init__(self, status_code: int, body: str):
        super().__init__(
            message=body,
            status_code=status_code,
            error_code="UPSTREAM_ERROR"
        )
        self.body = body

class ConfigurationError(AppException):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIGURATION_ERROR"
        )
