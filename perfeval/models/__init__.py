# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import employee, catalog, evaluation

# Explicit class exports for cleaner imports
from .employee import Employee
from .catalog import EvaluationLevel, Competency, Behavior
from .evaluation import Evaluation, EvaluationDetail, ActionPlanItem

__all__ = [
    "Employee",
    "EvaluationLevel",
    "Competency",
    "Behavior",
    "Evaluation",
    "EvaluationDetail",
    "ActionPlanItem",
]
