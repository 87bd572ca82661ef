"""
Demo data for local/offline operation.

Loaded into the in-memory store at startup (SEED_DEMO_DATA=true) and usable
against a real database through scripts/seed_demo_data.py.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from perfeval.models.catalog import Behavior, Competency, EvaluationLevel
from perfeval.models.employee import Employee
from perfeval.repositories.memory import InMemoryEvaluationRepository
from perfeval.schemas.records import BehaviorRecord, CompetencyRecord, EmployeeRecord, LevelRecord

DEMO_EVALUATOR_NAME = "Evaluador Demo"
DEMO_EVALUATOR_EMAIL = "evaluador.demo@contoso.com"


@dataclass
class SeedData:
    employees: List[EmployeeRecord] = field(default_factory=list)
    levels: List[LevelRecord] = field(default_factory=list)
    competencies: List[CompetencyRecord] = field(default_factory=list)
    behaviors: List[BehaviorRecord] = field(default_factory=list)


def _new_id() -> str:
    return str(uuid.uuid4())


def demo_seed(today: date = None) -> SeedData:
    today = today or date.today()

    employees = [
        EmployeeRecord(
            id=_new_id(),
            full_name=DEMO_EVALUATOR_NAME,
            document_id="1111111111",
            position="Jefe",
            division="Operaciones",
            email=DEMO_EVALUATOR_EMAIL,
            is_super_admin=True,
            notes="Usuario de prueba con rol superadmin.",
        ),
        EmployeeRecord(
            id=_new_id(),
            full_name="Juan Pérez",
            document_id="123456789",
            position="Operario",
            division="Operaciones",
            contract_start_date=today - relativedelta(years=2),
            contract_end_date=today + relativedelta(years=1),
            probation_end_date=today - relativedelta(years=2) + relativedelta(months=3),
            email="juan.perez@contoso.com",
            evaluator_name=DEMO_EVALUATOR_EMAIL,
            form_type=433930002,  # Operativo
            notes="Pendiente documentación.",
        ),
        EmployeeRecord(
            id=_new_id(),
            full_name="María López",
            document_id="987654321",
            position="Auxiliar",
            division="Gestión Ambiental",
            contract_start_date=today - relativedelta(years=1),
            contract_end_date=today + relativedelta(years=1),
            probation_end_date=today - relativedelta(years=1) + relativedelta(months=2),
            email="maria.lopez@contoso.com",
            evaluator_name=DEMO_EVALUATOR_EMAIL,
            notes="Cambio de cargo en trámite.",
        ),
    ]

    levels = [
        LevelRecord(id=_new_id(), name="Estratégico", code="ESTR"),
        LevelRecord(id=_new_id(), name="Táctico", code="TACT"),
        LevelRecord(id=_new_id(), name="Operativo Administrativo", code="OPEADM"),
        LevelRecord(id=_new_id(), name="Operativo", code="OPE"),
    ]

    competencies = [
        CompetencyRecord(id=_new_id(), name="Trabajo en equipo", order=1),
        CompetencyRecord(id=_new_id(), name="Orientación al servicio", order=2),
    ]

    behaviors = []
    for level in levels:
        for comp in competencies:
            behaviors.append(BehaviorRecord(
                id=_new_id(),
                competency_id=comp.id,
                level_id=level.id,
                description=f"Demuestra {comp.name.lower()} en nivel {level.name}",
                order=1,
            ))
            behaviors.append(BehaviorRecord(
                id=_new_id(),
                competency_id=comp.id,
                level_id=level.id,
                description=f"Aplica {comp.name.lower()} de forma consistente",
                order=2,
            ))

    return SeedData(employees=employees, levels=levels, competencies=competencies, behaviors=behaviors)


def memory_repository(seed: SeedData = None) -> InMemoryEvaluationRepository:
    seed = seed if seed is not None else SeedData()
    return InMemoryEvaluationRepository(
        employees=seed.employees,
        levels=seed.levels,
        competencies=seed.competencies,
        behaviors=seed.behaviors,
    )


def load_into_session(db: Session, seed: SeedData) -> None:
    """Insert seed records as ORM rows and commit."""
    try:
        for e in seed.employees:
            db.add(Employee(**e.model_dump()))
        for lvl in seed.levels:
            db.add(EvaluationLevel(**lvl.model_dump()))
        for c in seed.competencies:
            db.add(Competency(**c.model_dump()))
        db.flush()
        for b in seed.behaviors:
            db.add(Behavior(**b.model_dump()))
        db.commit()
    except Exception:
        db.rollback()
        raise
