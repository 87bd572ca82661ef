import base64
import json
import os
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = ""
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["ACTIVATION_FLOW_URL"] = "https://flows.example.test/activation"

from perfeval.database import Base
from perfeval.main import app
from perfeval.repositories.seed import DEMO_EVALUATOR_EMAIL, demo_seed, load_into_session, memory_repository
from perfeval.repositories.sql import SqlEvaluationRepository
from perfeval.routers.deps import get_repository
from perfeval.schemas.evaluation import EvaluationForm
from perfeval.services.evaluation_service import EvaluationLifecycleManager
from perfeval.services.identity import CurrentEvaluator
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

SEED_DAY = date(2024, 1, 15)


@pytest.fixture(scope="function")
def seed():
    """Demo catalog and employees with fixed dates."""
    return demo_seed(today=SEED_DAY)

@pytest.fixture(scope="function")
def memory_repo(seed):
    return memory_repository(seed)

@pytest.fixture(scope="function")
def sql_repo(seed):
    """SQL repository over a private in-memory SQLite database loaded with the same seed."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    load_into_session(session, seed)

    yield SqlEvaluationRepository(session)

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function", params=["memory", "sql"])
def repo(request):
    """Runs a test once against each repository implementation."""
    return request.getfixturevalue(f"{request.param}_repo")

@pytest.fixture(scope="function")
def manager(repo):
    return EvaluationLifecycleManager(repo)

@pytest.fixture(scope="function")
def evaluator(seed):
    return CurrentEvaluator(employee=seed.employees[0], identifier=DEMO_EVALUATOR_EMAIL)

@pytest.fixture(scope="function")
def juan(seed):
    """Employee whose form type maps to the Operativo level."""
    return seed.employees[1]

@pytest.fixture(scope="function")
def maria(seed):
    """Employee without a form type."""
    return seed.employees[2]

@pytest.fixture(scope="function")
def ope_level(seed):
    return next(lvl for lvl in seed.levels if lvl.code == "OPE")

@pytest.fixture(scope="function")
def fill_form():
    """Helper that scores a form section by section: [[80, 90], [60, None]]."""
    def _fill(form: EvaluationForm, scores, comment=None) -> EvaluationForm:
        for section, section_scores in zip(form.competencies, scores):
            for slot, score in zip(section.behaviors, section_scores):
                slot.score = score
                slot.comment = comment if score is not None else None
        return form
    return _fill

@pytest.fixture(scope="function")
def principal_headers():
    """Builds the headers the authentication proxy forwards for a signed-in user."""
    def _headers(email: str, claim_type: str = "preferred_username"):
        document = {"auth_typ": "aad", "claims": [{"typ": claim_type, "val": email}]}
        encoded = base64.b64encode(json.dumps(document).encode("utf-8")).decode("ascii")
        return {"X-MS-CLIENT-PRINCIPAL": encoded}
    return _headers

@pytest.fixture(scope="function")
def auth_headers(principal_headers):
    return principal_headers(DEMO_EVALUATOR_EMAIL)

@pytest.fixture(scope="function")
def client(memory_repo):
    """Get a TestClient that uses the seeded in-memory store via dependency override."""
    def override_get_repository():
        yield memory_repo

    app.dependency_overrides[get_repository] = override_get_repository
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
