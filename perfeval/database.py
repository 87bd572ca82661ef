from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from perfeval.core.config import settings

Base = declarative_base()

# No DATABASE_URL means the application runs on the in-memory store.
DATABASE_URL = settings.database_url

engine: Optional[Engine] = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

if DATABASE_URL:
    if DATABASE_URL.startswith("sqlite"):
        # SQLite configuration for local development/testing
        engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(DATABASE_URL, pool_pre_ping=True)
    SessionLocal.configure(bind=engine)

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the repository layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    if engine is None:
        return
    # Import all models to ensure they are registered with Base.metadata before create_all
    from perfeval.models import employee, catalog, evaluation  # noqa: F401
    Base.metadata.create_all(bind=engine)
