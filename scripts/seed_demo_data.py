from perfeval.database import SessionLocal, engine, init_db
from perfeval.models.employee import Employee
from perfeval.repositories.seed import DEMO_EVALUATOR_EMAIL, demo_seed, load_into_session

def seed():
    if engine is None:
        print("DATABASE_URL is not set; the in-memory store seeds itself at startup.")
        return

    init_db()
    db = SessionLocal()
    try:
        existing = db.query(Employee).filter(Employee.email == DEMO_EVALUATOR_EMAIL).first()
        if existing:
            print(f"Demo data already present (evaluator {DEMO_EVALUATOR_EMAIL}).")
            return

        data = demo_seed()
        load_into_session(db, data)
        print(
            f"Seeded {len(data.employees)} employees, {len(data.levels)} levels, "
            f"{len(data.competencies)} competencies and {len(data.behaviors)} behaviors."
        )
        print(f"Sign in as {DEMO_EVALUATOR_EMAIL} to evaluate the demo team.")
    finally:
        db.close()

if __name__ == "__main__":
    seed()
