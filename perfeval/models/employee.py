"""
Employee records synchronized from the HR source.
Read-only for the evaluation engine except for the notes field.
"""
from sqlalchemy import Column, String, Date, Integer, Boolean, Text
from perfeval.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, index=True)
    full_name = Column(String, nullable=False, default="")
    document_id = Column(String, index=True, nullable=False, default="")

    position = Column(String, nullable=True)
    division = Column(String, nullable=True)
    region = Column(String, nullable=True)

    hire_date = Column(Date, nullable=True)
    contract_start_date = Column(Date, nullable=True)
    contract_end_date = Column(Date, nullable=True)
    probation_end_date = Column(Date, nullable=True)

    # Address the principal signs in with
    email = Column(String, index=True, nullable=True)
    # Evaluator reference as free text (name or email), not a relational id
    evaluator_name = Column(String, index=True, nullable=True)
    # Determines the automatically assigned evaluation level
    form_type = Column(Integer, nullable=True)

    is_super_admin = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Employee {self.document_id} ({self.full_name})>"
