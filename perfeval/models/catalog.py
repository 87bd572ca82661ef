from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from perfeval.database import Base


class EvaluationLevel(Base):
    __tablename__ = "evaluation_levels"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)          # Estratégico, Táctico, ...
    code = Column(String, nullable=False)          # ESTR, TACT, OPEADM, OPE
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


class Competency(Base):
    __tablename__ = "competencies"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    behaviors = relationship("Behavior", back_populates="competency")


class Behavior(Base):
    __tablename__ = "behaviors"

    id = Column(String(36), primary_key=True, index=True)
    competency_id = Column(String(36), ForeignKey("competencies.id"), nullable=False, index=True)
    level_id = Column(String(36), ForeignKey("evaluation_levels.id"), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    competency = relationship("Competency", back_populates="behaviors")
