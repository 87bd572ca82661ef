from sqlalchemy import Column, String, Integer, Date, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from perfeval.database import Base


class Evaluation(Base):
    __tablename__ = "evaluations"

    id = Column(String(36), primary_key=True, index=True)
    employee_id = Column(String(36), ForeignKey("employees.id"), nullable=False, index=True)
    level_id = Column(String(36), ForeignKey("evaluation_levels.id"), nullable=False)

    evaluation_date = Column(Date, nullable=False)
    evaluation_type = Column(String, nullable=False)      # "Initial" / "Follow-up"
    origin_evaluation_id = Column(String(36), ForeignKey("evaluations.id"), nullable=True)
    status = Column(String, nullable=True)                # "Draft" / "Finalized"

    total = Column(Numeric(7, 2, asdecimal=False), nullable=True)
    observations = Column(Text, nullable=True)
    next_evaluation_date = Column(Date, nullable=True)

    # Evaluator as recorded at save time (email), not a foreign key
    evaluator_name = Column(String, index=True, nullable=True)

    details = relationship("EvaluationDetail", cascade="all, delete-orphan", back_populates="evaluation")
    action_plan = relationship("ActionPlanItem", cascade="all, delete-orphan", back_populates="evaluation")


class EvaluationDetail(Base):
    __tablename__ = "evaluation_details"

    id = Column(String(36), primary_key=True, index=True)
    evaluation_id = Column(String(36), ForeignKey("evaluations.id"), nullable=False, index=True)
    behavior_id = Column(String(36), ForeignKey("behaviors.id"), nullable=False)
    score = Column(Integer, nullable=False)  # 0-100
    comment = Column(Text, nullable=True)

    evaluation = relationship("Evaluation", back_populates="details")


class ActionPlanItem(Base):
    __tablename__ = "action_plan_items"

    id = Column(String(36), primary_key=True, index=True)
    evaluation_id = Column(String(36), ForeignKey("evaluations.id"), nullable=False, index=True)

    description = Column(Text, nullable=False)
    # Label of the behavior the action addresses, kept as free text
    behavior_label = Column(Text, nullable=True)
    target_date = Column(Date, nullable=True)

    status = Column(String, default="Pending", nullable=False)
    progress_pct = Column(Integer, nullable=True)

    evaluator_comments = Column(Text, nullable=True)
    follow_up_comments = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)

    evaluation = relationship("Evaluation", back_populates="action_plan")
