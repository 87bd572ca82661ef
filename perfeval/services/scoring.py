"""
Scoring aggregation for evaluation reports and persisted totals.

Rules:
- a competency average uses only strictly positive scores
- a competency without any positive score is dropped from the list and from the overall mean
- overall = mean of the competency averages (two-stage), not a flat mean of behavior scores
- averages are rounded half-up to 2 decimals
- behaviors scored below the improvement threshold (76 on a 0-100 scale) are reported
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from perfeval.core.config import settings
from perfeval.schemas.evaluation import (
    BehaviorResult,
    CompetencyResult,
    ImprovementOpportunity,
    ScoringResult,
)
from perfeval.schemas.records import DetailRecord
from perfeval.services.catalog import CompetencyGroup

CENT = Decimal("0.01")


def _mean2(values: List) -> float:
    """Arithmetic mean rounded half-up to 2 decimals."""
    total = sum((Decimal(str(v)) for v in values), Decimal("0"))
    return float((total / Decimal(len(values))).quantize(CENT, rounding=ROUND_HALF_UP))


def aggregate(
    groups: Iterable[CompetencyGroup],
    details: Iterable[DetailRecord],
    threshold: Optional[int] = None,
) -> ScoringResult:
    threshold = settings.improvement_threshold if threshold is None else threshold
    by_behavior: Dict[str, DetailRecord] = {d.behavior_id: d for d in details}

    competencies: List[CompetencyResult] = []
    for group in groups:
        positives = []
        behaviors = []
        for behavior in group.behaviors:
            detail = by_behavior.get(behavior.id)
            score = detail.score if detail else None
            if score is not None and score > 0:
                positives.append(score)
            behaviors.append(BehaviorResult(
                behavior_id=behavior.id,
                description=behavior.description,
                score=score,
                comment=detail.comment if detail else None,
            ))

        if positives:
            competencies.append(CompetencyResult(
                name=group.competency.name,
                average=_mean2(positives),
                behaviors=behaviors,
            ))

    overall = _mean2([c.average for c in competencies]) if competencies else None

    opportunities = [
        ImprovementOpportunity(competency=comp.name, behavior=b.description, score=b.score)
        for comp in competencies
        for b in comp.behaviors
        if b.score is not None and b.score < threshold
    ]

    return ScoringResult(
        competencies=competencies,
        overall_average=overall,
        opportunities=opportunities,
    )


def overall_score(groups: Iterable[CompetencyGroup], details: Iterable[DetailRecord]) -> Optional[float]:
    """Overall average persisted on the evaluation; same formula as the report."""
    return aggregate(groups, details).overall_average
