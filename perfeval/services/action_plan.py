import uuid
from typing import Iterable, List

from perfeval.schemas.evaluation import PlanRow
from perfeval.schemas.records import PlanItemRecord, PlanItemStatus


class ActionPlanManager:
    """Action-plan rows, edited from the report independently of the scoring form."""

    @staticmethod
    def is_complete(row: PlanRow) -> bool:
        return bool((row.description or "").strip()) and bool((row.behavior_label or "").strip())

    @staticmethod
    def filter_rows(evaluation_id: str, rows: Iterable[PlanRow]) -> List[PlanItemRecord]:
        """
        Turn submitted rows into plan items.

        Rows missing either the description or the behavior label are dropped
        silently. Existing rows keep their id, new ones get a fresh id.
        """
        return [
            PlanItemRecord(
                id=row.id or str(uuid.uuid4()),
                evaluation_id=evaluation_id,
                description=row.description.strip(),
                behavior_label=row.behavior_label.strip(),
                target_date=row.target_date,
                status=row.status or PlanItemStatus.PENDING.value,
                progress_pct=row.progress_pct,
                evaluator_comments=row.evaluator_comments,
                follow_up_comments=row.follow_up_comments,
                follow_up_date=row.follow_up_date,
            )
            for row in rows
            if ActionPlanManager.is_complete(row)
        ]

    @staticmethod
    def rows_for_display(items: Iterable[PlanItemRecord]) -> List[PlanRow]:
        """Rows for the report; a single blank row when there is no plan yet."""
        rows = [
            PlanRow(
                id=item.id,
                behavior_label=item.behavior_label,
                description=item.description,
                target_date=item.target_date,
                status=item.status,
                progress_pct=item.progress_pct,
                evaluator_comments=item.evaluator_comments,
                follow_up_comments=item.follow_up_comments,
                follow_up_date=item.follow_up_date,
            )
            for item in items
        ]
        if not rows:
            rows.append(PlanRow())
        return rows
