from typing import Iterable, List, NamedTuple

from perfeval.core.exceptions import NotFoundError
from perfeval.schemas.records import BehaviorRecord, CompetencyRecord, LevelRecord
from perfeval.services.base import BaseService


class CompetencyGroup(NamedTuple):
    competency: CompetencyRecord
    behaviors: List[BehaviorRecord]


def group_behaviors(
    competencies: Iterable[CompetencyRecord],
    behaviors: Iterable[BehaviorRecord],
) -> List[CompetencyGroup]:
    """
    Group a level's behaviors under their competencies.

    Competencies keep catalog order, behaviors are ordered by `order` inside
    each group, and competencies with no behaviors at the level are left out.
    """
    behaviors = list(behaviors)
    groups = []
    for comp in sorted(competencies, key=lambda c: c.order):
        members = sorted(
            (b for b in behaviors if b.competency_id == comp.id),
            key=lambda b: b.order,
        )
        if members:
            groups.append(CompetencyGroup(comp, members))
    return groups


class CatalogResolver(BaseService):
    """Read-only access to levels, competencies and behaviors."""

    def active_levels(self) -> List[LevelRecord]:
        return self.repo.list_active_levels()

    def get_level(self, level_id: str) -> LevelRecord:
        level = self.repo.get_level(level_id)
        if level is None:
            raise NotFoundError("Level", level_id)
        return level

    def competency_groups(self, level_id: str) -> List[CompetencyGroup]:
        return group_behaviors(
            self.repo.list_competencies(),
            self.repo.list_behaviors_by_level(level_id),
        )
