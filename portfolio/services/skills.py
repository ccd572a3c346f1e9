from __future__ import annotations

import logging
from uuid import UUID

from portfolio.domain.dtos import SkillIn
from portfolio.domain.models import Kind, Skill
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache

log = logging.getLogger("portfolio")


class SkillService:
    """
    Skills are referenced by profiles, projects and work history but owned by
    none of them: deleting a skill strips it from every relation set and
    leaves the referrers alone.
    """
    def __init__(self, repo: InMemoryRepo, cache: ProjectionCache | None = None):
        self.repo = repo
        self.cache = cache

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(Kind.skill)

    def create(self, body: SkillIn) -> Skill:
        skill = Skill(name=body.name, icon=body.icon)
        self.repo.commit(Kind.skill, skill, op="create")
        self._invalidate()
        log.info("[skill] created %s (%s)", skill.id, skill.name)
        return skill

    def update(self, skill_id: UUID, body: SkillIn) -> Skill:
        current = self.repo.get(Kind.skill, skill_id)
        skill = current.model_copy(update={"name": body.name, "icon": body.icon})
        self.repo.commit(Kind.skill, skill, op="update")
        self._invalidate()
        return skill

    def delete(self, skill_id: UUID) -> None:
        if self.repo.remove(Kind.skill, skill_id) is not None:
            self._invalidate()
            log.info("[skill] deleted %s", skill_id)
