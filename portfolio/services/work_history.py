from __future__ import annotations

import logging
from uuid import UUID

from portfolio.domain.dtos import WorkHistoryIn, WorkHistoryOut
from portfolio.domain.models import Kind, UtcNow, WorkHistory
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.projections import ProjectionService
from portfolio.services.relations import RelationSynchronizer

log = logging.getLogger("portfolio")


class WorkHistoryService:
    def __init__(self, repo: InMemoryRepo, cache: ProjectionCache | None = None):
        self.repo = repo
        self.cache = cache
        self.relations = RelationSynchronizer(repo)
        self.views = ProjectionService(repo)

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(Kind.work_history)

    def create(self, body: WorkHistoryIn) -> WorkHistoryOut:
        links = self.relations.resolve_all(Kind.work_history, {"skills": body.skill_ids})
        item = WorkHistory(**body.model_dump(exclude={"skill_ids"}))
        self.repo.commit(Kind.work_history, item, links, op="create")
        self._invalidate()
        log.info("[work_history] created %s", item.id)
        return self.views.work_history_item(item.id)

    def update(self, item_id: UUID, body: WorkHistoryIn) -> WorkHistoryOut:
        current = self.repo.get(Kind.work_history, item_id)
        links = self.relations.resolve_all(Kind.work_history, {"skills": body.skill_ids})
        patch = body.model_dump(exclude={"skill_ids"})
        patch["updated_at"] = UtcNow()
        self.repo.commit(Kind.work_history, current.model_copy(update=patch), links, op="update")
        self._invalidate()
        log.info("[work_history] updated %s", item_id)
        return self.views.work_history_item(item_id)

    def delete(self, item_id: UUID) -> None:
        if self.repo.remove(Kind.work_history, item_id) is not None:
            self._invalidate()
            log.info("[work_history] deleted %s", item_id)
