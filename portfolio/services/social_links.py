from __future__ import annotations

import logging
from uuid import UUID

from portfolio.domain.dtos import SocialLinkIn
from portfolio.domain.models import Kind, SocialLink, UtcNow
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache

log = logging.getLogger("portfolio")


class SocialLinkService:
    def __init__(self, repo: InMemoryRepo, cache: ProjectionCache | None = None):
        self.repo = repo
        self.cache = cache

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(Kind.social_link)

    def create(self, body: SocialLinkIn) -> SocialLink:
        link = SocialLink(name=body.name, url=body.url)
        self.repo.commit(Kind.social_link, link, op="create")
        self._invalidate()
        log.info("[social_link] created %s (%s)", link.id, link.name)
        return link

    def update(self, link_id: UUID, body: SocialLinkIn) -> SocialLink:
        current = self.repo.get(Kind.social_link, link_id)
        link = current.model_copy(update={"name": body.name, "url": body.url, "updated_at": UtcNow()})
        self.repo.commit(Kind.social_link, link, op="update")
        self._invalidate()
        return link

    def delete(self, link_id: UUID) -> None:
        if self.repo.remove(Kind.social_link, link_id) is not None:
            self._invalidate()
