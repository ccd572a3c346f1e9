# portfolio/services/profiles.py
from __future__ import annotations

import logging
from uuid import UUID

from portfolio.domain.dtos import ProfileIn, ProfileOut, ProfileUpdateIn
from portfolio.domain.errors import ConflictError
from portfolio.domain.models import Bucket, Kind, Profile, UtcNow, file_refs
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.file_plan import FilePlan, Upload
from portfolio.services.files import FileStore
from portfolio.services.projections import ProjectionService
from portfolio.services.relations import RelationSynchronizer

log = logging.getLogger("portfolio")


class ProfileService:
    """
    The one-per-deployment profile aggregate. Owns the profile image and four
    relation sets (skills, social links, projects, work history).
    """
    def __init__(self, repo: InMemoryRepo, files: FileStore, cache: ProjectionCache | None = None):
        self.repo = repo
        self.files = files
        self.cache = cache
        self.relations = RelationSynchronizer(repo)
        self.views = ProjectionService(repo)

    def _links(self, body: ProfileIn) -> dict:
        return self.relations.resolve_all(Kind.profile, {
            "skills": body.skill_ids,
            "social_links": body.social_link_ids,
            "projects": body.project_ids,
            "work_history": body.work_history_ids,
        })

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(Kind.profile)

    # ---- CREATE ----
    def create(self, body: ProfileIn, image: Upload | None = None) -> ProfileOut:
        if self.repo.list(Kind.profile):
            raise ConflictError("A profile already exists; update it instead")
        links = self._links(body)

        plan = FilePlan(self.files)
        profile = Profile(
            name=body.name,
            headline=body.headline,
            bio=body.bio,
            image=plan.single("", image, False, Bucket.profile),
        )
        try:
            self.repo.commit(Kind.profile, profile, links, op="create")
        except Exception as exc:
            plan.abandon(exc)
            raise
        self._invalidate()
        log.info("[profile] created %s", profile.id)
        return self.views.profile(profile.id)

    # ---- UPDATE ----
    def update(self, profile_id: UUID, body: ProfileUpdateIn, image: Upload | None = None) -> ProfileOut:
        current = self.repo.get(Kind.profile, profile_id)
        links = self._links(body)

        plan = FilePlan(self.files)
        updated = current.model_copy(update={
            "name": body.name,
            "headline": body.headline,
            "bio": body.bio,
            "image": plan.single(current.image, image, body.image_deleted, Bucket.profile),
            "updated_at": UtcNow(),
        })
        try:
            self.repo.commit(Kind.profile, updated, links, op="update")
        except Exception as exc:
            plan.abandon(exc)
            raise
        plan.finish()
        self._invalidate()
        log.info("[profile] updated %s", profile_id)
        return self.views.profile(profile_id)

    # ---- DELETE ----
    def delete(self, profile_id: UUID) -> None:
        removed = self.repo.remove(Kind.profile, profile_id)
        if removed is None:
            return
        self.files.delete_many(file_refs(removed))
        self._invalidate()
        log.info("[profile] deleted %s", profile_id)
