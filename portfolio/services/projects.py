# portfolio/services/projects.py
from __future__ import annotations

import logging
from uuid import UUID

from portfolio.domain.dtos import ProjectIn, ProjectOut, ProjectUpdateIn
from portfolio.domain.models import Bucket, Kind, Project, UtcNow, file_refs
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.file_plan import FilePlan, Upload
from portfolio.services.files import FileStore
from portfolio.services.projections import ProjectionService
from portfolio.services.relations import RelationSynchronizer

log = logging.getLogger("portfolio")


class ProjectService:
    """
    Project mutations: thumbnail (single file), gallery photos (file list) and
    the skills relation set.
    Order inside every mutation:
      validate -> resolve relations -> save new blobs -> commit -> delete old blobs
    """
    def __init__(self, repo: InMemoryRepo, files: FileStore, cache: ProjectionCache | None = None):
        self.repo = repo
        self.files = files
        self.cache = cache
        self.relations = RelationSynchronizer(repo)
        self.views = ProjectionService(repo)

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(Kind.project)

    def _commit(self, plan: FilePlan, project: Project, links: dict, op: str) -> None:
        try:
            self.repo.commit(Kind.project, project, links, op=op)
        except Exception as exc:
            plan.abandon(exc)
            raise

    # ---- CREATE ----
    def create(self, body: ProjectIn, thumbnail: Upload | None = None, photos: list[Upload] | None = None) -> ProjectOut:
        links = self.relations.resolve_all(Kind.project, {"skills": body.skill_ids})

        plan = FilePlan(self.files)
        photo_paths = plan.gallery([], None, [], photos or [], Bucket.photos)
        thumb_path = plan.single("", thumbnail, False, Bucket.thumbnails)

        project = Project(
            title=body.title,
            description=body.description,
            features=body.features,
            technologies=body.technologies,
            github_url=body.github_url,
            live_url=body.live_url,
            thumbnail=thumb_path,
            photos=photo_paths,
        )
        self._commit(plan, project, links, op="create")
        self._invalidate()
        log.info("[project] created %s (%d photo(s), %d skill(s))",
                 project.id, len(photo_paths), len(links["skills"]))
        return self.views.project(project.id)

    # ---- UPDATE ----
    def update(
        self,
        project_id: UUID,
        body: ProjectUpdateIn,
        thumbnail: Upload | None = None,
        photos: list[Upload] | None = None,
    ) -> ProjectOut:
        current = self.repo.get(Kind.project, project_id)
        links = self.relations.resolve_all(Kind.project, {"skills": body.skill_ids})

        plan = FilePlan(self.files)
        # gallery first: it validates submitted paths before anything is saved
        photo_paths = plan.gallery(
            current.photos, body.old_photos, body.removed_photos, photos or [], Bucket.photos
        )
        thumb_path = plan.single(current.thumbnail, thumbnail, body.thumbnail_deleted, Bucket.thumbnails)

        updated = current.model_copy(update={
            "title": body.title,
            "description": body.description,
            "features": body.features,
            "technologies": body.technologies,
            "github_url": body.github_url,
            "live_url": body.live_url,
            "thumbnail": thumb_path,
            "photos": photo_paths,
            "updated_at": UtcNow(),
        })
        self._commit(plan, updated, links, op="update")
        retired = plan.finish()
        self._invalidate()
        log.info("[project] updated %s (saved=%d retired=%d)", project_id, len(plan.saved), len(retired))
        return self.views.project(project_id)

    # ---- DELETE (idempotent; blobs go after the record) ----
    def delete(self, project_id: UUID) -> None:
        removed = self.repo.remove(Kind.project, project_id)
        if removed is None:
            return
        self.files.delete_many(file_refs(removed))
        self._invalidate()
        log.info("[project] deleted %s", project_id)
