# portfolio/services/projections.py
from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar
from uuid import UUID

from portfolio.domain.dtos import ProfileOut, ProjectOut, SkillRef, WorkHistoryOut
from portfolio.domain.errors import NotFoundError
from portfolio.domain.models import Kind, Profile, Project, Skill, SocialLink, WorkHistory
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache

T = TypeVar("T")

# which kinds each public projection is built from
PUBLIC_TAGS: dict[str, frozenset[Kind]] = {
    "home": frozenset(Kind),
    "projects": frozenset({Kind.project, Kind.skill}),
    "skills": frozenset({Kind.skill}),
    "work_history": frozenset({Kind.work_history, Kind.skill}),
    "social_links": frozenset({Kind.social_link}),
}


def newest_first(records: Iterable[T], key: Callable[[T], Any] = lambda r: r.created_at) -> list[T]:
    # ties resolve to the most recently inserted record
    ordered = list(records)[::-1]
    ordered.sort(key=key, reverse=True)
    return ordered


class ProjectionService:
    """Read-only projections with eager-loaded relations. Never mutates the repo."""

    def __init__(self, repo: InMemoryRepo, cache: ProjectionCache | None = None):
        self.repo = repo
        self.cache = cache

    # ---- relation helpers
    def _skills(self, ids: list[UUID]) -> list[SkillRef]:
        out = []
        for i in ids:
            s = self.repo.find(Kind.skill, i)
            if s is not None:
                out.append(SkillRef(id=s.id, name=s.name, icon=s.icon))
        return out

    def _records(self, kind: Kind, ids: list[UUID]) -> list:
        return [r for r in (self.repo.find(kind, i) for i in ids) if r is not None]

    def _read(self, kind: Kind, entity_id: UUID):
        found = self.repo.read(kind, entity_id)
        if found is None:
            raise NotFoundError(f"{kind.value.replace('_', ' ').title()} {entity_id}")
        return found

    # ---- Projects
    def project(self, project_id: UUID) -> ProjectOut:
        rec, links = self._read(Kind.project, project_id)
        return ProjectOut(**rec.model_dump(), skills=self._skills(links["skills"]))

    def projects(self) -> list[ProjectOut]:
        return [self.project(p.id) for p in newest_first(self.repo.list(Kind.project))
                if self.repo.exists(Kind.project, p.id)]

    # ---- Work history
    def work_history_item(self, item_id: UUID) -> WorkHistoryOut:
        rec, links = self._read(Kind.work_history, item_id)
        return WorkHistoryOut(**rec.model_dump(), skills=self._skills(links["skills"]))

    def work_history(self, by_start_date: bool = False) -> list[WorkHistoryOut]:
        items = [self.work_history_item(w.id) for w in self.repo.list(Kind.work_history)
                 if self.repo.exists(Kind.work_history, w.id)]
        if by_start_date:
            return newest_first(items, key=lambda w: w.start_date)
        return newest_first(items)

    # ---- Skills / social links (no relations of their own)
    def skill(self, skill_id: UUID) -> Skill:
        return self.repo.get(Kind.skill, skill_id)

    def skills(self) -> list[Skill]:
        return newest_first(self.repo.list(Kind.skill))

    def social_link(self, link_id: UUID) -> SocialLink:
        return self.repo.get(Kind.social_link, link_id)

    def social_links(self) -> list[SocialLink]:
        return newest_first(self.repo.list(Kind.social_link))

    # ---- Profile
    def profile(self, profile_id: UUID) -> ProfileOut:
        rec, links = self._read(Kind.profile, profile_id)
        projects = [self.project(p.id) for p in newest_first(self._records(Kind.project, links["projects"]))]
        work = [self.work_history_item(w.id)
                for w in newest_first(self._records(Kind.work_history, links["work_history"]),
                                      key=lambda w: w.start_date)]
        return ProfileOut(
            **rec.model_dump(),
            skills=self._skills(links["skills"]),
            social_links=self._records(Kind.social_link, links["social_links"]),
            projects=projects,
            work_history=work,
        )

    def profiles(self) -> list[ProfileOut]:
        return [self.profile(p.id) for p in newest_first(self.repo.list(Kind.profile))]

    def home(self) -> list[ProfileOut]:
        """The single profile with every project attached; [] before a profile exists."""
        profiles = self.profiles()
        if not profiles:
            return []
        return [profiles[0].model_copy(update={"projects": self.projects()})]

    # ---- cached public reads
    def public(self, name: str) -> list[dict[str, Any]]:
        loaders: dict[str, Callable[[], list]] = {
            "home": self.home,
            "projects": self.projects,
            "skills": self.skills,
            "work_history": lambda: self.work_history(by_start_date=True),
            "social_links": self.social_links,
        }
        load = loaders[name]

        def _dump() -> list[dict[str, Any]]:
            return [m.model_dump(mode="json") for m in load()]

        if self.cache is None:
            return _dump()
        return self.cache.get_or_load(f"public:{name}", PUBLIC_TAGS[name], _dump)
