# portfolio_client/resources.py
"""
Per-collection adapters used by OptimisticStore: the server calls for one
entity type plus how to build a local placeholder / locally patched copy.
"""
from __future__ import annotations
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from .client import PortfolioClient
from . import models as M

T = TypeVar("T", bound=BaseModel)
D = TypeVar("D", bound=M.FormIn)


class Resource(Generic[T, D]):
    name: str = ""

    def __init__(self, client: PortfolioClient):
        self.client = client

    async def list(self) -> list[T]:
        raise NotImplementedError

    async def create(self, draft: D, **uploads: Any) -> T:
        raise NotImplementedError

    async def update(self, item_id: str, draft: Any, **uploads: Any) -> T:
        raise NotImplementedError

    async def delete(self, item_id: str) -> None:
        raise NotImplementedError

    def placeholder(self, temp_id: str, draft: D) -> T:
        raise NotImplementedError

    def patched(self, item: T, draft: Any) -> T:
        """Best local guess of the server result, shown while the update is in flight."""
        raise NotImplementedError


def _kept(refs: list, ids: list[str]) -> list:
    # newly linked records are unknown until the server answers
    wanted = set(ids)
    return [r for r in refs if r.id in wanted]


class SkillResource(Resource[M.Skill, M.SkillIn]):
    name = "skills"

    async def list(self):
        return await self.client.list_skills()

    async def create(self, draft, **uploads):
        return await self.client.create_skill(draft)

    async def update(self, item_id, draft, **uploads):
        return await self.client.update_skill(item_id, draft)

    async def delete(self, item_id):
        await self.client.delete_skill(item_id)

    def placeholder(self, temp_id, draft):
        return M.Skill(id=temp_id, name=draft.name, icon=draft.icon)

    def patched(self, item, draft):
        return item.model_copy(update={"name": draft.name, "icon": draft.icon})


class SocialLinkResource(Resource[M.SocialLink, M.SocialLinkIn]):
    name = "social_links"

    async def list(self):
        return await self.client.list_social_links()

    async def create(self, draft, **uploads):
        return await self.client.create_social_link(draft)

    async def update(self, item_id, draft, **uploads):
        return await self.client.update_social_link(item_id, draft)

    async def delete(self, item_id):
        await self.client.delete_social_link(item_id)

    def placeholder(self, temp_id, draft):
        return M.SocialLink(id=temp_id, name=draft.name, url=draft.url)

    def patched(self, item, draft):
        return item.model_copy(update={"name": draft.name, "url": draft.url})


class ProjectResource(Resource[M.Project, M.ProjectIn]):
    name = "projects"

    async def list(self):
        return await self.client.list_projects()

    async def create(self, draft, **uploads):
        return await self.client.create_project(draft, **uploads)

    async def update(self, item_id, draft, **uploads):
        return await self.client.update_project(item_id, draft, **uploads)

    async def delete(self, item_id):
        await self.client.delete_project(item_id)

    def placeholder(self, temp_id, draft):
        return M.Project(
            id=temp_id,
            **draft.model_dump(include={"title", "description", "features", "technologies", "github_url", "live_url"}),
        )

    def patched(self, item, draft):
        old_photos = getattr(draft, "old_photos", None)
        survivors = item.photos if old_photos is None else old_photos
        removed = set(getattr(draft, "removed_photos", []))
        return item.model_copy(update={
            **draft.model_dump(include={"title", "description", "features", "technologies", "github_url", "live_url"}),
            "thumbnail": "" if getattr(draft, "thumbnail_deleted", False) else item.thumbnail,
            "photos": [p for p in survivors if p not in removed],
            "skills": _kept(item.skills, draft.skill_ids),
        })


class WorkHistoryResource(Resource[M.WorkHistory, M.WorkHistoryIn]):
    name = "work_history"

    async def list(self):
        return await self.client.list_work_history()

    async def create(self, draft, **uploads):
        return await self.client.create_work_history(draft)

    async def update(self, item_id, draft, **uploads):
        return await self.client.update_work_history(item_id, draft)

    async def delete(self, item_id):
        await self.client.delete_work_history(item_id)

    def placeholder(self, temp_id, draft):
        return M.WorkHistory(id=temp_id, **draft.model_dump(exclude={"skill_ids"}))

    def patched(self, item, draft):
        return item.model_copy(update={
            **draft.model_dump(exclude={"skill_ids"}),
            "skills": _kept(item.skills, draft.skill_ids),
        })


class ProfileResource(Resource[M.Profile, M.ProfileIn]):
    name = "profile"

    async def list(self):
        return await self.client.list_profiles()

    async def create(self, draft, **uploads):
        return await self.client.create_profile(draft, **uploads)

    async def update(self, item_id, draft, **uploads):
        return await self.client.update_profile(item_id, draft, **uploads)

    async def delete(self, item_id):
        await self.client.delete_profile(item_id)

    def placeholder(self, temp_id, draft):
        return M.Profile(id=temp_id, name=draft.name, headline=draft.headline, bio=draft.bio)

    def patched(self, item, draft):
        return item.model_copy(update={
            "name": draft.name,
            "headline": draft.headline,
            "bio": draft.bio,
            "image": "" if getattr(draft, "image_deleted", False) else item.image,
            "skills": _kept(item.skills, draft.skill_ids),
            "social_links": _kept(item.social_links, draft.social_link_ids),
            "projects": _kept(item.projects, draft.project_ids),
            "work_history": _kept(item.work_history, draft.work_history_ids),
        })
