# portfolio_client/models.py
from __future__ import annotations
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)

# -------- Server records --------
# ids are strings so client-side placeholders can carry "temp-<uuid>" ids

class SkillRef(BaseModel):
    id: str
    name: str
    icon: str = ""

class Skill(BaseModel):
    id: str
    name: str
    icon: str = ""
    created_at: datetime = Field(default_factory=_now)

class SocialLink(BaseModel):
    id: str
    name: str
    url: str
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime | None = None

class Project(BaseModel):
    id: str
    title: str
    description: str
    features: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    github_url: str = ""
    live_url: str = ""
    thumbnail: str = ""
    photos: list[str] = Field(default_factory=list)
    skills: list[SkillRef] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime | None = None

class WorkHistory(BaseModel):
    id: str
    position: str
    employment_type: str
    company: str
    location: str
    location_type: str
    description: list[str] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime | None = None
    skills: list[SkillRef] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime | None = None

class Profile(BaseModel):
    id: str
    name: str
    headline: str
    bio: str
    image: str = ""
    skills: list[SkillRef] = Field(default_factory=list)
    social_links: list[SocialLink] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    work_history: list[WorkHistory] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime | None = None

# -------- Form inputs --------

@dataclass(frozen=True)
class Upload:
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"


class FormIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_form(self) -> dict[str, str]:
        """camelCase string parts; arrays travel as JSON text, None is omitted."""
        out: dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True, exclude_none=True, mode="json").items():
            if isinstance(value, list):
                out[key] = json.dumps(value)
            elif isinstance(value, bool):
                out[key] = "true" if value else "false"
            else:
                out[key] = str(value)
        return out

class SkillIn(FormIn):
    name: str
    icon: str = ""

class SocialLinkIn(FormIn):
    name: str
    url: str

class ProjectIn(FormIn):
    title: str
    description: str
    features: list[str]
    technologies: list[str]
    github_url: str = ""
    live_url: str = ""
    skill_ids: list[str] = Field(default_factory=list)

class ProjectUpdateIn(ProjectIn):
    thumbnail_deleted: bool = False
    old_photos: list[str] | None = None
    removed_photos: list[str] = Field(default_factory=list)

class WorkHistoryIn(FormIn):
    position: str
    employment_type: str
    company: str
    location: str
    location_type: str
    description: list[str]
    start_date: datetime
    end_date: datetime | None = None
    skill_ids: list[str] = Field(default_factory=list)

class ProfileIn(FormIn):
    name: str
    headline: str
    bio: str
    skill_ids: list[str] = Field(default_factory=list)
    social_link_ids: list[str] = Field(default_factory=list)
    project_ids: list[str] = Field(default_factory=list)
    work_history_ids: list[str] = Field(default_factory=list)

class ProfileUpdateIn(ProfileIn):
    image_deleted: bool = False
