from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from uuid import UUID, uuid4
from enum import Enum

UtcNow = lambda: datetime.now(timezone.utc)

class Bucket(str, Enum):
    profile = "profile"
    thumbnails = "thumbnails"
    photos = "photos"

class Kind(str, Enum):
    profile = "profile"
    project = "project"
    work_history = "work_history"
    skill = "skill"
    social_link = "social_link"

class Skill(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    icon: str = ""
    created_at: datetime = Field(default_factory=UtcNow)

class SocialLink(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    url: str
    created_at: datetime = Field(default_factory=UtcNow)
    updated_at: datetime | None = None

class Project(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str
    features: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    github_url: str = ""
    live_url: str = ""
    thumbnail: str = ""
    photos: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=UtcNow)
    updated_at: datetime | None = None

class WorkHistory(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    position: str
    employment_type: str
    company: str
    location: str
    location_type: str
    description: list[str] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime | None = None   # None = current position
    created_at: datetime = Field(default_factory=UtcNow)
    updated_at: datetime | None = None

class Profile(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    headline: str
    bio: str
    image: str = ""
    created_at: datetime = Field(default_factory=UtcNow)
    updated_at: datetime | None = None


MODELS: dict[Kind, type[BaseModel]] = {
    Kind.profile: Profile,
    Kind.project: Project,
    Kind.work_history: WorkHistory,
    Kind.skill: Skill,
    Kind.social_link: SocialLink,
}

# (owner kind, relation name) -> target kind
RELATIONS: dict[tuple[Kind, str], Kind] = {
    (Kind.profile, "skills"): Kind.skill,
    (Kind.profile, "social_links"): Kind.social_link,
    (Kind.profile, "projects"): Kind.project,
    (Kind.profile, "work_history"): Kind.work_history,
    (Kind.project, "skills"): Kind.skill,
    (Kind.work_history, "skills"): Kind.skill,
}

def relations_of(kind: Kind) -> list[str]:
    return [rel for (owner, rel) in RELATIONS if owner == kind]

def file_refs(record: BaseModel) -> list[str]:
    """All non-empty FileReferences held by a record."""
    refs: list[str] = []
    if isinstance(record, Project):
        refs.append(record.thumbnail)
        refs.extend(record.photos)
    elif isinstance(record, Profile):
        refs.append(record.image)
    return [r for r in refs if r]
