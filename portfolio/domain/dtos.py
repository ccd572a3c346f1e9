from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import Annotated, Any
from uuid import UUID

from pydantic import (
    AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, HttpUrl,
    StringConstraints, TypeAdapter, model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from portfolio.domain.models import Profile, Project, Skill, SocialLink, WorkHistory

# ---------------------------------------------------------------------------
# Form field parsing. List-valued form fields arrive as JSON-encoded arrays
# inside plain string parts, e.g. features='["Auth", "Search"]'.
# ---------------------------------------------------------------------------

_http_url = TypeAdapter(HttpUrl)


def _json_list(v: Any) -> Any:
    if v is None or v == "":
        return []
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except json.JSONDecodeError as exc:
            raise ValueError(f"expected a JSON-encoded array ({exc.msg})") from exc
    if not isinstance(v, list):
        raise ValueError("expected a JSON-encoded array")
    return v


def _non_blank_items(v: list[str]) -> list[str]:
    items = [s.strip() for s in v if s.strip()]
    if not items:
        raise ValueError("at least one non-empty entry is required")
    return items


def _url_or_empty(v: str) -> str:
    v = v.strip()
    if not v:
        return ""
    try:
        _http_url.validate_python(v)
    except PydanticValidationError as exc:
        raise ValueError(f"invalid URL: {v!r}") from exc
    return v


def _required_url(v: str) -> str:
    v = _url_or_empty(v)
    if not v:
        raise ValueError("URL is required")
    return v


def _blank_to_none(v: Any) -> Any:
    if v is None or (isinstance(v, str) and v.strip() in ("", "null")):
        return None
    return v


def _as_utc(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
JsonStrList = Annotated[list[str], BeforeValidator(_json_list)]
JsonIdList = Annotated[list[UUID], BeforeValidator(_json_list)]
ItemList = Annotated[list[str], BeforeValidator(_json_list), AfterValidator(_non_blank_items)]
OptionalUrl = Annotated[str, AfterValidator(_url_or_empty)]
RequiredUrl = Annotated[str, AfterValidator(_required_url)]
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
OptionalUtcDatetime = Annotated[datetime | None, BeforeValidator(_blank_to_none), AfterValidator(_as_utc)]


class FormModel(BaseModel):
    """Base for mutation inputs: camelCase form names, unknown fields ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SkillIn(FormModel):
    name: NonEmptyStr
    icon: str = ""


class SocialLinkIn(FormModel):
    name: NonEmptyStr
    url: RequiredUrl


class ProjectIn(FormModel):
    title: NonEmptyStr
    description: NonEmptyStr
    features: ItemList
    technologies: ItemList
    github_url: OptionalUrl = ""
    live_url: OptionalUrl = ""
    skill_ids: JsonIdList = Field(default_factory=list)


class ProjectUpdateIn(ProjectIn):
    thumbnail_deleted: bool = False
    # None: every current photo survives
    old_photos: JsonStrList | None = None
    removed_photos: JsonStrList = Field(default_factory=list)


class WorkHistoryIn(FormModel):
    position: NonEmptyStr
    employment_type: NonEmptyStr
    company: NonEmptyStr
    location: NonEmptyStr
    location_type: NonEmptyStr
    description: ItemList
    start_date: UtcDatetime
    end_date: OptionalUtcDatetime = None
    skill_ids: JsonIdList = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_range(self) -> "WorkHistoryIn":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class ProfileIn(FormModel):
    name: NonEmptyStr
    headline: NonEmptyStr
    bio: NonEmptyStr
    skill_ids: JsonIdList = Field(default_factory=list)
    social_link_ids: JsonIdList = Field(default_factory=list)
    project_ids: JsonIdList = Field(default_factory=list)
    work_history_ids: JsonIdList = Field(default_factory=list)


class ProfileUpdateIn(ProfileIn):
    image_deleted: bool = False


# ---------------------------------------------------------------------------
# Read projections (canonical records with eager-loaded relations)
# ---------------------------------------------------------------------------

class SkillRef(BaseModel):
    id: UUID
    name: str
    icon: str


class ProjectOut(Project):
    skills: list[SkillRef] = Field(default_factory=list)


class WorkHistoryOut(WorkHistory):
    skills: list[SkillRef] = Field(default_factory=list)


class ProfileOut(Profile):
    skills: list[SkillRef] = Field(default_factory=list)
    social_links: list[SocialLink] = Field(default_factory=list)
    projects: list[ProjectOut] = Field(default_factory=list)
    work_history: list[WorkHistoryOut] = Field(default_factory=list)


SkillOut = Skill
SocialLinkOut = SocialLink


class SweepReport(BaseModel):
    dry_run: bool
    scanned: int
    referenced: int
    orphans: list[str]
    deleted: list[str]
    skipped_recent: int
