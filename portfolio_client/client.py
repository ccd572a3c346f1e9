# portfolio_client/client.py
from __future__ import annotations
import asyncio
import logging
from typing import Any, Iterable, TypeVar

import httpx
from pydantic import BaseModel

from .config import ClientConfig
from .exceptions import (
    PortfolioError, BadRequest, Unauthorized, NotFound, Conflict, ServerError, TransportError, MalformedResponse,
)
from . import models as M

log = logging.getLogger("portfolio_client")

T = TypeVar("T", bound=BaseModel)

# 5xx is only retried where repeating the call cannot duplicate an effect
IDEMPOTENT = frozenset({"GET", "PUT", "DELETE"})
# failures that happen before the request reaches the server
NOT_SENT = (httpx.ConnectError, httpx.ConnectTimeout)

Files = list[tuple[str, tuple[str, bytes, str]]]


def _detail(resp: httpx.Response) -> Any:
    try:
        return resp.json().get("detail")
    except (ValueError, AttributeError):
        return resp.text


def _raise_for_status(resp: httpx.Response) -> None:
    code = resp.status_code
    if code < 400:
        return
    detail = _detail(resp)
    msg = f"HTTP {code}: {detail}"
    if code >= 500:
        raise ServerError(msg, code, detail)
    if code in (400, 422):
        raise BadRequest(msg, code, detail)
    if code in (401, 403):
        raise Unauthorized(msg, code, detail)
    if code == 404:
        raise NotFound(msg, code, detail)
    if code == 409:
        raise Conflict(msg, code, detail)
    raise PortfolioError(msg, code, detail)


def _files(field: str, uploads: Iterable[M.Upload]) -> Files:
    return [(field, (u.filename, u.data, u.content_type)) for u in uploads]


class PortfolioClient:
    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = config
        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_s,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PortfolioClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------ low-level helpers ------------
    async def _request(
        self,
        method: str,
        url: str,
        data: dict[str, str] | None = None,
        files: Files | None = None,
    ) -> httpx.Response:
        tries = max(1, self.cfg.retries + 1)
        for attempt in range(tries):
            last = attempt == tries - 1
            try:
                resp = await self._client.request(method, url, data=data, files=files or None)
                _raise_for_status(resp)
                return resp
            except httpx.TransportError as e:
                # a lost reply to a POST may hide a committed create
                if not last and (method in IDEMPOTENT or isinstance(e, NOT_SENT)):
                    log.warning("[client] %s %s transport error (%s), retrying", method, url, e)
                    await asyncio.sleep(self.cfg.backoff_s)
                    continue
                raise TransportError(str(e)) from e
            except ServerError:
                if not last and method in IDEMPOTENT:
                    log.warning("[client] %s %s server error, retrying", method, url)
                    await asyncio.sleep(self.cfg.backoff_s)
                    continue
                raise
        raise AssertionError("unreachable")

    @staticmethod
    def _parse(model: type[T], resp: httpx.Response) -> T:
        try:
            return model.model_validate(resp.json())
        except ValueError as e:
            raise MalformedResponse(f"unexpected {model.__name__} body: {e}", resp.status_code) from e

    @staticmethod
    def _parse_list(model: type[T], resp: httpx.Response) -> list[T]:
        try:
            body = resp.json()
            if not isinstance(body, list):
                raise ValueError("expected a JSON array")
            return [model.model_validate(x) for x in body]
        except ValueError as e:
            raise MalformedResponse(f"unexpected {model.__name__} list body: {e}", resp.status_code) from e

    # ------------ Skills ------------
    async def list_skills(self) -> list[M.Skill]:
        return self._parse_list(M.Skill, await self._request("GET", "/v1/skills"))

    async def get_skill(self, skill_id: str) -> M.Skill:
        return self._parse(M.Skill, await self._request("GET", f"/v1/skills/{skill_id}"))

    async def create_skill(self, body: M.SkillIn) -> M.Skill:
        return self._parse(M.Skill, await self._request("POST", "/v1/skills", data=body.to_form()))

    async def update_skill(self, skill_id: str, body: M.SkillIn) -> M.Skill:
        return self._parse(M.Skill, await self._request("PUT", f"/v1/skills/{skill_id}", data=body.to_form()))

    async def delete_skill(self, skill_id: str) -> None:
        await self._request("DELETE", f"/v1/skills/{skill_id}")

    # ------------ Social links ------------
    async def list_social_links(self) -> list[M.SocialLink]:
        return self._parse_list(M.SocialLink, await self._request("GET", "/v1/social-links"))

    async def get_social_link(self, link_id: str) -> M.SocialLink:
        return self._parse(M.SocialLink, await self._request("GET", f"/v1/social-links/{link_id}"))

    async def create_social_link(self, body: M.SocialLinkIn) -> M.SocialLink:
        return self._parse(M.SocialLink, await self._request("POST", "/v1/social-links", data=body.to_form()))

    async def update_social_link(self, link_id: str, body: M.SocialLinkIn) -> M.SocialLink:
        r = await self._request("PUT", f"/v1/social-links/{link_id}", data=body.to_form())
        return self._parse(M.SocialLink, r)

    async def delete_social_link(self, link_id: str) -> None:
        await self._request("DELETE", f"/v1/social-links/{link_id}")

    # ------------ Projects ------------
    async def list_projects(self) -> list[M.Project]:
        return self._parse_list(M.Project, await self._request("GET", "/v1/projects"))

    async def get_project(self, project_id: str) -> M.Project:
        return self._parse(M.Project, await self._request("GET", f"/v1/projects/{project_id}"))

    async def create_project(
        self,
        body: M.ProjectIn,
        thumbnail: M.Upload | None = None,
        photos: Iterable[M.Upload] = (),
    ) -> M.Project:
        files = _files("thumbnail", [thumbnail] if thumbnail else []) + _files("photo", photos)
        r = await self._request("POST", "/v1/projects", data=body.to_form(), files=files)
        return self._parse(M.Project, r)

    async def update_project(
        self,
        project_id: str,
        body: M.ProjectUpdateIn,
        thumbnail: M.Upload | None = None,
        photos: Iterable[M.Upload] = (),
    ) -> M.Project:
        files = _files("thumbnail", [thumbnail] if thumbnail else []) + _files("photo", photos)
        r = await self._request("PUT", f"/v1/projects/{project_id}", data=body.to_form(), files=files)
        return self._parse(M.Project, r)

    async def delete_project(self, project_id: str) -> None:
        await self._request("DELETE", f"/v1/projects/{project_id}")

    # ------------ Work history ------------
    async def list_work_history(self) -> list[M.WorkHistory]:
        return self._parse_list(M.WorkHistory, await self._request("GET", "/v1/work-history"))

    async def get_work_history(self, item_id: str) -> M.WorkHistory:
        return self._parse(M.WorkHistory, await self._request("GET", f"/v1/work-history/{item_id}"))

    async def create_work_history(self, body: M.WorkHistoryIn) -> M.WorkHistory:
        r = await self._request("POST", "/v1/work-history", data=body.to_form())
        return self._parse(M.WorkHistory, r)

    async def update_work_history(self, item_id: str, body: M.WorkHistoryIn) -> M.WorkHistory:
        r = await self._request("PUT", f"/v1/work-history/{item_id}", data=body.to_form())
        return self._parse(M.WorkHistory, r)

    async def delete_work_history(self, item_id: str) -> None:
        await self._request("DELETE", f"/v1/work-history/{item_id}")

    # ------------ Profile ------------
    async def list_profiles(self) -> list[M.Profile]:
        return self._parse_list(M.Profile, await self._request("GET", "/v1/profile"))

    async def get_profile(self, profile_id: str) -> M.Profile:
        return self._parse(M.Profile, await self._request("GET", f"/v1/profile/{profile_id}"))

    async def create_profile(self, body: M.ProfileIn, image: M.Upload | None = None) -> M.Profile:
        files = _files("image", [image] if image else [])
        return self._parse(M.Profile, await self._request("POST", "/v1/profile", data=body.to_form(), files=files))

    async def update_profile(self, profile_id: str, body: M.ProfileUpdateIn, image: M.Upload | None = None) -> M.Profile:
        files = _files("image", [image] if image else [])
        r = await self._request("PUT", f"/v1/profile/{profile_id}", data=body.to_form(), files=files)
        return self._parse(M.Profile, r)

    async def delete_profile(self, profile_id: str) -> None:
        await self._request("DELETE", f"/v1/profile/{profile_id}")

    # ------------ Public reads ------------
    async def home(self) -> list[M.Profile]:
        return self._parse_list(M.Profile, await self._request("GET", "/v1/public/home"))

    async def public_projects(self) -> list[M.Project]:
        return self._parse_list(M.Project, await self._request("GET", "/v1/public/projects"))

    async def public_skills(self) -> list[M.Skill]:
        return self._parse_list(M.Skill, await self._request("GET", "/v1/public/skills"))

    async def public_work_history(self) -> list[M.WorkHistory]:
        return self._parse_list(M.WorkHistory, await self._request("GET", "/v1/public/work-history"))

    async def public_social_links(self) -> list[M.SocialLink]:
        return self._parse_list(M.SocialLink, await self._request("GET", "/v1/public/social-links"))
