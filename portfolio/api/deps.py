# portfolio/api/deps.py
from __future__ import annotations
import secrets
from typing import TypeVar

from fastapi import Header, Request, Response
from pydantic import BaseModel
from starlette.datastructures import FormData, UploadFile

from portfolio.config import settings
from portfolio.domain.errors import UnauthorizedError
from portfolio.services.file_plan import Upload

M = TypeVar("M", bound=BaseModel)


def require_admin(authorization: str | None = Header(default=None)) -> None:
    """Black-box admin gate: a static bearer token when ADMIN_TOKEN is configured."""
    token = settings.admin_token
    if not token:
        return
    scheme, _, given = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(given, token):
        raise UnauthorizedError()


def no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"


def public_cache(response: Response) -> None:
    ttl = int(settings.public_cache_ttl_s)
    response.headers["Cache-Control"] = f"public, max-age={ttl}, stale-while-revalidate={ttl}"


async def read_form(request: Request) -> FormData:
    return await request.form()


def parse_form(model: type[M], form: FormData) -> M:
    """Strict input boundary: plain string parts only, validated before any side effect."""
    data = {}
    for key in form.keys():
        value = form.get(key)
        if isinstance(value, str):
            data[key] = value
    return model.model_validate(data)


async def read_uploads(form: FormData, field: str) -> list[Upload]:
    out: list[Upload] = []
    for item in form.getlist(field):
        if isinstance(item, UploadFile) and item.filename:
            out.append(Upload(filename=item.filename, data=await item.read(), content_type=item.content_type))
    return out


async def read_upload(form: FormData, field: str) -> Upload | None:
    items = await read_uploads(form, field)
    return items[0] if items else None
