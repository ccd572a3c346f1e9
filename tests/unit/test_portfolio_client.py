import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from portfolio_client import ClientConfig, PortfolioClient, PortfolioStores
from portfolio_client import models as M
from portfolio_client.exceptions import (
    BadRequest, Conflict, MalformedResponse, NotFound, ServerError, TransportError, Unauthorized,
)

SKILL = {"id": "5f0c6a56-0b5e-4b5e-9d7b-2b0a3f6f9e01", "name": "react", "icon": "devicon-react-original",
         "created_at": "2024-01-01T00:00:00Z"}


def _client(handler, **cfg) -> PortfolioClient:
    config = ClientConfig(base_url="http://portfolio.test", backoff_s=0, **cfg)
    return PortfolioClient(config, transport=httpx.MockTransport(handler))


def test_get_retries_server_errors():
    calls = []

    def handler(request):
        calls.append(request.method)
        if len(calls) < 3:
            return httpx.Response(503, json={"error": "InternalError"})
        return httpx.Response(200, json=[SKILL])

    skills = asyncio.run(_client(handler, retries=2).list_skills())
    assert [s.name for s in skills] == ["react"]
    assert len(calls) == 3


def test_create_is_not_retried_on_server_error():
    calls = []

    def handler(request):
        calls.append(request.method)
        return httpx.Response(500, json={"error": "InternalError"})

    with pytest.raises(ServerError):
        asyncio.run(_client(handler, retries=3).create_skill(M.SkillIn(name="react")))
    assert calls == ["POST"]


def test_transport_errors_are_retried_then_raised():
    calls = []

    def handler(request):
        calls.append(1)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        asyncio.run(_client(handler, retries=2).delete_skill("x"))
    assert len(calls) == 3


def test_create_is_not_resent_after_a_lost_reply():
    calls = []

    def handler(request):
        calls.append(request.method)
        if len(calls) == 1:
            raise httpx.ReadTimeout("no reply", request=request)
        return httpx.Response(201, json=SKILL)

    with pytest.raises(TransportError):
        asyncio.run(_client(handler, retries=2).create_skill(M.SkillIn(name="react")))
    assert calls == ["POST"]


def test_create_is_retried_when_the_connection_never_opened():
    calls = []

    def handler(request):
        calls.append(request.method)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(201, json=SKILL)

    skill = asyncio.run(_client(handler, retries=2).create_skill(M.SkillIn(name="react")))
    assert skill.name == "react"
    assert calls == ["POST", "POST"]


@pytest.mark.parametrize("code,exc", [
    (400, BadRequest), (422, BadRequest), (401, Unauthorized), (404, NotFound), (409, Conflict),
])
def test_status_codes_map_to_exceptions(code, exc):
    def handler(request):
        return httpx.Response(code, json={"error": "X", "detail": "why"})

    with pytest.raises(exc) as info:
        asyncio.run(_client(handler).get_skill("x"))
    assert info.value.status_code == code
    assert info.value.detail == "why"


def test_malformed_success_body():
    def handler(request):
        return httpx.Response(201, json={"unexpected": True})

    with pytest.raises(MalformedResponse):
        asyncio.run(_client(handler).create_skill(M.SkillIn(name="react")))


def test_forms_are_camel_case_with_json_arrays_and_bearer_auth():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={
            "id": "p1", "title": "Site", "description": "x",
            "features": ["Gallery"], "technologies": ["FastAPI"],
        })

    body = M.ProjectUpdateIn(
        title="Site", description="x", features=["Gallery"], technologies=["FastAPI"],
        github_url="https://github.com/ada/site", skill_ids=["s1", "s2"], thumbnail_deleted=True,
    )
    asyncio.run(_client(handler, api_key="k3y").update_project("p1", body))

    form = {k: v[0] for k, v in seen["form"].items()}
    assert seen["auth"] == "Bearer k3y"
    assert json.loads(form["skillIds"]) == ["s1", "s2"]
    assert json.loads(form["features"]) == ["Gallery"]
    assert form["githubUrl"] == "https://github.com/ada/site"
    assert form["thumbnailDeleted"] == "true"
    # None means "not sent": the server keeps every current photo
    assert "oldPhotos" not in form


def test_uploads_are_sent_as_multipart():
    seen = {}

    def handler(request):
        seen["type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(201, json={"id": "p1", "title": "Site", "description": "x"})

    body = M.ProjectIn(title="Site", description="x", features=["a"], technologies=["b"])
    asyncio.run(_client(handler).create_project(
        body, thumbnail=M.Upload("cover.png", b"PNGDATA", "image/png"), photos=[M.Upload("a.png", b"A")],
    ))
    assert seen["type"].startswith("multipart/form-data")
    assert b'name="thumbnail"; filename="cover.png"' in seen["body"]
    assert b'name="photo"; filename="a.png"' in seen["body"]
    assert b"PNGDATA" in seen["body"]


def test_stores_against_the_real_app(app, files):
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with PortfolioClient(ClientConfig(base_url="http://testserver"), transport=transport) as api:
            stores = PortfolioStores.for_client(api)
            await stores.refresh_all()

            react = await stores.skills.add(M.SkillIn(name="react", icon="devicon-react-original"))
            project = await stores.projects.add(
                M.ProjectIn(title="Site", description="x", features=["a"], technologies=["b"], skill_ids=[react.id]),
                thumbnail=M.Upload("cover.png", b"cover", "image/png"),
                photos=[M.Upload("a.png", b"a"), M.Upload("b.png", b"b")],
            )
            a, b = project.photos

            updated = await stores.projects.update(
                project.id,
                M.ProjectUpdateIn(
                    title="Site", description="x", features=["a"], technologies=["b"],
                    skill_ids=[react.id], removed_photos=[b],
                ),
            )

            # an unknown skill id fails server-side; the local copy reverts
            before = stores.projects.items
            with pytest.raises(NotFound):
                await stores.projects.update(
                    project.id,
                    M.ProjectUpdateIn(title="Bad", description="x", features=["a"], technologies=["b"],
                                      skill_ids=["00000000-0000-0000-0000-000000000000"]),
                )
            after_failure = stores.projects.items

            public = await api.public_projects()
            await stores.projects.delete(project.id)
            return react, project, updated, before, after_failure, public, stores, (a, b)

    react, project, updated, before, after_failure, public, stores, (a, b) = asyncio.run(scenario())
    assert [s.name for s in project.skills] == ["react"]
    assert project.thumbnail.startswith("/thumbnails/")
    assert updated.photos == [a]
    assert not files.exists(b)
    assert after_failure == before
    assert [p.id for p in public] == [project.id]
    assert stores.projects.items == ()
    assert [s.id for s in stores.skills.items] == [react.id]
