import json


def _profile(**extra):
    form = {"name": "Ada Lovelace", "headline": "Engineer", "bio": "Writes programs"}
    form.update(extra)
    return form


def _job(company, start):
    return {
        "position": "Engineer",
        "employmentType": "Full-time",
        "company": company,
        "location": "London",
        "locationType": "Remote",
        "description": json.dumps(["Work"]),
        "startDate": start,
    }


def _project(title):
    return {"title": title, "description": "x", "features": '["a"]', "technologies": '["b"]'}


def test_home_is_empty_before_a_profile_exists(client):
    r = client.get("/v1/public/home")
    assert r.status_code == 200
    assert r.json() == []


def test_only_one_profile(client):
    assert client.post("/v1/profile", data=_profile()).status_code == 201
    r = client.post("/v1/profile", data=_profile(name="Someone else"))
    assert r.status_code == 409
    assert r.json()["error"] == "Conflict"
    assert len(client.get("/v1/profile").json()) == 1


def test_profile_image_lifecycle(client, files):
    created = client.post(
        "/v1/profile", data=_profile(),
        files=[("image", ("me.jpg", b"jpeg", "image/jpeg"))],
    ).json()
    image = created["image"]
    assert image.startswith("/profile/")
    assert files.exists(image)

    r = client.put(f"/v1/profile/{created['id']}", data=_profile(imageDeleted="true"))
    assert r.json()["image"] == ""
    assert not files.exists(image)


def test_profile_work_history_ordered_by_start_date(client):
    older = client.post("/v1/work-history", data=_job("Old Co", "2015-01-01T00:00:00Z")).json()
    newer = client.post("/v1/work-history", data=_job("New Co", "2020-01-01T00:00:00Z")).json()
    middle = client.post("/v1/work-history", data=_job("Mid Co", "2018-01-01T00:00:00Z")).json()

    profile = client.post("/v1/profile", data=_profile(
        workHistoryIds=json.dumps([older["id"], newer["id"], middle["id"]]),
    )).json()
    assert [w["company"] for w in profile["work_history"]] == ["New Co", "Mid Co", "Old Co"]

    public = client.get("/v1/public/work-history").json()
    assert [w["company"] for w in public] == ["New Co", "Mid Co", "Old Co"]


def test_home_attaches_every_project(client):
    linked = client.post("/v1/projects", data=_project("Linked")).json()
    client.post("/v1/projects", data=_project("Unlinked"))
    client.post("/v1/profile", data=_profile(projectIds=json.dumps([linked["id"]])))

    home = client.get("/v1/public/home").json()
    assert len(home) == 1
    assert [p["title"] for p in home[0]["projects"]] == ["Unlinked", "Linked"]


def test_public_reads_are_cached_until_a_write(client, cache):
    r = client.get("/v1/public/skills")
    assert r.json() == []
    assert r.headers["cache-control"].startswith("public, max-age=")
    assert len(cache) == 1

    client.post("/v1/skills", data={"name": "python"})
    assert [s["name"] for s in client.get("/v1/public/skills").json()] == ["python"]

    client.get("/v1/public/projects")
    client.post("/v1/social-links", data={"name": "GitHub", "url": "https://github.com/ada"})
    # an unrelated write leaves the projects entry alone
    assert "public:projects" in cache._entries


def test_skill_rename_reaches_cached_projects(client):
    skill = client.post("/v1/skills", data={"name": "js"}).json()
    client.post("/v1/projects", data={**_project("Site"), "skillIds": json.dumps([skill["id"]])})
    assert client.get("/v1/public/projects").json()[0]["skills"][0]["name"] == "js"

    client.put(f"/v1/skills/{skill['id']}", data={"name": "javascript"})
    assert client.get("/v1/public/projects").json()[0]["skills"][0]["name"] == "javascript"
