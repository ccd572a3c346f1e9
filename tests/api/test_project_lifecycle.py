import json
from uuid import uuid4


def _skill(client, name="react", icon="devicon-react-original"):
    r = client.post("/v1/skills", data={"name": name, "icon": icon})
    assert r.status_code == 201, r.text
    return r.json()


def _form(**extra):
    form = {
        "title": "Portfolio site",
        "description": "Personal portfolio with an admin panel",
        "features": json.dumps(["Gallery", "Admin panel"]),
        "technologies": json.dumps(["FastAPI", "React"]),
    }
    form.update(extra)
    return form


def _blob(field, name):
    return (field, (name, b"bytes-of-" + name.encode(), "image/png"))


def test_skill_project_thumbnail_scenario(client, files):
    skill = _skill(client)

    r = client.post(
        "/v1/projects",
        data=_form(skillIds=json.dumps([skill["id"]]), githubUrl="https://github.com/me/site"),
        files=[_blob("thumbnail", "cover.png"), _blob("photo", "one.png"), _blob("photo", "two.png")],
    )
    assert r.status_code == 201, r.text
    project = r.json()
    assert project["skills"] == [{"id": skill["id"], "name": "react", "icon": "devicon-react-original"}]
    assert project["github_url"] == "https://github.com/me/site"
    assert project["features"] == ["Gallery", "Admin panel"]
    thumb = project["thumbnail"]
    assert thumb.startswith("/thumbnails/") and thumb.endswith("-cover.png")
    assert [p.rsplit("-", 1)[-1] for p in project["photos"]] == ["one.png", "two.png"]
    assert files.exists(thumb)
    assert all(files.exists(p) for p in project["photos"])

    fetched = client.get(f"/v1/projects/{project['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == project

    # one update: empty skill set and a replacement thumbnail
    r = client.put(
        f"/v1/projects/{project['id']}",
        data=_form(skillIds="[]"),
        files=[_blob("thumbnail", "cover-v2.png")],
    )
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["skills"] == []
    new_thumb = updated["thumbnail"]
    assert new_thumb != thumb and new_thumb.endswith("-cover-v2.png")
    assert files.exists(new_thumb)
    assert not files.exists(thumb)
    assert updated["photos"] == project["photos"]
    assert updated["updated_at"] is not None
    assert client.get(f"/v1/skills/{skill['id']}").json() == skill

    # clearing the thumbnail deletes its blob after the commit
    r = client.put(f"/v1/projects/{project['id']}", data=_form(thumbnailDeleted="true"))
    assert r.status_code == 200, r.text
    assert r.json()["thumbnail"] == ""
    assert not files.exists(new_thumb)

    r = client.delete(f"/v1/projects/{project['id']}")
    assert r.status_code == 204
    assert client.get(f"/v1/projects/{project['id']}").status_code == 404
    assert not any(files.exists(p) for p in project["photos"])
    # the skill is referenced, not owned
    assert client.get(f"/v1/skills/{skill['id']}").status_code == 200


def test_delete_is_idempotent(client):
    created = client.post("/v1/projects", data=_form()).json()
    assert client.delete(f"/v1/projects/{created['id']}").status_code == 204
    assert client.delete(f"/v1/projects/{created['id']}").status_code == 204
    assert client.delete(f"/v1/projects/{uuid4()}").status_code == 204
    assert client.delete(f"/v1/skills/{uuid4()}").status_code == 204


def test_gallery_merge_removes_and_appends(client, files):
    created = client.post(
        "/v1/projects", data=_form(),
        files=[_blob("photo", "a.png"), _blob("photo", "b.png"), _blob("photo", "c.png")],
    ).json()
    a, b, c = created["photos"]

    r = client.put(
        f"/v1/projects/{created['id']}",
        data=_form(oldPhotos=json.dumps([a, b, c]), removedPhotos=json.dumps([b])),
        files=[_blob("photo", "d.png")],
    )
    assert r.status_code == 200, r.text
    photos = r.json()["photos"]
    assert photos[:2] == [a, c]
    assert len(photos) == 3 and photos[2].endswith("-d.png")
    assert not files.exists(b)
    assert files.exists(a) and files.exists(c) and files.exists(photos[2])


def test_photo_left_out_of_old_photos_is_retired(client, files):
    created = client.post(
        "/v1/projects", data=_form(),
        files=[_blob("photo", "a.png"), _blob("photo", "b.png")],
    ).json()
    a, b = created["photos"]

    r = client.put(f"/v1/projects/{created['id']}", data=_form(oldPhotos=json.dumps([a])))
    assert r.status_code == 200
    assert r.json()["photos"] == [a]
    assert not files.exists(b)


def test_absent_old_photos_keeps_every_photo(client):
    created = client.post("/v1/projects", data=_form(), files=[_blob("photo", "a.png")]).json()

    r = client.put(f"/v1/projects/{created['id']}", data=_form(), files=[_blob("photo", "b.png")])
    assert r.status_code == 200
    photos = r.json()["photos"]
    assert photos[0] == created["photos"][0]
    assert photos[1].endswith("-b.png")


def test_foreign_photo_path_is_rejected_before_any_save(client, files):
    created = client.post("/v1/projects", data=_form(), files=[_blob("photo", "a.png")]).json()
    before = files.stats()["blob_count"]

    r = client.put(
        f"/v1/projects/{created['id']}",
        data=_form(removedPhotos=json.dumps(["/photos/somebody-else.png"])),
        files=[_blob("photo", "new.png")],
    )
    assert r.status_code == 400
    assert r.json()["error"] == "BadRequest"
    assert files.stats()["blob_count"] == before
    assert client.get(f"/v1/projects/{created['id']}").json()["photos"] == created["photos"]


def test_new_thumbnail_replaces_old_one(client, files):
    created = client.post("/v1/projects", data=_form(), files=[_blob("thumbnail", "old.png")]).json()
    old = created["thumbnail"]

    # an upload wins over the delete flag
    r = client.put(
        f"/v1/projects/{created['id']}",
        data=_form(thumbnailDeleted="true"),
        files=[_blob("thumbnail", "new.png")],
    )
    assert r.status_code == 200
    new = r.json()["thumbnail"]
    assert new.endswith("-new.png")
    assert files.exists(new)
    assert not files.exists(old)


def test_thumbnail_kept_without_upload_or_flag(client, files):
    created = client.post("/v1/projects", data=_form(), files=[_blob("thumbnail", "keep.png")]).json()

    r = client.put(f"/v1/projects/{created['id']}", data=_form(title="Renamed"))
    assert r.status_code == 200
    assert r.json()["title"] == "Renamed"
    assert r.json()["thumbnail"] == created["thumbnail"]
    assert files.exists(created["thumbnail"])


def test_unknown_skill_rejects_the_whole_create(client, files):
    r = client.post(
        "/v1/projects",
        data=_form(skillIds=json.dumps([str(uuid4())])),
        files=[_blob("thumbnail", "cover.png")],
    )
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"
    assert client.get("/v1/projects").json() == []
    assert files.stats()["blob_count"] == 0


def test_projects_listed_newest_first(client):
    first = client.post("/v1/projects", data=_form(title="First")).json()
    second = client.post("/v1/projects", data=_form(title="Second")).json()
    r = client.get("/v1/projects")
    assert [p["id"] for p in r.json()] == [second["id"], first["id"]]
    assert r.headers["cache-control"] == "no-store"
