import json
from uuid import uuid4


def _job(**extra):
    form = {
        "position": "Engineer",
        "employmentType": "Full-time",
        "company": "Acme",
        "location": "Berlin",
        "locationType": "On-site",
        "description": json.dumps(["Shipped the platform"]),
        "startDate": "2021-03-01T00:00:00Z",
    }
    form.update(extra)
    return form


def test_missing_required_field_is_422(client):
    r = client.post("/v1/projects", data={"description": "x", "features": '["a"]', "technologies": '["b"]'})
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "ValidationError"
    assert any(e["loc"] == ["title"] for e in body["detail"])


def test_list_fields_must_be_json_arrays(client):
    r = client.post("/v1/projects", data={
        "title": "Site", "description": "x", "features": "not json", "technologies": '["b"]',
    })
    assert r.status_code == 422

    r = client.post("/v1/projects", data={
        "title": "Site", "description": "x", "features": '[" ", ""]', "technologies": '["b"]',
    })
    assert r.status_code == 422


def test_urls_are_checked(client):
    assert client.post("/v1/social-links", data={"name": "GitHub", "url": "not a url"}).status_code == 422
    assert client.post("/v1/social-links", data={"name": "GitHub", "url": ""}).status_code == 422
    r = client.post("/v1/projects", data={
        "title": "Site", "description": "x", "features": '["a"]', "technologies": '["b"]',
        "liveUrl": "ftp//broken",
    })
    assert r.status_code == 422


def test_blank_skill_name_is_rejected(client):
    assert client.post("/v1/skills", data={"name": "   "}).status_code == 422
    assert client.get("/v1/skills").json() == []


def test_work_history_dates(client):
    r = client.post("/v1/work-history", data=_job(endDate=""))
    assert r.status_code == 201, r.text
    assert r.json()["end_date"] is None

    r = client.post("/v1/work-history", data=_job(endDate="2020-01-01T00:00:00Z"))
    assert r.status_code == 422

    # naive timestamps are read as UTC
    r = client.post("/v1/work-history", data=_job(startDate="2019-05-01T09:30:00", endDate="2020-05-01T09:30:00"))
    assert r.status_code == 201
    assert r.json()["start_date"] == "2019-05-01T09:30:00Z"


def test_work_history_update_can_reopen_a_position(client):
    created = client.post("/v1/work-history", data=_job(endDate="2022-01-01T00:00:00Z")).json()
    r = client.put(f"/v1/work-history/{created['id']}", data=_job())
    assert r.status_code == 200
    assert r.json()["end_date"] is None
    assert r.json()["updated_at"] is not None


def test_update_of_unknown_record_is_404(client):
    r = client.put(f"/v1/skills/{uuid4()}", data={"name": "python"})
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"

    r = client.put(f"/v1/projects/{uuid4()}", data={
        "title": "Site", "description": "x", "features": '["a"]', "technologies": '["b"]',
    })
    assert r.status_code == 404


def test_unknown_form_fields_are_ignored(client):
    r = client.post("/v1/skills", data={"name": "python", "id": str(uuid4()), "createdAt": "1999-01-01"})
    assert r.status_code == 201
    assert r.json()["name"] == "python"


def test_malformed_path_id_has_error_body(client):
    r = client.get("/v1/projects/not-a-uuid")
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "ValidationError"
    assert body["detail"][0]["loc"] == ["path", "project_id"]

    assert client.delete("/v1/skills/123").json()["error"] == "ValidationError"
