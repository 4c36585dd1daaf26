from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from conftest import auth, create_field, upload_paper
from papertrove.database.db.models import DownloadRow, ReviewRow, SearchRow


def _count(database, model) -> int:
    with database.session() as db:
        return db.execute(select(func.count()).select_from(model)).scalar()


# =====================================================
# Fields
# =====================================================

def test_field_crud(client: TestClient, admin):
    token = admin["token"]
    field_id = create_field(client, token, "Physics")

    duplicate = client.post("/api/fields", json={"name": "Physics"}, headers=auth(token))
    assert duplicate.status_code == 409

    updated = client.put(f"/api/fields/{field_id}", json={"name": "Astrophysics"}, headers=auth(token))
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Astrophysics"

    listing = client.get("/api/fields").json()["data"]
    assert [f["name"] for f in listing["fields"]] == ["Astrophysics"]
    assert listing["pagination"]["total"] == 1

    assert client.delete(f"/api/fields/{field_id}", headers=auth(token)).status_code == 200
    assert client.get(f"/api/fields/{field_id}").status_code == 404


def test_field_requires_admin_and_name(client: TestClient, admin, researcher):
    assert client.post("/api/fields", json={"name": "Biology"}).status_code == 401
    assert client.post("/api/fields", json={"name": "Biology"}, headers=auth(researcher["token"])).status_code == 403
    assert client.post("/api/fields", json={"description": "no name"}, headers=auth(admin["token"])).status_code == 400


def test_field_in_use_cannot_be_deleted(client: TestClient, admin, field_id):
    upload_paper(client, admin["token"], field_id)
    res = client.delete(f"/api/fields/{field_id}", headers=auth(admin["token"]))
    assert res.status_code == 409
    assert client.get(f"/api/fields/{field_id}").json()["data"]["paper_count"] == 1


# =====================================================
# Browsing & search
# =====================================================

def test_browse_and_filter_by_field(client: TestClient, admin, field_id):
    other = create_field(client, admin["token"], "Mathematics")
    upload_paper(client, admin["token"], field_id, title="Transformers")
    upload_paper(client, admin["token"], other, title="Topology")

    everything = client.get("/api/papers").json()["data"]
    assert everything["pagination"]["total"] == 2

    maths = client.get("/api/papers", params={"field_id": other}).json()["data"]
    assert [p["title"] for p in maths["papers"]] == ["Topology"]

    assert client.get("/api/papers/999").status_code == 404


def test_search_matches_keywords_and_records_history(client: TestClient, admin, researcher, field_id, database):
    upload_paper(client, admin["token"], field_id, title="Plain title", abstract="Nothing here", keywords=["Graphs"])
    upload_paper(client, admin["token"], field_id, title="Unrelated", abstract="Other")

    res = client.get("/api/papers/search/graph", headers=auth(researcher["token"]))
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["query"] == "graph"
    assert [p["title"] for p in data["papers"]] == ["Plain title"]
    assert _count(database, SearchRow) == 1

    # anonymous and admin searches are not recorded
    client.get("/api/papers/search/graph")
    client.get("/api/papers/search/graph", headers=auth(admin["token"]))
    assert _count(database, SearchRow) == 1


# =====================================================
# Interactions
# =====================================================

def test_download_records_for_researchers_only(client: TestClient, admin, researcher, field_id, database):
    paper_id = upload_paper(client, admin["token"], field_id).json()["data"]["paper_id"]

    res = client.post(f"/api/interactions/download/{paper_id}", headers=auth(researcher["token"]))
    assert res.status_code == 200
    assert res.json()["data"]["recorded"] is True
    assert res.json()["data"]["path"].startswith("/uploads/papers/")

    admin_res = client.post(f"/api/interactions/download/{paper_id}", headers=auth(admin["token"]))
    assert admin_res.json()["data"]["recorded"] is False
    assert _count(database, DownloadRow) == 1

    assert client.post("/api/interactions/download/999", headers=auth(researcher["token"])).status_code == 404


def test_reviews(client: TestClient, admin, researcher, field_id, database):
    paper_id = upload_paper(client, admin["token"], field_id).json()["data"]["paper_id"]
    token = researcher["token"]

    out_of_range = client.post("/api/interactions/review", json={"paper_id": paper_id, "rating": 6}, headers=auth(token))
    assert out_of_range.status_code == 400

    by_admin = client.post(
        "/api/interactions/review", json={"paper_id": paper_id, "rating": 3}, headers=auth(admin["token"])
    )
    assert by_admin.status_code == 403

    first = client.post(
        "/api/interactions/review", json={"paper_id": paper_id, "rating": 2, "comment": "meh"}, headers=auth(token)
    )
    assert first.status_code == 201
    second = client.post(
        "/api/interactions/review", json={"paper_id": paper_id, "rating": 5, "comment": "great"}, headers=auth(token)
    )
    assert second.status_code == 201
    assert _count(database, ReviewRow) == 1

    reviews = client.get(f"/api/interactions/reviews/{paper_id}").json()["data"]["reviews"]
    assert len(reviews) == 1
    assert reviews[0]["rating"] == 5
    assert reviews[0]["researcher_name"] == "Rita Researcher"

    detail = client.get(f"/api/papers/{paper_id}").json()["data"]
    assert detail["average_rating"] == 5.0
    assert detail["review_count"] == 1


# =====================================================
# Statistics
# =====================================================

def test_statistics_endpoints(client: TestClient, admin, researcher, field_id):
    paper_id = upload_paper(
        client,
        admin["token"],
        field_id,
        authors=[{"firstName": "A", "lastName": "B", "email": "ab@example.com"}],
    ).json()["data"]["paper_id"]
    client.post(f"/api/interactions/download/{paper_id}", headers=auth(researcher["token"]))

    overview = client.get("/api/statistics/overview").json()["data"]
    assert overview["total_papers"] == 1
    assert overview["total_fields"] == 1
    assert overview["total_authors"] == 1
    assert overview["total_downloads"] == 1

    papers = client.get("/api/statistics/papers").json()["data"]
    assert papers["recent_papers"][0]["paper_id"] == paper_id

    users = client.get("/api/statistics/users").json()["data"]
    assert users["total_users"] == 2
