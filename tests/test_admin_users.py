from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from conftest import auth, login, register, upload_paper
from papertrove.database.db.models import (
    AdminRow,
    ChatSessionRow,
    DownloadRow,
    PaperRow,
    ResearcherRow,
    ReviewRow,
    SearchRow,
    UserRow,
)
from papertrove.database.user_repository import UserRepository
from papertrove.service.identity_service import reconcile_role_rows


def _count(database, model) -> int:
    with database.session() as db:
        return db.execute(select(func.count()).select_from(model)).scalar()


def test_list_users_with_role_counts(client: TestClient, admin, researcher):
    register(client, "Bob", "bob@example.com")

    res = client.get("/api/admin/users", params={"limit": 2}, headers=auth(admin["token"]))
    assert res.status_code == 200
    data = res.json()["data"]
    assert [u["name"] for u in data["users"]] == ["Ada Admin", "Bob"]
    assert data["pagination"]["totalPages"] == 2
    assert data["role_counts"] == {"Admin": 1, "Researcher": 2}


def test_create_user(client: TestClient, admin, database):
    body = {"name": "Carol", "email": "carol@example.com", "password": "secret123", "role": "Admin"}
    res = client.post("/api/admin/users", json=body, headers=auth(admin["token"]))
    assert res.status_code == 201
    user_id = res.json()["data"]["user_id"]
    with database.session() as db:
        assert db.get(AdminRow, user_id) is not None

    duplicate = client.post("/api/admin/users", json=body, headers=auth(admin["token"]))
    assert duplicate.status_code == 409

    no_role = client.post(
        "/api/admin/users",
        json={"name": "Dan", "email": "dan@example.com", "password": "secret123"},
        headers=auth(admin["token"]),
    )
    assert no_role.status_code == 400


def test_change_role_guards(client: TestClient, admin, researcher):
    token = admin["token"]

    own = client.put(f"/api/admin/users/{admin['user_id']}/role", json={"role": "Researcher"}, headers=auth(token))
    assert own.status_code == 403

    invalid = client.put(f"/api/admin/users/{researcher['user_id']}/role", json={"role": "Owner"}, headers=auth(token))
    assert invalid.status_code == 400

    missing = client.put("/api/admin/users/999/role", json={"role": "Admin"}, headers=auth(token))
    assert missing.status_code == 404


def test_change_role_same_role_is_noop(client: TestClient, admin, researcher, database):
    res = client.put(
        f"/api/admin/users/{researcher['user_id']}/role",
        json={"role": "Researcher"},
        headers=auth(admin["token"]),
    )
    assert res.status_code == 200
    assert res.json()["data"]["changed"] is False
    with database.session() as db:
        assert db.get(ResearcherRow, researcher["user_id"]).affiliation == "MIT"


def test_change_role_moves_extension_row(client: TestClient, admin, researcher, field_id, database):
    paper_id = upload_paper(client, admin["token"], field_id).json()["data"]["paper_id"]
    client.post(f"/api/interactions/download/{paper_id}", headers=auth(researcher["token"]))

    res = client.put(
        f"/api/admin/users/{researcher['user_id']}/role",
        json={"role": "Admin"},
        headers=auth(admin["token"]),
    )
    assert res.status_code == 200
    assert res.json()["data"] == {
        "user_id": researcher["user_id"],
        "previous_role": "Researcher",
        "new_role": "Admin",
        "changed": True,
    }
    with database.session() as db:
        assert db.get(UserRow, researcher["user_id"]).role == "Admin"
        assert db.get(AdminRow, researcher["user_id"]) is not None
        assert db.get(ResearcherRow, researcher["user_id"]) is None
    assert _count(database, DownloadRow) == 0

    back = client.put(
        f"/api/admin/users/{researcher['user_id']}/role",
        json={"role": "Researcher"},
        headers=auth(admin["token"]),
    )
    assert back.status_code == 200
    with database.session() as db:
        assert db.get(AdminRow, researcher["user_id"]) is None
        assert db.get(ResearcherRow, researcher["user_id"]) is not None


def test_demoting_admin_with_papers_conflicts(client: TestClient, admin, field_id, database):
    register(client, "Eve", "eve@example.com", role="Admin")
    eve = login(client, "eve@example.com")
    upload_paper(client, eve, field_id)
    eve_id = client.get("/api/auth/me", headers=auth(eve)).json()["data"]["id"]

    res = client.put(f"/api/admin/users/{eve_id}/role", json={"role": "Researcher"}, headers=auth(admin["token"]))
    assert res.status_code == 409
    with database.session() as db:
        assert db.get(UserRow, eve_id).role == "Admin"
        assert db.get(AdminRow, eve_id) is not None


def test_reconcile_role_rows_is_idempotent(client: TestClient, researcher, database):
    user_id = researcher["user_id"]
    with database.transaction() as db:
        users = UserRepository(db)
        reconcile_role_rows(users, user_id, "Researcher")
        reconcile_role_rows(users, user_id, "Researcher")
    with database.session() as db:
        assert db.get(ResearcherRow, user_id).specialization == "NLP"
        assert db.get(AdminRow, user_id) is None


def test_delete_user_guards(client: TestClient, admin):
    token = admin["token"]
    assert client.delete(f"/api/admin/users/{admin['user_id']}", headers=auth(token)).status_code == 403
    assert client.delete("/api/admin/users/0", headers=auth(token)).status_code == 400
    assert client.delete("/api/admin/users/999", headers=auth(token)).status_code == 404


def test_delete_researcher_removes_activity(client: TestClient, admin, researcher, field_id, database):
    paper_id = upload_paper(client, admin["token"], field_id).json()["data"]["paper_id"]
    token = researcher["token"]
    client.post(f"/api/interactions/download/{paper_id}", headers=auth(token))
    client.post("/api/interactions/review", json={"paper_id": paper_id, "rating": 5}, headers=auth(token))
    client.get("/api/papers/search/attention", headers=auth(token))
    client.post("/api/chat/sessions", json={"messages": [{"role": "user", "content": "hi"}]}, headers=auth(token))

    res = client.delete(f"/api/admin/users/{researcher['user_id']}", headers=auth(admin["token"]))
    assert res.status_code == 200
    for model in (DownloadRow, ReviewRow, SearchRow, ResearcherRow, ChatSessionRow):
        assert _count(database, model) == 0
    assert _count(database, UserRow) == 1
    assert _count(database, PaperRow) == 1


def test_delete_admin_removes_uploaded_papers(client: TestClient, admin, field_id, upload_dir, database):
    register(client, "Eve", "eve@example.com", role="Admin")
    eve = login(client, "eve@example.com")
    upload_paper(client, eve, field_id, title="One")
    upload_paper(client, eve, field_id, title="Two")
    upload_paper(client, admin["token"], field_id, title="Kept")
    eve_id = client.get("/api/auth/me", headers=auth(eve)).json()["data"]["id"]

    res = client.delete(f"/api/admin/users/{eve_id}", headers=auth(admin["token"]))
    assert res.status_code == 200

    with database.session() as db:
        titles = db.execute(select(PaperRow.title)).scalars().all()
        assert titles == ["Kept"]
        assert db.get(AdminRow, eve_id) is None
    assert len(list(upload_dir.iterdir())) == 1

    gone = client.get("/api/auth/me", headers=auth(eve))
    assert gone.status_code == 404


def test_admin_statistics(client: TestClient, admin, researcher, field_id):
    upload_paper(client, admin["token"], field_id)
    res = client.get("/api/admin/statistics", headers=auth(admin["token"]))
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["overview"]["total_papers"] == 1
    assert data["papers"]["papers_by_field"] == [{"field_name": "Computer Science", "count": 1}]
    assert data["users"]["role_counts"] == {"Admin": 1, "Researcher": 1}


def test_create_user_rejects_overlong_password(client: TestClient, admin, database):
    res = client.post(
        "/api/admin/users",
        json={"name": "Long", "email": "long@example.com", "password": "p" * 80, "role": "Researcher"},
        headers=auth(admin["token"]),
    )
    assert res.status_code == 400
    assert _count(database, UserRow) == 1


def test_demoted_admin_token_loses_admin_access(client: TestClient, admin, researcher):
    register(client, "Bob", "bob@example.com", role="Admin")
    bob = login(client, "bob@example.com")
    bob_id = client.get("/api/auth/me", headers=auth(bob)).json()["data"]["id"]

    demoted = client.put(f"/api/admin/users/{bob_id}/role", json={"role": "Researcher"}, headers=auth(admin["token"]))
    assert demoted.status_code == 200

    # the token still carries role=Admin
    res = client.delete(f"/api/admin/users/{researcher['user_id']}", headers=auth(bob))
    assert res.status_code == 403
    assert client.get("/api/admin/users", headers=auth(bob)).status_code == 403
    assert client.post("/api/fields", json={"name": "Chemistry"}, headers=auth(bob)).status_code == 403

    me = client.get("/api/auth/me", headers=auth(researcher["token"]))
    assert me.status_code == 200


def test_promoted_researcher_token_gains_admin_access(client: TestClient, admin, researcher):
    client.put(f"/api/admin/users/{researcher['user_id']}/role", json={"role": "Admin"}, headers=auth(admin["token"]))
    res = client.get("/api/admin/users", headers=auth(researcher["token"]))
    assert res.status_code == 200


def test_deleted_user_token_is_rejected(client: TestClient, admin, researcher, field_id, database):
    upload_paper(client, admin["token"], field_id)
    stale = researcher["token"]
    client.delete(f"/api/admin/users/{researcher['user_id']}", headers=auth(admin["token"]))

    chat = client.post("/api/chat/sessions", json={"title": "After deletion"}, headers=auth(stale))
    assert chat.status_code == 404
    assert chat.json()["message"] == "User not found"
    assert _count(database, ChatSessionRow) == 0

    review = client.post("/api/interactions/review", json={"paper_id": 1, "rating": 5}, headers=auth(stale))
    assert review.status_code == 404

    # optional auth falls back to an anonymous search
    search = client.get("/api/papers/search/attention", headers=auth(stale))
    assert search.status_code == 200
    assert _count(database, SearchRow) == 0
