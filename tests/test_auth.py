from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from conftest import PASSWORD, auth, login, register
from papertrove.config import AuthConfig
from papertrove.database.db.models import AdminRow, ResearcherRow, UserRow
from papertrove.model.user import TokenClaims
from papertrove.service.security import create_access_token


def _count(database, model) -> int:
    with database.session() as db:
        return db.execute(select(func.count()).select_from(model)).scalar()


def test_health(client: TestClient):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["success"] is True
    assert res.json()["data"]["status"] == "ok"


def test_unknown_endpoint_uses_envelope(client: TestClient):
    res = client.get("/api/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Endpoint not found", "data": None}


def test_register_defaults_to_researcher(client: TestClient, database):
    data = register(client, "Rita", "rita@example.com", affiliation="MIT")
    assert data["role"] == "Researcher"
    assert data["email"] == "rita@example.com"

    with database.session() as db:
        researcher = db.get(ResearcherRow, data["user_id"])
        assert researcher is not None
        assert researcher.affiliation == "MIT"
        assert researcher.join_date is not None
        assert db.get(AdminRow, data["user_id"]) is None


def test_register_admin_creates_admin_row(client: TestClient, database):
    data = register(client, "Ada", "ada@example.com", role="Admin")
    with database.session() as db:
        assert db.get(AdminRow, data["user_id"]) is not None
        assert db.get(ResearcherRow, data["user_id"]) is None


def test_register_duplicate_email_conflicts(client: TestClient, database):
    register(client, "Rita", "rita@example.com")
    res = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "rita@example.com", "password": PASSWORD},
    )
    assert res.status_code == 409
    assert res.json()["success"] is False
    assert _count(database, UserRow) == 1


def test_register_validation(client: TestClient, database):
    missing = client.post("/api/auth/register", json={"email": "x@example.com", "password": PASSWORD})
    assert missing.status_code == 400

    short = client.post("/api/auth/register", json={"name": "X", "email": "x@example.com", "password": "123"})
    assert short.status_code == 400
    assert "at least 6" in short.json()["message"]

    bad_role = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "x@example.com", "password": PASSWORD, "role": "Owner"},
    )
    assert bad_role.status_code == 400

    assert _count(database, UserRow) == 0


def test_login_errors(client: TestClient):
    register(client, "Rita", "rita@example.com")

    assert client.post("/api/auth/login", json={"email": "rita@example.com"}).status_code == 400
    assert client.post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD}
    ).status_code == 404
    assert client.post(
        "/api/auth/login", json={"email": "rita@example.com", "password": "wrong-password"}
    ).status_code == 401


def test_login_and_me(client: TestClient):
    register(client, "Rita", "rita@example.com", specialization="NLP")
    res = client.post("/api/auth/login", json={"email": "rita@example.com", "password": PASSWORD})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["user"]["role"] == "Researcher"

    me = client.get("/api/auth/me", headers=auth(data["token"]))
    assert me.status_code == 200
    profile = me.json()["data"]
    assert profile["email"] == "rita@example.com"
    assert profile["profile"]["kind"] == "Researcher"
    assert profile["profile"]["specialization"] == "NLP"


def test_token_errors(client: TestClient, settings):
    register(client, "Rita", "rita@example.com")

    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers=auth("not-a-jwt")).status_code == 403

    claims = TokenClaims(user_id=1, email="rita@example.com", name="Rita", role="Researcher")
    expired = create_access_token(
        claims, AuthConfig(jwt_secret=settings.auth.jwt_secret, token_expire_hours=-1)
    )
    res = client.get("/api/auth/me", headers=auth(expired))
    assert res.status_code == 403
    assert res.json()["message"] == "Token expired"

    forged = create_access_token(claims, AuthConfig(jwt_secret="another-secret-key-for-the-papertrove-suite"))
    assert client.get("/api/auth/me", headers=auth(forged)).status_code == 403


def test_update_profile(client: TestClient):
    register(client, "Rita", "rita@example.com")
    token = login(client, "rita@example.com")

    res = client.put(
        "/api/users/profile",
        json={"name": "Rita R.", "affiliation": "ETH", "specialization": "Vision"},
        headers=auth(token),
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["name"] == "Rita R."
    assert data["profile"]["affiliation"] == "ETH"

    blank = client.put("/api/users/profile", json={"name": "  "}, headers=auth(token))
    assert blank.status_code == 400

    profile = client.get("/api/users/profile", headers=auth(token)).json()["data"]
    assert profile["profile"]["specialization"] == "Vision"


def test_admin_routes_reject_researchers(client: TestClient, researcher):
    res = client.get("/api/admin/users", headers=auth(researcher["token"]))
    assert res.status_code == 403
    assert res.json()["message"] == "Admin access required"


def test_password_byte_limit(client: TestClient, database):
    too_long = client.post(
        "/api/auth/register",
        json={"name": "Long", "email": "long@example.com", "password": "p" * 80},
    )
    assert too_long.status_code == 400
    assert too_long.json()["message"] == "Password must be at most 72 bytes"

    # 37 two-byte characters are 74 bytes
    multibyte = client.post(
        "/api/auth/register",
        json={"name": "Long", "email": "long@example.com", "password": "é" * 37},
    )
    assert multibyte.status_code == 400
    assert _count(database, UserRow) == 0

    register(client, "Exact", "exact@example.com", password="p" * 72)
    assert login(client, "exact@example.com", "p" * 72)

    wrong = client.post("/api/auth/login", json={"email": "exact@example.com", "password": "p" * 80})
    assert wrong.status_code == 401
