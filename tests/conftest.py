from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from papertrove.config import AuthConfig, Settings, UploadConfig  # noqa: E402

PASSWORD = "secret123"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'papertrove.db'}",
        log_dir="",
        auth=AuthConfig(jwt_secret="test-secret-key-for-the-papertrove-suite", bcrypt_rounds=4),
        upload=UploadConfig(upload_dir=str(tmp_path / "uploads" / "papers")),
    )


@pytest.fixture()
def client(settings: Settings):
    from main import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture()
def database(client: TestClient):
    return client.app.state.database


@pytest.fixture()
def upload_dir(settings: Settings) -> Path:
    return Path(settings.upload.upload_dir)


# =====================================================
# Helpers
# =====================================================

def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, name: str, email: str, role: Optional[str] = None, **extra) -> dict:
    body = {"name": name, "email": email, "password": PASSWORD, **extra}
    if role:
        body["role"] = role
    res = client.post("/api/auth/register", json=body)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["data"]["token"]


def create_field(client: TestClient, token: str, name: str = "Computer Science") -> int:
    res = client.post("/api/fields", json={"name": name, "description": "CS"}, headers=auth(token))
    assert res.status_code == 201, res.text
    return res.json()["data"]["id"]


def upload_paper(
    client: TestClient,
    token: str,
    field_id: Optional[int],
    title: Optional[str] = "Attention Is All You Need",
    abstract: Optional[str] = "We propose the transformer architecture.",
    publication_date: str = "2017-06-12",
    authors: Optional[List[dict]] = None,
    keywords: Optional[List[str]] = None,
    content: Optional[bytes] = PDF_BYTES,
    content_type: str = "application/pdf",
    filename: str = "paper.pdf",
):
    data = {"publication_date": publication_date}
    if title is not None:
        data["title"] = title
    if abstract is not None:
        data["abstract"] = abstract
    if field_id is not None:
        data["field_id"] = str(field_id)
    if authors is not None:
        data["authors"] = json.dumps(authors)
    if keywords is not None:
        data["keywords"] = json.dumps(keywords)

    files = {"pdf_file": (filename, content, content_type)} if content is not None else None
    return client.post("/api/admin/papers", data=data, files=files, headers=auth(token))


# =====================================================
# Common accounts
# =====================================================

@pytest.fixture()
def admin(client: TestClient) -> dict:
    user = register(client, "Ada Admin", "admin@example.com", role="Admin")
    return {**user, "token": login(client, "admin@example.com")}


@pytest.fixture()
def researcher(client: TestClient) -> dict:
    user = register(
        client,
        "Rita Researcher",
        "rita@example.com",
        affiliation="MIT",
        specialization="NLP",
    )
    return {**user, "token": login(client, "rita@example.com")}


@pytest.fixture()
def field_id(client: TestClient, admin: dict) -> int:
    return create_field(client, admin["token"])
