from fastapi.testclient import TestClient

from taskforms.main import app
from taskforms.models.user import User
from tests.helpers import create_user, grant_role, headers


def test_me_requires_header(db_session):
    client = TestClient(app)
    r = client.get("/me")
    assert r.status_code == 401


def test_me_rejects_unknown_or_inactive_user(db_session):
    u = create_user(db_session, "gone@local.test")
    u.is_active = False
    db_session.commit()

    client = TestClient(app)
    assert client.get("/me", headers=headers("nobody@local.test")).status_code == 401
    assert client.get("/me", headers=headers("gone@local.test")).status_code == 401


def test_me_returns_principal(db_session):
    # seed user
    u = User(email="admin@local.test", full_name="Admin Local", department="Operations")
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    grant_role(db_session, u, "ADMIN")

    client = TestClient(app)
    r = client.get("/me", headers={"X-User-Email": "admin@local.test"})
    assert r.status_code == 200
    body = r.json()
    assert body["principal"] == u.id
    assert body["email"] == "admin@local.test"
    assert body["fullName"] == "Admin Local"
    assert body["department"] == "Operations"
    assert body["isAdmin"] is True
    assert body["roles"] == ["ADMIN"]


def test_me_plain_user_is_not_admin(db_session):
    create_user(db_session, "user@local.test")
    client = TestClient(app)
    body = client.get("/me", headers=headers("user@local.test")).json()
    assert body["isAdmin"] is False
    assert body["roles"] == []
