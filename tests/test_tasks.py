from fastapi.testclient import TestClient

from taskforms.main import app
from tests.helpers import create_admin, create_form_definition, create_user, field, headers


def _task_payload(**extra) -> dict:
    payload = {"title": "Quarterly expenses", "taskType": "checklist", "priority": "high"}
    payload.update(extra)
    return payload


def test_create_task_requires_admin(db_session):
    create_user(db_session, "user@test.com")
    client = TestClient(app)
    r = client.post("/tasks", headers=headers("user@test.com"), json=_task_payload())
    assert r.status_code == 403


def test_create_task_with_attached_forms(db_session):
    admin = create_admin(db_session)
    owner = create_user(db_session, "owner@test.com")
    a = create_form_definition(db_session, creator=admin, name="A", fields=[field("x")])
    b = create_form_definition(db_session, creator=admin, name="B", fields=[field("y")])

    client = TestClient(app)
    r = client.post(
        "/tasks",
        headers=headers(admin),
        json=_task_payload(ownerEmail=owner.email, dueDate=1_700_000_000_000_000_000, formDefinitionIds=[a.id, b.id]),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["owner"] == owner.id
    assert body["status"] == "open"
    assert body["dueDate"] == 1_700_000_000_000_000_000
    assert body["completionDate"] is None
    assert body["attachedForms"] == [
        {"formDefinitionId": a.id, "completed": False},
        {"formDefinitionId": b.id, "completed": False},
    ]

    r = client.get(f"/tasks/{body['id']}", headers=headers(owner))
    assert r.status_code == 200


def test_create_task_rejects_bad_references(db_session):
    admin = create_admin(db_session)
    form = create_form_definition(db_session, creator=admin)

    client = TestClient(app)
    r = client.post("/tasks", headers=headers(admin), json=_task_payload(ownerEmail="ghost@test.com"))
    assert r.status_code == 400

    r = client.post("/tasks", headers=headers(admin), json=_task_payload(formDefinitionIds=["missing"]))
    assert r.status_code == 404

    r = client.post("/tasks", headers=headers(admin), json=_task_payload(formDefinitionIds=[form.id, form.id]))
    assert r.status_code == 400


def test_task_hidden_from_other_users(db_session):
    admin = create_admin(db_session)
    owner = create_user(db_session, "owner@test.com")
    create_user(db_session, "other@test.com")

    client = TestClient(app)
    task_id = client.post("/tasks", headers=headers(admin), json=_task_payload(ownerEmail=owner.email)).json()["id"]

    assert client.get(f"/tasks/{task_id}", headers=headers("other@test.com")).status_code == 404
    assert client.get(f"/tasks/{task_id}", headers=headers(admin)).status_code == 200
