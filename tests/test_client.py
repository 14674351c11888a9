import json

import httpx
import pytest

from taskforms.client import QueryCache, ServiceError, TaskFormsClient, get_error_message
from taskforms.core.errors import FormValidationFailed
from taskforms.schemas.forms import FormDefinitionCreate

PRINCIPAL = {
    "principal": "user-1",
    "email": "user@test.com",
    "fullName": "User",
    "department": None,
    "isAdmin": False,
    "roles": ["USER"],
}

FORM = {
    "id": "form-1",
    "name": "Intake",
    "version": 2,
    "creator": "admin-1",
    "created": 1,
    "lastUpdated": 2,
    "fields": [
        {"id": "name", "fieldLabel": "Name", "fieldType": "singleLine", "validations": {"required": True}},
        {"id": "age", "fieldLabel": "Age", "fieldType": "number"},
    ],
}


class FakeService:
    """Canned responses for the routes the client calls; records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path, method = request.url.path, request.method

        if path == "/me":
            return httpx.Response(200, json=PRINCIPAL)
        if path == "/forms" and method == "GET":
            return httpx.Response(200, json=[FORM])
        if path == "/forms" and method == "POST":
            body = json.loads(request.content)
            if not body["fields"]:
                return httpx.Response(
                    400,
                    json={"detail": {"message": "Form definition is invalid", "errors": [{"field": None, "code": "x", "message": "y"}]}},
                )
            return httpx.Response(201, json={**FORM, "id": "form-2", "name": body["name"], "version": 1})
        if path == "/forms/form-1":
            return httpx.Response(200, json=FORM)
        if path in ("/submissions", "/tasks/task-1/submissions") and method == "POST":
            body = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": "sub-1",
                    "formId": body["formId"],
                    "version": body["version"],
                    "taskId": "task-1" if path.startswith("/tasks") else None,
                    "data": body["data"],
                    "submittedBy": "user-1",
                    "submittedAt": 10,
                },
            )
        return httpx.Response(404, json={"detail": "Not found"})

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)


@pytest.fixture()
def service():
    return FakeService()


@pytest.fixture()
def client(service):
    with TaskFormsClient("http://taskforms.test", "user@test.com", transport=httpx.MockTransport(service)) as c:
        yield c


def test_sends_dev_auth_header(client, service):
    assert client.get_caller_identity().principal == "user-1"
    assert service.requests[0].headers["X-User-Email"] == "user@test.com"


def test_reads_are_cached(client, service):
    first = client.get_form_definition("form-1")
    second = client.get_form_definition("form-1")
    assert first is second
    assert first.version == 2
    assert service.calls("GET", "/forms/form-1") == 1


def test_missing_definition_is_none(client):
    assert client.get_form_definition("nope") is None


def test_mutation_invalidates_listing(client, service):
    client.list_form_definitions()
    client.list_form_definitions()
    assert service.calls("GET", "/forms") == 1

    created = client.create_form_definition(
        FormDefinitionCreate.model_validate({"name": "New", "fields": [{"id": "a", "fieldLabel": "A", "fieldType": "Number"}]})
    )
    assert created.id == "form-2"
    sent = json.loads(service.requests[-1].content)
    assert sent["fields"][0]["fieldType"] == "number"

    client.list_form_definitions()
    assert service.calls("GET", "/forms") == 2


def test_submit_encodes_locally(client, service):
    sub = client.submit_form("form-1", {"name": "Ann", "age": "42"})

    sent = json.loads(service.requests[-1].content)
    assert sent == {
        "formId": "form-1",
        "version": 2,
        "data": [
            {"fieldId": "name", "value": {"text": "Ann"}},
            {"fieldId": "age", "value": {"number": 42}},
        ],
    }
    assert sub.version == 2
    assert sub.data[1].value.number == 42


def test_invalid_submission_is_never_sent(client, service):
    with pytest.raises(FormValidationFailed) as exc:
        client.submit_form("form-1", {"age": "abc"})
    assert {e.code for e in exc.value.errors} == {"required", "type"}
    assert service.calls("POST", "/submissions") == 0


def test_submit_for_task_invalidates_task(client, service):
    client.cache.set(("task", "task-1"), "stale")
    client.cache.set(("tasks",), "stale")

    sub = client.submit_form_for_task("task-1", "form-1", {"name": "Ann"})
    assert sub.task_id == "task-1"
    assert ("task", "task-1") not in client.cache
    assert ("tasks",) not in client.cache


def test_rejection_becomes_service_error(client):
    with pytest.raises(ServiceError) as exc:
        client.create_form_definition(FormDefinitionCreate(name="Empty"))
    assert exc.value.status_code == 400
    assert exc.value.message == "Form definition is invalid"
    assert exc.value.errors[0]["code"] == "x"


def test_transport_failure_becomes_service_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    with TaskFormsClient("http://taskforms.test", "u@test.com", transport=httpx.MockTransport(boom)) as c:
        with pytest.raises(ServiceError) as exc:
            c.get_caller_identity()
    assert exc.value.status_code is None
    assert "connection refused" in exc.value.message


def test_query_cache_invalidates_by_prefix():
    cache = QueryCache()
    cache.set(("task", "t1"), 1)
    cache.set(("task", "t2"), 2)
    cache.set(("tasks",), 3)

    assert cache.invalidate(("task",)) == 2
    assert ("tasks",) in cache
    assert cache.get_or_fetch(("task", "t1"), lambda: 9) == 9


def test_get_error_message():
    assert get_error_message("plain") == "plain"
    assert get_error_message({"message": "from dict"}) == "from dict"
    assert get_error_message({"code": 1}) == '{"code": 1}'
    assert get_error_message({}) == "An unknown error occurred"
    assert get_error_message(ValueError("boom")) == "boom"
    assert get_error_message(None) == "An unknown error occurred"
