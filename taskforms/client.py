"""
HTTP client for the task forms service.

Reads are kept in an explicit ``QueryCache`` that callers can share and
inspect; every mutation invalidates the keys it makes stale. Submissions are
validated and encoded locally before anything is sent, so bad input never
leaves the caller, and the server checks them again.

No timeout and no retry: a call either returns or raises ``ServiceError``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Hashable, Mapping

import httpx

from taskforms.core.normalizer import encode_submission
from taskforms.schemas.forms import FormDefinitionCreate, FormDefinitionOut, FormDefinitionUpdate
from taskforms.schemas.masters import LookupOption
from taskforms.schemas.submissions import FormSubmissionOut, SubmissionDisplayOut
from taskforms.schemas.tasks import TaskOut
from taskforms.schemas.user import PrincipalOut

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]


class QueryCache:
    """
    Results of read calls, keyed by tuples such as ``("formDefinition", id)``.

    ``invalidate(("formDefinitions",))`` drops that key and every key that
    starts with it.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, key: CacheKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def get_or_fetch(self, key: CacheKey, fetch: Callable[[], Any]) -> Any:
        if key not in self._entries:
            self._entries[key] = fetch()
        return self._entries[key]

    def invalidate(self, key: CacheKey) -> int:
        stale = [k for k in self._entries if k[: len(key)] == key]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


class ServiceError(Exception):
    """A rejected call; ``errors`` carries per-field problems when the service sent them."""

    def __init__(self, message: str, status_code: int | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


def get_error_message(error: BaseException | str | Mapping | None) -> str:
    """Best-effort user-facing text for any error value."""
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping):
        msg = error.get("message")
        if isinstance(msg, str):
            return msg
        try:
            text = json.dumps(error, default=str)
        except (TypeError, ValueError):
            text = ""
        if text and text != "{}":
            return text
        return "An unknown error occurred"
    if isinstance(error, BaseException):
        msg = getattr(error, "message", None)
        if isinstance(msg, str) and msg:
            return msg
        if str(error):
            return str(error)
    return "An unknown error occurred"


def _error_from_response(response: httpx.Response) -> ServiceError:
    try:
        body = response.json()
    except ValueError:
        return ServiceError(response.text or response.reason_phrase, response.status_code)

    detail = body.get("detail") if isinstance(body, dict) else body
    if isinstance(detail, dict):
        return ServiceError(get_error_message(detail), response.status_code, detail.get("errors"))
    if isinstance(detail, list):
        # FastAPI request validation errors
        return ServiceError("Request validation failed", response.status_code, detail)
    return ServiceError(get_error_message(detail), response.status_code)


class TaskFormsClient:
    def __init__(
        self,
        base_url: str,
        user_email: str,
        *,
        cache: QueryCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.cache = cache if cache is not None else QueryCache()
        self._http = httpx.Client(
            base_url=base_url,
            headers={"X-User-Email": user_email},
            timeout=None,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TaskFormsClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ServiceError(f"Service unavailable: {e}") from e

        if response.status_code >= 400:
            err = _error_from_response(response)
            logger.info("%s %s rejected (%d): %s", method, path, response.status_code, err.message)
            raise err
        return response

    def _get_or_none(self, path: str) -> dict | None:
        try:
            return self._request("GET", path).json()
        except ServiceError as e:
            if e.status_code == 404:
                return None
            raise

    # identity

    def get_caller_identity(self) -> PrincipalOut:
        return self.cache.get_or_fetch(
            ("me",),
            lambda: PrincipalOut.model_validate(self._request("GET", "/me").json()),
        )

    # form definitions

    def list_form_definitions(self) -> list[FormDefinitionOut]:
        return self.cache.get_or_fetch(
            ("formDefinitions",),
            lambda: [FormDefinitionOut.model_validate(d) for d in self._request("GET", "/forms").json()],
        )

    def get_form_definition(self, form_id: str) -> FormDefinitionOut | None:
        def fetch():
            body = self._get_or_none(f"/forms/{form_id}")
            return FormDefinitionOut.model_validate(body) if body is not None else None

        return self.cache.get_or_fetch(("formDefinition", form_id), fetch)

    def create_form_definition(self, definition: FormDefinitionCreate) -> FormDefinitionOut:
        body = self._request("POST", "/forms", json=definition.model_dump(mode="json", by_alias=True))
        self.cache.invalidate(("formDefinitions",))
        return FormDefinitionOut.model_validate(body.json())

    def update_form_definition(
        self,
        form_id: str,
        definition: FormDefinitionUpdate,
        *,
        if_match: int | None = None,
    ) -> FormDefinitionOut:
        headers = {"If-Match": str(if_match)} if if_match is not None else None
        body = self._request(
            "PUT",
            f"/forms/{form_id}",
            json=definition.model_dump(mode="json", by_alias=True),
            headers=headers,
        )
        self.cache.invalidate(("formDefinitions",))
        self.cache.invalidate(("formDefinition", form_id))
        return FormDefinitionOut.model_validate(body.json())

    def delete_form_definition(self, form_id: str) -> None:
        self._request("DELETE", f"/forms/{form_id}")
        self.cache.invalidate(("formDefinitions",))
        self.cache.invalidate(("formDefinition", form_id))

    # submissions

    def _encode(self, form_id: str, values: Mapping[str, Any], task_id: str | None) -> dict:
        definition = self.get_form_definition(form_id)
        if definition is None:
            raise ServiceError("Form definition not found", 404)
        me = self.get_caller_identity()
        # raises FormValidationFailed before anything is sent
        encoded = encode_submission(definition, values, submitted_by=me.principal, task_id=task_id)
        return {
            "formId": encoded.form_id,
            "version": encoded.version,
            "data": [e.model_dump(mode="json", by_alias=True) for e in encoded.data],
        }

    def submit_form(self, form_id: str, values: Mapping[str, Any]) -> FormSubmissionOut:
        body = self._request("POST", "/submissions", json=self._encode(form_id, values, None))
        self.cache.invalidate(("mySubmissions",))
        return FormSubmissionOut.model_validate(body.json())

    def submit_form_for_task(self, task_id: str, form_id: str, values: Mapping[str, Any]) -> FormSubmissionOut:
        body = self._request(
            "POST",
            f"/tasks/{task_id}/submissions",
            json=self._encode(form_id, values, task_id),
        )
        self.cache.invalidate(("taskSubmissions", task_id))
        self.cache.invalidate(("task", task_id))
        self.cache.invalidate(("tasks",))
        self.cache.invalidate(("mySubmissions",))
        return FormSubmissionOut.model_validate(body.json())

    def get_submission(self, submission_id: str) -> FormSubmissionOut | None:
        # submissions never change, so a cached copy never goes stale
        def fetch():
            body = self._get_or_none(f"/submissions/{submission_id}")
            return FormSubmissionOut.model_validate(body) if body is not None else None

        return self.cache.get_or_fetch(("submission", submission_id), fetch)

    def get_submission_display(self, submission_id: str) -> SubmissionDisplayOut | None:
        body = self._get_or_none(f"/submissions/{submission_id}/display")
        return SubmissionDisplayOut.model_validate(body) if body is not None else None

    def my_submissions(self) -> list[FormSubmissionOut]:
        return self.cache.get_or_fetch(
            ("mySubmissions",),
            lambda: [FormSubmissionOut.model_validate(s) for s in self._request("GET", "/me/submissions").json()],
        )

    # tasks and lookups

    def get_task(self, task_id: str) -> TaskOut | None:
        def fetch():
            body = self._get_or_none(f"/tasks/{task_id}")
            return TaskOut.model_validate(body) if body is not None else None

        return self.cache.get_or_fetch(("task", task_id), fetch)

    def lookup_options(self, ref: str) -> list[LookupOption]:
        return self.cache.get_or_fetch(
            ("lookupOptions", ref),
            lambda: [LookupOption.model_validate(o) for o in self._request("GET", f"/lookups/{ref}").json()],
        )
