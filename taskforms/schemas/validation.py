from pydantic import BaseModel

from taskforms.core.errors import FormValueError


class ValidationError(BaseModel):
    field: str | None  # None for form-level problems
    code: str  # required, length, range, type, shape, choice, unknown_key, type_mismatch, ...
    message: str

    @classmethod
    def from_error(cls, err: FormValueError) -> "ValidationError":
        return cls(**err.to_dict())


class ValidationPreviewResponse(BaseModel):
    """Dry-run result of a submission against one definition version."""

    version: int
    valid: bool
    errors: list[ValidationError]
    warnings: list[str]  # non-blocking
