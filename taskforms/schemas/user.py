from pydantic import BaseModel, ConfigDict, Field


class PrincipalOut(BaseModel):
    """The caller's identity; ``principal`` is what creator / submittedBy refer to."""

    model_config = ConfigDict(populate_by_name=True)

    principal: str
    email: str
    full_name: str = Field(alias="fullName")
    department: str | None = None
    is_admin: bool = Field(alias="isAdmin")
    roles: list[str]
