from pydantic import BaseModel, ConfigDict, Field


class TaskFormAttachmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    form_definition_id: str = Field(alias="formDefinitionId")
    completed: bool


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=200)
    task_type: str = Field(alias="taskType", min_length=1, max_length=120)
    priority: str = Field(min_length=1, max_length=120)
    status: str = Field(default="open", min_length=1, max_length=120)
    # assignee email; defaults to the caller
    owner_email: str | None = Field(default=None, alias="ownerEmail")
    due_date: int | None = Field(default=None, alias="dueDate")  # ns since epoch
    form_definition_ids: list[str] = Field(default_factory=list, alias="formDefinitionIds")


class TaskOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    task_type: str = Field(alias="taskType")
    priority: str
    status: str
    owner: str
    due_date: int | None = Field(alias="dueDate")
    created_date: int = Field(alias="createdDate")
    completion_date: int | None = Field(alias="completionDate")
    attached_forms: list[TaskFormAttachmentOut] = Field(alias="attachedForms")
