from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskforms.core.audit import log_event
from taskforms.core.form_definitions import get_form_or_404
from taskforms.core.rbac import ADMIN, is_admin, require_roles
from taskforms.core.security import get_current_user
from taskforms.core.timestamps import datetime_to_nanos, nanos_to_datetime
from taskforms.db.session import get_db
from taskforms.models.task import Task, TaskFormAttachment
from taskforms.models.user import User
from taskforms.schemas.tasks import TaskCreate, TaskFormAttachmentOut, TaskOut

router = APIRouter(prefix="/tasks", tags=["tasks"])


def task_out(t: Task) -> TaskOut:
    return TaskOut(
        id=t.id,
        title=t.title,
        task_type=t.task_type,
        priority=t.priority,
        status=t.status,
        owner=t.owner_user_id,
        due_date=datetime_to_nanos(t.due_date) if t.due_date else None,
        created_date=datetime_to_nanos(t.created_at),
        completion_date=datetime_to_nanos(t.completion_date) if t.completion_date else None,
        attached_forms=[
            TaskFormAttachmentOut(form_definition_id=a.form_definition_id, completed=a.completed)
            for a in t.attached_forms
        ],
    )


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    owner = current_user
    if payload.owner_email:
        owner = db.query(User).filter(User.email == payload.owner_email).one_or_none()
        if not owner or not owner.is_active:
            raise HTTPException(status_code=400, detail={"message": "Unknown owner", "owner_email": payload.owner_email})

    if len(set(payload.form_definition_ids)) != len(payload.form_definition_ids):
        raise HTTPException(status_code=400, detail="Form attached more than once")
    for form_id in payload.form_definition_ids:
        get_form_or_404(db, form_id)

    task = Task(
        title=payload.title,
        task_type=payload.task_type,
        priority=payload.priority,
        status=payload.status,
        owner_user_id=owner.id,
        due_date=nanos_to_datetime(payload.due_date) if payload.due_date is not None else None,
    )
    for idx, form_id in enumerate(payload.form_definition_ids, start=1):
        task.attached_forms.append(TaskFormAttachment(form_definition_id=form_id, position=idx))
    db.add(task)
    db.flush()

    log_event(
        db=db,
        actor=current_user,
        action="TASK_CREATED",
        entity_type="task",
        entity_id=task.id,
        metadata={"owner_user_id": owner.id, "form_count": len(payload.form_definition_ids)},
    )

    db.commit()
    db.refresh(task)
    return task_out(task)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = db.get(Task, task_id)
    if not task or (task.owner_user_id != current_user.id and not is_admin(db, current_user)):
        raise HTTPException(status_code=404, detail="Task not found")
    return task_out(task)
