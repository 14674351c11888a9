import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from taskforms.core.audit import log_event
from taskforms.core.errors import FormValidationFailed
from taskforms.core.form_definitions import definition_at_version, get_form_or_404
from taskforms.core.lookups import with_resolved_options
from taskforms.core.normalizer import display_value, encode_submission, validate_entries
from taskforms.core.rbac import ADMIN, is_admin, require_roles
from taskforms.core.security import get_current_user
from taskforms.core.timestamps import datetime_to_nanos, nanos_to_datetime, utcnow
from taskforms.db.session import get_db
from taskforms.models.form_definition import FormDefinition
from taskforms.models.form_submission import FormSubmission
from taskforms.models.task import Task
from taskforms.models.user import User
from taskforms.schemas.pagination import PaginatedResponse
from taskforms.schemas.submissions import (
    DisplayField,
    EncodedSubmission,
    FieldEntry,
    FormSubmissionIn,
    FormSubmissionOut,
    SubmissionDisplayOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


def submission_out(row: FormSubmission) -> FormSubmissionOut:
    return FormSubmissionOut(
        id=row.id,
        form_id=row.form_id,
        version=row.version,
        task_id=row.task_id,
        data=[FieldEntry.model_validate(e) for e in row.data],
        submitted_by=row.submitted_by_user_id,
        submitted_at=datetime_to_nanos(row.submitted_at),
    )


def encode_payload(
    db: Session,
    payload: FormSubmissionIn,
    user: User,
    task_id: str | None = None,
) -> EncodedSubmission:
    """
    Validate + encode an incoming submission against the definition version it
    names. The version it was filled in against is kept as-is.
    """
    form = get_form_or_404(db, payload.form_id)
    definition = with_resolved_options(db, definition_at_version(db, form, payload.version))
    now = utcnow()

    try:
        if payload.values is not None:
            return encode_submission(
                definition,
                payload.values,
                submitted_by=user.id,
                task_id=task_id,
                submitted_at=datetime_to_nanos(now),
            )

        entries = validate_entries(definition, payload.data)
    except FormValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.to_detail())

    return EncodedSubmission(
        form_id=definition.id,
        version=definition.version,
        task_id=task_id,
        data=entries,
        submitted_by=user.id,
        submitted_at=datetime_to_nanos(now),
    )


def store_submission(db: Session, encoded: EncodedSubmission, user: User) -> FormSubmission:
    row = FormSubmission(
        form_id=encoded.form_id,
        version=encoded.version,
        task_id=encoded.task_id,
        data=[e.model_dump(mode="json", by_alias=True) for e in encoded.data],
        submitted_by_user_id=encoded.submitted_by,
        submitted_at=nanos_to_datetime(encoded.submitted_at),
    )
    db.add(row)
    db.flush()

    log_event(
        db=db,
        actor=user,
        action="FORM_SUBMITTED",
        entity_type="form_submission",
        entity_id=row.id,
        metadata={
            "form_id": row.form_id,
            "version": row.version,
            "task_id": row.task_id,
            "field_count": len(encoded.data),
        },
    )
    logger.info("Submission %s stored for form %s v%s", row.id, row.form_id, row.version)
    return row


def _get_visible_submission_or_404(db: Session, submission_id: str, user: User) -> FormSubmission:
    row = db.get(FormSubmission, submission_id)
    if not row:
        raise HTTPException(status_code=404, detail="Submission not found")
    if row.submitted_by_user_id != user.id and not is_admin(db, user):
        # don't leak existence
        raise HTTPException(status_code=404, detail="Submission not found")
    return row


@router.post("/submissions", response_model=FormSubmissionOut, status_code=status.HTTP_201_CREATED)
def submit_form(
    payload: FormSubmissionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    encoded = encode_payload(db, payload, current_user)
    row = store_submission(db, encoded, current_user)
    db.commit()
    return submission_out(row)


@router.get("/submissions", response_model=PaginatedResponse[FormSubmissionOut])
def list_submissions(
    form_id: str | None = Query(default=None, description="Filter by form definition"),
    task_id: str | None = Query(default=None, description="Filter by task"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ADMIN)),
):
    query = db.query(FormSubmission)
    if form_id:
        query = query.filter(FormSubmission.form_id == form_id)
    if task_id:
        query = query.filter(FormSubmission.task_id == task_id)

    total = query.with_entities(func.count(FormSubmission.id)).scalar() or 0
    rows = query.order_by(FormSubmission.submitted_at.desc()).offset(offset).limit(limit).all()

    return PaginatedResponse[FormSubmissionOut].build(
        [submission_out(r) for r in rows], total=total, limit=limit, offset=offset
    )


@router.get("/submissions/{submission_id}", response_model=FormSubmissionOut)
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return submission_out(_get_visible_submission_or_404(db, submission_id, current_user))


@router.get("/submissions/{submission_id}/display", response_model=SubmissionDisplayOut)
def get_submission_display(
    submission_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Decoded values laid out against the fields of the version the submission
    was made for. Once that definition is gone the stored entries are shown
    as they are, keyed by field id.
    """
    row = _get_visible_submission_or_404(db, submission_id, current_user)
    entries = submission_out(row).data

    form = db.get(FormDefinition, row.form_id)
    if form is None:
        logger.info("Form %s of submission %s is gone; generic display", row.form_id, row.id)
        return SubmissionDisplayOut(
            submission_id=row.id,
            form_id=row.form_id,
            form_name=None,
            version=row.version,
            fields=[
                DisplayField(
                    id=e.field_id,
                    field_label=e.field_id,
                    field_type=e.value.tag,
                    value=display_value(e.value),
                )
                for e in entries
            ],
        )

    definition = definition_at_version(db, form, row.version)
    values = {e.field_id: e.value for e in entries}
    return SubmissionDisplayOut(
        submission_id=row.id,
        form_id=definition.id,
        form_name=definition.name,
        version=row.version,
        fields=[
            DisplayField(
                id=f.id,
                field_label=f.field_label,
                field_type=f.field_type.value,
                value=display_value(values.get(f.id)),
            )
            for f in definition.fields
        ],
    )


@router.post(
    "/tasks/{task_id}/submissions",
    response_model=FormSubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_form_for_task(
    task_id: str,
    payload: FormSubmissionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if task.owner_user_id != current_user.id and not is_admin(db, current_user):
        raise HTTPException(status_code=403, detail="Task is not assigned to you")

    attachment = next(
        (a for a in task.attached_forms if a.form_definition_id == payload.form_id),
        None,
    )
    if attachment is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Form is not attached to this task",
        )

    encoded = encode_payload(db, payload, current_user, task_id=task.id)
    row = store_submission(db, encoded, current_user)
    attachment.completed = True

    if all(a.completed for a in task.attached_forms) and task.completion_date is None:
        task.completion_date = utcnow()

    db.commit()
    return submission_out(row)


@router.get("/me/submissions", response_model=list[FormSubmissionOut])
def my_submissions(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(FormSubmission)
        .filter(FormSubmission.submitted_by_user_id == current_user.id)
        .order_by(FormSubmission.submitted_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [submission_out(r) for r in rows]
