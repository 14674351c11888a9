import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskforms.core.audit import log_event
from taskforms.core.errors import FormValidationFailed
from taskforms.core.form_definitions import (
    claim_next_version,
    definition_at_version,
    fields_changed,
    form_out,
    get_form_or_404,
    get_version_or_404,
    replace_fields,
    snapshot,
    version_out,
)
from taskforms.core.lookups import with_resolved_options
from taskforms.core.normalizer import encode_submission, normalize_form_definition
from taskforms.core.optimistic_lock import assert_version_matches, parse_if_match, set_etag
from taskforms.core.rbac import ADMIN, require_roles
from taskforms.core.security import get_current_user
from taskforms.core.timestamps import utcnow
from taskforms.db.session import get_db
from taskforms.models.form_definition import FormDefinition
from taskforms.models.task import TaskFormAttachment
from taskforms.models.user import User
from taskforms.schemas.forms import (
    FormDefinitionCreate,
    FormDefinitionOut,
    FormDefinitionUpdate,
    FormDefinitionVersionOut,
)
from taskforms.schemas.validation import ValidationError, ValidationPreviewResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["forms"])


def _normalized_or_400(payload: FormDefinitionCreate) -> FormDefinitionCreate:
    try:
        return normalize_form_definition(payload)
    except FormValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.to_detail())


@router.get("", response_model=list[FormDefinitionOut])
def list_form_definitions(
    search: str | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    query = db.query(FormDefinition)
    if search:
        query = query.filter(FormDefinition.name.ilike(f"%{search}%"))
    rows = query.order_by(FormDefinition.created_at.desc()).all()
    return [form_out(r) for r in rows]


@router.get("/{form_id}", response_model=FormDefinitionOut)
def get_form_definition(
    form_id: str,
    response: Response,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    form = get_form_or_404(db, form_id)
    set_etag(response, form.version)
    return form_out(form)


@router.get("/{form_id}/versions/{version}", response_model=FormDefinitionVersionOut)
def get_form_definition_version(
    form_id: str,
    version: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    get_form_or_404(db, form_id)
    return version_out(get_version_or_404(db, form_id, version))


@router.post("", response_model=FormDefinitionOut, status_code=status.HTTP_201_CREATED)
def create_form_definition(
    payload: FormDefinitionCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    payload = _normalized_or_400(payload)

    now = utcnow()
    form = FormDefinition(
        name=payload.name,
        version=1,
        creator_user_id=current_user.id,
        created_at=now,
        updated_at=now,
    )
    db.add(form)
    db.flush()

    replace_fields(db, form, payload.fields)
    snapshot(db, form, payload.fields)

    log_event(
        db=db,
        actor=current_user,
        action="FORM_DEFINITION_CREATED",
        entity_type="form_definition",
        entity_id=form.id,
        metadata={"name": form.name, "field_count": len(payload.fields)},
    )
    logger.info("Form definition %s created by %s", form.id, current_user.email)

    db.commit()
    db.refresh(form)
    set_etag(response, form.version)
    return form_out(form)


@router.put("/{form_id}", response_model=FormDefinitionOut)
def update_form_definition(
    form_id: str,
    payload: FormDefinitionUpdate,
    response: Response,
    if_match: str | None = Header(default=None, alias="If-Match"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    """
    Edits in place. A changed field list bumps ``version`` and snapshots the
    new fields; a rename alone keeps the version.
    """
    expected = parse_if_match(if_match)
    form = get_form_or_404(db, form_id)
    assert_version_matches(current_version=form.version, if_match_version=expected)

    payload = _normalized_or_400(payload)
    bumped = fields_changed(form, payload.fields)

    if bumped:
        claim_next_version(db, form)

    form.name = payload.name
    form.updated_at = utcnow()
    if bumped:
        try:
            replace_fields(db, form, payload.fields)
            snapshot(db, form, payload.fields)
            db.flush()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=409, detail="Form definition was changed by someone else")

    log_event(
        db=db,
        actor=current_user,
        action="FORM_DEFINITION_UPDATED",
        entity_type="form_definition",
        entity_id=form.id,
        metadata={"version": form.version, "fields_changed": bumped},
    )

    db.commit()
    db.refresh(form)
    set_etag(response, form.version)
    return form_out(form)


@router.delete("/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_form_definition(
    form_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    form = get_form_or_404(db, form_id)

    # open tasks could never be completed without this form
    pending = (
        db.query(TaskFormAttachment.task_id)
        .filter(
            TaskFormAttachment.form_definition_id == form.id,
            TaskFormAttachment.completed.is_(False),
        )
        .all()
    )
    if pending:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Form definition is attached to open tasks",
                "tasks": sorted(task_id for (task_id,) in pending),
            },
        )

    log_event(
        db=db,
        actor=current_user,
        action="FORM_DEFINITION_DELETED",
        entity_type="form_definition",
        entity_id=form.id,
        metadata={"name": form.name, "version": form.version},
    )
    db.delete(form)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{form_id}/validate", response_model=ValidationPreviewResponse)
def preview_validation(
    form_id: str,
    values: dict,
    version: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Dry run of a submission: reports every error without storing anything.
    """
    form = get_form_or_404(db, form_id)
    definition = with_resolved_options(db, definition_at_version(db, form, version))

    warnings: list[str] = []
    if definition.version != form.version:
        warnings.append(f"Form has moved on to version {form.version}")

    try:
        encode_submission(definition, values, submitted_by=current_user.id)
    except FormValidationFailed as e:
        return ValidationPreviewResponse(
            version=definition.version,
            valid=False,
            errors=[ValidationError.from_error(err) for err in e.errors],
            warnings=warnings,
        )
    return ValidationPreviewResponse(version=definition.version, valid=True, errors=[], warnings=warnings)
