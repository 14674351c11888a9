from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from taskforms.core.timestamps import datetime_to_nanos
from taskforms.models.form_definition import FormDefinition
from taskforms.models.form_definition_version import FormDefinitionVersion
from taskforms.models.form_field import FormField
from taskforms.schemas.forms import (
    FieldOption,
    FormDefinitionOut,
    FormDefinitionVersionOut,
    FormFieldSpec,
)


def field_to_wire(spec: FormFieldSpec) -> dict:
    return spec.model_dump(mode="json", by_alias=True, exclude_none=True)


def field_from_row(row: FormField) -> FormFieldSpec:
    return FormFieldSpec(
        id=row.field_key,
        field_label=row.field_label,
        field_type=row.field_type,
        validations=row.validations,
        options=[FieldOption.model_validate(o) for o in row.options] if row.options else None,
        master_list_ref=row.master_list_ref,
    )


def form_out(form: FormDefinition) -> FormDefinitionOut:
    return FormDefinitionOut(
        id=form.id,
        name=form.name,
        version=form.version,
        creator=form.creator_user_id,
        created=datetime_to_nanos(form.created_at),
        last_updated=datetime_to_nanos(form.updated_at),
        fields=[field_from_row(r) for r in form.fields],
    )


def version_out(snap: FormDefinitionVersion) -> FormDefinitionVersionOut:
    return FormDefinitionVersionOut(
        form_id=snap.form_definition_id,
        version=snap.version,
        name=snap.name,
        fields=[FormFieldSpec.model_validate(f) for f in snap.fields],
        created=datetime_to_nanos(snap.created_at),
    )


def get_form_or_404(db: Session, form_id: str) -> FormDefinition:
    form = db.get(FormDefinition, form_id)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form definition not found")
    return form


def get_version_or_404(db: Session, form_id: str, version: int) -> FormDefinitionVersion:
    snap = (
        db.query(FormDefinitionVersion)
        .filter(
            FormDefinitionVersion.form_definition_id == form_id,
            FormDefinitionVersion.version == version,
        )
        .one_or_none()
    )
    if not snap:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form definition version not found")
    return snap


def definition_at_version(db: Session, form: FormDefinition, version: int | None) -> FormDefinitionOut:
    """
    The definition as it was at ``version`` (current one if None).
    Older versions come from their snapshot; id/creator/timestamps stay current.
    """
    current = form_out(form)
    if version is None or version == form.version:
        return current
    if version > form.version:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Unknown form version", "current": form.version, "got": version},
        )

    snap = get_version_or_404(db, form.id, version)
    past = version_out(snap)
    return current.model_copy(update={"version": past.version, "name": past.name, "fields": past.fields})


def replace_fields(db: Session, form: FormDefinition, fields: list[FormFieldSpec]) -> None:
    # flush the deletes first so (form, position) / (form, key) stay unique
    form.fields.clear()
    db.flush()

    for idx, spec in enumerate(fields, start=1):
        wire = field_to_wire(spec)
        form.fields.append(
            FormField(
                field_key=spec.id,
                position=idx,
                field_label=spec.field_label,
                field_type=spec.field_type.value,
                validations=wire.get("validations"),
                options=wire.get("options"),
                master_list_ref=spec.master_list_ref,
            )
        )
    db.flush()


def claim_next_version(db: Session, form: FormDefinition) -> int:
    """
    Move ``form`` from the version it was loaded at to the next one in a single
    conditional UPDATE. A concurrent edit that got there first is a 409.
    """
    read = form.version
    result = db.execute(
        update(FormDefinition)
        .where(FormDefinition.id == form.id, FormDefinition.version == read)
        .values(version=read + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Form definition was changed by someone else", "got": read},
        )
    set_committed_value(form, "version", read + 1)
    return read + 1


def snapshot(db: Session, form: FormDefinition, fields: list[FormFieldSpec]) -> FormDefinitionVersion:
    snap = FormDefinitionVersion(
        form_definition_id=form.id,
        version=form.version,
        name=form.name,
        fields=[field_to_wire(f) for f in fields],
    )
    db.add(snap)
    return snap


def fields_changed(form: FormDefinition, fields: list[FormFieldSpec]) -> bool:
    current = [field_to_wire(field_from_row(r)) for r in form.fields]
    return current != [field_to_wire(f) for f in fields]
