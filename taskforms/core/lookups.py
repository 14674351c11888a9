from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from taskforms.models.master import FIXED_MASTER_TYPES, FixedMasterEntry, MasterList
from taskforms.schemas.forms import FieldOption, FormDefinitionOut
from taskforms.schemas.masters import LookupOption

logger = logging.getLogger(__name__)


def find_options(db: Session, ref: str) -> list[LookupOption] | None:
    """
    Options behind a masterListRef: a fixed master name ("departments", ...)
    or a master list id. None if the reference does not resolve.
    """
    ref = ref.strip()
    if ref in FIXED_MASTER_TYPES:
        rows = (
            db.query(FixedMasterEntry)
            .filter(FixedMasterEntry.master_type == ref)
            .order_by(FixedMasterEntry.name.asc())
            .all()
        )
        return [LookupOption(value=r.id, label=r.name) for r in rows]

    ml = db.get(MasterList, ref)
    if ml is None:
        return None
    return [LookupOption(value=i["value"], label=i["itemLabel"]) for i in ml.items]


def get_options_or_404(db: Session, ref: str) -> list[LookupOption]:
    options = find_options(db, ref)
    if options is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Master list not found")
    return options


def with_resolved_options(db: Session, definition: FormDefinitionOut) -> FormDefinitionOut:
    """
    Copy of ``definition`` where choice fields that only carry a masterListRef
    get that list's options, so submitted choices can be checked against them.
    """
    fields = []
    for f in definition.fields:
        if f.master_list_ref and not f.options:
            found = find_options(db, f.master_list_ref)
            if found is None:
                logger.warning(
                    "Form %s field %s references unknown master list %r",
                    definition.id, f.id, f.master_list_ref,
                )
            elif found:
                f = f.model_copy(
                    update={"options": [FieldOption(value=o.value, field_label=o.label) for o in found]}
                )
        fields.append(f)
    return definition.model_copy(update={"fields": fields})
