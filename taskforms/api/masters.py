from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskforms.core.audit import log_event
from taskforms.core.lookups import get_options_or_404
from taskforms.core.rbac import ADMIN, require_roles
from taskforms.core.security import get_current_user
from taskforms.core.timestamps import datetime_to_nanos, utcnow
from taskforms.db.session import get_db
from taskforms.models.master import FixedMasterEntry, MasterList
from taskforms.models.user import User
from taskforms.schemas.masters import (
    FixedMasterCreate,
    FixedMasterOut,
    FixedMasterType,
    LookupOption,
    MasterListCreate,
    MasterListItem,
    MasterListOut,
)

router = APIRouter(tags=["masters"])


def _list_out(ml: MasterList) -> MasterListOut:
    return MasterListOut(
        id=ml.id,
        name=ml.name,
        items=[MasterListItem.model_validate(i) for i in ml.items],
        created=datetime_to_nanos(ml.created_at),
        last_updated=datetime_to_nanos(ml.updated_at),
    )


def _entry_out(e: FixedMasterEntry) -> FixedMasterOut:
    return FixedMasterOut(
        id=e.id,
        master_type=e.master_type,
        name=e.name,
        created=datetime_to_nanos(e.created_at),
        last_updated=datetime_to_nanos(e.updated_at),
    )


def _items_json(items: list[MasterListItem]) -> list[dict]:
    values = [i.value for i in items]
    if len(set(values)) != len(values):
        raise HTTPException(status_code=400, detail="Duplicate item values in master list")
    return [i.model_dump(by_alias=True) for i in items]


def _get_list_or_404(db: Session, list_id: str) -> MasterList:
    ml = db.get(MasterList, list_id)
    if not ml:
        raise HTTPException(status_code=404, detail="Master list not found")
    return ml


@router.get("/masters/lists", response_model=list[MasterListOut])
def list_master_lists(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    rows = db.query(MasterList).order_by(MasterList.name.asc()).all()
    return [_list_out(r) for r in rows]


@router.post("/masters/lists", response_model=MasterListOut, status_code=status.HTTP_201_CREATED)
def create_master_list(
    payload: MasterListCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    now = utcnow()
    ml = MasterList(name=payload.name, items=_items_json(payload.items), created_at=now, updated_at=now)
    db.add(ml)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Master list name already exists")

    log_event(
        db=db,
        actor=current_user,
        action="MASTER_LIST_CREATED",
        entity_type="master_list",
        entity_id=ml.id,
        metadata={"name": ml.name, "item_count": len(payload.items)},
    )

    db.commit()
    db.refresh(ml)
    return _list_out(ml)


@router.get("/masters/lists/{list_id}", response_model=MasterListOut)
def get_master_list(
    list_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return _list_out(_get_list_or_404(db, list_id))


@router.put("/masters/lists/{list_id}", response_model=MasterListOut)
def update_master_list(
    list_id: str,
    payload: MasterListCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    ml = _get_list_or_404(db, list_id)
    ml.name = payload.name
    ml.items = _items_json(payload.items)
    ml.updated_at = utcnow()
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Master list name already exists")

    log_event(
        db=db,
        actor=current_user,
        action="MASTER_LIST_UPDATED",
        entity_type="master_list",
        entity_id=ml.id,
        metadata={"name": ml.name, "item_count": len(payload.items)},
    )

    db.commit()
    db.refresh(ml)
    return _list_out(ml)


@router.delete("/masters/lists/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_master_list(
    list_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    ml = _get_list_or_404(db, list_id)
    log_event(
        db=db,
        actor=current_user,
        action="MASTER_LIST_DELETED",
        entity_type="master_list",
        entity_id=ml.id,
        metadata={"name": ml.name},
    )
    db.delete(ml)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/masters/{master_type}", response_model=list[FixedMasterOut])
def list_fixed_master(
    master_type: FixedMasterType,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    rows = (
        db.query(FixedMasterEntry)
        .filter(FixedMasterEntry.master_type == master_type)
        .order_by(FixedMasterEntry.name.asc())
        .all()
    )
    return [_entry_out(r) for r in rows]


@router.post("/masters/{master_type}", response_model=FixedMasterOut, status_code=status.HTTP_201_CREATED)
def create_fixed_master_entry(
    master_type: FixedMasterType,
    payload: FixedMasterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    now = utcnow()
    entry = FixedMasterEntry(master_type=master_type, name=payload.name, created_at=now, updated_at=now)
    db.add(entry)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"{master_type} entry already exists")

    log_event(
        db=db,
        actor=current_user,
        action="MASTER_ENTRY_CREATED",
        entity_type=master_type,
        entity_id=entry.id,
        metadata={"name": entry.name},
    )

    db.commit()
    db.refresh(entry)
    return _entry_out(entry)


@router.delete("/masters/{master_type}/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fixed_master_entry(
    master_type: FixedMasterType,
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    entry = db.get(FixedMasterEntry, entry_id)
    if not entry or entry.master_type != master_type:
        raise HTTPException(status_code=404, detail=f"{master_type} entry not found")

    log_event(
        db=db,
        actor=current_user,
        action="MASTER_ENTRY_DELETED",
        entity_type=master_type,
        entity_id=entry.id,
        metadata={"name": entry.name},
    )
    db.delete(entry)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/lookups/{ref}", response_model=list[LookupOption])
def lookup_options(
    ref: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """Options for a field's masterListRef: a fixed master name or a master list id."""
    return get_options_or_404(db, ref)
