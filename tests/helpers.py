from sqlalchemy.orm import Session

from taskforms.core.form_definitions import replace_fields, snapshot
from taskforms.core.normalizer import normalize_form_definition
from taskforms.models.form_definition import FormDefinition
from taskforms.models.master import FixedMasterEntry, MasterList
from taskforms.models.rbac import Role, UserRole
from taskforms.models.task import Task, TaskFormAttachment
from taskforms.models.user import User
from taskforms.schemas.forms import FormDefinitionCreate


def headers(user: User | str) -> dict[str, str]:
    email = user if isinstance(user, str) else user.email
    return {"X-User-Email": email}


def ensure_role(db, name: str) -> Role:
    r = db.query(Role).filter(Role.name == name).one_or_none()
    if r:
        return r
    r = Role(name=name)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def create_user(db, email: str, full_name="User", is_admin=False, department=None) -> User:
    u = User(email=email, full_name=full_name, is_active=True, is_admin=is_admin, department=department)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def grant_role(db, user: User, role_name: str):
    role = ensure_role(db, role_name)
    exists = db.query(UserRole).filter(UserRole.user_id == user.id, UserRole.role_id == role.id).one_or_none()
    if not exists:
        db.add(UserRole(user_id=user.id, role_id=role.id))
        db.commit()


def create_admin(db, email: str = "admin@test.com") -> User:
    u = create_user(db, email, full_name="Admin")
    grant_role(db, u, "ADMIN")
    return u


def field(id: str, field_type: str = "singleLine", label: str | None = None, **extra) -> dict:
    """Wire-shaped form field dict."""
    f = {"id": id, "fieldLabel": label or id.title(), "fieldType": field_type}
    f.update(extra)
    return f


def create_form_definition(
    db: Session,
    *,
    creator: User,
    name: str = "Test Form",
    fields: list[dict] | None = None,
) -> FormDefinition:
    payload = normalize_form_definition(
        FormDefinitionCreate.model_validate({"name": name, "fields": fields or []})
    )
    form = FormDefinition(name=payload.name, version=1, creator_user_id=creator.id)
    db.add(form)
    db.flush()
    replace_fields(db, form, payload.fields)
    snapshot(db, form, payload.fields)
    db.commit()
    db.refresh(form)
    return form


def create_task(
    db: Session,
    *,
    owner: User,
    forms: list[FormDefinition] = (),
    title: str = "Task",
) -> Task:
    t = Task(title=title, task_type="checklist", priority="medium", status="open", owner_user_id=owner.id)
    for idx, form in enumerate(forms, start=1):
        t.attached_forms.append(TaskFormAttachment(form_definition_id=form.id, position=idx))
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def create_master_list(db: Session, name: str, items: list[tuple[str, str]]) -> MasterList:
    ml = MasterList(name=name, items=[{"value": v, "itemLabel": label} for v, label in items])
    db.add(ml)
    db.commit()
    db.refresh(ml)
    return ml


def create_fixed_master(db: Session, master_type: str, name: str) -> FixedMasterEntry:
    e = FixedMasterEntry(master_type=master_type, name=name)
    db.add(e)
    db.commit()
    db.refresh(e)
    return e
