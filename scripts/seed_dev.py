# seed_dev.py
from sqlalchemy.orm import Session

from taskforms.core.form_definitions import replace_fields, snapshot
from taskforms.core.normalizer import normalize_form_definition
from taskforms.core.rbac import ADMIN, GUEST, USER
from taskforms.db.session import SessionLocal
from taskforms.models.form_definition import FormDefinition
from taskforms.models.master import FixedMasterEntry, MasterList
from taskforms.models.rbac import Role, UserRole
from taskforms.models.task import Task, TaskFormAttachment
from taskforms.models.user import User
from taskforms.schemas.forms import FormDefinitionCreate


# ---------- helpers: RBAC ----------

def get_or_create_role(db: Session, name: str) -> Role:
    r = db.query(Role).filter(Role.name == name).one_or_none()
    if r:
        return r
    r = Role(name=name)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def get_or_create_user(db: Session, email: str, full_name: str, department: str | None = None) -> User:
    u = db.query(User).filter(User.email == email).one_or_none()
    if u:
        # keep these up to date in dev
        changed = False
        if u.full_name != full_name:
            u.full_name = full_name
            changed = True
        if u.department != department:
            u.department = department
            changed = True
        if not u.is_active:
            u.is_active = True
            changed = True
        if changed:
            db.commit()
            db.refresh(u)
        return u

    u = User(email=email, full_name=full_name, department=department, is_active=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def ensure_user_role(db: Session, user_id: str, role_id: str) -> UserRole:
    ur = (
        db.query(UserRole)
        .filter(UserRole.user_id == user_id, UserRole.role_id == role_id)
        .one_or_none()
    )
    if ur:
        return ur
    ur = UserRole(user_id=user_id, role_id=role_id)
    db.add(ur)
    db.commit()
    return ur


# ---------- helpers: masters ----------

FIXED_MASTERS = {
    "departments": ["Finance", "Operations", "People"],
    "categories": ["Onboarding", "Compliance"],
    "statuses": ["open", "in progress", "done"],
    "priorities": ["low", "medium", "high"],
    "taskTypes": ["checklist", "request"],
}


def ensure_fixed_masters(db: Session) -> None:
    for master_type, names in FIXED_MASTERS.items():
        existing = {
            e.name
            for e in db.query(FixedMasterEntry).filter(FixedMasterEntry.master_type == master_type).all()
        }
        for name in names:
            if name not in existing:
                db.add(FixedMasterEntry(master_type=master_type, name=name))
    db.commit()


def get_or_create_master_list(db: Session, name: str, items: list[dict]) -> MasterList:
    ml = db.query(MasterList).filter(MasterList.name == name).one_or_none()
    if ml:
        return ml
    ml = MasterList(name=name, items=items)
    db.add(ml)
    db.commit()
    db.refresh(ml)
    return ml


# ---------- helpers: forms / tasks ----------

def get_or_create_form(db: Session, creator: User, payload: FormDefinitionCreate) -> FormDefinition:
    form = db.query(FormDefinition).filter(FormDefinition.name == payload.name).one_or_none()
    if form:
        return form

    payload = normalize_form_definition(payload)
    form = FormDefinition(name=payload.name, version=1, creator_user_id=creator.id)
    db.add(form)
    db.flush()
    replace_fields(db, form, payload.fields)
    snapshot(db, form, payload.fields)
    db.commit()
    db.refresh(form)
    return form


def get_or_create_task(db: Session, title: str, owner: User, form: FormDefinition) -> Task:
    t = db.query(Task).filter(Task.title == title, Task.owner_user_id == owner.id).one_or_none()
    if t:
        return t
    t = Task(title=title, task_type="checklist", priority="medium", status="open", owner_user_id=owner.id)
    t.attached_forms.append(TaskFormAttachment(form_definition_id=form.id, position=1))
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def main():
    db = SessionLocal()
    try:
        admin_role = get_or_create_role(db, ADMIN)
        user_role = get_or_create_role(db, USER)
        get_or_create_role(db, GUEST)

        admin = get_or_create_user(db, "admin@local.test", "Admin Local", department="Operations")
        alice = get_or_create_user(db, "alice@local.test", "Alice Example", department="Finance")
        ensure_user_role(db, admin.id, admin_role.id)
        ensure_user_role(db, alice.id, user_role.id)

        ensure_fixed_masters(db)
        regions = get_or_create_master_list(
            db,
            "Regions",
            [
                {"value": "eu", "itemLabel": "Europe"},
                {"value": "na", "itemLabel": "North America"},
                {"value": "apac", "itemLabel": "Asia Pacific"},
            ],
        )

        form = get_or_create_form(
            db,
            admin,
            FormDefinitionCreate.model_validate(
                {
                    "name": "Expense claim",
                    "fields": [
                        {
                            "id": "summary",
                            "fieldLabel": "Summary",
                            "fieldType": "Single line",
                            "validations": {"required": True, "minLength": 3, "maxLength": 80},
                        },
                        {
                            "id": "amount",
                            "fieldLabel": "Amount",
                            "fieldType": "Number",
                            "validations": {"required": True, "minValue": 1},
                        },
                        {"id": "spent_on", "fieldLabel": "Date", "fieldType": "Date"},
                        {
                            "id": "region",
                            "fieldLabel": "Region",
                            "fieldType": "Dropdown",
                            "masterListRef": regions.id,
                        },
                        {"id": "receipt", "fieldLabel": "Receipt", "fieldType": "File upload"},
                    ],
                }
            ),
        )
        task = get_or_create_task(db, "Submit Q3 expenses", alice, form)

        print("Seeded users:", admin.email, alice.email)
        print("Seeded form:", form.id, form.name, f"v{form.version}")
        print("Seeded task:", task.id, task.title)
    finally:
        db.close()


if __name__ == "__main__":
    main()
