from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskforms.core.rbac import ADMIN, effective_roles
from taskforms.core.security import get_current_user
from taskforms.db.session import get_db
from taskforms.models.user import User
from taskforms.schemas.user import PrincipalOut

router = APIRouter(tags=["auth"])


@router.get("/me", response_model=PrincipalOut)
def me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Caller identity; ``principal`` is what creator / submittedBy are stamped with."""
    roles = effective_roles(db, current_user)
    return PrincipalOut(
        principal=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        department=current_user.department,
        is_admin=ADMIN in roles,
        roles=sorted(roles),
    )
