from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskforms.core.security import get_current_user
from taskforms.db.session import get_db
from taskforms.models.rbac import Role, UserRole
from taskforms.models.user import User

ADMIN = "ADMIN"
USER = "USER"
GUEST = "GUEST"


def get_user_role_names(db: Session, user: User) -> set[str]:
    rows = (
        db.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id)
        .all()
    )
    return {r[0] for r in rows}


def effective_roles(db: Session, user: User) -> set[str]:
    """Granted roles, plus ADMIN for users flagged ``is_admin``."""
    roles = get_user_role_names(db, user)
    if user.is_admin:
        roles.add(ADMIN)
    return roles


def is_admin(db: Session, user: User) -> bool:
    return ADMIN in effective_roles(db, user)


def require_roles(*required: str):
    """
    Usage:
      Depends(require_roles(ADMIN))
      Depends(require_roles(ADMIN, USER))  # any-of
    """
    required_set = set(required)

    def _dep(
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user),
    ) -> User:
        if not (effective_roles(db, user) & required_set):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden. Requires one of: {sorted(required_set)}",
            )
        return user

    return _dep
