import logging

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from taskforms.db.session import get_db
from taskforms.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_current_user(
    x_user_email: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """
    DEV AUTH: the X-User-Email header names the caller.
    The resolved user's id is the principal stamped on definitions and submissions.
    """
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Email header (dev auth)",
        )

    email = normalize_email(x_user_email)
    user = db.query(User).filter(func.lower(User.email) == email).one_or_none()
    if not user or not user.is_active:
        logger.info("Rejected caller %r", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")
    return user
