from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from taskforms.core.config import settings
from taskforms.db.session import get_db

router = APIRouter()


@router.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }


@router.get("/health", tags=["health"])
def health(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the database."""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": db.get_bind().dialect.name}
