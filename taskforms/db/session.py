from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taskforms.core.config import settings


def make_engine(url: str = settings.DATABASE_URL, echo: bool = settings.SQL_ECHO):
    if url.startswith("sqlite"):
        # sync handlers run in FastAPI's threadpool
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = make_engine()

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db():
    """One session per request: committed if the handler returns, rolled back if it raises."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
