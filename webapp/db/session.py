"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from webapp.core.config import get_settings
from webapp.core.errors import ConflictError, InternalError

logger = logging.getLogger(__name__)

Base = declarative_base()


@lru_cache
def get_engine():
    settings = get_settings()
    url = (settings.database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    kwargs = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


@lru_cache
def _get_sessionmaker():
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session; roll back and translate storage failures on error.

    Unique-constraint violations surface as ConflictError, anything else raised
    by SQLAlchemy as InternalError.
    """
    session: Session = _get_sessionmaker()()
    try:
        yield session
    except IntegrityError as exc:
        session.rollback()
        logger.warning("DB integrity error: %s", exc.orig)
        raise ConflictError("Integrity constraint violated") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("DB error: %s", exc)
        raise InternalError("Database operation failed", "database") from exc
    finally:
        session.close()


def init_db() -> None:
    """Create missing tables for every registered model."""
    from . import models  # noqa: F401  # ensure models are imported for metadata

    Base.metadata.create_all(bind=get_engine())
