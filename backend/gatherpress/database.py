"""SQLAlchemy engine, session factory and declarative base."""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from gatherpress.config import settings
from gatherpress.exceptions import StorageError

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a session and always closes it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db, description: str):
    """Roll back and re-raise any SQLAlchemy failure as ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure: %s", description)
        raise StorageError(f"Could not {description}") from exc
