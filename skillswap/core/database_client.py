from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from typing import Generator
import logging

from .config import DATABASE_URL

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

SQLALCHEMY_DATABASE_URL = DATABASE_URL

# Create the SQLAlchemy engine.
# 'pool_pre_ping=True' keeps long-lived pooled connections usable.
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    pool_pre_ping=True
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator:
    """
    Dependency generator for database sessions.
    This function creates a new session for each request and closes it afterwards.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_rollback(db: Session, action: str) -> None:
    """
    Commit the current unit of work.

    On a persistence error the session is rolled back, the failure is logged
    and the exception propagates to the application's error handlers.
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error {action}: {e}")
        raise
