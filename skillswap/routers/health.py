"""Health check router."""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.database_client import get_db

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """Always answers; reports whether the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        database = f"disconnected: {str(e)[:80]}"

    return {
        "status": "ok",
        "message": "SkillSwap API is running",
        "database": database,
        "timestamp": datetime.utcnow().isoformat(),
    }
