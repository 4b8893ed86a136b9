"""
Health check: process is up and the database answers.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medlegal.core.config import settings
from medlegal.core.logger import logger
from medlegal.db.database import get_db

router = APIRouter()


@router.get("")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        database = "error"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "app": settings.APP_NAME,
        "database": database,
    }
