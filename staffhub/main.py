"""
StaffHub import service - FastAPI Application Entry Point
"""

import logging

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffhub.config import get_settings
from staffhub.database import get_db
from staffhub.routers import imports

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title="StaffHub",
    description="Bulk data import engine for staffing data",
    version="0.1.0",
    debug=settings.debug,
)

# Include routers
app.include_router(imports.router)


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint that also verifies database connection.
    """
    try:
        db.execute(text("SELECT 1")).fetchone()
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy",
        "database": db_status,
        "debug": settings.debug,
    }
