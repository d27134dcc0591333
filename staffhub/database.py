"""
Database connection and session management.
Uses synchronous SQLAlchemy; one session (and one transaction) per request.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from staffhub.config import get_settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine for the given URL.

    In-memory SQLite needs a single shared connection, otherwise every
    checkout would see an empty database.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        echo=echo,  # Log SQL when DEBUG=true
        pool_pre_ping=True,  # Verify connections before use
    )


# Create engine (synchronous)
settings = get_settings()
engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @router.post("/import")
        def run_import(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
