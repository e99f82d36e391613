"""
Database connection and session management.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from authz.core.config import settings

# Create declarative base for models
Base = declarative_base()


def _engine_kwargs(database_url: str) -> dict:
    """Pool options for server databases; SQLite gets a single shared connection."""
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
            "echo": settings.database_echo,
        }
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_timeout": settings.database_pool_timeout,
        "pool_recycle": settings.database_pool_recycle,
        "echo": settings.database_echo,
    }


DATABASE_URL = settings.database_url

engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency functions
def get_db():
    """Get database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Database initialization
def init_db(bind=None):
    """Initialize database tables."""
    # Register the ORM tables on Base.metadata
    import authz.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
