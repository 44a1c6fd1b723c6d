from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bizdir.core.config import settings
from bizdir.db.base import Base

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables (development and seeding; production uses alembic)."""
    import bizdir.models  # noqa: F401  registers mappers on Base.metadata

    Base.metadata.create_all(bind=engine)
