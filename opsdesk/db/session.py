"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from opsdesk.core.config import settings
from opsdesk.db.base import Base
import opsdesk.models  # noqa: F401  (registers tables on Base.metadata)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    # FastAPI runs sync endpoints in a threadpool
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

# Create all tables automatically on startup for SQLite
if _is_sqlite:
    Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
