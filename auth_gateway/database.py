"""
Database engine and session for the client registry. SQLite for development and tests,
any SQLAlchemy URL (e.g. PostgreSQL) in deployment.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth_gateway.config import DATABASE_CONNECT_TIMEOUT_SECONDS, DATABASE_URL
from auth_gateway.models import Base

# SQLite: in-memory needs StaticPool so all connections share the same DB (for tests)
# SQLite needs check_same_thread=False because seeding runs in the threadpool
if DATABASE_URL.startswith("sqlite:///:memory:"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif "sqlite" in DATABASE_URL:
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False, "timeout": DATABASE_CONNECT_TIMEOUT_SECONDS},
    )
else:
    engine = create_engine(
        DATABASE_URL,
        connect_args={"connect_timeout": DATABASE_CONNECT_TIMEOUT_SECONDS},
        pool_timeout=DATABASE_CONNECT_TIMEOUT_SECONDS,
        pool_pre_ping=True,
    )
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create all tables."""
    Base.metadata.create_all(bind=engine)
