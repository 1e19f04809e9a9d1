"""Database configuration, session management and schema setup for the approvals store."""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# PostgreSQL in production (DATABASE_URL), a local SQLite file otherwise
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./approvals.db")

# Render/Heroku hand out postgres:// but SQLAlchemy needs postgresql://
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# DB_ECHO=1 logs every SQL statement
SQLALCHEMY_ECHO = os.getenv("DB_ECHO", "0").lower() in ("1", "true", "yes")


def make_engine(url: str = SQLALCHEMY_DATABASE_URL):
    """SQLite needs cross-thread access for FastAPI's threadpool; Postgres gets a small pool."""
    if url.startswith("sqlite"):
        return create_engine(url, echo=SQLALCHEMY_ECHO, connect_args={"check_same_thread": False})
    return create_engine(url, echo=SQLALCHEMY_ECHO, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = make_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    """
    Create the approvals tables (users, auth records, protected entities,
    deletion requests, audit log) on `bind`, the application engine by default.
    """
    # Imported here so every model is registered on Base before create_all
    from app.models import audit, deletion, domain  # noqa: F401

    Base.metadata.create_all(bind=bind if bind is not None else engine)


def get_db():
    """Dependency for FastAPI endpoints to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
