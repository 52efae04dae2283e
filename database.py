"""SQLAlchemy engine, session factory and declarative base."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

import config
from logging_config import get_logger

logger = get_logger("database")


def _engine_options(url: str) -> dict:
    options = {"echo": config.SQL_ECHO}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        # In-memory databases live on a single connection.
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
    return options


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

logger.info("Connecting to: %s", engine.url.render_as_string(hide_password=True))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency function that provides a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
