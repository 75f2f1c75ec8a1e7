"""Database session and engine."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from oxytree.utils.config import settings


class Base(DeclarativeBase):
    pass


def create_tables(bind: Engine) -> None:
    # Tables must be registered on Base before create_all.
    import oxytree.db_models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def make_session_factory(database_url: str):
    engine = create_engine(database_url, pool_pre_ping=True)
    create_tables(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
