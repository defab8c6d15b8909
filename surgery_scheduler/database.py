"""Database setup (SQLite by default). The engine is created on first use."""
from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import get_settings

Base = declarative_base()

# Bound by get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def make_engine(url: str):
    kwargs = {"echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty DB
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.split("///", 1)[-1]).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, **kwargs)


def init_db(bind) -> None:
    from . import tables  # noqa: F401  registers models on Base
    Base.metadata.create_all(bind=bind)


@lru_cache
def get_engine():
    """Engine for the configured database; binds SessionLocal and creates tables."""
    engine = make_engine(get_settings().db_url)
    SessionLocal.configure(bind=engine)
    init_db(engine)
    return engine
