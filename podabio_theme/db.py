from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from podabio_theme.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.THEME_DB_URL,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.THEME_DB_URL),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def init_db() -> None:
    from podabio_theme.models import Base

    Base.metadata.create_all(bind=engine)


def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope(session_factory=SessionLocal) -> Iterator[Session]:
    """Provide a session for one unit of store work and always close it."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
