import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ["THEME_DB_URL"] = "sqlite://"

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from podabio_theme.accessor import ThemeAccessor
from podabio_theme.cache import ThemeCache
from podabio_theme.models import Base
from podabio_theme.repository import ThemeSchema

LEGACY_THEMES_DDL = """
CREATE TABLE themes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER,
    name VARCHAR(100) NOT NULL,
    colors TEXT,
    fonts TEXT,
    page_background TEXT,
    widget_background TEXT,
    widget_border_color TEXT,
    page_primary_font VARCHAR(100),
    page_secondary_font VARCHAR(100),
    widget_styles TEXT,
    spatial_effect VARCHAR(20),
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


def _memory_engine():
    return create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def session_factory():
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    try:
        yield TestingSessionLocal
    finally:
        engine.dispose()


@pytest.fixture()
def accessor(session_factory) -> ThemeAccessor:
    return ThemeAccessor(session_factory=session_factory, cache=ThemeCache(), schema=ThemeSchema())


@pytest.fixture()
def legacy_session_factory():
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(text(LEGACY_THEMES_DDL))
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    try:
        yield TestingSessionLocal
    finally:
        engine.dispose()


@pytest.fixture()
def legacy_accessor(legacy_session_factory) -> ThemeAccessor:
    return ThemeAccessor(session_factory=legacy_session_factory, cache=ThemeCache(), schema=ThemeSchema())
