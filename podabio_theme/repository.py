from __future__ import annotations

import threading
from typing import Any, Optional

from sqlalchemy import delete, func, insert, inspect, select, update
from sqlalchemy.orm import Session

from podabio_theme.models import Theme

THEMES_TABLE = Theme.__tablename__


class ThemeSchema:
    """Column names the live ``themes`` table actually has.

    Older databases may predate the token columns. Introspection runs once per
    instance until ``clear`` is called.
    """

    def __init__(self) -> None:
        self._columns: Optional[frozenset[str]] = None
        self._lock = threading.Lock()

    def columns(self, session: Session) -> frozenset[str]:
        with self._lock:
            if self._columns is None:
                inspector = inspect(session.get_bind())
                live = {column["name"] for column in inspector.get_columns(THEMES_TABLE)}
                self._columns = frozenset(live & set(Theme.__table__.c.keys()))
            return self._columns

    def has_column(self, session: Session, name: str) -> bool:
        return name in self.columns(session)

    def clear(self) -> None:
        with self._lock:
            self._columns = None


class ThemesRepository:
    def __init__(self, session: Session, schema: ThemeSchema) -> None:
        self.session = session
        self.schema = schema

    def _selectable(self):
        available = self.schema.columns(self.session)
        table = Theme.__table__
        return select(*[column for column in table.c if column.name in available])

    def _filter(self, values: dict[str, Any]) -> dict[str, Any]:
        available = self.schema.columns(self.session)
        return {key: value for key, value in values.items() if key in available}

    def get(self, theme_id: int, *, active_only: bool = False) -> Optional[dict[str, Any]]:
        stmt = self._selectable().where(Theme.__table__.c.id == theme_id)
        if active_only and self.schema.has_column(self.session, "is_active"):
            stmt = stmt.where(Theme.__table__.c.is_active.is_(True))
        row = self.session.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def get_owned(self, theme_id: int, user_id: int) -> Optional[dict[str, Any]]:
        stmt = self._selectable().where(
            Theme.__table__.c.id == theme_id,
            Theme.__table__.c.user_id == user_id,
        )
        row = self.session.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def list(
        self,
        *,
        user_id: Optional[int] = None,
        system_only: bool = False,
        active_only: bool = True,
    ) -> list[dict[str, Any]]:
        table = Theme.__table__
        stmt = self._selectable()
        if system_only:
            stmt = stmt.where(table.c.user_id.is_(None))
        elif user_id is not None:
            stmt = stmt.where(table.c.user_id == user_id)
        if active_only and self.schema.has_column(self.session, "is_active"):
            stmt = stmt.where(table.c.is_active.is_(True))
        stmt = stmt.order_by(table.c.name.asc(), table.c.id.asc())
        return [dict(row) for row in self.session.execute(stmt).mappings().all()]

    def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Theme.__table__).where(Theme.__table__.c.user_id == user_id)
        return int(self.session.execute(stmt).scalar_one())

    def insert(self, values: dict[str, Any]) -> int:
        result = self.session.execute(insert(Theme.__table__).values(**self._filter(values)))
        self.session.commit()
        return int(result.inserted_primary_key[0])

    def update(self, theme_id: int, values: dict[str, Any]) -> bool:
        filtered = self._filter(values)
        if not filtered:
            return False
        result = self.session.execute(
            update(Theme.__table__).where(Theme.__table__.c.id == theme_id).values(**filtered)
        )
        self.session.commit()
        return result.rowcount > 0

    def delete(self, theme_id: int, user_id: Optional[int] = None) -> bool:
        stmt = delete(Theme.__table__).where(Theme.__table__.c.id == theme_id)
        if user_id is not None:
            stmt = stmt.where(Theme.__table__.c.user_id == user_id)
        result = self.session.execute(stmt)
        self.session.commit()
        return result.rowcount > 0
