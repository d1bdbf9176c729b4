from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# JSON-valued columns are stored as encoded text so legacy rows may hold malformed values.
JSON_COLUMNS = (
    "colors",
    "fonts",
    "widget_styles",
    "color_tokens",
    "typography_tokens",
    "spacing_tokens",
    "shape_tokens",
    "motion_tokens",
    "iconography_tokens",
    "categories",
    "tags",
)

TOKEN_COLUMNS = (
    "color_tokens",
    "typography_tokens",
    "spacing_tokens",
    "shape_tokens",
    "motion_tokens",
    "iconography_tokens",
)


class Theme(Base):
    __tablename__ = "themes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    colors: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fonts: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    page_background: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    widget_background: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    widget_border_color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    page_primary_font: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    page_secondary_font: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    widget_primary_font: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    widget_secondary_font: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    widget_styles: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    spatial_effect: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    color_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    typography_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    spacing_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    shape_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    motion_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    iconography_tokens: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    layout_density: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    categories: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
