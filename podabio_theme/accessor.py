from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from podabio_theme import color_math
from podabio_theme.background import Background
from podabio_theme.cache import ThemeCache
from podabio_theme.config import settings
from podabio_theme.db import SessionLocal, session_scope
from podabio_theme.errors import (
    ThemeError,
    ThemeLimitExceededError,
    ThemeNotFoundError,
    ThemePersistenceError,
    ThemeValidationError,
)
from podabio_theme.legacy import project_legacy_colors, should_apply_legacy_colors
from podabio_theme.models import JSON_COLUMNS, TOKEN_COLUMNS
from podabio_theme.repository import ThemeSchema, ThemesRepository
from podabio_theme.schemas import (
    FontPair,
    ResolvedTheme,
    ThemeColors,
    ThemeData,
    ThemeOperationResult,
    ThemeTokens,
)
from podabio_theme.spacing import resolve_density, resolve_spacing
from podabio_theme.token_defaults import (
    default_color_tokens,
    default_iconography_tokens,
    default_motion_tokens,
    default_shape_tokens,
    default_spacing_tokens,
    default_typography_tokens,
)
from podabio_theme.token_merger import get_token, merge_tokens, parse_json_column
from podabio_theme import widget_styles as widget_style_rules

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

SPATIAL_EFFECTS = ("none", "glass", "depth", "floating", "tilt")
GOOGLE_FONTS_BASE_URL = "https://fonts.googleapis.com/css2"
GOOGLE_FONTS_WEIGHTS = "wght@400;600;700"

_CLONE_FIELDS = (
    "colors",
    "fonts",
    "page_background",
    "widget_background",
    "widget_border_color",
    "page_primary_font",
    "page_secondary_font",
    "widget_primary_font",
    "widget_secondary_font",
    "widget_styles",
    "spatial_effect",
    *TOKEN_COLUMNS,
    "layout_density",
    "categories",
    "tags",
)
_CLEARABLE_FIELDS = ("page_background", "widget_background")
_LEGACY_COLOR_KEYS = ("primary", "secondary", "accent")


def _text(record: Optional[Record], key: str) -> Optional[str]:
    if not record:
        return None
    value = record.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first(*candidates: Any) -> Optional[str]:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _json(record: Optional[Record], column: str) -> dict[str, Any]:
    if not record:
        return {}
    return parse_json_column(record.get(column), column=column)


def _decodes_to_container(value: Any, *, allow_null: bool) -> bool:
    if isinstance(value, (dict, list)):
        return True
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return False
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError:
        return False
    if decoded is None:
        return allow_null
    return isinstance(decoded, (dict, list))


def _encode_json(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


class ThemeAccessor:
    """Resolves page and theme records into a ResolvedTheme and manages user themes.

    Every getter takes ``(page, theme=None)``. When ``theme`` is omitted and the
    page names a ``theme_id``, the theme is loaded through the id cache. Values
    resolve per field: page, then theme, then a computed default.
    """

    def __init__(
        self,
        session_factory=SessionLocal,
        cache: Optional[ThemeCache] = None,
        schema: Optional[ThemeSchema] = None,
    ) -> None:
        self.session_factory = session_factory
        self.cache = cache if cache is not None else ThemeCache()
        self.schema = schema if schema is not None else ThemeSchema()

    @contextmanager
    def _repository(self, action: str) -> Iterator[ThemesRepository]:
        with session_scope(self.session_factory) as session:
            try:
                yield ThemesRepository(session, self.schema)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("theme.store_failed", extra={"action": action})
                raise ThemePersistenceError(f"Failed to {action} theme: {exc}") from exc

    # Reads

    def get_theme(self, theme_id: Any) -> Optional[dict[str, Any]]:
        try:
            key = int(theme_id)
        except (TypeError, ValueError):
            return None
        try:
            with self._repository("load") as repo:
                record = repo.get(key, active_only=True)
        except ThemePersistenceError:
            return None
        if record is None or not self.validate_theme(record):
            return None
        return record

    def get_cached_theme(self, theme_id: Any) -> Optional[dict[str, Any]]:
        try:
            key = int(theme_id)
        except (TypeError, ValueError):
            return None
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        record = self.get_theme(key)
        if record is not None:
            self.cache.set(key, record)
        return record

    def _list_themes(self, **filters: Any) -> list[dict[str, Any]]:
        try:
            with self._repository("list") as repo:
                records = repo.list(**filters)
        except ThemePersistenceError:
            return []
        return [record for record in records if self.validate_theme(record)]

    def get_all_themes(self, active_only: bool = True) -> list[dict[str, Any]]:
        return self._list_themes(active_only=active_only)

    def get_user_themes(self, user_id: int) -> list[dict[str, Any]]:
        return self._list_themes(user_id=user_id)

    def get_system_themes(self, active_only: bool = True) -> list[dict[str, Any]]:
        return self._list_themes(system_only=True, active_only=active_only)

    def validate_theme(self, record: Optional[Record]) -> bool:
        if not record or not record.get("id") or not _text(record, "name"):
            return False

        for column in ("colors", "fonts"):
            value = record.get(column)
            if value is None or value == "":
                continue
            if not _decodes_to_container(value, allow_null=False):
                return False

        colors = parse_json_column(record.get("colors"), column="colors")
        for key in _LEGACY_COLOR_KEYS:
            if key in colors and not color_math.is_hex_color(colors[key]):
                return False

        for column in TOKEN_COLUMNS:
            value = record.get(column)
            if value is None or value == "":
                continue
            if not _decodes_to_container(value, allow_null=True):
                return False
        return True

    def clear_cache(self, theme_id: Optional[int] = None) -> None:
        if theme_id is None:
            self.cache.clear()
        else:
            self.cache.invalidate(int(theme_id))

    def clear_theme_columns_cache(self) -> None:
        self.schema.clear()

    # Resolution

    def _resolve_theme(self, page: Optional[Record], theme: Optional[Record]) -> Optional[Record]:
        if theme is not None:
            return theme
        if page and page.get("theme_id"):
            return self.get_cached_theme(page["theme_id"])
        return None

    def get_theme_colors(self, page: Optional[Record], theme: Optional[Record] = None) -> ThemeColors:
        theme = self._resolve_theme(page, theme)
        page_colors = _json(page, "colors")
        theme_colors = _json(theme, "colors")
        explicit_tokens = merge_tokens({}, _json(theme, "color_tokens"), _json(page, "color_tokens"))
        token_values = {
            "primary": get_token(explicit_tokens, "text.primary"),
            "secondary": get_token(explicit_tokens, "background.base"),
            "accent": get_token(explicit_tokens, "accent.primary"),
        }
        defaults = {
            "primary": settings.THEME_DEFAULT_PRIMARY_COLOR,
            "secondary": settings.THEME_DEFAULT_SECONDARY_COLOR,
            "accent": settings.THEME_DEFAULT_ACCENT_COLOR,
        }
        resolved = {
            key: _first(page_colors.get(key), theme_colors.get(key), token_values[key], defaults[key])
            for key in _LEGACY_COLOR_KEYS
        }
        return ThemeColors(**resolved)

    def get_theme_fonts(self, page: Optional[Record], theme: Optional[Record] = None) -> FontPair:
        theme = self._resolve_theme(page, theme)
        typography = merge_tokens({}, _json(theme, "typography_tokens"), _json(page, "typography_tokens"))
        page_fonts = _json(page, "fonts")
        theme_fonts = _json(theme, "fonts")
        primary = _first(
            get_token(typography, "font.heading"),
            _text(page, "page_primary_font"),
            page_fonts.get("heading"),
            page_fonts.get("page_primary_font"),
            _text(theme, "page_primary_font"),
            theme_fonts.get("heading"),
            settings.THEME_DEFAULT_FONT,
        )
        secondary = _first(
            get_token(typography, "font.body"),
            _text(page, "page_secondary_font"),
            page_fonts.get("body"),
            page_fonts.get("page_secondary_font"),
            _text(theme, "page_secondary_font"),
            theme_fonts.get("body"),
            settings.THEME_DEFAULT_FONT,
        )
        return FontPair(primary_font=primary, secondary_font=secondary)

    get_page_fonts = get_theme_fonts

    def get_widget_fonts(self, page: Optional[Record], theme: Optional[Record] = None) -> FontPair:
        theme = self._resolve_theme(page, theme)
        typography = merge_tokens({}, _json(theme, "typography_tokens"), _json(page, "typography_tokens"))
        page_fonts = self.get_page_fonts(page, theme if theme is not None else {})
        primary = _first(
            _text(page, "widget_primary_font"),
            _text(theme, "widget_primary_font"),
            get_token(typography, "font.widget_heading"),
            page_fonts.primary_font,
        )
        secondary = _first(
            _text(page, "widget_secondary_font"),
            _text(theme, "widget_secondary_font"),
            get_token(typography, "font.widget_body"),
            page_fonts.secondary_font,
        )
        return FontPair(primary_font=primary, secondary_font=secondary)

    def _effective_color_tokens(self, page: Optional[Record], theme: Optional[Record]) -> dict[str, Any]:
        tokens = self.get_color_tokens(page, theme)
        if should_apply_legacy_colors(page, theme):
            tokens = project_legacy_colors(tokens, self.get_theme_colors(page, theme))
        return tokens

    def _background(
        self,
        page: Optional[Record],
        theme: Optional[Record],
        column: str,
        token_paths: Iterable[str],
    ) -> Background:
        theme = self._resolve_theme(page, theme)
        for raw in (_text(page, column), _text(theme, column)):
            parsed = Background.parse(raw)
            if parsed is not None:
                return parsed
        tokens = self._effective_color_tokens(page, theme if theme is not None else {})
        for path in token_paths:
            value = get_token(tokens, path)
            parsed = Background.parse(value) if isinstance(value, str) else None
            if parsed is not None:
                return parsed
        return Background.solid(settings.THEME_DEFAULT_SECONDARY_COLOR)

    def get_page_background(self, page: Optional[Record], theme: Optional[Record] = None) -> Background:
        return self._background(page, theme, "page_background", ("gradient.page", "background.base"))

    def get_widget_background(self, page: Optional[Record], theme: Optional[Record] = None) -> Background:
        return self._background(page, theme, "widget_background", ("background.surface",))

    def get_widget_border_color(self, page: Optional[Record], theme: Optional[Record] = None) -> Background:
        return self._background(page, theme, "widget_border_color", ("border.default",))

    def get_spatial_effect(self, page: Optional[Record], theme: Optional[Record] = None) -> str:
        theme = self._resolve_theme(page, theme)
        for candidate in (_text(page, "spatial_effect"), _text(theme, "spatial_effect")):
            if candidate in SPATIAL_EFFECTS:
                return candidate
        return "none"

    def get_widget_styles(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        theme = self._resolve_theme(page, theme)
        combined = {**_json(theme, "widget_styles"), **_json(page, "widget_styles")}
        return widget_style_rules.merge_with_defaults(combined)

    def _merged_tokens(
        self,
        page: Optional[Record],
        theme: Optional[Record],
        column: str,
        defaults: dict[str, Any],
    ) -> dict[str, Any]:
        theme = self._resolve_theme(page, theme)
        return merge_tokens(defaults, _json(theme, column), _json(page, column))

    def get_color_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        return self._merged_tokens(page, theme, "color_tokens", default_color_tokens())

    def get_typography_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        return self._merged_tokens(page, theme, "typography_tokens", default_typography_tokens())

    def get_motion_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        return self._merged_tokens(page, theme, "motion_tokens", default_motion_tokens())

    def get_iconography_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        return self._merged_tokens(page, theme, "iconography_tokens", default_iconography_tokens())

    def get_shape_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        theme = self._resolve_theme(page, theme)
        theme_shape = _json(theme, "shape_tokens")
        page_shape = _json(page, "shape_tokens")
        merged = merge_tokens(default_shape_tokens(), theme_shape, page_shape)
        # A corner scale is a set; a partial one replaces the defaults instead of merging.
        for layer in (theme_shape, page_shape):
            corner = layer.get("corner")
            if isinstance(corner, Mapping) and corner:
                merged["corner"] = deepcopy(dict(corner))
        return merged

    def get_spacing_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> dict[str, Any]:
        theme = self._resolve_theme(page, theme)
        merged = self._merged_tokens(page, theme, "spacing_tokens", default_spacing_tokens())
        density = resolve_density(page, theme, merged.get("density"))
        return resolve_spacing(merged, density)

    def get_theme_tokens(self, page: Optional[Record], theme: Optional[Record] = None) -> ThemeTokens:
        theme = self._resolve_theme(page, theme)
        if theme is None:
            theme = {}
        spacing = self.get_spacing_tokens(page, theme)
        tokens: dict[str, Any] = {
            "colors": self.get_color_tokens(page, theme),
            "typography": self.get_typography_tokens(page, theme),
            "spacing": spacing,
            "shape": self.get_shape_tokens(page, theme),
            "motion": self.get_motion_tokens(page, theme),
            "iconography": self.get_iconography_tokens(page, theme),
        }
        overrides = _json(page, "token_overrides")
        category_overrides = {key: value for key, value in overrides.items() if isinstance(value, Mapping)}
        if category_overrides:
            tokens = merge_tokens(tokens, category_overrides)
        tokens.pop("layout_density", None)
        return ThemeTokens(**tokens, layout_density=spacing["density"])

    def get_theme_config(self, page: Optional[Record], theme: Optional[Record] = None) -> ResolvedTheme:
        resolved_theme = self._resolve_theme(page, theme)
        # An empty mapping stops every getter from refetching a missing theme.
        theme = resolved_theme if resolved_theme is not None else {}
        page_fonts = self.get_page_fonts(page, theme)
        tokens = self.get_theme_tokens(page, theme)
        return ResolvedTheme(
            colors=self.get_theme_colors(page, theme),
            fonts=page_fonts,
            page_fonts=page_fonts,
            widget_fonts=self.get_widget_fonts(page, theme),
            page_background=self.get_page_background(page, theme),
            widget_background=self.get_widget_background(page, theme),
            widget_border_color=self.get_widget_border_color(page, theme),
            widget_styles=self.get_widget_styles(page, theme),
            spatial_effect=self.get_spatial_effect(page, theme),
            tokens=tokens,
            layout_density=tokens.layout_density,
            legacy_color_overrides=should_apply_legacy_colors(page, theme),
        )

    def build_google_fonts_url(self, fonts: Union[Mapping[str, Any], FontPair, Iterable[Any]]) -> str:
        if isinstance(fonts, FontPair):
            candidates: Iterable[Any] = (fonts.primary_font, fonts.secondary_font)
        elif isinstance(fonts, Mapping):
            candidates = fonts.values()
        else:
            candidates = fonts

        families: list[str] = []
        for font in candidates:
            if isinstance(font, FontPair):
                names = [font.primary_font, font.secondary_font]
            else:
                names = [font]
            for name in names:
                if not isinstance(name, str) or not name.strip():
                    continue
                family = f"family={name.strip().replace(' ', '+')}:{GOOGLE_FONTS_WEIGHTS}"
                if family not in families:
                    families.append(family)
        if not families:
            return ""
        return f"{GOOGLE_FONTS_BASE_URL}?{'&'.join(families)}&display=swap"

    # Writes

    def _coerce_data(self, theme_data: Union[ThemeData, Mapping[str, Any], None]) -> ThemeData:
        if theme_data is None:
            return ThemeData()
        if isinstance(theme_data, ThemeData):
            return theme_data
        try:
            return ThemeData.model_validate(dict(theme_data))
        except (TypeError, ValueError, ValidationError) as exc:
            raise ThemeValidationError(f"Invalid theme data: {exc}") from exc

    def _validate_name(self, name: Any) -> str:
        limit = settings.THEME_NAME_MAX_LENGTH
        cleaned = name.strip() if isinstance(name, str) else ""
        if not cleaned or len(cleaned) > limit:
            raise ThemeValidationError(f"Theme name must be 1-{limit} characters")
        return cleaned

    def _validate_colors(self, colors: Any) -> None:
        decoded = parse_json_column(colors, column="colors")
        for key in _LEGACY_COLOR_KEYS:
            if key in decoded and not color_math.is_hex_color(decoded[key]):
                raise ThemeValidationError(f"Invalid {key} color: {decoded[key]!r}")

    def _column_values(self, data: ThemeData, *, clearing: bool) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field, value in data.model_dump(exclude_unset=True).items():
            if clearing and field in _CLEARABLE_FIELDS and (value is None or value == "null"):
                values[field] = None
                continue
            if value is None:
                continue
            if field in JSON_COLUMNS and isinstance(value, str) and value != "":
                if not _decodes_to_container(value, allow_null=field not in ("colors", "fonts")):
                    raise ThemeValidationError(f"Invalid {field} JSON")
            if field == "colors":
                self._validate_colors(value)
            if field == "widget_styles":
                decoded = parse_json_column(value, column="widget_styles")
                values[field] = _encode_json(widget_style_rules.sanitize(decoded))
            elif field in JSON_COLUMNS:
                values[field] = _encode_json(value)
            else:
                values[field] = value
        return values

    def _create(self, user_id: int, name: Any, theme_data: Union[ThemeData, Mapping[str, Any], None]) -> int:
        cleaned_name = self._validate_name(name)
        data = self._coerce_data(theme_data)
        values = self._column_values(data, clearing=False)
        values.setdefault("colors", "{}")
        values.setdefault("fonts", "{}")
        values.setdefault("spatial_effect", "none")
        values.update(user_id=user_id, name=cleaned_name, is_active=True)

        limit = settings.THEME_MAX_USER_THEMES
        with self._repository("create") as repo:
            if repo.count_for_user(user_id) >= limit:
                raise ThemeLimitExceededError(
                    f"You can create a maximum of {limit} custom themes. Please delete one first."
                )
            theme_id = repo.insert(values)
        self.cache.invalidate(theme_id)
        return theme_id

    def create_theme(
        self,
        user_id: int,
        name: str,
        theme_data: Union[ThemeData, Mapping[str, Any], None] = None,
    ) -> ThemeOperationResult:
        try:
            theme_id = self._create(user_id, name, theme_data)
        except ThemeError as exc:
            logger.warning(
                "theme.create_rejected",
                extra={"user_id": user_id, "error_code": exc.code, "error": exc.message},
            )
            return ThemeOperationResult(success=False, error=exc.message, error_code=exc.code)
        logger.info("theme.created", extra={"user_id": user_id, "theme_id": theme_id})
        return ThemeOperationResult(success=True, theme_id=theme_id)

    def clone_theme(self, theme_id: int, user_id: int, name: Optional[str] = None) -> ThemeOperationResult:
        source = self.get_theme(theme_id)
        if source is None:
            error = ThemeNotFoundError("Theme not found")
            return ThemeOperationResult(success=False, error=error.message, error_code=error.code)
        data = {field: source[field] for field in _CLONE_FIELDS if source.get(field) is not None}
        return self.create_theme(user_id, name or f"{source['name']} Copy", data)

    def update_user_theme(
        self,
        theme_id: int,
        user_id: int,
        name: Optional[str] = None,
        theme_data: Union[ThemeData, Mapping[str, Any], None] = None,
    ) -> bool:
        try:
            values: dict[str, Any] = {}
            if name is not None:
                values["name"] = self._validate_name(name)
            if theme_data is not None:
                values.update(self._column_values(self._coerce_data(theme_data), clearing=True))
            if not values:
                return False
            values["updated_at"] = datetime.now(timezone.utc)

            with self._repository("update") as repo:
                if repo.get_owned(theme_id, user_id) is None:
                    raise ThemeNotFoundError("Theme not found")
                updated = repo.update(theme_id, values)
        except ThemeError as exc:
            logger.warning(
                "theme.update_rejected",
                extra={"theme_id": theme_id, "user_id": user_id, "error_code": exc.code},
            )
            return False
        self.cache.invalidate(theme_id)
        return updated

    def delete_user_theme(self, theme_id: int, user_id: int) -> bool:
        try:
            with self._repository("delete") as repo:
                if repo.get_owned(theme_id, user_id) is None:
                    raise ThemeNotFoundError("Theme not found")
                deleted = repo.delete(theme_id, user_id)
        except ThemeError as exc:
            logger.warning(
                "theme.delete_rejected",
                extra={"theme_id": theme_id, "user_id": user_id, "error_code": exc.code},
            )
            return False
        self.cache.invalidate(theme_id)
        return deleted
