from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

from podabio_theme.color_math import is_hex_color

WIDGET_STYLE_ENUMS: dict[str, tuple[str, ...]] = {
    "border_width": ("none", "thin", "thick"),
    "border_effect": ("shadow", "glow"),
    "border_shadow_intensity": ("none", "subtle", "pronounced"),
    "border_glow_intensity": ("none", "subtle", "pronounced"),
    "spacing": ("tight", "comfortable", "spacious"),
    "shape": ("square", "rounded", "round"),
}

_DEFAULT_WIDGET_STYLES: dict[str, Any] = {
    "border_width": "none",
    "border_effect": "shadow",
    "border_shadow_intensity": "subtle",
    "border_glow_intensity": "subtle",
    "glow_color": "#ff00ff",
    "spacing": "comfortable",
    "shape": "rounded",
}

_ENUM_CSS: dict[str, dict[str, str]] = {
    "border_width": {"none": "0px", "thin": "1px", "medium": "2px", "thick": "3px"},
    "shadow": {
        "none": "none",
        "subtle": "0 2px 4px rgba(0, 0, 0, 0.05)",
        "pronounced": "0 4px 12px rgba(0, 0, 0, 0.15)",
    },
    "glow_blur": {"none": "0px", "subtle": "8px", "pronounced": "16px"},
    "glow_opacity": {"none": "0", "subtle": "0.5", "pronounced": "0.8"},
    "spacing": {"tight": "0.5rem", "comfortable": "1rem", "spacious": "1.5rem"},
    "shape": {"square": "0px", "rounded": "8px", "round": "50px"},
}

_CSS_VAR_RE = re.compile(r"^var\(--[A-Za-z0-9_-]+\)$")
_GRADIENT_RE = re.compile(r"^(linear|radial|conic)-gradient\(", re.IGNORECASE)
_COLOR_FIELDS = ("glow_color",)
_PAINT_FIELDS = ("border_color", "background_color")


def default_widget_styles() -> dict[str, Any]:
    return dict(_DEFAULT_WIDGET_STYLES)


def is_valid_color(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    value = value.strip()
    return is_hex_color(value) or bool(_CSS_VAR_RE.match(value))


def is_valid_color_or_gradient(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_GRADIENT_RE.match(value.strip())) or is_valid_color(value)


def _is_numeric_width(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value >= 0
    if isinstance(value, str):
        try:
            return float(value) >= 0
        except ValueError:
            return False
    return False


def _valid_enum(key: str, value: Any) -> bool:
    if key == "border_width" and _is_numeric_width(value):
        return True
    return value in WIDGET_STYLE_ENUMS[key]


def validate(styles: Any) -> bool:
    """True when every known key present in ``styles`` holds an allowed value."""
    if not isinstance(styles, Mapping):
        return False
    for key in WIDGET_STYLE_ENUMS:
        if key in styles and not _valid_enum(key, styles[key]):
            return False
    for key in _COLOR_FIELDS:
        if key in styles and not is_valid_color(styles[key]):
            return False
    for key in _PAINT_FIELDS:
        if key in styles and not is_valid_color_or_gradient(styles[key]):
            return False
    return True


def merge_with_defaults(styles: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    merged = default_widget_styles()
    if isinstance(styles, Mapping):
        merged.update(styles)
    for key in WIDGET_STYLE_ENUMS:
        if not _valid_enum(key, merged.get(key)):
            merged[key] = _DEFAULT_WIDGET_STYLES[key]
    return merged


def sanitize(styles: Any) -> dict[str, Any]:
    """Coerce user input into a valid style bag; bad values fall back to defaults."""
    if not isinstance(styles, Mapping):
        return default_widget_styles()

    sanitized: dict[str, Any] = {}
    for key, value in styles.items():
        if key in WIDGET_STYLE_ENUMS:
            sanitized[key] = value if _valid_enum(key, value) else _DEFAULT_WIDGET_STYLES[key]
        elif key in _COLOR_FIELDS:
            sanitized[key] = value.strip() if is_valid_color(value) else _DEFAULT_WIDGET_STYLES[key]
        elif key in _PAINT_FIELDS:
            sanitized[key] = value.strip() if is_valid_color_or_gradient(value) else "#000000"
        else:
            sanitized[key] = value
    return merge_with_defaults(sanitized)


def enum_to_css(kind: str, value: Any) -> str:
    """Translate a widget style enum to its CSS value; unknown values map to the kind's default."""
    table = _ENUM_CSS.get(kind)
    if table is None:
        raise KeyError(f"Unknown widget style kind: {kind}")
    if isinstance(value, str) and value in table:
        return table[value]
    if kind == "border_width" and _is_numeric_width(value):
        return f"{float(value):g}px"
    fallbacks = {
        "border_width": "none",
        "shadow": "subtle",
        "glow_blur": "subtle",
        "glow_opacity": "subtle",
        "spacing": "comfortable",
        "shape": "rounded",
    }
    return table[fallbacks[kind]]
