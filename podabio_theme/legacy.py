"""Projection of pre-token legacy colors onto the color token tree.

Pages and themes created before color tokens existed only carry a flat
``colors`` JSON with primary/secondary/accent. When no structured color tokens
exist anywhere in the page/theme chain, those three values are spread across
the token tree so the rest of the pipeline can read tokens only.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from podabio_theme import color_math
from podabio_theme.schemas import ThemeColors
from podabio_theme.token_merger import parse_json_column, set_token


def _has_entries(record: Optional[Mapping[str, Any]], column: str) -> bool:
    if not record:
        return False
    return bool(parse_json_column(record.get(column), column=column))


def should_apply_legacy_colors(
    page: Optional[Mapping[str, Any]],
    theme: Optional[Mapping[str, Any]],
) -> bool:
    if _has_entries(page, "color_tokens") or _has_entries(theme, "color_tokens"):
        return False
    return _has_entries(page, "colors") or _has_entries(theme, "colors")


def _shift(color: str, amount: float) -> Optional[str]:
    if color_math.luminance(color) >= 0.5:
        return color_math.darken(color, amount)
    return color_math.lighten(color, amount)


def project_legacy_colors(tokens: Mapping[str, Any], colors: ThemeColors) -> dict[str, Any]:
    primary = colors.primary
    secondary = colors.secondary
    accent = colors.accent

    projected: dict[str, Any] = dict(tokens)
    assignments = {
        "text.primary": primary,
        "border.default": _shift(primary, 0.25),
        "border.focus": _shift(primary, 0.2),
        "background.base": secondary,
        "background.surface": _shift(secondary, 0.12),
        "background.surface_raised": _shift(secondary, 0.22),
        "text.secondary": color_math.mix(primary, secondary, 0.35),
        "accent.primary": accent,
        "accent.muted": color_math.lighten(accent, 0.75),
    }
    for path, value in assignments.items():
        # Non-hex legacy values cannot be derived from; keep the token default.
        if value:
            projected = set_token(projected, path, value)
    return projected
