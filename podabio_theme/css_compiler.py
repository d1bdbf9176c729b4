"""Compile a resolved theme into the page's ``<style>`` block.

The compiler never raises on resolved input: any token value of the wrong
shape falls back to a fixed value so the page still renders.
"""

from __future__ import annotations

import html
import logging
import math
import re
from collections.abc import Mapping
from typing import Any, Optional

from podabio_theme.accessor import ThemeAccessor
from podabio_theme.color_math import (
    BLACK,
    WHITE,
    contrast_ratio,
    hex_to_rgba,
    lighten,
    luminance,
    normalize_hex,
)
from podabio_theme.legacy import project_legacy_colors
from podabio_theme.spacing import format_rem
from podabio_theme.token_merger import get_token
from podabio_theme.widget_styles import enum_to_css

logger = logging.getLogger(__name__)

MIN_TEXT_CONTRAST = 4.0
LIGHT_TEXT_FALLBACK = "#f0f0f0"
DARK_TEXT_FALLBACK = "#1a1a1a"

_SOLID_HEX_RE = re.compile(r"^#[0-9a-fA-F]{3,6}$")
_TWO_STOP_GRADIENT_RE = re.compile(
    r"linear-gradient\([^,]+,\s*(#[0-9a-fA-F]{3,6})\s*\d+%,\s*(#[0-9a-fA-F]{3,6})\s*\d+%\)"
)
_UNSAFE_VALUE_RE = re.compile(r"[<>{};\\\r\n]")
_UNSAFE_FONT_RE = re.compile(r"[<>{};\\\r\n'\"]")
_UNSAFE_IDENT_RE = re.compile(r"[^A-Za-z0-9_-]")
_NUMBER_UNIT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*([a-z%]*)\s*$", re.IGNORECASE)

_PROFILE_IMAGE_SIZES = {"small": 80, "medium": 120, "large": 180}
_DEFAULT_SHADOW_LEVEL_1 = "0 1px 2px rgba(15, 23, 42, 0.06)"
_DEFAULT_SHADOW_LEVEL_2 = "0 16px 48px rgba(15, 23, 42, 0.5)"


def _css(value: Any) -> str:
    """Render a scalar as a CSS value with characters that could end a declaration removed."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        text = f"{value:g}"
    else:
        text = str(value)
    return _UNSAFE_VALUE_RE.sub("", text).strip()


def _font(value: Any) -> str:
    return _UNSAFE_FONT_RE.sub("", str(value)).strip()


def _ident(name: str) -> str:
    return _UNSAFE_IDENT_RE.sub("", name)


def _num(value: float) -> str:
    value = round(value, 2)
    if value == 0:
        value = 0.0
    return f"{value:g}"


def _scalar(tree: Any, path: str, fallback: Any = None) -> Any:
    value = get_token(tree, path) if isinstance(tree, Mapping) else None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool) and value != "":
        return value
    return fallback


def _mapping(tree: Any, path: str) -> dict[str, Any]:
    value = get_token(tree, path) if isinstance(tree, Mapping) else None
    if isinstance(value, Mapping):
        return {
            str(key): item
            for key, item in value.items()
            if isinstance(item, (str, int, float)) and not isinstance(item, bool) and item != ""
        }
    return {}


def _as_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _bare_number(value: Any) -> Optional[float]:
    """Numbers and unitless numeric strings; ``None`` for anything carrying a unit."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER_UNIT_RE.match(value)
        if match and not match.group(2):
            return float(match.group(1))
    return None


def _is_gradient(value: Any) -> bool:
    return isinstance(value, str) and "gradient" in value


def dominant_background_color(background: Any) -> str:
    """Pick one hex color to stand in for ``background`` in contrast checks."""
    if not isinstance(background, str):
        return WHITE
    text = background.strip()
    if _SOLID_HEX_RE.match(text):
        return text
    match = _TWO_STOP_GRADIENT_RE.search(text)
    if match:
        first = normalize_hex(match.group(1)) or match.group(1)
        second = normalize_hex(match.group(2)) or match.group(2)
        if normalize_hex(first) and normalize_hex(second):
            return first if luminance(first) > luminance(second) else second
        return first or second or WHITE
    return WHITE


def get_optimal_text_color(background: Any, default_color: str) -> str:
    representative = dominant_background_color(background)
    if contrast_ratio(default_color, representative) >= MIN_TEXT_CONTRAST:
        return default_color
    if luminance(representative) < 0.5:
        if contrast_ratio(WHITE, representative) >= MIN_TEXT_CONTRAST:
            return WHITE
        return LIGHT_TEXT_FALLBACK
    if contrast_ratio(BLACK, representative) >= MIN_TEXT_CONTRAST:
        return BLACK
    return DARK_TEXT_FALLBACK


def _rule(selector: str, declarations: list[str]) -> str:
    body = "".join(f"    {declaration};\n" for declaration in declarations)
    return f"{selector} {{\n{body}}}\n\n"


class ThemeCSSCompiler:
    def __init__(
        self,
        page: Optional[Mapping[str, Any]],
        theme: Optional[Mapping[str, Any]] = None,
        *,
        accessor: Optional[ThemeAccessor] = None,
    ) -> None:
        self.page: Mapping[str, Any] = page or {}
        self.accessor = accessor or ThemeAccessor()
        self.config = self.accessor.get_theme_config(self.page, theme)

        tokens = self.config.tokens
        self.color_tokens = tokens.colors
        if self.config.legacy_color_overrides:
            self.color_tokens = project_legacy_colors(self.color_tokens, self.config.colors)
        self.typography_tokens = tokens.typography
        self.spacing_tokens = tokens.spacing
        self.shape_tokens = tokens.shape
        self.motion_tokens = tokens.motion
        self.iconography_tokens = tokens.iconography
        self.layout_density = self.config.layout_density
        self.spacing_values = _mapping(self.spacing_tokens, "values")

        self.widget_styles = self.config.widget_styles
        self.spatial_effect = self.config.spatial_effect
        self.page_fonts = self.config.page_fonts
        self.widget_fonts = self.config.widget_fonts

        self.page_background = _css(self.config.page_background.css()) or WHITE
        self.widget_background = _css(self.config.widget_background.css()) or WHITE
        self.widget_border_color = _css(self.config.widget_border_color.css()) or "#e2e8f0"
        self.border_width = enum_to_css("border_width", self.widget_styles.get("border_width"))
        self.border_radius = self._resolve_border_radius()

    # Resolution helpers

    @property
    def border_effect(self) -> str:
        return self.widget_styles.get("border_effect", "shadow")

    @property
    def glow_intensity(self) -> str:
        return self.widget_styles.get("border_glow_intensity", "subtle")

    @property
    def glow_color(self) -> str:
        return _css(self.widget_styles.get("glow_color") or "#ff00ff")

    def _resolve_border_radius(self) -> str:
        corner = _mapping(self.shape_tokens, "corner")
        if len(corner) == 1:
            return _css(next(iter(corner.values())))
        if "md" in corner:
            return _css(corner["md"])
        if corner:
            return _css(next(iter(corner.values())))
        return "0.75rem"

    def _button_corner_radius(self) -> str:
        button_corner = _mapping(self.shape_tokens, "button_corner")
        for key in ("md", "pill", "none"):
            if key in button_corner:
                return _css(button_corner[key])
        if button_corner:
            return _css(next(iter(button_corner.values())))
        return "0.75rem"

    def _shadow_for_intensity(self, intensity: str) -> Optional[str]:
        if intensity == "none":
            return None
        if intensity == "pronounced":
            return _css(_scalar(self.shape_tokens, "shadow.level_2", _DEFAULT_SHADOW_LEVEL_2))
        return _css(_scalar(self.shape_tokens, "shadow.level_1", _DEFAULT_SHADOW_LEVEL_1))

    def _heading_color(self) -> Optional[str]:
        value = _scalar(self.typography_tokens, "color.heading") or _scalar(
            self.color_tokens, "core.typography.color.heading"
        )
        return _css(value) if value else None

    def _body_color(self) -> Optional[str]:
        value = _scalar(self.typography_tokens, "color.body") or _scalar(
            self.color_tokens, "core.typography.color.body"
        )
        return _css(value) if value else None

    def _widget_heading_color(self) -> Optional[str]:
        value = _scalar(self.typography_tokens, "color.widget_heading")
        return _css(value) if value else self._heading_color()

    def _widget_body_color(self) -> Optional[str]:
        value = _scalar(self.typography_tokens, "color.widget_body")
        return _css(value) if value else self._body_color()

    def _widget_spacing(self) -> str:
        return _css(self.spacing_values.get("lg") or "1.5rem")

    def _page_padding(self) -> str:
        base = _css(self.spacing_values.get("lg") or "1.5rem")
        multiplier = _as_float(_scalar(self.spacing_tokens, "page_multiplier", 1.0), 1.0)
        match = _NUMBER_UNIT_RE.match(base)
        if multiplier <= 0 or not match:
            return base
        unit = match.group(2) or "rem"
        return f"{round(float(match.group(1)) * multiplier, 4):g}{unit}"

    def _widget_space_values(self) -> dict[str, str]:
        base_scale = _mapping(self.spacing_tokens, "base_scale")
        density = _scalar(self.spacing_tokens, "density", self.layout_density)
        multipliers = _mapping(self.spacing_tokens, f"density_multipliers.{density}")
        return {
            key: format_rem(_as_float(base, 0.0) * _as_float(multipliers.get(key, 1.0), 1.0))
            for key, base in base_scale.items()
        }

    def _profile_image_shadow(self) -> str:
        effect = self.page.get("profile_image_effect") or "none"
        if effect == "shadow":
            color = self.page.get("profile_image_shadow_color") or BLACK
            intensity = _as_float(self.page.get("profile_image_shadow_intensity"), 0.5)
            depth = _css(self.page.get("profile_image_shadow_depth") or 4)
            blur = _css(self.page.get("profile_image_shadow_blur") or 8)
            return f"{depth}px {depth}px {blur}px {hex_to_rgba(color, intensity)}"
        if effect == "glow":
            color = hex_to_rgba(self.page.get("profile_image_glow_color") or "#2563eb", 0.8)
            width = _as_float(self.page.get("profile_image_glow_width"), 10.0)
            return ", ".join(f"0 0 {_num(width * factor)}px {color}" for factor in (1, 1.5, 2))
        return "none"

    def _profile_image_size(self) -> str:
        size = self.page.get("profile_image_size", 120)
        number = _bare_number(size)
        if number is not None:
            return f"{_num(number)}px"
        return f"{_PROFILE_IMAGE_SIZES.get(size, 120) if isinstance(size, str) else 120}px"

    def _title_text_shadows(self) -> list[str]:
        effect = self.typography_tokens.get("effect")
        if not isinstance(effect, Mapping):
            return []
        shadows: list[str] = []

        border_width = _as_float(_scalar(effect, "border.width", 0), 0.0)
        if border_width > 0:
            border_color = _css(_scalar(effect, "border.color", BLACK))
            for angle in range(0, 360, 15):
                radians = math.radians(angle)
                x = _num(math.cos(radians) * border_width)
                y = _num(math.sin(radians) * border_width)
                shadows.append(f"{x}px {y}px 0 {border_color}")

        heading_effect = _scalar(effect, "heading", "none")
        if heading_effect == "shadow":
            color = _scalar(effect, "shadow.color", BLACK)
            intensity = _as_float(_scalar(effect, "shadow.intensity", 0.5), 0.5)
            depth = int(_as_float(_scalar(effect, "shadow.depth", 4), 4))
            blur = int(_as_float(_scalar(effect, "shadow.blur", 8), 8))
            shadows.append(f"{depth}px {depth}px {blur}px {hex_to_rgba(color, intensity)}")
        elif heading_effect == "glow":
            color = hex_to_rgba(_scalar(effect, "glow.color", "#2563eb"), 0.8)
            width = int(_as_float(_scalar(effect, "glow.width", 10), 10))
            for factor in (1, 1.5, 2):
                shadows.append(f"0 0 {_num(width * factor)}px {color}")
        return shadows

    # Output

    def generate_css_variables(self) -> str:
        colors = self.color_tokens
        text_primary = _css(_scalar(colors, "text.primary", "#0f172a"))
        text_secondary = _css(_scalar(colors, "text.secondary", "#64748b"))
        text_inverse = _css(_scalar(colors, "text.inverse", WHITE))
        accent_primary = _css(_scalar(colors, "accent.primary", "#2563eb"))
        accent_muted = _css(_scalar(colors, "accent.muted", "#e0edff"))
        surface = _css(_scalar(colors, "background.surface", "#f8fafc"))
        surface_raised = _css(_scalar(colors, "background.surface_raised", surface))
        border_focus = _css(_scalar(colors, "border.focus", accent_primary))
        page_background = self.page_background

        title_override = _scalar(colors, "semantic.text.title") or _scalar(colors, "text.title")
        heading_color = self._heading_color()
        body_color = self._body_color()
        page_title_color = heading_color or (
            _css(title_override) if title_override else get_optimal_text_color(page_background, text_primary)
        )
        page_description_color = body_color or get_optimal_text_color(page_background, text_secondary)

        gradient_page = _scalar(colors, "gradient.page")
        if not gradient_page and _is_gradient(page_background):
            gradient_page = page_background
        shell_base = dominant_background_color(page_background)
        shell_background = lighten(shell_base, 0.85) or shell_base or "#f5f7fa"

        declarations: list[tuple[str, Any]] = [
            ("--color-background-base", page_background),
            ("--color-background-surface", surface),
            ("--color-background-surface-raised", surface_raised),
            ("--color-background-overlay", _scalar(colors, "background.overlay", "rgba(15, 23, 42, 0.6)")),
            ("--color-text-primary", text_primary),
            ("--color-text-secondary", text_secondary),
            ("--color-text-inverse", text_inverse),
            ("--color-border-default", _scalar(colors, "border.default", "#e2e8f0")),
            ("--color-border-focus", border_focus),
            ("--color-accent-primary", accent_primary),
            ("--color-accent-muted", accent_muted),
            ("--color-state-success", _scalar(colors, "state.success", "#12b76a")),
            ("--color-state-warning", _scalar(colors, "state.warning", "#f59e0b")),
            ("--color-state-danger", _scalar(colors, "state.danger", "#ef4444")),
            ("--color-text-state-success", _scalar(colors, "text_state.success", "#0f5132")),
            ("--color-text-state-warning", _scalar(colors, "text_state.warning", "#7c2d12")),
            ("--color-text-state-danger", _scalar(colors, "text_state.danger", "#7f1d1d")),
            ("--color-text-on-background", get_optimal_text_color(page_background, text_primary)),
            ("--color-text-on-surface", get_optimal_text_color(surface, text_primary)),
            ("--color-text-on-surface-raised", get_optimal_text_color(surface_raised, text_primary)),
            ("--color-text-on-accent", get_optimal_text_color(accent_primary, text_inverse)),
            ("--color-shadow-ambient", _scalar(colors, "shadow.ambient", "rgba(15, 23, 42, 0.12)")),
            ("--color-shadow-focus", _scalar(colors, "shadow.focus", "rgba(37, 99, 235, 0.35)")),
            ("--gradient-page", gradient_page or page_background),
            ("--gradient-accent", _scalar(colors, "gradient.accent", accent_primary)),
            ("--gradient-widget", _scalar(colors, "gradient.widget", self.widget_background)),
            (
                "--gradient-podcast",
                _scalar(colors, "gradient.podcast", _scalar(colors, "gradient.accent", accent_primary)),
            ),
        ]
        glow_primary = _scalar(colors, "glow.primary")
        if glow_primary:
            declarations.append(("--glow-primary", glow_primary))
        declarations.append(("--shell-background", shell_background))

        for key, value in self.spacing_values.items():
            declarations.append((f"--space-{key}", value))
        declarations.append(("--layout-density", self.layout_density))
        for key, value in self._widget_space_values().items():
            declarations.append((f"--widget-space-{key}", value))

        shape_groups = (("corner", "--shape-corner-"), ("border_width", "--border-width-"), ("shadow", "--shadow-"))
        for group, prefix in shape_groups:
            for name, value in _mapping(self.shape_tokens, group).items():
                declarations.append((f"{prefix}{name.replace('_', '-')}", value))

        declarations.extend(self._typography_declarations())

        for name, value in _mapping(self.motion_tokens, "duration").items():
            declarations.append((f"--motion-duration-{name}", value))
        for name, value in _mapping(self.motion_tokens, "easing").items():
            declarations.append((f"--motion-easing-{name}", value))
        declarations.extend(
            [
                ("--focus-ring-width", _scalar(self.motion_tokens, "focus.ring_width", "3px")),
                ("--focus-ring-offset", _scalar(self.motion_tokens, "focus.ring_offset", "2px")),
                ("--focus-ring-color", border_focus),
                ("--page-title-color", page_title_color),
                ("--page-description-color", page_description_color),
                ("--social-icon-color", get_optimal_text_color(page_background, accent_primary)),
            ]
        )

        icon_size = _scalar(self.iconography_tokens, "size", "48px")
        icon_spacing = _scalar(self.iconography_tokens, "spacing", "0.75rem")
        if _bare_number(icon_size) is not None:
            icon_size = f"{_css(icon_size)}px"
        if _bare_number(icon_spacing) is not None:
            icon_spacing = f"{_css(icon_spacing)}rem"
        declarations.append(("--icon-size", icon_size))
        declarations.append(("--icon-spacing", icon_spacing))
        icon_color = _scalar(self.iconography_tokens, "color")
        if icon_color:
            declarations.append(("--icon-color", icon_color))

        declarations.extend(
            [
                ("--page-primary-font", f"'{_font(self.page_fonts.primary_font)}'"),
                ("--page-secondary-font", f"'{_font(self.page_fonts.secondary_font)}'"),
                ("--widget-primary-font", f"'{_font(self.widget_fonts.primary_font)}'"),
                ("--widget-secondary-font", f"'{_font(self.widget_fonts.secondary_font)}'"),
            ]
        )
        declarations.extend(self._legacy_declarations())
        declarations.extend(self._page_declarations())
        declarations.extend(self._border_effect_declarations())

        body = "".join(f"    {_ident(name)}: {_css(value)};\n" for name, value in declarations)
        return f":root {{\n{body}}}\n"

    def _typography_declarations(self) -> list[tuple[str, Any]]:
        typography = self.typography_tokens
        heading_font = _font(self.page_fonts.primary_font)
        body_font = _font(self.page_fonts.secondary_font)
        meta_font = _font(_scalar(typography, "font.metatext", body_font))
        declarations: list[tuple[str, Any]] = [
            ("--font-family-heading", f"'{heading_font}', sans-serif"),
            ("--font-family-body", f"'{body_font}', sans-serif"),
            ("--font-family-meta", f"'{meta_font}', sans-serif"),
            ("--page-title-font", f"'{heading_font}', sans-serif"),
            ("--page-description-font", f"'{body_font}', sans-serif"),
            ("--widget-heading-font", f"'{_font(self.widget_fonts.primary_font)}', sans-serif"),
            ("--widget-body-font", f"'{_font(self.widget_fonts.secondary_font)}', sans-serif"),
        ]

        heading_color = self._heading_color()
        body_color = self._body_color()
        for name, color in (("heading", heading_color), ("body", body_color)):
            if color:
                declarations.append((f"--{name}-font-color", color))
                if _is_gradient(color):
                    declarations.append((f"--{name}-font-gradient", color))

        widget_heading = self._widget_heading_color()
        widget_body = self._widget_body_color()
        fallbacks = {
            "heading": "var(--heading-font-color, var(--color-text-primary, #0f172a))",
            "body": "var(--body-font-color, var(--color-text-secondary, #64748b))",
        }
        for name, color in (("heading", widget_heading), ("body", widget_body)):
            if color:
                declarations.append((f"--widget-{name}-font-color", color))
                if _is_gradient(color):
                    declarations.append((f"--widget-{name}-font-gradient", color))
            else:
                declarations.append((f"--widget-{name}-font-color", fallbacks[name]))

        for name, value in _mapping(typography, "scale").items():
            declarations.append((f"--type-scale-{name}", f"{_css(value)}rem"))
        heading_size = _scalar(typography, "size.heading")
        if heading_size:
            declarations.append(("--page-title-size", f"{_css(heading_size)}px"))
        body_size = _scalar(typography, "size.body")
        if body_size:
            declarations.append(("--page-body-size", f"{_css(body_size)}px"))
        for name, value in _mapping(typography, "line_height").items():
            declarations.append((f"--type-line-height-{name}", value))

        weights = typography.get("weight") if isinstance(typography.get("weight"), Mapping) else {}
        for name, value in weights.items():
            if isinstance(value, Mapping):
                declarations.append((f"--type-weight-{name}", "bold" if value.get("bold") else "normal"))
                declarations.append((f"--type-style-{name}", "italic" if value.get("italic") else "normal"))
            elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
                declarations.append((f"--type-weight-{name}", value))
        return declarations

    def _legacy_declarations(self) -> list[tuple[str, Any]]:
        colors = self.config.colors
        widget_width = int(_as_float(self.widget_styles.get("width"), 100))
        return [
            ("--primary-color", colors.primary),
            ("--secondary-color", colors.secondary),
            ("--accent-color", colors.accent),
            ("--heading-font", f"'{_font(self.page_fonts.primary_font)}'"),
            ("--body-font", f"'{_font(self.page_fonts.secondary_font)}'"),
            ("--page-background", self.page_background),
            ("--widget-background", self.widget_background),
            ("--widget-border-width", self.border_width),
            ("--widget-border-color", self.widget_border_color),
            ("--widget-spacing", self._widget_spacing()),
            ("--widget-border-radius", self.border_radius),
            ("--widget-padding", enum_to_css("spacing", self.widget_styles.get("spacing"))),
            ("--widget-shape-radius", enum_to_css("shape", self.widget_styles.get("shape"))),
            ("--widget-width", f"{widget_width}%"),
            ("--text-color", "var(--color-text-primary)"),
        ]

    def _page_declarations(self) -> list[tuple[str, Any]]:
        vertical = _scalar(self.spacing_tokens, "vertical_spacing")
        vertical_number = _bare_number(vertical)
        if vertical_number is not None:
            vertical_spacing = f"{_num(vertical_number)}px"
        else:
            vertical_spacing = _css(vertical) if vertical is not None else "24px"
            vertical_number = 24.0

        page = self.page
        return [
            ("--page-padding", self._page_padding()),
            ("--widget-gap", self._widget_spacing()),
            ("--page-vertical-spacing", vertical_spacing),
            ("--profile-image-spacing-top", f"{_num(vertical_number + 20)}px"),
            ("--profile-image-spacing-bottom", f"{_num(vertical_number)}px"),
            ("--profile-image-size", self._profile_image_size()),
            ("--profile-image-radius", f"{_num(_as_float(page.get('profile_image_radius'), 16.0))}%"),
            ("--profile-image-border-width", f"{_num(_as_float(page.get('profile_image_border_width'), 0.0))}px"),
            ("--profile-image-border-color", page.get("profile_image_border_color") or BLACK),
            ("--profile-image-box-shadow", self._profile_image_shadow()),
            ("--button-corner-radius", self._button_corner_radius()),
        ]

    def _border_effect_declarations(self) -> list[tuple[str, Any]]:
        if self.border_effect == "glow":
            return [
                ("--widget-glow-color", self.glow_color),
                ("--widget-glow-blur", enum_to_css("glow_blur", self.glow_intensity)),
                ("--widget-glow-opacity", enum_to_css("glow_opacity", self.glow_intensity)),
            ]
        intensity = self.widget_styles.get("border_shadow_intensity", "subtle")
        return [("--widget-box-shadow", enum_to_css("shadow", intensity))]

    def generate_spatial_effect_css(self) -> str:
        effect = self.spatial_effect
        if effect == "glass":
            return _rule(
                "body.spatial-glass",
                [
                    "background: var(--page-background)",
                    "backdrop-filter: blur(20px) saturate(180%)",
                    "-webkit-backdrop-filter: blur(20px) saturate(180%)",
                ],
            ) + _rule(
                "body.spatial-glass .widget-item",
                ["backdrop-filter: blur(10px)", "-webkit-backdrop-filter: blur(10px)"],
            )
        if effect == "depth":
            return (
                _rule("body.spatial-depth", ["perspective: 1000px"])
                + _rule(
                    "body.spatial-depth .widget-item",
                    [
                        "transform-style: preserve-3d",
                        "box-shadow: 0 10px 30px rgba(0, 0, 0, 0.2)",
                        "transition: transform 0.3s ease",
                    ],
                )
                + _rule("body.spatial-depth .widget-item:hover", ["transform: translateZ(10px)"])
            )
        if effect == "floating":
            return _rule("body.spatial-floating", ["padding: 2rem"]) + _rule(
                "body.spatial-floating .page-container",
                [
                    "background: var(--color-background-surface)",
                    "border-radius: 24px",
                    "box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3)",
                    "padding: 2rem",
                    "max-width: 1200px",
                    "margin: 0 auto",
                ],
            )
        if effect == "tilt":
            return _rule(
                "body.spatial-tilt .widget-item",
                ["will-change: transform", "transition: transform 0.1s ease-out", "transform-style: preserve-3d"],
            )
        return ""

    def generate_glow_animation_css(self) -> str:
        if self.border_effect != "glow" or self.glow_intensity == "none":
            return ""
        return (
            "@keyframes glow-pulse {\n"
            "    0%, 100% { opacity: 0.8; }\n"
            "    50% { opacity: 1; }\n"
            "}\n\n"
            "@keyframes glow-rotate {\n"
            "    0% { filter: blur(var(--widget-glow-blur)) hue-rotate(0deg); }\n"
            "    100% { filter: blur(var(--widget-glow-blur)) hue-rotate(360deg); }\n"
            "}\n\n"
        ) + _rule(
            '.widget-item[data-border-effect="glow"]:not(.widget-video)',
            ["animation: glow-pulse 3s ease-in-out infinite"],
        )

    def _text_fill(self, color: Optional[str], variable: str, fallback: str) -> list[str]:
        if color and _is_gradient(color):
            return [
                f"background: var({variable}-gradient)",
                "-webkit-background-clip: text",
                "background-clip: text",
                "color: transparent",
            ]
        return [f"color: var({variable}-color, {fallback})"]

    def _widget_rules(self) -> str:
        item = [
            "display: flex",
            "align-items: center",
            "gap: var(--widget-space-sm, 0.75rem)",
            "width: 100%",
            "max-width: var(--widget-width, 100%)",
            "margin: 0 auto",
            "padding: var(--widget-space-sm, 0.75rem) var(--widget-space-md, 1rem)",
            "box-sizing: border-box",
            "position: relative",
            f"background: {self.widget_background} !important",
            f"border: {self.border_width} solid {self.widget_border_color} !important",
            f"border-radius: {self.border_radius} !important",
        ]
        if self.border_effect == "shadow":
            shadow = self._shadow_for_intensity(self.widget_styles.get("border_shadow_intensity", "subtle"))
            item.append(f"box-shadow: {shadow or 'none'} !important")
        item.extend(
            [
                "font-family: var(--widget-secondary-font, var(--page-secondary-font), sans-serif)",
                "text-decoration: none",
                "color: var(--heading-font-color, var(--color-text-primary, #0f172a))",
                "transition: transform var(--motion-duration-fast, 150ms) "
                "var(--motion-easing-standard, cubic-bezier(0.4, 0, 0.2, 1)), "
                "box-shadow var(--motion-duration-fast, 150ms) "
                "var(--motion-easing-standard, cubic-bezier(0.4, 0, 0.2, 1))",
            ]
        )

        widget_heading = self._widget_heading_color()
        widget_body = self._widget_body_color()
        css = _rule(".widgets-container", ["gap: var(--widget-spacing)"])
        css += _rule(".widget-item", item)
        css += _rule(
            ".widget-content",
            [
                "flex: 1",
                "min-width: 0",
                "font-family: var(--widget-secondary-font, var(--page-secondary-font), sans-serif)",
                "font-size: var(--type-scale-sm, 1rem)",
                "line-height: var(--type-line-height-normal, 1.5)",
            ],
        )
        css += _rule(
            ".widget-title",
            [
                "font-weight: var(--type-weight-medium, 500)",
                "margin: 0 0 var(--widget-space-2xs, 0.25rem) 0",
                "font-family: var(--widget-primary-font, var(--page-primary-font), sans-serif)",
                *self._text_fill(widget_heading, "--widget-heading-font", "var(--color-text-primary, #0f172a)"),
                "font-size: var(--type-scale-md, 1.333rem)",
            ],
        )
        css += _rule(
            ".widget-description",
            [
                "font-size: var(--type-scale-sm, 1rem)",
                *self._text_fill(widget_body, "--widget-body-font", "var(--color-text-secondary, #64748b)"),
                "opacity: 0.9",
                "margin: var(--widget-space-2xs, 0.25rem) 0 0 0",
                "font-family: var(--widget-secondary-font, var(--page-secondary-font), sans-serif)",
            ],
        )
        css += _rule(
            ".widget-thumbnail",
            [
                "width: 100%",
                "height: 100%",
                "border-radius: var(--widget-border-radius, var(--shape-corner-md, 0.75rem))",
                "object-fit: cover",
            ],
        )
        css += _rule(".widget-video", ["padding: 0", "border: none", "background: transparent", "width: 100%"])

        hover = []
        if self.border_effect == "shadow":
            intensity = self.widget_styles.get("border_shadow_intensity", "subtle")
            base_shadow = self._shadow_for_intensity(intensity)
            if not base_shadow:
                hover.append("box-shadow: 0 4px 12px rgba(0, 0, 0, 0.1) !important")
            elif intensity == "pronounced":
                hover.append("box-shadow: 0 20px 56px rgba(15, 23, 42, 0.6) !important")
            else:
                level_2 = _css(_scalar(self.shape_tokens, "shadow.level_2", _DEFAULT_SHADOW_LEVEL_2))
                hover.append(f"box-shadow: {level_2} !important")
        elif self.border_effect == "glow":
            rgba = hex_to_rgba(self.glow_color, enum_to_css("glow_opacity", self.glow_intensity))
            blur, spread = ("12px", "6px") if self.glow_intensity == "subtle" else ("24px", "12px")
            hover.append(f"box-shadow: 0 0 {blur} {spread} {rgba} !important")
        hover.append("transform: translateY(-2px)")
        css += _rule(".widget-item:not(.widget-video):hover", hover)
        css += _rule(
            ".widget-item.widget-video",
            [
                "cursor: default !important",
                "background: transparent !important",
                "border: none !important",
                "border-radius: 0 !important",
                "box-shadow: none !important",
                "padding: 0 !important",
            ],
        )
        css += _rule(".widget-item.widget-video:hover", ["transform: none !important", "box-shadow: none !important"])
        return css

    def _effect_reapply_rules(self) -> str:
        css = _rule(".widget-item", [f"background: {self.widget_background} !important"])
        selector = "body .widget-item:not(.widget-video),\n.widget-item:not(.widget-video)"
        if self.border_effect == "shadow":
            shadow = self._shadow_for_intensity(self.widget_styles.get("border_shadow_intensity", "subtle"))
            if shadow:
                css += _rule(selector, [f"box-shadow: {shadow} !important"])
        elif self.border_effect == "glow":
            if self.glow_intensity == "none":
                css += _rule(selector, ["box-shadow: none !important"])
            else:
                blur = enum_to_css("glow_blur", self.glow_intensity)
                rgba = hex_to_rgba(self.glow_color, enum_to_css("glow_opacity", self.glow_intensity))
                spread = "4px" if self.glow_intensity == "subtle" else "8px"
                css += _rule(selector, [f"box-shadow: 0 0 {blur} {spread} {rgba} !important"])
        return css

    def _page_rules(self) -> str:
        title = ["color: var(--page-title-color)"]
        heading_size = _scalar(self.typography_tokens, "size.heading")
        if heading_size:
            title.append(f"font-size: var(--page-title-size, {_css(heading_size)}px) !important")
        shadows = self._title_text_shadows()
        if shadows:
            title.append(f"text-shadow: {_css(', '.join(shadows))}")

        description = ["color: var(--page-description-color)"]
        body_size = _scalar(self.typography_tokens, "size.body")
        if body_size:
            description.append(f"font-size: var(--page-body-size, {_css(body_size)}px) !important")

        has_icon_color = bool(_scalar(self.iconography_tokens, "color"))
        icon = (
            ["color: var(--icon-color) !important"]
            if has_icon_color
            else ["color: var(--icon-color, var(--social-icon-color, var(--color-accent-primary)))"]
        )
        if _scalar(self.iconography_tokens, "size"):
            icon.extend(
                [
                    "width: var(--icon-size) !important",
                    "height: var(--icon-size) !important",
                    "font-size: calc(var(--icon-size) * 0.625) !important",
                ]
            )
        icon_hover = [
            "color: var(--icon-color) !important" if has_icon_color else "color: var(--icon-color, var(--accent-color))",
            "opacity: 0.8",
        ]

        return (
            _rule(".profile-image", ["border: 3px solid var(--primary-color)"])
            + _rule(".page-title", title)
            + _rule(".page-description", description)
            + _rule("body .social-icon", icon)
            + _rule("body .social-icon:hover", icon_hover)
            + _rule("button, .btn, .podcast-banner-toggle, .drawer-close", [
                "border-radius: var(--button-corner-radius, 0.75rem) !important"
            ])
        )

    def generate_complete_style_block(self) -> str:
        background = self.page_background
        body = [
            "font-family: var(--page-secondary-font), var(--body-font), sans-serif",
            f"background: {background} !important",
        ]
        # Gradients scroll with the page; only solid fills and images are pinned.
        if not _is_gradient(background):
            body.append("background-attachment: fixed !important")
        body.extend(["min-height: 100vh", "color: var(--text-color)", "margin: 0", "padding: 0"])

        heading_color = self._heading_color()
        body_color = self._body_color()
        heading_rule = ["font-family: var(--page-primary-font), var(--heading-font), sans-serif"]
        if heading_color:
            heading_rule.extend(self._text_fill(heading_color, "--heading-font", "var(--color-text-primary)"))

        parts = [
            "<style>\n",
            self.generate_css_variables(),
            _rule("body", body),
            _rule("html", [f"background: {background} !important", "min-height: 100%"]),
            _rule("h1, h2, h3, .page-title", heading_rule),
        ]
        if body_color:
            parts.append(
                _rule(
                    "body, p, .page-description, .widget-description",
                    self._text_fill(body_color, "--body-font", "var(--color-text-secondary)"),
                )
            )
        parts.extend(
            [
                self._widget_rules(),
                self.generate_spatial_effect_css(),
                self.generate_glow_animation_css(),
                self._effect_reapply_rules(),
                self._page_rules(),
                "</style>\n",
            ]
        )
        css = "".join(parts)
        logger.debug(
            "theme_css.compiled",
            extra={"spatial_effect": self.spatial_effect, "border_effect": self.border_effect, "length": len(css)},
        )
        return css

    def get_spatial_effect_class(self) -> str:
        return f"spatial-{self.spatial_effect}"

    def get_widget_effect_attributes(self) -> str:
        attributes = f'data-border-effect="{html.escape(self.border_effect)}"'
        if self.border_effect == "glow":
            attributes += f' data-glow-intensity="{html.escape(self.glow_intensity)}"'
        return attributes
