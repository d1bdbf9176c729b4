from __future__ import annotations

from copy import deepcopy
from typing import Any

# Scale and base_scale values are unitless (rendered as rem); shape and motion carry units.

_COLOR_TOKENS: dict[str, Any] = {
    "background": {
        "base": "#f5f7fa",
        "surface": "#ffffff",
        "surface_raised": "#f9fafb",
        "overlay": "rgba(15, 23, 42, 0.6)",
    },
    "text": {
        "primary": "#111827",
        "secondary": "#4b5563",
        "inverse": "#ffffff",
    },
    "border": {
        "default": "#d1d5db",
        "focus": "#2563eb",
    },
    "accent": {
        "primary": "#0066ff",
        "muted": "#e0edff",
    },
    "state": {
        "success": "#12b76a",
        "warning": "#f59e0b",
        "danger": "#ef4444",
    },
    "text_state": {
        "success": "#0f5132",
        "warning": "#7c2d12",
        "danger": "#7f1d1d",
    },
    "shadow": {
        "ambient": "rgba(15, 23, 42, 0.12)",
        "focus": "rgba(37, 99, 235, 0.35)",
    },
    "gradient": {
        "page": None,
        "accent": None,
        "widget": None,
        "podcast": None,
    },
    "glow": {
        "primary": None,
    },
}

_TYPOGRAPHY_TOKENS: dict[str, Any] = {
    "font": {
        "heading": "Inter",
        "body": "Inter",
        "metatext": "Inter",
    },
    "scale": {
        "xl": 2.488,
        "lg": 1.777,
        "md": 1.333,
        "sm": 1.111,
        "xs": 0.889,
    },
    "line_height": {
        "tight": 1.2,
        "normal": 1.5,
        "relaxed": 1.7,
    },
    "weight": {
        "normal": 400,
        "medium": 500,
        "bold": 600,
    },
}

_SPACING_TOKENS: dict[str, Any] = {
    "density": "comfortable",
    "base_scale": {
        "2xs": 0.25,
        "xs": 0.5,
        "sm": 0.75,
        "md": 1.0,
        "lg": 1.5,
        "xl": 2.0,
        "2xl": 3.0,
    },
    "density_multipliers": {
        "compact": {
            "2xs": 1.0,
            "xs": 1.1,
            "sm": 1.2,
            "md": 1.5,
            "lg": 1.75,
            "xl": 2.0,
            "2xl": 2.25,
        },
        "comfortable": {
            "2xs": 1.4,
            "xs": 1.5,
            "sm": 1.6,
            "md": 2.0,
            "lg": 2.75,
            "xl": 3.0,
            "2xl": 3.25,
        },
    },
    "modifiers": [],
}

_SHAPE_TOKENS: dict[str, Any] = {
    "corner": {
        "none": "0px",
        "sm": "0.375rem",
        "md": "0.75rem",
        "lg": "1.5rem",
        "pill": "9999px",
    },
    "border_width": {
        "hairline": "1px",
        "regular": "2px",
        "bold": "4px",
    },
    "shadow": {
        "level_1": "0 1px 2px rgba(15, 23, 42, 0.06)",
        "level_2": "0 16px 48px rgba(15, 23, 42, 0.5)",
        "focus": "0 0 0 4px rgba(37, 99, 235, 0.35)",
    },
}

_MOTION_TOKENS: dict[str, Any] = {
    "duration": {
        "fast": "150ms",
        "standard": "250ms",
    },
    "easing": {
        "standard": "cubic-bezier(0.4, 0, 0.2, 1)",
        "decelerate": "cubic-bezier(0.0, 0, 0.2, 1)",
    },
    "focus": {
        "ring_width": "3px",
        "ring_offset": "2px",
    },
}

_ICONOGRAPHY_TOKENS: dict[str, Any] = {
    "size": "48px",
    "color": "",
    "spacing": "0.75rem",
}


def default_color_tokens() -> dict[str, Any]:
    return deepcopy(_COLOR_TOKENS)


def default_typography_tokens() -> dict[str, Any]:
    return deepcopy(_TYPOGRAPHY_TOKENS)


def default_spacing_tokens() -> dict[str, Any]:
    return deepcopy(_SPACING_TOKENS)


def default_shape_tokens() -> dict[str, Any]:
    return deepcopy(_SHAPE_TOKENS)


def default_motion_tokens() -> dict[str, Any]:
    return deepcopy(_MOTION_TOKENS)


def default_iconography_tokens() -> dict[str, Any]:
    return deepcopy(_ICONOGRAPHY_TOKENS)
