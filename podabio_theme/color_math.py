"""Pure color helpers shared by the accessor, compiler and generator.

All functions accept CSS hex strings (``#RGB`` or ``#RRGGBB``, ``#`` optional
where noted) and never raise on malformed input; callers get ``None`` or a
neutral value instead.
"""

from __future__ import annotations

import re
from typing import Optional

WHITE = "#ffffff"
BLACK = "#000000"

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_STRICT_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

_NEUTRAL_LUMINANCE = 0.5


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and bool(_STRICT_HEX_RE.match(value.strip()))


def hex_to_rgb(value: object) -> Optional[tuple[int, int, int]]:
    if not isinstance(value, str):
        return None
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    body = match.group(1)
    if len(body) == 3:
        body = "".join(ch * 2 for ch in body)
    return int(body[0:2], 16), int(body[2:4], 16), int(body[4:6], 16)


def rgb_to_hex(rgb: tuple[float, float, float], *, upper: bool = True) -> str:
    channels = [max(0, min(255, int(round(c)))) for c in rgb]
    fmt = "#{:02X}{:02X}{:02X}" if upper else "#{:02x}{:02x}{:02x}"
    return fmt.format(*channels)


def normalize_hex(value: object) -> Optional[str]:
    """Expand 3-digit hex and upper-case; ``None`` unless ``value`` is ``#RGB``/``#RRGGBB``."""
    if not is_hex_color(value):
        return None
    rgb = hex_to_rgb(value)
    if rgb is None:
        return None
    return rgb_to_hex(rgb)


def luminance(color: object) -> float:
    """WCAG relative luminance in [0, 1]; non-hex input reads as neutral 0.5."""
    rgb = hex_to_rgb(color)
    if rgb is None:
        return _NEUTRAL_LUMINANCE

    def to_linear(channel: int) -> float:
        v = channel / 255.0
        return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4

    r, g, b = (to_linear(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(a: object, b: object) -> float:
    la = luminance(a)
    lb = luminance(b)
    lighter, darker = (la, lb) if la >= lb else (lb, la)
    return (lighter + 0.05) / (darker + 0.05)


def mix(a: object, b: object, ratio: float) -> Optional[str]:
    rgb_a = hex_to_rgb(a)
    rgb_b = hex_to_rgb(b)
    if rgb_a is None or rgb_b is None:
        return None
    ratio = max(0.0, min(1.0, float(ratio)))
    mixed = tuple(ca * (1 - ratio) + cb * ratio for ca, cb in zip(rgb_a, rgb_b))
    return rgb_to_hex(mixed)  # type: ignore[arg-type]


def lighten(color: object, amount: float) -> Optional[str]:
    return mix(color, "#FFFFFF", amount)


def darken(color: object, amount: float) -> Optional[str]:
    return mix(color, "#000000", amount)


def adjust_brightness(color: object, delta: int) -> Optional[str]:
    """Add ``delta`` to every channel and clamp.

    Unlike :func:`lighten`/:func:`darken` this is a flat shift, used for simple
    tints and shades in generated palettes.
    """
    rgb = hex_to_rgb(color)
    if rgb is None:
        return None
    return rgb_to_hex(tuple(c + delta for c in rgb), upper=False)  # type: ignore[arg-type]


def hex_to_rgba(color: object, opacity: object) -> str:
    try:
        alpha = float(opacity)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        alpha = 0.5
    alpha = max(0.0, min(1.0, alpha))
    alpha_text = f"{alpha:g}"
    rgb = hex_to_rgb(color)
    if rgb is None:
        return f"rgba(255, 0, 255, {alpha_text})"
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha_text})"
