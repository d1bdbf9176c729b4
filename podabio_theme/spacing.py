from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from podabio_theme.token_defaults import default_spacing_tokens

DENSITIES = ("compact", "comfortable")
DEFAULT_DENSITY = "comfortable"


def resolve_density(
    page: Optional[Mapping[str, Any]],
    theme: Optional[Mapping[str, Any]] = None,
    fallback: Optional[str] = None,
) -> str:
    density = fallback or DEFAULT_DENSITY
    if page and page.get("layout_density"):
        density = page["layout_density"]
    elif theme and theme.get("layout_density"):
        density = theme["layout_density"]
    return density if density in DENSITIES else DEFAULT_DENSITY


def format_rem(value: float) -> str:
    formatted = f"{round(float(value), 4):.4f}".rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        formatted = "0"
    return f"{formatted}rem"


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def resolve_spacing(bundle: Mapping[str, Any], density: str) -> dict[str, Any]:
    """Scale ``base_scale`` by the multipliers for ``density``.

    Returns a copy of ``bundle`` with ``density``, ``values`` (rem strings keyed
    like ``base_scale``) and ``modifiers`` filled in.
    """
    defaults = default_spacing_tokens()
    if density not in DENSITIES:
        density = DEFAULT_DENSITY

    base_scale = bundle.get("base_scale")
    if not isinstance(base_scale, Mapping) or not base_scale:
        base_scale = defaults["base_scale"]

    multipliers_by_density = bundle.get("density_multipliers")
    multipliers: Any = None
    if isinstance(multipliers_by_density, Mapping):
        multipliers = multipliers_by_density.get(density)
    if not isinstance(multipliers, Mapping):
        multipliers = defaults["density_multipliers"].get(density, {})

    values: dict[str, str] = {}
    for key, base in base_scale.items():
        multiplier = _as_float(multipliers.get(key), 1.0) if key in multipliers else 1.0
        values[key] = format_rem(_as_float(base, 0.0) * multiplier)

    resolved = dict(bundle)
    resolved["density"] = density
    resolved["values"] = values
    if resolved.get("modifiers") is None:
        resolved["modifiers"] = []
    return resolved
