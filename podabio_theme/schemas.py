from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from podabio_theme.background import Background

SpatialEffect = Literal["none", "glass", "depth", "floating", "tilt"]
LayoutDensity = Literal["compact", "comfortable"]

JsonField = Union[dict[str, Any], list[Any], str]


class FontPair(BaseModel):
    primary_font: str
    secondary_font: str


class ThemeColors(BaseModel):
    primary: str
    secondary: str
    accent: str


class ThemeTokens(BaseModel):
    model_config = ConfigDict(extra="allow")

    colors: dict[str, Any] = Field(default_factory=dict)
    typography: dict[str, Any] = Field(default_factory=dict)
    spacing: dict[str, Any] = Field(default_factory=dict)
    shape: dict[str, Any] = Field(default_factory=dict)
    motion: dict[str, Any] = Field(default_factory=dict)
    iconography: dict[str, Any] = Field(default_factory=dict)
    layout_density: LayoutDensity = "comfortable"


class ResolvedTheme(BaseModel):
    colors: ThemeColors
    fonts: FontPair
    page_fonts: FontPair
    widget_fonts: FontPair
    page_background: Background
    widget_background: Background
    widget_border_color: Background
    widget_styles: dict[str, Any]
    spatial_effect: SpatialEffect
    tokens: ThemeTokens
    layout_density: LayoutDensity
    legacy_color_overrides: bool = False


class ThemeData(BaseModel):
    """Optional theme fields accepted by create and update.

    JSON-valued fields take either a mapping or an already-encoded string.
    Only fields explicitly set are written on update.
    """

    model_config = ConfigDict(extra="ignore")

    colors: Optional[JsonField] = None
    fonts: Optional[JsonField] = None
    page_background: Optional[str] = None
    widget_background: Optional[str] = None
    widget_border_color: Optional[str] = None
    page_primary_font: Optional[str] = None
    page_secondary_font: Optional[str] = None
    widget_primary_font: Optional[str] = None
    widget_secondary_font: Optional[str] = None
    widget_styles: Optional[JsonField] = None
    spatial_effect: Optional[str] = None
    color_tokens: Optional[JsonField] = None
    typography_tokens: Optional[JsonField] = None
    spacing_tokens: Optional[JsonField] = None
    shape_tokens: Optional[JsonField] = None
    motion_tokens: Optional[JsonField] = None
    iconography_tokens: Optional[JsonField] = None
    layout_density: Optional[str] = None
    categories: Optional[JsonField] = None
    tags: Optional[JsonField] = None


class ThemeOperationResult(BaseModel):
    success: bool
    theme_id: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
