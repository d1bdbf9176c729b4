from __future__ import annotations

import logging
import random
from typing import Any, Optional, Sequence, Union

from podabio_theme.color_extractor import DEFAULT_PALETTE, ColorExtractor
from podabio_theme.color_math import (
    BLACK,
    WHITE,
    adjust_brightness,
    contrast_ratio,
    is_hex_color,
    luminance,
)
from podabio_theme.config import settings

logger = logging.getLogger(__name__)

PALETTE_SIZE = 5
DEFAULT_THEME_NAME = "Podcast Theme"

PAGE_HEADING_FONT = "Playfair Display"
PAGE_BODY_FONT = "Source Sans Pro"
WIDGET_HEADING_FONT = "Montserrat"
WIDGET_BODY_FONT = "Open Sans"

TITLE_MIN_CONTRAST = 3.0
BODY_MIN_CONTRAST = 4.5
# Positional minimums applied after a shuffle, for slots 1-4 against slot 0.
SHUFFLE_MIN_CONTRAST = (3.0, 4.5, 2.5, 2.0)

DARK_FALLBACK = "#1a1a1a"
LIGHT_FALLBACK = "#f0f0f0"


def ensure_contrast(foreground: str, background: str, min_ratio: float) -> str:
    """Return ``foreground`` or the nearest replacement that reaches ``min_ratio``.

    Tries pure white or black for the background's side, then a flat 30-step
    shift of the foreground, then a fixed near-black or near-white.
    """
    if contrast_ratio(foreground, background) >= min_ratio:
        return foreground

    bg_luminance = luminance(background)
    if bg_luminance < 0.5 and contrast_ratio(WHITE, background) >= min_ratio:
        return WHITE
    if bg_luminance >= 0.5 and contrast_ratio(BLACK, background) >= min_ratio:
        return BLACK

    if bg_luminance > 0.5:
        adjusted = adjust_brightness(foreground, -30)
        if adjusted and contrast_ratio(adjusted, background) >= min_ratio:
            return adjusted
        return DARK_FALLBACK

    adjusted = adjust_brightness(foreground, 30)
    if adjusted and contrast_ratio(adjusted, background) >= min_ratio:
        return adjusted
    return LIGHT_FALLBACK


def truncate_string(value: str, max_length: int) -> str:
    if len(value) <= max_length:
        return value
    return value[: max(0, max_length - 3)] + "..."


def pad_palette(colors: Sequence[str]) -> list[str]:
    padded = list(colors)
    if len(padded) < 2:
        padded.extend(DEFAULT_PALETTE[: 2 - len(padded)])
    if len(padded) < PALETTE_SIZE:
        padded.extend(DEFAULT_PALETTE[: PALETTE_SIZE - len(padded)])
    return padded


def map_podcast_data(
    podcast_name: Optional[str] = None,
    podcast_description: Optional[str] = None,
) -> dict[str, str]:
    page_data: dict[str, str] = {}
    if podcast_name:
        page_data["podcast_name"] = truncate_string(podcast_name, settings.GENERATOR_PODCAST_NAME_MAX_LENGTH)
    if podcast_description:
        page_data["podcast_description"] = truncate_string(
            podcast_description, settings.GENERATOR_PODCAST_DESCRIPTION_MAX_LENGTH
        )
    return page_data


def shuffle_colors(colors: Sequence[str], rng: Optional[random.Random] = None) -> list[str]:
    """Pad to five, permute, then re-check slots 1-4 against the new slot 0.

    Contrast minimums belong to the slot, not the color, so the same color can
    be held to a different bar from one shuffle to the next.
    """
    shuffled = pad_palette(colors)
    (rng or random).shuffle(shuffled)
    background = shuffled[0]
    for slot, min_ratio in enumerate(SHUFFLE_MIN_CONTRAST, start=1):
        shuffled[slot] = ensure_contrast(shuffled[slot], background, min_ratio)
    return shuffled


def _color_at(colors: Sequence[Any], index: int) -> Optional[str]:
    if index < len(colors) and is_hex_color(colors[index]):
        return colors[index].strip()
    return None


class PodcastThemeGenerator:
    """Builds a complete theme record from a 2-5 color palette."""

    def __init__(self, extractor: Optional[ColorExtractor] = None) -> None:
        self.extractor = extractor or ColorExtractor()

    def generate_theme(
        self,
        colors: Sequence[str],
        podcast_name: Optional[str] = None,
        podcast_description: Optional[str] = None,
    ) -> dict[str, Any]:
        """Build a theme record from a five-color palette.

        Slot 1 is the page title color. The record has no separate
        ``page_title_color`` key; the title color is stored at
        ``typography_tokens.color.heading``, mirrored in
        ``color_tokens.semantic.text.primary``.
        """
        palette = pad_palette(colors)

        page_background = _color_at(palette, 0) or DEFAULT_PALETTE[0]
        title_color = _color_at(palette, 1) or adjust_brightness(page_background, -30)
        body_color = _color_at(palette, 2) or adjust_brightness(page_background, -50)
        widget_background = _color_at(palette, 3) or adjust_brightness(page_background, 10)
        accent_color = _color_at(palette, 4) or page_background

        title_color = ensure_contrast(title_color, page_background, TITLE_MIN_CONTRAST)
        body_color = ensure_contrast(body_color, page_background, BODY_MIN_CONTRAST)
        widget_text_color = ensure_contrast(body_color, widget_background, BODY_MIN_CONTRAST)

        gradient_end = _color_at(palette, 1) or adjust_brightness(page_background, -20)
        gradient = f"linear-gradient(135deg, {page_background} 0%, {gradient_end} 100%)"

        text_colors = {
            "heading": title_color,
            "body": body_color,
            "widget_heading": widget_text_color,
            "widget_body": widget_text_color,
        }
        title_shadow_color = adjust_brightness(title_color, -40)
        title_border_color = adjust_brightness(title_color, -20)

        theme: dict[str, Any] = {
            "name": (
                truncate_string(podcast_name, settings.GENERATOR_THEME_NAME_MAX_LENGTH)
                if podcast_name
                else DEFAULT_THEME_NAME
            ),
            "color_tokens": {
                "gradient": {
                    "primary": {"type": "gradient", "value": gradient},
                    "secondary": {"type": "solid", "value": adjust_brightness(accent_color, -20)},
                },
                "semantic": {
                    "text": {"primary": title_color, "secondary": body_color},
                    "background": {"primary": gradient, "secondary": widget_background},
                    "accent": {"primary": accent_color},
                },
                "core": {"typography": {"color": dict(text_colors)}},
            },
            "typography_tokens": {
                "font": {
                    "heading": PAGE_HEADING_FONT,
                    "body": PAGE_BODY_FONT,
                    "widget_heading": WIDGET_HEADING_FONT,
                    "widget_body": WIDGET_BODY_FONT,
                },
                "color": dict(text_colors),
                "effect": {
                    "heading": "shadow",
                    "shadow": {"color": title_shadow_color, "intensity": 0.8, "depth": 3, "blur": 6},
                    "border": {"color": title_border_color, "width": 3},
                },
            },
            "page_background": gradient,
            "widget_background": widget_background,
            "widget_border_color": adjust_brightness(widget_background, -15),
            "page_primary_font": PAGE_HEADING_FONT,
            "page_secondary_font": PAGE_BODY_FONT,
            "widget_primary_font": WIDGET_HEADING_FONT,
            "widget_secondary_font": WIDGET_BODY_FONT,
            "page_name_effect": "shadow",
            "page_name_shadow_color": title_shadow_color,
            "page_name_shadow_intensity": 0.8,
            "page_name_shadow_depth": 3,
            "page_name_shadow_blur": 6,
            "page_name_border_color": title_border_color,
            "page_name_border_width": 3,
            "profile_image_radius": 15,
            "profile_image_effect": "shadow",
            "profile_image_shadow_color": "#000000",
            "profile_image_shadow_intensity": 0.4,
            "profile_image_shadow_depth": 4,
            "profile_image_shadow_blur": 12,
            "widget_styles": {
                "border_width": 2,
                "border_radius": 12,
                "glow_enabled": True,
                "glow_color": accent_color,
                "glow_width": 8,
                "glow_intensity": 0.6,
                "glow_blur": "medium",
            },
        }
        theme.update(map_podcast_data(podcast_name, podcast_description))
        return theme

    def generate_theme_from_image(
        self,
        image_source: Union[bytes, str],
        podcast_name: Optional[str] = None,
        podcast_description: Optional[str] = None,
        count: int = PALETTE_SIZE,
    ) -> dict[str, Any]:
        colors = self.extractor.extract_colors(image_source, count)
        logger.info("theme_generator.palette_extracted", extra={"colors": colors})
        return self.generate_theme(colors, podcast_name, podcast_description)

    def shuffle_colors(self, colors: Sequence[str], rng: Optional[random.Random] = None) -> list[str]:
        return shuffle_colors(colors, rng)
