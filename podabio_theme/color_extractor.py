from __future__ import annotations

import logging
import math
from io import BytesIO
from typing import Optional, Union
from urllib.parse import urlparse

import httpx
from PIL import Image

from podabio_theme.color_math import hex_to_rgb
from podabio_theme.config import settings
from podabio_theme.errors import ColorExtractionError

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = ("#2563eb", "#1d4ed8", "#3b82f6", "#60a5fa", "#93c5fd")

# Candidates closer than this (Euclidean RGB) to a selected color are treated as duplicates.
MIN_COLOR_DISTANCE = 30
QUANTIZE_STEP = 16
TARGET_SAMPLES = 10000


def default_palette(count: int = 5) -> list[str]:
    return list(DEFAULT_PALETTE[: max(0, count)])


def color_distance(a: str, b: str) -> float:
    rgb_a = hex_to_rgb(a)
    rgb_b = hex_to_rgb(b)
    if rgb_a is None or rgb_b is None:
        return float("inf")
    return math.sqrt(sum((ca - cb) ** 2 for ca, cb in zip(rgb_a, rgb_b)))


class ColorExtractor:
    """Pull a dominant-color palette out of a cover image.

    Any fetch or decode failure degrades to the default blue palette; callers
    never see an exception.
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        max_bytes: Optional[int] = None,
        max_dimension: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds or settings.COLOR_EXTRACTOR_TIMEOUT_SECONDS
        self.max_bytes = max_bytes or settings.COLOR_EXTRACTOR_MAX_BYTES
        self.max_dimension = max_dimension or settings.COLOR_EXTRACTOR_MAX_DIMENSION
        self.transport = transport

    def extract_colors(self, image_source: Union[bytes, str], count: int = 5) -> list[str]:
        if count <= 0:
            return []
        try:
            data = self._load(image_source)
            image = self._decode(data)
        except ColorExtractionError as exc:
            logger.warning("color_extractor.extract_failed", extra={"error": str(exc)})
            return default_palette(count)

        colors = self._dominant_colors(image)
        return self._pad(colors, count)

    def _load(self, image_source: Union[bytes, str]) -> bytes:
        if isinstance(image_source, (bytes, bytearray)):
            if not image_source:
                raise ColorExtractionError("empty_image")
            if len(image_source) > self.max_bytes:
                raise ColorExtractionError("image_too_large")
            return bytes(image_source)
        if isinstance(image_source, str):
            return self._fetch(image_source)
        raise ColorExtractionError(f"unsupported_source:{type(image_source).__name__}")

    def _fetch(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ColorExtractionError("invalid_url")

        timeout = httpx.Timeout(self.timeout_seconds, read=self.timeout_seconds)
        headers = {"User-Agent": settings.COLOR_EXTRACTOR_USER_AGENT, "Accept": "image/*"}
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True, transport=self.transport) as client:
                with client.stream("GET", url, headers=headers) as resp:
                    resp.raise_for_status()
                    data = bytearray()
                    for chunk in resp.iter_bytes():
                        data.extend(chunk)
                        if len(data) > self.max_bytes:
                            raise ColorExtractionError("image_too_large")
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            logger.warning("color_extractor.fetch_failed", extra={"url": url, "error": str(exc)})
            raise ColorExtractionError(f"fetch_failed:{exc}") from exc
        if not data:
            raise ColorExtractionError("empty_image")
        return bytes(data)

    def _decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(BytesIO(data)) as img:
                image = img.convert("RGB")
        except Exception as exc:  # noqa: BLE001
            logger.warning("color_extractor.decode_failed", extra={"error": str(exc)})
            raise ColorExtractionError(f"decode_failed:{exc}") from exc

        width, height = image.size
        if width > self.max_dimension or height > self.max_dimension:
            ratio = min(self.max_dimension / width, self.max_dimension / height)
            image = image.resize((max(1, int(width * ratio)), max(1, int(height * ratio))))
        return image

    def _dominant_colors(self, image: Image.Image) -> list[str]:
        width, height = image.size
        stride = max(1, int(math.sqrt(width * height / TARGET_SAMPLES)))
        pixels = image.load()

        counts: dict[tuple[int, int, int], int] = {}
        representatives: dict[tuple[int, int, int], tuple[int, int, int]] = {}
        for y in range(0, height, stride):
            for x in range(0, width, stride):
                r, g, b = pixels[x, y][:3]
                bucket = (
                    (r // QUANTIZE_STEP) * QUANTIZE_STEP,
                    (g // QUANTIZE_STEP) * QUANTIZE_STEP,
                    (b // QUANTIZE_STEP) * QUANTIZE_STEP,
                )
                if bucket not in counts:
                    counts[bucket] = 0
                    representatives[bucket] = (r, g, b)
                counts[bucket] += 1

        # sorted() is stable, so ties keep first-seen order.
        ranked = sorted(counts, key=lambda bucket: counts[bucket], reverse=True)

        selected: list[str] = []
        for bucket in ranked:
            candidate = "#{:02x}{:02x}{:02x}".format(*representatives[bucket])
            if all(color_distance(candidate, existing) >= MIN_COLOR_DISTANCE for existing in selected):
                selected.append(candidate)
        return selected

    def _pad(self, colors: list[str], count: int) -> list[str]:
        padded = list(colors[:count])
        for color in DEFAULT_PALETTE:
            if len(padded) >= count:
                break
            if color not in padded:
                padded.append(color)
        index = 0
        while len(padded) < count:
            padded.append(DEFAULT_PALETTE[index % len(DEFAULT_PALETTE)])
            index += 1
        return padded[:count]
