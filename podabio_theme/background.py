from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional

BackgroundKind = Literal["solid", "gradient", "image"]

_GRADIENT_RE = re.compile(r"^\s*(repeating-)?(linear|radial|conic)-gradient\(", re.IGNORECASE)
_URL_FUNCTION_RE = re.compile(r"^\s*url\(\s*(['\"]?)(.*?)\1\s*\)\s*$", re.IGNORECASE)
_HTTP_URL_RE = re.compile(r"^\s*https?://", re.IGNORECASE)


@dataclass(frozen=True)
class Background:
    """A page, widget or border fill.

    Stored values are plain CSS strings whose type is sniffed from their content;
    ``parse`` and ``css`` translate at that edge only.
    """

    kind: BackgroundKind
    value: str

    @classmethod
    def solid(cls, color: str) -> "Background":
        return cls(kind="solid", value=color.strip())

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Background"]:
        if raw is None:
            return None
        text = str(raw).strip()
        if not text or text.lower() == "null":
            return None
        if _GRADIENT_RE.match(text):
            return cls(kind="gradient", value=text)
        url_match = _URL_FUNCTION_RE.match(text)
        if url_match:
            return cls(kind="image", value=url_match.group(2).strip())
        if _HTTP_URL_RE.match(text):
            return cls(kind="image", value=text)
        return cls(kind="solid", value=text)

    @property
    def is_gradient(self) -> bool:
        return self.kind == "gradient"

    def css(self) -> str:
        if self.kind == "image":
            escaped = self.value.replace('"', "%22")
            return f'url("{escaped}") center / cover no-repeat'
        return self.value

    def __str__(self) -> str:
        return self.css()
