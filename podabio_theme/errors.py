from __future__ import annotations


class ThemeError(RuntimeError):
    """Base class for theme operation failures surfaced as results."""

    code = "theme_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ThemeValidationError(ThemeError):
    code = "validation"


class ThemeNotFoundError(ThemeError):
    code = "not_found"


class ThemeLimitExceededError(ThemeError):
    code = "limit_exceeded"


class ThemePersistenceError(ThemeError):
    code = "persistence"


class ColorExtractionError(RuntimeError):
    """Raised when a cover image cannot be fetched or decoded."""
