"""Exception types raised by the desahogo package."""

from __future__ import annotations


class DesahogoError(Exception):
    """Base class for every error raised by desahogo."""


class ConfigValidationError(DesahogoError):
    """A moderation configuration update was rejected."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class LexiconError(DesahogoError):
    """A lexicon file could not be loaded or contains an invalid pattern."""


class InvalidContentTypeError(DesahogoError, ValueError):
    """A submission named a content type the moderator does not know."""
