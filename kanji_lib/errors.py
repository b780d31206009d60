"""Error taxonomy for the kanji stroke viewer.

Every error raised across a component boundary derives from KanjiError so
callers can catch the whole family at once:

    ConfigurationError: No asset path can be resolved for an entry.
    NetworkError: The asset fetch failed or returned a non-success status.
    ParseError: The vector markup is empty or malformed.
    NormalizationReject: A record has no determinable character identity.

Normalizer and loader failures are per-item: batch helpers drop rejected
records and keep going.
"""

from __future__ import annotations


class KanjiError(Exception):
    """Base class for all kanji_lib errors."""


class ConfigurationError(KanjiError):
    """Raised when an entry has neither a character nor an explicit asset path."""


class NetworkError(KanjiError):
    """Raised when an asset cannot be fetched.

    Attributes:
        status: HTTP status code, or None for transport failures.
        cause: The underlying exception, if any.
        url: The URL or file path that was requested.
    """

    def __init__(self, message: str, status: int | None = None,
                 cause: BaseException | None = None, url: str = ''):
        super().__init__(message)
        self.status = status
        self.cause = cause
        self.url = url


class ParseError(KanjiError):
    """Raised when vector markup is empty or cannot be parsed."""


class NormalizationReject(KanjiError):
    """Raised by a schema decoder when no character identity can be found."""
