"""Core token model and extractor protocol.

Every extractor turns normalized document text into zero or more
:class:`EvidenceToken` objects.  Token values are lowercase so that
deduplication and cross-document comparison are case-insensitive.
Extractors never raise on text content: a candidate that fails validation is
skipped silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from ..config.schema import NormalizerSettings
from ..preprocess.normalizer import NormalizationResult


class TokenType(Enum):
    """Enumeration of evidence token types."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    LOCATION = "location"
    ORGANIZATION = "organization"
    DOMAIN = "domain"
    HANDLE = "handle"
    KEYWORD = "keyword"
    YEAR = "year"
    URL = "url"


@dataclass(slots=True, frozen=True)
class EvidenceToken:
    """A single typed fact extracted from a document.

    ``confidence`` must be between ``0`` and ``1``.  ``platform`` is only set
    for handle tokens.
    """

    type: TokenType
    value: str
    confidence: float
    source: str
    platform: str | None = None

    def __post_init__(self) -> None:  # noqa: D401 - simple validation
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0.0, 1.0]")

    @property
    def key(self) -> tuple[TokenType, str | None, str]:
        """Return the deduplication key of the token."""

        return (self.type, self.platform, self.value.lower())


@dataclass(slots=True, frozen=True)
class ExtractionContext:
    """Context information supplied to extractors."""

    source_url: str = ""
    current_year: int | None = None
    config: object | None = None


@runtime_checkable
class Extractor(Protocol):
    """Protocol for evidence extractors."""

    def name(self) -> str:
        """Return a short, stable identifier for the extractor."""

        ...

    def extract(
        self, text: NormalizationResult, context: "ExtractionContext | None" = None
    ) -> list[EvidenceToken]:
        """Extract tokens from ``text``.

        Parameters
        ----------
        text:
            Normalized document text, both case-preserving and folded.
        context:
            Optional :class:`ExtractionContext` carrying the source URL and
            configuration.
        """

        ...


def clamp(value: float) -> float:
    """Clamp ``value`` into ``[0, 1]``."""

    return max(0.0, min(1.0, value))


def settings_from(context: ExtractionContext | None) -> NormalizerSettings:
    """Return the normalizer settings carried by ``context`` or the defaults."""

    config = context.config if context is not None else None
    if isinstance(config, NormalizerSettings):
        return config
    return NormalizerSettings()


__all__ = [
    "TokenType",
    "EvidenceToken",
    "ExtractionContext",
    "Extractor",
    "clamp",
    "settings_from",
]
