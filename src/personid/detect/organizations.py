"""Organization extractor.

An organization is a run of capitalised words that either ends in a legal
suffix (``Acme Corp``, ``Initech LLC``; the suffix is kept) or follows an
employment cue (``at X``, ``works at X``, ``employed by X``).  A leading
article is dropped.  Values are lowercased and must be 2–100 characters long.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import ORG_SUFFIXES
from .base import EvidenceToken, ExtractionContext, TokenType

__all__ = ["OrganizationExtractor", "get_extractor"]

_PHRASE = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*"
_SUFFIX = "|".join(ORG_SUFFIXES)

LEGAL_RX = re.compile(rf"\b{_PHRASE}\s+(?:{_SUFFIX})\b")
CUE_RX = re.compile(
    rf"\b(?:(?i:works?|working)\s+at|at|(?i:employed)\s+by)"
    rf"\s+({_PHRASE}(?:\s+(?:{_SUFFIX})\b)?)"
)

_LEADING_ARTICLES = ("The ", "A ", "An ")
_CONFIDENCE = 0.8


def _clean(value: str) -> str:
    for article in _LEADING_ARTICLES:
        if value.startswith(article):
            value = value[len(article) :]
    return value.strip().lower()


class OrganizationExtractor:
    """Extract organization names."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "organization"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract organization tokens from ``text``."""

        source = context.source_url if context is not None else ""
        candidates = [m.group(0) for m in LEGAL_RX.finditer(text.text)]
        candidates.extend(m.group(1) for m in CUE_RX.finditer(text.text))
        tokens: dict[str, EvidenceToken] = {}
        for candidate in candidates:
            value = _clean(candidate)
            if 2 <= len(value) <= 100 and value not in tokens:
                tokens[value] = EvidenceToken(TokenType.ORGANIZATION, value, _CONFIDENCE, source)
        return list(tokens.values())


def get_extractor() -> OrganizationExtractor:
    """Return an :class:`OrganizationExtractor` instance."""

    return OrganizationExtractor()
