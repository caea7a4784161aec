"""URL extractor.

Links are matched in the folded text, trimmed of trailing prose punctuation
and classified with :func:`personid.utils.urls.validate_url`.  Rejected URLs
(generic pages, tracking links) are dropped; accepted ones are stored in
normalized form with confidence ``0.9`` for profile URLs and ``0.6`` for
other sites.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import rtrim_index
from ..utils.urls import validate_url
from .base import EvidenceToken, ExtractionContext, TokenType

__all__ = ["UrlExtractor", "get_extractor"]

URL_RX: re.Pattern[str] = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+")

PROFILE_CONFIDENCE = 0.9
SITE_CONFIDENCE = 0.6


class UrlExtractor:
    """Extract and normalize links."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "url"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract URL tokens from ``text``."""

        source = context.source_url if context is not None else ""
        folded = text.folded
        tokens: dict[str, EvidenceToken] = {}
        for match in URL_RX.finditer(folded):
            end = rtrim_index(folded, match.end())
            result = validate_url(folded[match.start() : end])
            if not result.is_valid or result.normalized_url is None:
                continue
            value = result.normalized_url
            confidence = PROFILE_CONFIDENCE if result.is_person_profile else SITE_CONFIDENCE
            if value not in tokens:
                tokens[value] = EvidenceToken(
                    TokenType.URL, value, confidence, source, result.platform
                )
        return list(tokens.values())


def get_extractor() -> UrlExtractor:
    """Return a :class:`UrlExtractor` instance."""

    return UrlExtractor()
