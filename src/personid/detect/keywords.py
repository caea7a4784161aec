"""Salient keyword extractor.

Words longer than two characters that are not stop words become keywords when
they occur at least twice in a document or belong to the configured domain
vocabulary (roles, titles and multi-account terms such as ``backup``).
Words containing address punctuation (``@``, ``/``, inner dots) and pure
numbers are skipped since other extractors own them.  Confidence grows with
frequency: ``min(0.9, 0.3 + 0.1 * count)``.
"""

from __future__ import annotations

import re
from collections import Counter

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import KEYWORD_STOP_WORDS
from .base import EvidenceToken, ExtractionContext, TokenType, settings_from

__all__ = ["KeywordExtractor", "get_extractor"]

_EDGE_PUNCT_RX = re.compile(r"^[^\w]+|[^\w]+$")
_WORD_RX = re.compile(r"^\w+$")


def _candidate_words(folded: str) -> list[str]:
    words: list[str] = []
    for raw in folded.split():
        word = _EDGE_PUNCT_RX.sub("", raw)
        if len(word) <= 2 or not _WORD_RX.match(word) or word.isdigit():
            continue
        if word in KEYWORD_STOP_WORDS:
            continue
        words.append(word)
    return words


class KeywordExtractor:
    """Extract repeated or domain specific words."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "keyword"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract keyword tokens from ``text``."""

        settings = settings_from(context)
        source = context.source_url if context is not None else ""
        domain_words = {word.lower() for word in settings.domain_keywords}
        counts = Counter(_candidate_words(text.folded))
        tokens: list[EvidenceToken] = []
        for word, count in counts.items():
            if count >= 2 or word in domain_words:
                confidence = min(0.9, 0.3 + 0.1 * count)
                tokens.append(EvidenceToken(TokenType.KEYWORD, word, confidence, source))
        return tokens


def get_extractor() -> KeywordExtractor:
    """Return a :class:`KeywordExtractor` instance."""

    return KeywordExtractor()
