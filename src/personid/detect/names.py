"""Person name extractor based on title-case heuristics.

Candidates are runs of two to four capitalised words read from the
case-preserving text.  Leading and trailing words that cannot be part of a
personal name (stop words, honorifics, platform names, organisation words,
calendar words, job titles) are peeled off; a candidate that still contains
such a word inside is discarded.

Scoring
-------
``0.5`` base, ``+0.2`` for a length of 5–50 characters, ``+0.2`` for two to
four words, ``+0.1`` when every word is capitalised and ``-0.5`` when the name
contains a blacklisted word such as ``admin`` or ``test``.  Names scoring at or
below ``min_name_confidence`` are dropped.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import DOMAIN_KEYWORDS, KEYWORD_STOP_WORDS, ORG_SUFFIXES, PLATFORM_NAMES
from .base import EvidenceToken, ExtractionContext, TokenType, clamp, settings_from

__all__ = ["NameExtractor", "name_confidence", "get_extractor"]

_WORD = r"[A-Z][a-z]+(?:['-][A-Z]?[a-z]+)?"
NAME_RX: re.Pattern[str] = re.compile(rf"\b{_WORD}(?:\s+{_WORD}){{1,3}}\b")
_CAPITALISED_RX = re.compile(r"^[A-Z][a-z]+(?:['-][A-Z]?[a-z]+)?$")

HONORIFICS: frozenset[str] = frozenset({"mr", "mrs", "ms", "miss", "dr", "prof", "sir", "dame"})

ORG_WORDS: frozenset[str] = frozenset(
    {s.lower() for s in ORG_SUFFIXES}
    | {
        "university", "college", "school", "institute", "bank", "group",
        "foundation", "labs", "lab", "studio", "studios", "agency", "partners",
        "holdings", "association", "society", "department", "club", "team",
    }
)  # fmt: skip

CALENDAR_WORDS: frozenset[str] = frozenset(
    {
        "january", "february", "march", "april", "may", "june", "july",
        "august", "september", "october", "november", "december", "monday",
        "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    }
)  # fmt: skip

_NOT_NAME_WORDS: frozenset[str] = (
    KEYWORD_STOP_WORDS
    | PLATFORM_NAMES
    | ORG_WORDS
    | CALENDAR_WORDS
    | HONORIFICS
    | frozenset(DOMAIN_KEYWORDS)
    | frozenset({"meet", "hello", "welcome", "contact", "dear", "thanks", "posted", "by"})
)


def name_confidence(name: str, blacklist: list[str] | tuple[str, ...] = ()) -> float:
    """Return the confidence that ``name`` (original case) is a personal name."""

    score = 0.5
    if 5 <= len(name) <= 50:
        score += 0.2
    words = name.split()
    if 2 <= len(words) <= 4:
        score += 0.2
    if words and all(_CAPITALISED_RX.match(word) for word in words):
        score += 0.1
    lowered = name.lower()
    if any(bad in lowered for bad in blacklist):
        score -= 0.5
    return clamp(score)


def _trim_candidate(candidate: str) -> str | None:
    words = candidate.split()
    while words and words[0].lower() in _NOT_NAME_WORDS:
        words.pop(0)
    while words and words[-1].lower() in _NOT_NAME_WORDS:
        words.pop()
    if not 2 <= len(words) <= 4:
        return None
    if any(word.lower() in _NOT_NAME_WORDS for word in words):
        return None
    return " ".join(words)


class NameExtractor:
    """Extract personal names from title-case runs."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "name"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract name tokens from the case-preserving form of ``text``."""

        settings = settings_from(context)
        source = context.source_url if context is not None else ""
        tokens: dict[str, EvidenceToken] = {}
        for match in NAME_RX.finditer(text.text):
            candidate = _trim_candidate(match.group(0))
            if candidate is None:
                continue
            confidence = name_confidence(candidate, settings.name_blacklist)
            if confidence <= settings.min_name_confidence:
                continue
            value = candidate.lower()
            if value not in tokens:
                tokens[value] = EvidenceToken(TokenType.NAME, value, confidence, source)
        return list(tokens.values())


def get_extractor() -> NameExtractor:
    """Return a :class:`NameExtractor` instance."""

    return NameExtractor()
