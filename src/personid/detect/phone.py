"""Phone number extractor.

Candidates come from two passes over the folded text:

1. ``PhoneNumberMatcher`` from
   `phonenumbers <https://github.com/daviddrysdale/python-phonenumbers>`_
   with ``POSSIBLE`` leniency, which understands international groupings
   such as ``+44 20 7946 0958`` for the configured default region.
2. Two permissive patterns (North American and generic international
   grouping) for numbers the matcher rejects.  A pattern hit overlapping a
   matcher span is skipped so that a tail of an international number never
   becomes a token of its own.

Each candidate is reduced to its digits and only digit strings of 10–15
characters survive.  A number that is valid for the default region (or
carries an explicit ``+`` country code) scores ``0.9``, the rest keep the
base ``0.8``.  Tokens with the same digits collapse to the best score.
"""

from __future__ import annotations

import re
from typing import Iterator

from phonenumbers import (
    Leniency,
    NumberParseException,
    PhoneNumberMatcher,
    is_valid_number,
    parse,
)

from ..preprocess.normalizer import NormalizationResult
from .base import EvidenceToken, ExtractionContext, TokenType, settings_from

__all__ = ["PhoneExtractor", "get_extractor"]

_US_RX = re.compile(r"(?<![\w+])\+?1?[-.\s]?\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})(?!\d)")
_INTL_RX = re.compile(
    r"(?<![\w+])\+?(\d{1,3})[-.\s]?(\d{3,4})[-.\s]?(\d{3,4})[-.\s]?(\d{3,4})(?!\d)"
)

_LENIENCY = int(Leniency.POSSIBLE)
_BASE_CONFIDENCE = 0.8
_VALID_CONFIDENCE = 0.9
_MIN_DIGITS = 10
_MAX_DIGITS = 15


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def _is_valid(candidate: str, region: str) -> bool:
    try:
        number = parse(candidate.strip(), region)
    except NumberParseException:
        return False
    return is_valid_number(number)


def _candidates(text: str, region: str, leniency: int) -> Iterator[tuple[str, bool]]:
    """Yield ``(raw, valid)`` pairs from both discovery passes."""

    spans: list[tuple[int, int]] = []
    for match in PhoneNumberMatcher(text, region, leniency=leniency):
        spans.append((match.start, match.end))
        yield match.raw_string, is_valid_number(match.number)
    for rx in (_US_RX, _INTL_RX):
        for hit in rx.finditer(text):
            if any(hit.start() < end and start < hit.end() for start, end in spans):
                continue
            raw = hit.group(0)
            yield raw, _is_valid(raw, region)


class PhoneExtractor:
    """Extract phone numbers as digit strings."""

    def __init__(self, leniency: int = _LENIENCY) -> None:
        self._leniency = leniency

    def name(self) -> str:  # pragma: no cover - trivial
        return "phone"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract phone tokens from ``text``."""

        settings = settings_from(context)
        source = context.source_url if context is not None else ""
        tokens: dict[str, EvidenceToken] = {}
        for raw, valid in _candidates(text.folded, settings.default_region, self._leniency):
            digits = _digits(raw)
            if not _MIN_DIGITS <= len(digits) <= _MAX_DIGITS:
                continue
            confidence = _VALID_CONFIDENCE if valid else _BASE_CONFIDENCE
            previous = tokens.get(digits)
            if previous is None or previous.confidence < confidence:
                tokens[digits] = EvidenceToken(TokenType.PHONE, digits, confidence, source)
        return list(tokens.values())


def get_extractor() -> PhoneExtractor:
    """Return a :class:`PhoneExtractor` instance."""

    return PhoneExtractor()
