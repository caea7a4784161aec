"""Location extractor driven by textual cues.

Recognised forms (read from the case-preserving text):

* ``City, ST`` with a two-letter upper-case region code; the city is kept
* ``based in X``, ``lives in X``, ``located in X``
* ``X area`` such as ``Bay Area``

``X`` is a run of capitalised words.  Values are lowercased and must be 2–100
characters long and not purely numeric.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from .base import EvidenceToken, ExtractionContext, TokenType

__all__ = ["LocationExtractor", "get_extractor"]

_PHRASE = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*"

LOCATION_RXS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\b({_PHRASE}),\s*[A-Z]{{2}}\b"),
    re.compile(rf"\b(?i:based|lives|living|located)\s+in\s+({_PHRASE})"),
    re.compile(rf"\b({_PHRASE})\s+(?i:area)\b"),
)

_CONFIDENCE = 0.7


def _valid_location(value: str) -> bool:
    return 2 <= len(value) <= 100 and not value.isdigit()


class LocationExtractor:
    """Extract place names following location cues."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "location"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract location tokens from ``text``."""

        source = context.source_url if context is not None else ""
        tokens: dict[str, EvidenceToken] = {}
        for rx in LOCATION_RXS:
            for match in rx.finditer(text.text):
                value = match.group(1).strip().lower()
                if _valid_location(value) and value not in tokens:
                    tokens[value] = EvidenceToken(TokenType.LOCATION, value, _CONFIDENCE, source)
        return list(tokens.values())


def get_extractor() -> LocationExtractor:
    """Return a :class:`LocationExtractor` instance."""

    return LocationExtractor()
