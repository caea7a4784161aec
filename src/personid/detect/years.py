"""Year extractor.

Four digit years starting with ``19`` or ``20`` are kept when they fall within
``1950`` and the year after the current one.  The current year comes from the
extraction context or configuration so that results are reproducible.
"""

from __future__ import annotations

import re
from datetime import date

from ..preprocess.normalizer import NormalizationResult
from .base import EvidenceToken, ExtractionContext, TokenType, settings_from

__all__ = ["YearExtractor", "get_extractor", "MIN_YEAR"]

YEAR_RX: re.Pattern[str] = re.compile(r"\b(?:19|20)\d{2}\b")

MIN_YEAR = 1950
_CONFIDENCE = 0.9


class YearExtractor:
    """Extract plausible biographical years."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "year"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract year tokens from ``text``."""

        settings = settings_from(context)
        source = context.source_url if context is not None else ""
        current = (
            (context.current_year if context is not None else None)
            or settings.current_year
            or date.today().year
        )
        tokens: dict[str, EvidenceToken] = {}
        for match in YEAR_RX.finditer(text.folded):
            value = match.group(0)
            if MIN_YEAR <= int(value) <= current + 1 and value not in tokens:
                tokens[value] = EvidenceToken(TokenType.YEAR, value, _CONFIDENCE, source)
        return list(tokens.values())


def get_extractor() -> YearExtractor:
    """Return a :class:`YearExtractor` instance."""

    return YearExtractor()
