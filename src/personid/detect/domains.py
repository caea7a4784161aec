"""Domain name extractor.

Domains are read from the folded text, including the host part of email
addresses and URLs.  A candidate must have valid labels, an alphabetic
top-level domain and at most 253 characters.  ``@name.tld`` mentions are
social handles rather than hosts, file names such as ``photo.jpg`` are not
hosts, and social platform hosts are skipped because handles and profile URLs
already carry them.  A ``www.`` prefix is removed.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.urls import is_social_platform
from .base import EvidenceToken, ExtractionContext, TokenType

__all__ = ["DomainExtractor", "valid_domain", "get_extractor"]

DOMAIN_RX: re.Pattern[str] = re.compile(
    r"(?<![\w.-])((?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63})(?![\w@-])"
)

FILE_EXTENSIONS: frozenset[str] = frozenset(
    {"jpg", "jpeg", "png", "gif", "svg", "webp", "html", "htm", "php", "pdf", "js", "css", "txt"}
)

_CONFIDENCE = 0.6


def valid_domain(domain: str) -> bool:
    """Return ``True`` when ``domain`` is a syntactically valid host name."""

    if len(domain) > 253 or ".." in domain:
        return False
    labels = domain.split(".")
    if len(labels) < 2:
        return False
    tld = labels[-1]
    if not tld.isalpha() or not 2 <= len(tld) <= 63:
        return False
    return all(label and not label.startswith("-") and not label.endswith("-") for label in labels)


def _is_handle_mention(text: str, start: int) -> bool:
    if start == 0 or text[start - 1] != "@":
        return False
    return start < 2 or not (text[start - 2].isalnum() or text[start - 2] in "._%+-")


class DomainExtractor:
    """Extract host names."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "domain"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract domain tokens from ``text``."""

        source = context.source_url if context is not None else ""
        folded = text.folded
        tokens: dict[str, EvidenceToken] = {}
        for match in DOMAIN_RX.finditer(folded):
            if _is_handle_mention(folded, match.start(1)):
                continue
            domain = match.group(1)
            if domain.startswith("www."):
                domain = domain[4:]
            if domain.rsplit(".", 1)[-1] in FILE_EXTENSIONS:
                continue
            if not valid_domain(domain) or is_social_platform(domain):
                continue
            if domain not in tokens:
                tokens[domain] = EvidenceToken(TokenType.DOMAIN, domain, _CONFIDENCE, source)
        return list(tokens.values())


def get_extractor() -> DomainExtractor:
    """Return a :class:`DomainExtractor` instance."""

    return DomainExtractor()
