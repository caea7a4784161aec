"""Structured evidence records and the evidence normalizer.

:func:`normalize` turns raw page text into a :class:`NormalizedEvidence`
record: the text is normalized once (see
:mod:`personid.preprocess.normalizer`), every extractor runs over it, tokens
are deduplicated per ``(type, platform, value)`` keeping the most confident
one, and the surviving values are grouped by type in first-seen order.

Document confidence
-------------------
Each token category carries a weight (names ``0.3``, emails ``0.25``, handles
``0.2``, organizations ``0.1``, phones ``0.1``, locations ``0.05``).  The
document confidence is the summed weight of the categories that are present
divided by the summed weight of all categories, so an empty document scores
``0`` and a document with every category scores ``1``.

Hints
-----
Upstream collectors may attach a ``handle_hint``/``platform_hint`` to a
document.  Hints are not trusted blindly: a hinted handle is added (with
confidence ``0.7``) only when it passes the handle validator and does not
contradict the profile handle found in the document's own source URL.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..config.schema import NormalizerSettings
from ..detect import default_extractors
from ..detect.base import EvidenceToken, ExtractionContext, Extractor, TokenType
from ..utils.urls import profile_url, validate_social_handle, validate_url
from .normalizer import normalize_text

__all__ = [
    "CATEGORY_WEIGHTS",
    "EvidenceDocument",
    "SocialHandle",
    "NormalizedEvidence",
    "document_confidence",
    "trusted_hint",
    "EvidenceNormalizer",
    "normalize",
    "normalize_document",
]

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS: dict[TokenType, float] = {
    TokenType.NAME: 0.3,
    TokenType.EMAIL: 0.25,
    TokenType.HANDLE: 0.2,
    TokenType.ORGANIZATION: 0.1,
    TokenType.LOCATION: 0.05,
    TokenType.PHONE: 0.1,
}

HINT_CONFIDENCE = 0.7


@dataclass(slots=True, frozen=True)
class EvidenceDocument:
    """One collected document: its position, origin and raw text."""

    index: int
    source_url: str
    raw_text: str
    platform_hint: str | None = None
    handle_hint: str | None = None


@dataclass(slots=True, frozen=True)
class SocialHandle:
    """A handle on a platform with its profile URL."""

    platform: str
    handle: str
    url: str | None = None
    confidence: float = 0.0


@dataclass(slots=True, frozen=True)
class NormalizedEvidence:
    """Deduplicated, typed facts extracted from a single document."""

    names: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    phones: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    handles: tuple[SocialHandle, ...] = ()
    keywords: tuple[str, ...] = ()
    years: tuple[int, ...] = ()
    urls: tuple[str, ...] = ()
    confidence: float = 0.0
    tokens: tuple[EvidenceToken, ...] = field(default=(), repr=False)

    def all_tokens(self) -> set[str]:
        """Return the lowercase token set used for Jaccard similarity."""

        values: set[str] = set()
        values.update(self.names)
        values.update(self.emails)
        values.update(h.handle for h in self.handles)
        values.update(self.organizations)
        values.update(self.locations)
        values.update(self.domains)
        values.update(self.keywords)
        return {v.lower() for v in values}

    def handle_keys(self) -> set[tuple[str, str]]:
        """Return the ``(platform, handle)`` pairs of the document."""

        return {(h.platform, h.handle) for h in self.handles}

    def to_dict(self) -> dict[str, object]:
        """Return a JSON friendly representation."""

        return {
            "names": list(self.names),
            "emails": list(self.emails),
            "phones": list(self.phones),
            "locations": list(self.locations),
            "organizations": list(self.organizations),
            "domains": list(self.domains),
            "handles": [
                {
                    "platform": h.platform,
                    "handle": h.handle,
                    "url": h.url,
                    "confidence": h.confidence,
                }
                for h in self.handles
            ],
            "keywords": list(self.keywords),
            "years": list(self.years),
            "urls": list(self.urls),
            "confidence": self.confidence,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dedupe(tokens: Iterable[EvidenceToken]) -> list[EvidenceToken]:
    best: dict[tuple[TokenType, str | None, str], EvidenceToken] = {}
    for token in tokens:
        previous = best.get(token.key)
        if previous is None or previous.confidence < token.confidence:
            best[token.key] = token
    return list(best.values())


def document_confidence(present: Iterable[TokenType]) -> float:
    """Return the weighted category coverage for ``present`` token types."""

    total = sum(CATEGORY_WEIGHTS.values())
    covered = sum(CATEGORY_WEIGHTS.get(kind, 0.0) for kind in set(present))
    return covered / total if total else 0.0


def trusted_hint(document: EvidenceDocument) -> tuple[str, str] | None:
    """Return the ``(platform, handle)`` hint of ``document`` when it passes validation."""

    if not (document.handle_hint and document.platform_hint):
        return None
    platform = document.platform_hint.strip().lower()
    handle = document.handle_hint.strip().lstrip("@").lower()
    if not validate_social_handle(handle, platform):
        logger.debug("rejected handle hint %r on %s", handle, platform)
        return None
    if document.source_url:
        source = validate_url(document.source_url)
        if source.is_person_profile and source.platform == platform and source.handle != handle:
            logger.debug("handle hint %r contradicts source URL %s", handle, document.source_url)
            return None
    return platform, handle


def _hint_token(document: EvidenceDocument) -> EvidenceToken | None:
    hint = trusted_hint(document)
    if hint is None:
        return None
    platform, handle = hint
    return EvidenceToken(TokenType.HANDLE, handle, HINT_CONFIDENCE, document.source_url, platform)


def _organize(tokens: Sequence[EvidenceToken]) -> NormalizedEvidence:
    groups: dict[TokenType, list[EvidenceToken]] = {kind: [] for kind in TokenType}
    for token in tokens:
        groups[token.type].append(token)

    def values(kind: TokenType) -> tuple[str, ...]:
        return tuple(t.value for t in groups[kind])

    handles = tuple(
        SocialHandle(
            platform=t.platform or "unknown",
            handle=t.value,
            url=profile_url(t.platform or "", t.value),
            confidence=t.confidence,
        )
        for t in groups[TokenType.HANDLE]
    )
    return NormalizedEvidence(
        names=values(TokenType.NAME),
        emails=values(TokenType.EMAIL),
        phones=values(TokenType.PHONE),
        locations=values(TokenType.LOCATION),
        organizations=values(TokenType.ORGANIZATION),
        domains=values(TokenType.DOMAIN),
        handles=handles,
        keywords=values(TokenType.KEYWORD),
        years=tuple(int(v) for v in values(TokenType.YEAR)),
        urls=values(TokenType.URL),
        confidence=document_confidence(kind for kind, items in groups.items() if items),
        tokens=tuple(tokens),
    )


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class EvidenceNormalizer:
    """Run a set of extractors over documents and build evidence records."""

    def __init__(
        self,
        settings: NormalizerSettings | None = None,
        extractors: Sequence[Extractor] | None = None,
    ) -> None:
        self.settings = settings or NormalizerSettings()
        self.extractors = list(extractors) if extractors is not None else default_extractors()

    def normalize(self, raw_text: str | None, source_url: str = "") -> NormalizedEvidence:
        """Return the evidence found in ``raw_text``."""

        return _organize(_dedupe(self._extract(raw_text, source_url)))

    def normalize_document(self, document: EvidenceDocument) -> NormalizedEvidence:
        """Return the evidence for ``document`` including a validated hint."""

        tokens = self._extract(document.raw_text, document.source_url)
        hint = _hint_token(document)
        if hint is not None:
            tokens.append(hint)
        return _organize(_dedupe(tokens))

    def _extract(self, raw_text: str | None, source_url: str) -> list[EvidenceToken]:
        text = normalize_text(raw_text)
        context = ExtractionContext(
            source_url=source_url or "",
            current_year=self.settings.current_year,
            config=self.settings,
        )
        tokens: list[EvidenceToken] = []
        for extractor in self.extractors:
            tokens.extend(extractor.extract(text, context))
        return tokens


def normalize(
    raw_text: str | None, source_url: str = "", settings: NormalizerSettings | None = None
) -> NormalizedEvidence:
    """Normalize ``raw_text`` with the default extractors."""

    return EvidenceNormalizer(settings).normalize(raw_text, source_url)


def normalize_document(
    document: EvidenceDocument, settings: NormalizerSettings | None = None
) -> NormalizedEvidence:
    """Normalize ``document`` with the default extractors."""

    return EvidenceNormalizer(settings).normalize_document(document)
