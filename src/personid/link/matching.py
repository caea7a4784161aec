"""Pairwise match scoring between two documents.

The match score is a weighted average over the signals that fired for a pair
of documents.  The vector cosine (clamped at ``0``) and the Jaccard overlap of
the extracted tokens always take part; every other signal joins the average
only when it produces a non-zero score.

Signals
-------
``handle``
    exact handle on the same platform ``1.0``; the same handle on another
    platform ``0.9``; handles longer than three characters within
    ``handle_edit_distance`` edits ``0.8 * (1 - distance / max_length)``.
``email``
    exact address ``1.0``; same mail domain ``0.3``.
``name``
    names longer than five characters within ``levenshtein_threshold`` edits
    whose similarity exceeds ``0.7`` score that similarity; otherwise one name
    containing the other scores ``0.6``.
``domain``
    any shared web domain ``0.5``.
``context``
    a shared organization ``0.7``, else a shared location ``0.4``.

Every signal records a reason string; ``confidence`` adds ``0.05`` per reason
to the similarity and is capped at ``1``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rapidfuzz.distance import Levenshtein

from ..config.schema import ResolverSettings
from ..preprocess.evidence import NormalizedEvidence
from ..vectorize.tfidf import FeatureVector, cosine_similarity, jaccard_similarity

__all__ = ["EntityNode", "MatchResult", "score_match"]

REASON_BONUS = 0.05
HIGH_VECTOR_SIMILARITY = 0.5


@dataclass(slots=True, frozen=True)
class EntityNode:
    """One document as seen by the resolver."""

    document_index: int
    url: str
    evidence: NormalizedEvidence
    vector: FeatureVector
    platform: str | None = None
    handle: str | None = None
    tokens: frozenset[str] = field(default=frozenset(), repr=False)

    @classmethod
    def build(cls, vector: FeatureVector, evidence: NormalizedEvidence) -> "EntityNode":
        return cls(
            document_index=vector.document_index,
            url=vector.url,
            evidence=evidence,
            vector=vector,
            platform=vector.platform,
            handle=vector.handle,
            tokens=frozenset(evidence.all_tokens()),
        )


@dataclass(slots=True, frozen=True)
class MatchResult:
    """Similarity of two documents with the reasons that produced it."""

    similarity: float
    confidence: float
    reasons: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Individual signals
# ---------------------------------------------------------------------------


def _handle_match(
    a: NormalizedEvidence, b: NormalizedEvidence, max_edits: int
) -> tuple[float, str]:
    best = (0.0, "")
    for h1 in a.handles:
        for h2 in b.handles:
            if h1.handle == h2.handle:
                if h1.platform == h2.platform:
                    return 1.0, f"exact_handle_match({h1.platform}:{h1.handle})"
                candidate = (0.9, f"cross_platform_handle({h1.handle})")
            elif min(len(h1.handle), len(h2.handle)) > 3:
                distance = Levenshtein.distance(h1.handle, h2.handle)
                if distance > max_edits:
                    continue
                similarity = 1 - distance / max(len(h1.handle), len(h2.handle))
                candidate = (similarity * 0.8, f"similar_handle({h1.handle}≈{h2.handle})")
            else:
                continue
            if candidate[0] > best[0]:
                best = candidate
    return best


def _email_match(a: NormalizedEvidence, b: NormalizedEvidence) -> tuple[float, str]:
    best = (0.0, "")
    for e1 in a.emails:
        for e2 in b.emails:
            if e1 == e2:
                return 1.0, f"exact_email_match({e1})"
            d1 = e1.partition("@")[2]
            if d1 and d1 == e2.partition("@")[2] and best[0] < 0.3:
                best = (0.3, f"same_email_domain({d1})")
    return best


def _name_match(
    a: NormalizedEvidence, b: NormalizedEvidence, max_edits: int
) -> tuple[float, str]:
    best = (0.0, "")
    for n1 in a.names:
        for n2 in b.names:
            l1, l2 = n1.lower(), n2.lower()
            longest = max(len(l1), len(l2))
            candidate = (0.0, "")
            if longest > 5:
                distance = Levenshtein.distance(l1, l2)
                similarity = 1 - distance / longest
                if distance <= max_edits and similarity > 0.7:
                    candidate = (similarity, f"similar_name({n1}≈{n2})")
            if not candidate[0] and (l1 in l2 or l2 in l1):
                candidate = (0.6, f"name_substring({n1}⊇{n2})")
            if candidate[0] > best[0]:
                best = candidate
    return best


def _first_shared(a: tuple[str, ...], b: tuple[str, ...]) -> str | None:
    others = {v.lower() for v in b}
    for value in a:
        if value.lower() in others:
            return value
    return None


def _domain_match(a: NormalizedEvidence, b: NormalizedEvidence) -> tuple[float, str]:
    shared = _first_shared(a.domains, b.domains)
    return (0.5, f"shared_domain({shared})") if shared else (0.0, "")


def _context_match(a: NormalizedEvidence, b: NormalizedEvidence) -> tuple[float, str]:
    org = _first_shared(a.organizations, b.organizations)
    if org:
        return 0.7, f"shared_org({org})"
    location = _first_shared(a.locations, b.locations)
    if location:
        return 0.4, f"shared_location({location})"
    return 0.0, ""


# ---------------------------------------------------------------------------
# Combined score
# ---------------------------------------------------------------------------


def score_match(
    a: EntityNode, b: EntityNode, settings: ResolverSettings | None = None
) -> MatchResult:
    """Return the symmetric match score of ``a`` and ``b``."""

    settings = settings or ResolverSettings()
    weights = settings.weights
    reasons: list[str] = []
    weighted = 0.0
    total = 0.0

    cosine = max(0.0, cosine_similarity(a.vector.features, b.vector.features))
    weighted += cosine * weights.vector
    total += weights.vector
    if cosine > HIGH_VECTOR_SIMILARITY:
        reasons.append(f"high_vector_similarity({cosine:.2f})")

    jaccard = jaccard_similarity(set(a.tokens), set(b.tokens))
    weighted += jaccard * weights.jaccard
    total += weights.jaccard
    if jaccard > settings.jaccard_threshold:
        reasons.append(f"token_overlap({jaccard:.2f})")

    signals = (
        (_handle_match(a.evidence, b.evidence, settings.handle_edit_distance), weights.handle),
        (_email_match(a.evidence, b.evidence), weights.email),
        (_name_match(a.evidence, b.evidence, settings.levenshtein_threshold), weights.name),
        (_domain_match(a.evidence, b.evidence), weights.domain),
        (_context_match(a.evidence, b.evidence), weights.context),
    )
    for (score, reason), weight in signals:
        if score > 0:
            weighted += score * weight
            total += weight
            reasons.append(reason)

    similarity = weighted / total if total > 0 else 0.0
    confidence = min(1.0, similarity + REASON_BONUS * len(reasons))
    return MatchResult(similarity=similarity, confidence=confidence, reasons=tuple(reasons))
