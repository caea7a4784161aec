"""Combine entity clusters with density clustering into ranked persons.

For every entity cluster the share of its documents that the density
clusterer marked as outliers is computed.  When that share exceeds
``outlier_ratio`` the entity is flagged as an outlier and its confidence is
multiplied by ``outlier_penalty`` (``0.5`` halves it).

Small low-confidence entities are dropped: an entity with fewer nodes than
half of ``min_cluster_size`` whose adjusted confidence is at most
``confidence_floor`` does not appear in the output.  The remaining entities
are ranked by confidence, then node count, then entity id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from ..cluster.base import ClusteringResult
from ..config.schema import AggregationSettings
from ..preprocess.evidence import NormalizedEvidence
from ..utils.urls import validate_url
from .entity_resolver import AlternateHandle, ElectedHandle, EntityCluster

__all__ = [
    "EnhancedProfile",
    "PersonCluster",
    "AggregationResult",
    "aggregate",
    "entity_matches",
    "rationale",
    "top_terms",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class EnhancedProfile:
    """One document of a person with the reason it was included."""

    document_index: int
    url: str
    platform: str
    evidence: NormalizedEvidence
    relevance_score: float
    why_included: str


@dataclass(slots=True, frozen=True)
class PersonCluster:
    """Presentation view of one resolved person."""

    person_id: str
    confidence: float
    profiles: tuple[EnhancedProfile, ...]
    canonical_handle: ElectedHandle | None
    alternate_handles: tuple[AlternateHandle, ...]
    top_terms: tuple[str, ...]
    entity_matches: tuple[str, ...]
    rationale: str
    outlier_ratio: float
    is_outlier: bool

    def to_dict(self) -> dict[str, object]:
        """Return a JSON friendly representation."""

        canonical = self.canonical_handle
        return {
            "person_id": self.person_id,
            "confidence": self.confidence,
            "profiles": [
                {
                    "document_index": p.document_index,
                    "url": p.url,
                    "platform": p.platform,
                    "relevance_score": p.relevance_score,
                    "why_included": p.why_included,
                    "evidence": p.evidence.to_dict(),
                }
                for p in self.profiles
            ],
            "canonical_handle": (
                {
                    "platform": canonical.platform,
                    "handle": canonical.handle,
                    "url": canonical.url,
                    "confidence": canonical.confidence,
                }
                if canonical
                else None
            ),
            "alternate_handles": [
                {"platform": h.platform, "handle": h.handle, "status": h.status, "reason": h.reason}
                for h in self.alternate_handles
            ],
            "top_terms": list(self.top_terms),
            "entity_matches": list(self.entity_matches),
            "rationale": self.rationale,
            "outlier_ratio": self.outlier_ratio,
            "is_outlier": self.is_outlier,
        }


@dataclass(slots=True, frozen=True)
class AggregationResult:
    """Adjusted entity clusters, their person views and the dropped ids."""

    entity_clusters: tuple[EntityCluster, ...]
    persons: tuple[PersonCluster, ...]
    dropped: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def _distinct(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def top_terms(cluster: EntityCluster, limit: int = 10) -> tuple[str, ...]:
    """Return the first ``limit`` distinct keywords of ``cluster``."""

    return tuple(_distinct(k for n in cluster.nodes for k in n.evidence.keywords)[:limit])


def entity_matches(cluster: EntityCluster) -> tuple[str, ...]:
    """Return short summaries of the names, emails, organizations and locations."""

    nodes = cluster.nodes
    matches: list[str] = []
    for label, values, limit in (
        ("names", [v for n in nodes for v in n.evidence.names], 3),
        ("emails", [v for n in nodes for v in n.evidence.emails], 2),
        ("organizations", [v for n in nodes for v in n.evidence.organizations], 2),
        ("locations", [v for n in nodes for v in n.evidence.locations], 2),
    ):
        distinct = _distinct(values)
        if distinct:
            matches.append(f"{label}: {', '.join(distinct[:limit])}")
    return tuple(matches)


def rationale(cluster: EntityCluster, terms: Sequence[str], matches: Sequence[str]) -> str:
    """Return a human readable explanation of ``cluster``."""

    parts = [
        f"Identified from {len(cluster.nodes)} profiles with "
        f"{cluster.confidence * 100:.1f}% confidence"
    ]
    if terms:
        parts.append(f"Key terms: {', '.join(terms[:5])}")
    if matches:
        parts.append(f"Matched on: {'; '.join(matches[:3])}")
    canonical = cluster.canonical_handle
    if canonical:
        parts.append(f"Primary {canonical.platform} handle: @{canonical.handle}")
    accepted = [h for h in cluster.alternate_handles if h.status == "accepted"]
    rejected = [h for h in cluster.alternate_handles if h.status == "rejected"]
    if accepted:
        parts.append(f"Additional accounts: {', '.join('@' + h.handle for h in accepted)}")
    if rejected:
        parts.append(f"Rejected duplicates: {len(rejected)} handle(s)")
    return ". ".join(parts)


def _profiles(cluster: EntityCluster) -> tuple[EnhancedProfile, ...]:
    profiles: list[EnhancedProfile] = []
    for node in cluster.nodes:
        platform = node.platform
        if not platform and node.url:
            platform = validate_url(node.url).platform
        confidence = node.evidence.confidence
        profiles.append(
            EnhancedProfile(
                document_index=node.document_index,
                url=node.url,
                platform=platform or "unknown",
                evidence=node.evidence,
                relevance_score=confidence,
                why_included=f"Evidence confidence: {confidence * 100:.1f}%",
            )
        )
    return tuple(profiles)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate(
    entity_clusters: Sequence[EntityCluster],
    clustering: ClusteringResult,
    settings: AggregationSettings | None = None,
    min_cluster_size: int = 12,
) -> AggregationResult:
    """Adjust, filter and rank ``entity_clusters``."""

    settings = settings or AggregationSettings()
    outliers = set(clustering.outlier_indices)
    kept: list[tuple[EntityCluster, float, bool]] = []
    dropped: list[str] = []
    for cluster in entity_clusters:
        size = len(cluster.nodes)
        ratio = sum(1 for i in cluster.document_indices if i in outliers) / size if size else 0.0
        is_outlier = ratio > settings.outlier_ratio
        confidence = cluster.confidence
        if is_outlier:
            confidence *= settings.outlier_penalty
        adjusted = replace(cluster, confidence=confidence)
        if size < min_cluster_size / 2 and confidence <= settings.confidence_floor:
            dropped.append(cluster.entity_id)
            continue
        kept.append((adjusted, ratio, is_outlier))

    kept.sort(key=lambda item: (-item[0].confidence, -len(item[0].nodes), item[0].entity_id))
    persons: list[PersonCluster] = []
    for cluster, ratio, is_outlier in kept:
        terms = top_terms(cluster, settings.top_terms)
        matches = entity_matches(cluster)
        persons.append(
            PersonCluster(
                person_id=cluster.entity_id,
                confidence=cluster.confidence,
                profiles=_profiles(cluster),
                canonical_handle=cluster.canonical_handle,
                alternate_handles=cluster.alternate_handles,
                top_terms=terms,
                entity_matches=matches,
                rationale=rationale(cluster, terms, matches),
                outlier_ratio=ratio,
                is_outlier=is_outlier,
            )
        )
    if dropped:
        logger.debug("dropped %d low-evidence entities: %s", len(dropped), ", ".join(dropped))
    return AggregationResult(
        entity_clusters=tuple(c for c, _, _ in kept),
        persons=tuple(persons),
        dropped=tuple(dropped),
    )
