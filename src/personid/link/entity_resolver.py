"""Entity resolution: group documents that describe the same person.

Rules
-----
1. **Validation** – vectors and evidence must have the same length and the
   vectors must carry document indices ``0..N-1`` in order; otherwise
   :class:`~personid.utils.errors.InvalidInputError` is raised before any
   scoring happens.
2. **Edges** – every pair of documents is scored with
   :func:`~personid.link.matching.score_match`; a pair is connected when the
   similarity reaches ``cosine_similarity_threshold`` or the confidence
   reaches ``edge_confidence_threshold``.
3. **Components** – connected components of the graph become entities,
   numbered ``entity_1..entity_K`` by their lowest document index.  A document
   without edges forms a singleton entity.
4. **Election** – per platform, handles are grouped by value and voted on with
   ``occurrences * mean evidence confidence`` of the documents carrying them.
   The winner is canonical for its platform; the other handles are alternates,
   accepted or rejected by the :class:`MultiAccountPolicy`.
5. **Confidence** – mean document confidence plus ``0.2`` when a canonical
   handle exists, capped at ``1``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config.schema import ResolverSettings
from ..preprocess.evidence import NormalizedEvidence
from ..utils.errors import InvalidInputError
from ..utils.urls import profile_url
from ..vectorize.tfidf import FeatureVector
from .matching import EntityNode, MatchResult, score_match
from .multi_account import MultiAccountPolicy

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..preprocess.evidence import EvidenceDocument

__all__ = [
    "EntityEdge",
    "ElectedHandle",
    "AlternateHandle",
    "EntityCluster",
    "EntityResolver",
    "resolve",
]

logger = logging.getLogger(__name__)

CANONICAL_BONUS = 0.2


@dataclass(slots=True, frozen=True)
class EntityEdge:
    """An accepted link between two documents."""

    source: int
    target: int
    similarity: float
    confidence: float
    reasons: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class ElectedHandle:
    """The canonical handle of one platform within an entity."""

    platform: str
    handle: str
    url: str | None
    confidence: float
    score: float
    occurrences: int
    reason: str


@dataclass(slots=True, frozen=True)
class AlternateHandle:
    """A non-canonical handle and the verdict on it."""

    platform: str
    handle: str
    url: str | None
    confidence: float
    status: str
    reason: str


@dataclass(slots=True, frozen=True)
class EntityCluster:
    """Documents inferred to describe one real-world person."""

    entity_id: str
    nodes: tuple[EntityNode, ...]
    confidence: float
    canonical_handles: dict[str, ElectedHandle] = field(default_factory=dict)
    alternate_handles: tuple[AlternateHandle, ...] = ()
    edges: tuple[EntityEdge, ...] = ()

    @property
    def canonical_handle(self) -> ElectedHandle | None:
        """Return the best elected handle over all platforms, if any."""

        if not self.canonical_handles:
            return None
        return min(
            self.canonical_handles.values(),
            key=lambda h: (-h.score, -h.occurrences, h.platform),
        )

    @property
    def document_indices(self) -> tuple[int, ...]:
        return tuple(n.document_index for n in self.nodes)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON friendly representation."""

        canonical = self.canonical_handle
        return {
            "entity_id": self.entity_id,
            "confidence": self.confidence,
            "documents": list(self.document_indices),
            "canonical_handle": _handle_dict(canonical) if canonical else None,
            "canonical_handles": {p: _handle_dict(h) for p, h in self.canonical_handles.items()},
            "alternate_handles": [
                {
                    "platform": h.platform,
                    "handle": h.handle,
                    "url": h.url,
                    "confidence": h.confidence,
                    "status": h.status,
                    "reason": h.reason,
                }
                for h in self.alternate_handles
            ],
            "edges": [
                {
                    "source": e.source,
                    "target": e.target,
                    "similarity": e.similarity,
                    "confidence": e.confidence,
                    "reasons": list(e.reasons),
                }
                for e in self.edges
            ],
        }


def _handle_dict(handle: ElectedHandle) -> dict[str, object]:
    return {
        "platform": handle.platform,
        "handle": handle.handle,
        "url": handle.url,
        "confidence": handle.confidence,
        "reason": handle.reason,
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate(
    vectors: Sequence[FeatureVector],
    evidence: Sequence[NormalizedEvidence],
    documents: "Sequence[EvidenceDocument] | None",
) -> None:
    if len(vectors) != len(evidence):
        raise InvalidInputError(
            f"got {len(vectors)} vectors but {len(evidence)} evidence records"
        )
    if documents is not None and len(documents) != len(vectors):
        raise InvalidInputError(f"got {len(documents)} documents for {len(vectors)} vectors")
    seen: set[int] = set()
    for position, vector in enumerate(vectors):
        index = vector.document_index
        if index in seen:
            raise InvalidInputError(f"duplicate document index {index}")
        if not 0 <= index < len(vectors):
            raise InvalidInputError(f"document index {index} out of range")
        if index != position:
            raise InvalidInputError(f"document index {index} found at position {position}")
        seen.add(index)
    if documents is not None:
        for position, document in enumerate(documents):
            if document.index != position:
                raise InvalidInputError(
                    f"document index {document.index} found at position {position}"
                )


def _components(n: int, adjacency: dict[int, set[int]]) -> list[list[int]]:
    visited = [False] * n
    components: list[list[int]] = []
    for start in range(n):
        if visited[start]:
            continue
        visited[start] = True
        stack = [start]
        members: list[int] = []
        while stack:
            node = stack.pop()
            members.append(node)
            for neighbour in sorted(adjacency[node], reverse=True):
                if not visited[neighbour]:
                    visited[neighbour] = True
                    stack.append(neighbour)
        components.append(sorted(members))
    return components


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class EntityResolver:
    """Link documents into entity clusters and elect canonical handles."""

    def __init__(
        self,
        settings: ResolverSettings | None = None,
        policy: MultiAccountPolicy | None = None,
    ) -> None:
        self.settings = settings or ResolverSettings()
        self.policy = policy or MultiAccountPolicy.from_settings(self.settings.multi_account)

    def is_edge(self, match: MatchResult) -> bool:
        """Return ``True`` when ``match`` is strong enough to link two documents."""

        return (
            match.similarity >= self.settings.cosine_similarity_threshold
            or match.confidence >= self.settings.edge_confidence_threshold
        )

    def resolve(
        self,
        vectors: Sequence[FeatureVector],
        evidence: Sequence[NormalizedEvidence],
        documents: "Sequence[EvidenceDocument] | None" = None,
    ) -> list[EntityCluster]:
        """Return the entity clusters of the documents behind ``vectors``."""

        _validate(vectors, evidence, documents)
        nodes = [EntityNode.build(v, e) for v, e in zip(vectors, evidence)]
        n = len(nodes)

        adjacency: dict[int, set[int]] = {i: set() for i in range(n)}
        edges: list[EntityEdge] = []
        for i in range(n):
            for j in range(i + 1, n):
                match = score_match(nodes[i], nodes[j], self.settings)
                if self.is_edge(match):
                    adjacency[i].add(j)
                    adjacency[j].add(i)
                    edges.append(
                        EntityEdge(i, j, match.similarity, match.confidence, match.reasons)
                    )
        logger.debug("resolver scored %d pairs and kept %d edges", n * (n - 1) // 2, len(edges))

        clusters: list[EntityCluster] = []
        for number, members in enumerate(_components(n, adjacency), start=1):
            member_set = set(members)
            component = tuple(nodes[i] for i in members)
            clusters.append(
                self._build_cluster(
                    f"entity_{number}",
                    component,
                    tuple(e for e in edges if e.source in member_set),
                )
            )
        for cluster in clusters:
            canonical = cluster.canonical_handle
            logger.debug(
                "%s: %d documents, confidence=%.3f, canonical=%s",
                cluster.entity_id,
                len(cluster.nodes),
                cluster.confidence,
                f"{canonical.platform}:{canonical.handle}" if canonical else None,
            )
        return clusters

    def _build_cluster(
        self,
        entity_id: str,
        component: tuple[EntityNode, ...],
        edges: tuple[EntityEdge, ...],
    ) -> EntityCluster:
        groups: dict[str, dict[str, list[EntityNode]]] = {}
        for node in component:
            for handle in node.evidence.handles:
                groups.setdefault(handle.platform, {}).setdefault(handle.handle, []).append(node)

        canonical: dict[str, ElectedHandle] = {}
        alternates: list[AlternateHandle] = []
        for platform, by_handle in groups.items():
            ranked = sorted(
                (
                    (
                        len(carriers) * _mean_confidence(carriers),
                        len(carriers),
                        _mean_confidence(carriers),
                        handle,
                        carriers,
                    )
                    for handle, carriers in by_handle.items()
                ),
                key=lambda item: (-item[0], -item[1], item[3]),
            )
            score, count, weight, handle, winners = ranked[0]
            canonical[platform] = ElectedHandle(
                platform=platform,
                handle=handle,
                url=profile_url(platform, handle),
                confidence=min(1.0, score),
                score=score,
                occurrences=count,
                reason=f"highest_vote(freq={count}, weight={weight:.2f})",
            )
            for alt_score, _, _, alt_handle, carriers in ranked[1:]:
                accepted = self.policy.is_legitimate(winners, carriers, component)
                alternates.append(
                    AlternateHandle(
                        platform=platform,
                        handle=alt_handle,
                        url=profile_url(platform, alt_handle),
                        confidence=min(1.0, alt_score),
                        status="accepted" if accepted else "rejected",
                        reason="legitimate_multi_account" if accepted else "insufficient_evidence",
                    )
                )

        confidence = _mean_confidence(component) + (CANONICAL_BONUS if canonical else 0.0)
        return EntityCluster(
            entity_id=entity_id,
            nodes=component,
            confidence=max(0.0, min(1.0, confidence)),
            canonical_handles=canonical,
            alternate_handles=tuple(alternates),
            edges=edges,
        )


def _mean_confidence(nodes: Sequence[EntityNode]) -> float:
    if not nodes:
        return 0.0
    return sum(n.evidence.confidence for n in nodes) / len(nodes)


def resolve(
    vectors: Sequence[FeatureVector],
    evidence: Sequence[NormalizedEvidence],
    settings: ResolverSettings | None = None,
) -> list[EntityCluster]:
    """Resolve entities with a fresh :class:`EntityResolver`."""

    return EntityResolver(settings).resolve(vectors, evidence)
