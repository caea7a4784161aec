"""Clustering result model and strategy protocol.

Every clustering strategy assigns each feature vector either a cluster id in
``0..K-1`` or ``-1`` for outliers.  Results are immutable and reproducible:
identical inputs and settings always give identical assignments.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np

from ..config.schema import ClusteringSettings
from ..preprocess.evidence import EvidenceDocument, trusted_hint
from ..vectorize.tfidf import FeatureVector

OUTLIER = -1


@dataclass(slots=True, frozen=True)
class ClusterAssignment:
    """Cluster membership of one document."""

    document_index: int
    cluster_id: int
    confidence: float
    stability: float

    @property
    def is_outlier(self) -> bool:
        """Return ``True`` when the document belongs to no cluster."""

        return self.cluster_id == OUTLIER


@dataclass(slots=True, frozen=True)
class ClusteringResult:
    """Output of a clustering strategy."""

    assignments: tuple[ClusterAssignment, ...]
    cluster_count: int
    outlier_indices: tuple[int, ...]
    core_distances: tuple[float, ...] = ()
    cluster_stabilities: dict[int, float] = field(default_factory=dict)
    cluster_persistence: dict[int, float] = field(default_factory=dict)
    algorithm: str = ""

    @property
    def labels(self) -> list[int]:
        """Return the cluster id of every document in order."""

        return [a.cluster_id for a in self.assignments]

    def members(self, cluster_id: int) -> list[int]:
        """Return the document indices assigned to ``cluster_id``."""

        return [a.document_index for a in self.assignments if a.cluster_id == cluster_id]

    def to_dict(self) -> dict[str, object]:
        """Return a JSON friendly representation."""

        return {
            "algorithm": self.algorithm,
            "cluster_count": self.cluster_count,
            "outlier_indices": list(self.outlier_indices),
            "assignments": [
                {
                    "document_index": a.document_index,
                    "cluster_id": a.cluster_id,
                    "confidence": a.confidence,
                    "stability": a.stability,
                    "is_outlier": a.is_outlier,
                }
                for a in self.assignments
            ],
            "cluster_stabilities": {str(k): v for k, v in self.cluster_stabilities.items()},
            "cluster_persistence": {str(k): v for k, v in self.cluster_persistence.items()},
        }


@runtime_checkable
class ClusteringAlgorithm(Protocol):
    """Protocol for clustering strategies."""

    def name(self) -> str:
        """Return a short, stable identifier for the strategy."""

        ...

    def cluster(self, vectors: Sequence[FeatureVector]) -> ClusteringResult:
        """Assign every vector in ``vectors`` to a cluster or to the outliers."""

        ...


# ---------------------------------------------------------------------------
# Shared numeric helpers
# ---------------------------------------------------------------------------


def feature_matrix(vectors: Sequence[FeatureVector]) -> np.ndarray:
    """Stack the features of ``vectors`` into an ``N x D`` matrix."""

    if not vectors:
        return np.zeros((0, 0))
    return np.vstack([np.asarray(v.features, dtype=float) for v in vectors])


def pairwise_distances(matrix: np.ndarray, metric: str) -> np.ndarray:
    """Return the symmetric distance matrix of the rows of ``matrix``.

    ``euclidean`` is the L2 distance; ``cosine`` is ``max(0, 2 - 2 * dot)``,
    which equals the squared euclidean distance for unit vectors.
    """

    n = matrix.shape[0]
    if n == 0:
        return np.zeros((0, 0))
    gram = matrix @ matrix.T
    if metric == "cosine":
        dist = np.maximum(2.0 - 2.0 * gram, 0.0)
    else:
        sq = np.diag(gram)
        dist = np.sqrt(np.maximum(sq[:, None] + sq[None, :] - 2.0 * gram, 0.0))
    np.fill_diagonal(dist, 0.0)
    return (dist + dist.T) / 2.0


def single_cluster_result(n: int, algorithm: str) -> ClusteringResult:
    """Return the degenerate result placing all ``n`` documents in one cluster."""

    if n == 0:
        return ClusteringResult((), 0, (), algorithm=algorithm)
    assignments = tuple(ClusterAssignment(i, 0, 1.0, 1.0) for i in range(n))
    return ClusteringResult(
        assignments,
        1,
        (),
        core_distances=tuple(0.0 for _ in range(n)),
        cluster_stabilities={0: 1.0},
        cluster_persistence={0: 1.0},
        algorithm=algorithm,
    )


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ClusterSummary:
    """Descriptive statistics of one cluster."""

    cluster_id: int
    size: int
    average_confidence: float
    members: tuple[int, ...]
    handles: tuple[str, ...]
    platforms: tuple[str, ...]


def summarize_clusters(
    result: ClusteringResult,
    vectors: Sequence[FeatureVector],
    documents: Sequence[EvidenceDocument] | None = None,
) -> list[ClusterSummary]:
    """Return one :class:`ClusterSummary` per cluster, largest first.

    Handles and platforms come from the vectors' origin metadata and, when
    ``documents`` is given, from their validated hints.
    """

    by_index = {v.document_index: v for v in vectors}
    docs = {d.index: d for d in documents} if documents is not None else {}
    summaries: list[ClusterSummary] = []
    for cluster_id in range(result.cluster_count):
        members = tuple(result.members(cluster_id))
        confidences = [a.confidence for a in result.assignments if a.cluster_id == cluster_id]
        handles: dict[str, None] = {}
        platforms: dict[str, None] = {}
        for index in members:
            vector = by_index.get(index)
            doc = docs.get(index)
            hint = trusted_hint(doc) if doc else None
            hinted_handles = (vector.handle if vector else None, hint[1] if hint else None)
            hinted_platforms = (vector.platform if vector else None, hint[0] if hint else None)
            for handle in hinted_handles:
                if handle:
                    handles.setdefault(handle.lower(), None)
            for platform in hinted_platforms:
                if platform:
                    platforms.setdefault(platform.lower(), None)
        summaries.append(
            ClusterSummary(
                cluster_id=cluster_id,
                size=len(members),
                average_confidence=sum(confidences) / len(confidences) if confidences else 0.0,
                members=members,
                handles=tuple(handles),
                platforms=tuple(platforms),
            )
        )
    summaries.sort(key=lambda s: (-s.size, s.cluster_id))
    return summaries


def get_clusterer(settings: ClusteringSettings | None = None) -> ClusteringAlgorithm:
    """Return the clustering strategy selected by ``settings.algorithm``."""

    settings = settings or ClusteringSettings()
    if settings.algorithm == "consensus":
        from .consensus import ConsensusClusterer

        return ConsensusClusterer(settings)
    if settings.algorithm == "kmeans":
        from .kmeans import KMeansClusterer

        return KMeansClusterer(settings)
    from .hdbscan import DensityClusterer

    return DensityClusterer(settings)


__all__ = [
    "OUTLIER",
    "ClusterAssignment",
    "ClusteringResult",
    "ClusteringAlgorithm",
    "ClusterSummary",
    "feature_matrix",
    "pairwise_distances",
    "single_cluster_result",
    "summarize_clusters",
    "get_clusterer",
]
