"""Consensus clustering over an ensemble of clusterings.

The density clusterer is run once per configured ``member_sizes`` value and,
with ``include_kmeans``, the k-means clusterer joins as one more member.  The
co-association of two documents is the share of ensemble members that put them
in the same (non-outlier) cluster.  Groups are then formed greedily: the
lowest unassigned index seeds a group and collects every unassigned document
whose co-association with the seed reaches ``agreement_threshold``.

A document's confidence is its mean co-association with the rest of its group
(``0`` for singletons).  Documents below ``min_confidence`` become outliers;
groups that keep at least one member receive ids ``0..K-1`` in seed order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ..config.schema import ClusteringSettings
from ..vectorize.tfidf import FeatureVector
from .base import (
    OUTLIER,
    ClusterAssignment,
    ClusteringAlgorithm,
    ClusteringResult,
    single_cluster_result,
)
from .hdbscan import DensityClusterer
from .kmeans import KMeansClusterer

__all__ = ["ConsensusClusterer", "co_association"]

logger = logging.getLogger(__name__)


def co_association(labelings: Sequence[Sequence[int]], n: int) -> np.ndarray:
    """Return the ``n x n`` agreement matrix of ``labelings``."""

    matrix = np.zeros((n, n))
    if not labelings:
        np.fill_diagonal(matrix, 1.0)
        return matrix
    for labels in labelings:
        arr = np.asarray(labels)
        same = (arr[:, None] == arr[None, :]) & (arr[:, None] != OUTLIER)
        matrix += same
    matrix /= len(labelings)
    np.fill_diagonal(matrix, 1.0)
    return matrix


class ConsensusClusterer:
    """Combine several clusterings into one partition."""

    def __init__(self, settings: ClusteringSettings | None = None) -> None:
        self.settings = settings or ClusteringSettings()

    def name(self) -> str:  # pragma: no cover - trivial
        return "consensus"

    def members(self) -> list[ClusteringAlgorithm]:
        """Return the ensemble members.

        One density clusterer per configured cluster size, followed by the
        k-means clusterer when ``include_kmeans`` is set.
        """

        sizes = self.settings.consensus.member_sizes or [self.settings.min_cluster_size]
        members: list[ClusteringAlgorithm] = [
            DensityClusterer(
                self.settings.model_copy(update={"min_cluster_size": size, "min_samples": None})
            )
            for size in sizes
        ]
        if self.settings.consensus.include_kmeans:
            members.append(KMeansClusterer(self.settings))
        return members

    def cluster(self, vectors: Sequence[FeatureVector]) -> ClusteringResult:
        """Cluster ``vectors`` by ensemble agreement."""

        n = len(vectors)
        if n <= 1:
            return single_cluster_result(n, self.name())
        runs = [member.cluster(vectors) for member in self.members()]
        agreement = co_association([run.labels for run in runs], n)
        consensus = self.settings.consensus

        groups: list[list[int]] = []
        assigned = np.zeros(n, dtype=bool)
        for seed in range(n):
            if assigned[seed]:
                continue
            group = [seed] + [
                j
                for j in range(seed + 1, n)
                if not assigned[j] and agreement[seed, j] >= consensus.agreement_threshold
            ]
            assigned[group] = True
            groups.append(group)

        ids = [OUTLIER] * n
        confidences = [0.0] * n
        next_id = 0
        for group in groups:
            kept: list[int] = []
            for i in group:
                others = [j for j in group if j != i]
                confidence = float(np.mean(agreement[i, others])) if others else 0.0
                confidences[i] = confidence
                if confidence >= consensus.min_confidence:
                    kept.append(i)
            if not kept:
                continue
            for i in kept:
                ids[i] = next_id
            next_id += 1

        sizes = {cid: ids.count(cid) for cid in range(next_id)}
        stabilities = {cid: size / n for cid, size in sizes.items()}
        agreement_by_cluster = {
            cid: float(np.mean([confidences[i] for i in range(n) if ids[i] == cid]))
            for cid in sizes
        }
        assignments = tuple(
            ClusterAssignment(
                document_index=v.document_index,
                cluster_id=ids[i],
                confidence=confidences[i] if ids[i] != OUTLIER else 0.0,
                stability=stabilities.get(ids[i], 0.0),
            )
            for i, v in enumerate(vectors)
        )
        logger.debug("consensus of %d members produced %d clusters", len(runs), next_id)
        return ClusteringResult(
            assignments=assignments,
            cluster_count=next_id,
            outlier_indices=tuple(a.document_index for a in assignments if a.is_outlier),
            core_distances=runs[0].core_distances if runs else (),
            cluster_stabilities=stabilities,
            cluster_persistence=agreement_by_cluster,
            algorithm=self.name(),
        )
