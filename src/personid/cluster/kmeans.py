"""Centroid clustering with an automatic choice of ``k``.

Algorithm
---------
1. **Seeding** – k-means++ driven by ``numpy.random.default_rng`` seeded with
   ``(seed, k, run)``, so a given configuration always starts from the same
   centroids.  When every remaining point coincides with a chosen centroid the
   lowest unused index is taken.
2. **Lloyd iterations** – points move to their nearest centroid (ties pick the
   lowest centroid) and centroids to the mean of their members until the
   labels stop changing or ``max_iterations`` is reached.  A centroid that
   loses all members keeps its position.
3. **Restarts** – ``n_init`` seeded runs per ``k``; the run with the lowest
   within-cluster sum of squares wins, the first one on ties.
4. **Choice of k** – every ``k`` in ``2..min(max_clusters, N // 2)`` is scored
   by its mean silhouette over the configured metric.  The best score picks
   ``k`` (smaller ``k`` on ties); when it stays below ``min_silhouette`` all
   documents form one cluster.

k-means has no notion of noise, so no document is an outlier.  A document's
confidence is ``1 - distance to its centroid`` clipped to ``[0, 1]``; cluster
stability is ``size / N`` and persistence is the mean positive silhouette of
the members.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ..config.schema import ClusteringSettings
from ..vectorize.tfidf import FeatureVector
from .base import (
    ClusterAssignment,
    ClusteringResult,
    feature_matrix,
    pairwise_distances,
    single_cluster_result,
)

__all__ = ["KMeansClusterer", "kmeans_plus_plus", "lloyd", "silhouette_scores"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def _squared_distances(matrix: np.ndarray, point: np.ndarray) -> np.ndarray:
    return ((matrix - point) ** 2).sum(axis=1)


def kmeans_plus_plus(matrix: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Return ``k`` initial centroids drawn from the rows of ``matrix``."""

    n = matrix.shape[0]
    chosen = [int(rng.integers(n))]
    d2 = _squared_distances(matrix, matrix[chosen[0]])
    while len(chosen) < k:
        total = float(d2.sum())
        if total > 0:
            index = int(rng.choice(n, p=d2 / total))
        else:
            index = next(i for i in range(n) if i not in chosen)
        chosen.append(index)
        d2 = np.minimum(d2, _squared_distances(matrix, matrix[index]))
    return matrix[chosen].astype(float)


def lloyd(
    matrix: np.ndarray, centroids: np.ndarray, max_iterations: int
) -> tuple[np.ndarray, np.ndarray, float]:
    """Refine ``centroids`` and return ``(labels, centroids, wcss)``."""

    centroids = centroids.copy()
    labels = np.full(matrix.shape[0], -1)
    for _ in range(max_iterations):
        sq = ((matrix[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        nearest = sq.argmin(axis=1)
        if np.array_equal(nearest, labels):
            break
        labels = nearest
        for j in range(centroids.shape[0]):
            members = matrix[labels == j]
            if len(members):
                centroids[j] = members.mean(axis=0)
    wcss = float(((matrix - centroids[labels]) ** 2).sum())
    return labels, centroids, wcss


def silhouette_scores(dist: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """Return the silhouette of every point; ``0`` for singletons or one cluster."""

    n = len(labels)
    scores = np.zeros(n)
    clusters = [int(c) for c in np.unique(labels)]
    if len(clusters) < 2:
        return scores
    masks = {c: labels == c for c in clusters}
    for i in range(n):
        own = masks[int(labels[i])]
        size = int(own.sum())
        if size <= 1:
            continue
        a = float(dist[i, own].sum()) / (size - 1)
        b = min(float(dist[i, masks[c]].mean()) for c in clusters if c != labels[i])
        denom = max(a, b)
        scores[i] = (b - a) / denom if denom > 0 else 0.0
    return scores


# ---------------------------------------------------------------------------
# Clusterer
# ---------------------------------------------------------------------------


class KMeansClusterer:
    """Partition feature vectors around ``k`` centroids."""

    def __init__(self, settings: ClusteringSettings | None = None) -> None:
        self.settings = settings or ClusteringSettings()

    def name(self) -> str:  # pragma: no cover - trivial
        return "kmeans"

    def fit(self, matrix: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray, float]:
        """Return the best of ``n_init`` seeded runs for ``k`` clusters."""

        opts = self.settings.kmeans
        best: tuple[np.ndarray, np.ndarray, float] | None = None
        for run in range(opts.n_init):
            rng = np.random.default_rng([opts.seed, k, run])
            seeds = kmeans_plus_plus(matrix, k, rng)
            labels, centroids, wcss = lloyd(matrix, seeds, opts.max_iterations)
            if best is None or wcss < best[2]:
                best = (labels, centroids, wcss)
        assert best is not None
        return best

    def choose(
        self, matrix: np.ndarray, dist: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Pick ``k`` and return ``(labels, centroids, silhouettes)``."""

        opts = self.settings.kmeans
        n = matrix.shape[0]
        best_score = -np.inf
        best: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None
        for k in range(2, min(opts.max_clusters, n // 2) + 1):
            labels, centroids, _ = self.fit(matrix, k)
            scores = silhouette_scores(dist, labels)
            score = float(scores.mean())
            logger.debug("k=%d mean silhouette %.3f", k, score)
            if score > best_score:
                best_score, best = score, (labels, centroids, scores)
        if best is None or best_score < opts.min_silhouette:
            labels = np.zeros(n, dtype=int)
            return labels, matrix.mean(axis=0, keepdims=True), np.zeros(n)
        return best

    def cluster(self, vectors: Sequence[FeatureVector]) -> ClusteringResult:
        """Cluster ``vectors``."""

        n = len(vectors)
        if n <= 1:
            return single_cluster_result(n, self.name())
        matrix = feature_matrix(vectors)
        dist = pairwise_distances(matrix, self.settings.metric)
        labels, centroids, scores = self.choose(matrix, dist)

        present = list(dict.fromkeys(int(lab) for lab in labels))
        compact = {lab: i for i, lab in enumerate(present)}
        ids = [compact[int(lab)] for lab in labels]
        sizes = {cid: ids.count(cid) for cid in compact.values()}
        stabilities = {cid: sizes[cid] / n for cid in sizes}
        if len(present) == 1:
            persistence = {0: 1.0}
        else:
            persistence = {
                cid: float(np.mean([max(0.0, scores[i]) for i in range(n) if ids[i] == cid]))
                for cid in sizes
            }

        offsets = np.linalg.norm(matrix - centroids[labels], axis=1)
        assignments = tuple(
            ClusterAssignment(
                document_index=v.document_index,
                cluster_id=ids[i],
                confidence=float(np.clip(1.0 - offsets[i], 0.0, 1.0)),
                stability=stabilities[ids[i]],
            )
            for i, v in enumerate(vectors)
        )
        logger.debug("k-means chose %d clusters for %d vectors", len(present), n)
        return ClusteringResult(
            assignments=assignments,
            cluster_count=len(present),
            outlier_indices=(),
            cluster_stabilities=stabilities,
            cluster_persistence=persistence,
            algorithm=self.name(),
        )
