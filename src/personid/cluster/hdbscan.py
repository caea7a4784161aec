"""HDBSCAN-style density clustering.

The clusterer groups feature vectors that sit in dense regions and leaves
sparse points as outliers.

Algorithm
---------
1. **Distances** – euclidean, or cosine as ``max(0, 2 - 2 * dot)``.
2. **Core distances** – distance to the ``(min_samples - 1)``-th nearest
   neighbour of each point.
3. **Mutual reachability** – ``max(core_i, core_j, d_ij)``.
4. **Minimum spanning tree** – Prim's algorithm on the dense reachability
   matrix; ties pick the lowest index.
5. **Single linkage** – MST edges in ascending order are merged with a
   union-find, giving a binary merge tree.
6. **Condensed tree** – walking down from the root with ``λ = 1 / distance``
   (distances are floored at ``1e-12``), a split yields two child clusters when
   both sides hold at least ``min_cluster_size`` points; otherwise the small
   side's points fall out of the parent cluster.
7. **Excess of mass** – a cluster's stability is
   ``Σ (λ_fallout - λ_birth) * size``; clusters are selected bottom-up when
   their own stability beats the total of their selected descendants.  The
   root is eligible only with ``allow_single_cluster``; when it is selected,
   only points that persist to the root's densest level are members.
   Selected clusters are numbered ``0..K-1`` in order of their lowest member.
8. **Monotone count** – steps 2-7 run for every size from ``2`` up to
   ``min_cluster_size`` (with ``min_samples`` following the size unless it is
   set).  Each size keeps at most as many clusters as the size before it; when
   the excess-of-mass pick exceeds that bound, the most stable cut of the
   condensed tree within the bound is used.  A larger ``min_cluster_size``
   therefore never yields more clusters.

Degenerate inputs
-----------------
With fewer than ``min_cluster_size`` vectors every point goes to a single
cluster with confidence and stability ``1``.  Reported cluster stability is
``size / N``; the excess-of-mass value is reported as persistence.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..config.schema import ClusteringSettings
from ..vectorize.tfidf import FeatureVector
from .base import (
    OUTLIER,
    ClusterAssignment,
    ClusteringResult,
    feature_matrix,
    pairwise_distances,
    single_cluster_result,
)

__all__ = [
    "DensityClusterer",
    "CondensedTree",
    "core_distances",
    "mutual_reachability",
    "minimum_spanning_tree",
    "condense_tree",
    "select_clusters",
]

logger = logging.getLogger(__name__)

MIN_DISTANCE = 1e-12


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------


def core_distances(dist: np.ndarray, min_samples: int) -> np.ndarray:
    """Return the distance of every point to its ``(min_samples - 1)``-th neighbour."""

    n = dist.shape[0]
    if n == 0:
        return np.zeros(0)
    k = min(max(min_samples - 1, 0), n - 1)
    return np.sort(dist, axis=1)[:, k]


def mutual_reachability(dist: np.ndarray, core: np.ndarray) -> np.ndarray:
    """Return ``max(core_i, core_j, d_ij)`` with a zero diagonal."""

    mr = np.maximum(dist, np.maximum(core[:, None], core[None, :]))
    np.fill_diagonal(mr, 0.0)
    return mr


def minimum_spanning_tree(weights: np.ndarray) -> list[tuple[int, int, float]]:
    """Return MST edges ``(a, b, weight)`` sorted by weight then endpoints."""

    n = weights.shape[0]
    if n < 2:
        return []
    in_tree = np.zeros(n, dtype=bool)
    in_tree[0] = True
    best = weights[0].copy()
    source = np.zeros(n, dtype=int)
    edges: list[tuple[int, int, float]] = []
    for _ in range(n - 1):
        candidates = np.where(in_tree, np.inf, best)
        j = int(np.argmin(candidates))
        a, b = sorted((int(source[j]), j))
        edges.append((a, b, float(best[j])))
        in_tree[j] = True
        closer = (weights[j] < best) & ~in_tree
        best[closer] = weights[j][closer]
        source[closer] = j
    edges.sort(key=lambda e: (e[2], e[0], e[1]))
    return edges


def _single_linkage(
    edges: Sequence[tuple[int, int, float]], n: int
) -> tuple[dict[int, tuple[int, int, float]], list[int]]:
    parent = list(range(n))
    label = list(range(n))
    sizes = [1] * n + [0] * max(n - 1, 0)
    children: dict[int, tuple[int, int, float]] = {}

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    node = n
    for a, b, weight in edges:
        ra, rb = find(a), find(b)
        if ra == rb:
            continue
        left, right = label[ra], label[rb]
        children[node] = (left, right, weight)
        sizes[node] = sizes[left] + sizes[right]
        parent[rb] = ra
        label[ra] = node
        node += 1
    return children, sizes


# ---------------------------------------------------------------------------
# Condensed tree
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class CondensedTree:
    """Rows ``(parent, child, lambda, child_size)`` of the condensed hierarchy.

    Children below ``n_points`` are points; cluster labels start at
    ``n_points`` which is the root.
    """

    n_points: int
    rows: tuple[tuple[int, int, float, int], ...]

    @property
    def root(self) -> int:
        return self.n_points

    def clusters(self) -> list[int]:
        """Return all cluster labels, root first."""

        labels = {self.root}
        labels.update(child for _, child, _, _ in self.rows if child >= self.n_points)
        return sorted(labels)

    def cluster_children(self, cluster: int) -> list[int]:
        return [c for p, c, _, _ in self.rows if p == cluster and c >= self.n_points]

    def point_lambdas(self) -> dict[int, tuple[int, float]]:
        """Return, per point, the cluster it falls out of and the λ at which it does."""

        return {c: (p, lam) for p, c, lam, _ in self.rows if c < self.n_points}

    def births(self) -> dict[int, float]:
        births = {self.root: 0.0}
        births.update({c: lam for _, c, lam, _ in self.rows if c >= self.n_points})
        return births

    def stabilities(self) -> dict[int, float]:
        """Return the excess-of-mass stability of every cluster."""

        births = self.births()
        stability = {c: 0.0 for c in births}
        for parent, _, lam, size in self.rows:
            stability[parent] += (lam - births[parent]) * size
        return stability


def _leaves(node: int, children: dict[int, tuple[int, int, float]], n: int) -> list[int]:
    points: list[int] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current < n:
            points.append(current)
        else:
            left, right, _ = children[current]
            stack.extend((right, left))
    return points


def condense_tree(
    edges: Sequence[tuple[int, int, float]], n: int, min_cluster_size: int
) -> CondensedTree:
    """Condense the single linkage tree of ``edges`` with ``min_cluster_size``."""

    children, sizes = _single_linkage(edges, n)
    rows: list[tuple[int, int, float, int]] = []
    if n < 2 or not children:
        return CondensedTree(n, tuple((n, p, 1.0 / MIN_DISTANCE, 1) for p in range(n)))

    root_node = max(children)
    relabel = {root_node: n}
    next_label = n + 1
    queue = deque([root_node])
    while queue:
        node = queue.popleft()
        left, right, distance = children[node]
        lam = 1.0 / max(distance, MIN_DISTANCE)
        parent_label = relabel[node]
        big = [sizes[c] >= min_cluster_size for c in (left, right)]
        for child, is_big in zip((left, right), big):
            size = sizes[child]
            if all(big):
                relabel[child] = next_label
                rows.append((parent_label, next_label, lam, size))
                next_label += 1
                queue.append(child)
            elif is_big:
                relabel[child] = parent_label
                queue.append(child)
            else:
                rows.extend((parent_label, p, lam, 1) for p in _leaves(child, children, n))
    return CondensedTree(n, tuple(rows))


def _capped_selection(
    tree: CondensedTree,
    allow_single_cluster: bool,
    stability: dict[int, float],
    max_clusters: int,
) -> list[int]:
    # Per cluster: selected count -> (total stability, selected labels) of its best cut.
    best: dict[int, dict[int, tuple[float, tuple[int, ...]]]] = {}
    for cluster in sorted(tree.clusters(), reverse=True):
        combined: dict[int, tuple[float, tuple[int, ...]]] = {0: (0.0, ())}
        for kid in tree.cluster_children(cluster):
            merged: dict[int, tuple[float, tuple[int, ...]]] = {}
            for k1, (s1, c1) in combined.items():
                for k2, (s2, c2) in best[kid].items():
                    k = k1 + k2
                    if k <= max_clusters and (k not in merged or s1 + s2 > merged[k][0]):
                        merged[k] = (s1 + s2, c1 + c2)
            combined = merged
        eligible = cluster != tree.root or allow_single_cluster
        if eligible and max_clusters >= 1:
            if 1 not in combined or stability[cluster] >= combined[1][0]:
                combined[1] = (stability[cluster], (cluster,))
        best[cluster] = combined
    options = best[tree.root]
    count = max(options, key=lambda k: (options[k][0], -k))
    return sorted(options[count][1])


def select_clusters(
    tree: CondensedTree, allow_single_cluster: bool, max_clusters: int | None = None
) -> tuple[list[int], dict[int, float]]:
    """Return selected cluster labels (ascending) and raw stabilities.

    Selection is the bottom-up excess-of-mass pass.  When it picks more than
    ``max_clusters`` clusters, the cut of the tree with the highest total
    stability among those with at most ``max_clusters`` clusters is returned
    instead (ties prefer fewer clusters).
    """

    raw = tree.stabilities()
    stability = dict(raw)
    candidates = [c for c in tree.clusters() if c != tree.root or allow_single_cluster]
    selected = {c: True for c in candidates}
    for cluster in sorted(candidates, reverse=True):
        kids = [k for k in tree.cluster_children(cluster) if k in selected]
        subtree = sum(stability[k] for k in kids)
        if kids and subtree > stability[cluster]:
            selected[cluster] = False
            stability[cluster] = subtree
        else:
            stack = list(kids)
            while stack:
                descendant = stack.pop()
                selected[descendant] = False
                stack.extend(k for k in tree.cluster_children(descendant) if k in selected)
    chosen = sorted(c for c, keep in selected.items() if keep)
    if max_clusters is not None and len(chosen) > max_clusters:
        chosen = _capped_selection(tree, allow_single_cluster, raw, max_clusters)
    return chosen, raw


# ---------------------------------------------------------------------------
# Clusterer
# ---------------------------------------------------------------------------


class DensityClusterer:
    """Hierarchical density clusterer with excess-of-mass selection."""

    def __init__(self, settings: ClusteringSettings | None = None) -> None:
        self.settings = settings or ClusteringSettings()

    def name(self) -> str:  # pragma: no cover - trivial
        return "hdbscan"

    def cluster(self, vectors: Sequence[FeatureVector]) -> ClusteringResult:
        """Cluster ``vectors``."""

        settings = self.settings
        n = len(vectors)
        mcs = settings.min_cluster_size
        if n < mcs:
            logger.debug("%d vectors below min_cluster_size=%d; single cluster", n, mcs)
            return single_cluster_result(n, self.name())

        matrix = feature_matrix(vectors)
        dist = pairwise_distances(matrix, settings.metric)
        core, tree, selected, raw_stability = self._select(dist)
        labels = self._label_points(tree, selected)

        # Compact ids in order of each cluster's lowest member; empty clusters vanish.
        present = list(dict.fromkeys(lab for lab in labels if lab != OUTLIER))
        compact = {lab: i for i, lab in enumerate(present)}
        ids = [compact.get(lab, OUTLIER) for lab in labels]
        sizes = {cid: ids.count(cid) for cid in compact.values()}
        stabilities = {cid: sizes[cid] / n for cid in sizes}
        persistence = {compact[lab]: raw_stability[lab] for lab in present}

        confidences = self._confidences(matrix, dist, ids, stabilities)
        assignments = tuple(
            ClusterAssignment(
                document_index=v.document_index,
                cluster_id=ids[i],
                confidence=confidences[i],
                stability=stabilities.get(ids[i], 0.0),
            )
            for i, v in enumerate(vectors)
        )
        outliers = tuple(a.document_index for a in assignments if a.is_outlier)
        logger.debug(
            "found %d clusters and %d outliers among %d vectors", len(present), len(outliers), n
        )
        return ClusteringResult(
            assignments=assignments,
            cluster_count=len(present),
            outlier_indices=outliers,
            core_distances=tuple(float(c) for c in core),
            cluster_stabilities=stabilities,
            cluster_persistence=persistence,
            algorithm=self.name(),
        )

    def _select(
        self, dist: np.ndarray
    ) -> tuple[np.ndarray, CondensedTree, list[int], dict[int, float]]:
        """Run the hierarchy and selection for sizes ``2..min_cluster_size``.

        Each size may select at most as many clusters as the size before it,
        so the cluster count never grows with ``min_cluster_size``.
        """

        settings = self.settings
        n = dist.shape[0]
        graphs: dict[int, tuple[np.ndarray, list[tuple[int, int, float]]]] = {}
        cap: int | None = None
        result: tuple[np.ndarray, CondensedTree, list[int], dict[int, float]] | None = None
        for size in range(2, settings.min_cluster_size + 1):
            samples = settings.min_samples if settings.min_samples is not None else size
            if samples not in graphs:
                core = core_distances(dist, samples)
                graphs[samples] = (core, minimum_spanning_tree(mutual_reachability(dist, core)))
            core, edges = graphs[samples]
            tree = condense_tree(edges, n, size)
            selected, raw = select_clusters(tree, settings.allow_single_cluster, cap)
            cap = len(selected)
            result = (core, tree, selected, raw)
        assert result is not None
        return result

    @staticmethod
    def _label_points(tree: CondensedTree, selected: list[int]) -> list[int]:
        n = tree.n_points
        chosen = set(selected)
        cluster_parent = {c: p for p, c, _, _ in tree.rows if c >= n}
        fallout = tree.point_lambdas()
        root_max = max((lam for p, _, lam, _ in tree.rows if p == tree.root), default=0.0)
        labels: list[int] = []
        for point in range(n):
            cluster, lam = fallout[point]
            label = OUTLIER
            current: int | None = cluster
            while current is not None:
                if current in chosen:
                    label = current
                    break
                current = cluster_parent.get(current)
            if label == tree.root and lam < root_max:
                label = OUTLIER
            labels.append(label)
        return labels

    def _confidences(
        self,
        matrix: np.ndarray,
        dist: np.ndarray,
        ids: list[int],
        stabilities: dict[int, float],
    ) -> list[float]:
        confidences = [0.0] * len(ids)
        for cid, stability in stabilities.items():
            members = [i for i, c in enumerate(ids) if c == cid]
            centroid = matrix[members].mean(axis=0)
            for i in members:
                if self.settings.metric == "cosine":
                    to_centroid = max(0.0, 2.0 - 2.0 * float(np.dot(matrix[i], centroid)))
                else:
                    to_centroid = float(np.linalg.norm(matrix[i] - centroid))
                farthest = float(dist[i].max()) if dist.shape[0] else 0.0
                ratio = to_centroid / farthest if farthest > 0 else 0.0
                confidences[i] = max(0.0, min(1.0, (1.0 - ratio) * stability))
        return confidences
