"""Tests for the k-means clusterer."""

from __future__ import annotations

import numpy as np
import pytest

from personid.cluster import KMeansClusterer, get_clusterer
from personid.cluster.kmeans import kmeans_plus_plus, lloyd, silhouette_scores
from personid.config.schema import ClusteringSettings, KMeansSettings
from personid.vectorize import FeatureVector


def _grid(x0: float, y0: float) -> list[tuple[float, float]]:
    return [(x0 + 0.1 * i, y0 + 0.1 * j) for j in range(2) for i in range(3)]


def _vectors(points: list[tuple[float, float]]) -> list[FeatureVector]:
    return [
        FeatureVector(i, f"https://example.com/{i}", np.array(p, dtype=float), ("x", "y"))
        for i, p in enumerate(points)
    ]


THREE_GROUPS = _vectors(_grid(0, 0) + _grid(10, 0) + _grid(0, 10))


def _kmeans(**overrides: object) -> KMeansClusterer:
    settings = ClusteringSettings(
        algorithm="kmeans", kmeans=KMeansSettings(**overrides)  # type: ignore[arg-type]
    )
    return KMeansClusterer(settings)


def test_three_groups_found() -> None:
    result = _kmeans().cluster(THREE_GROUPS)
    assert result.algorithm == "kmeans"
    assert result.cluster_count == 3
    assert result.labels == [0] * 6 + [1] * 6 + [2] * 6
    assert result.outlier_indices == ()
    assert result.cluster_stabilities == {c: pytest.approx(1 / 3) for c in range(3)}
    assert all(0.85 < a.confidence <= 1.0 for a in result.assignments)
    assert all(0.9 < p <= 1.0 for p in result.cluster_persistence.values())


def test_cap_on_clusters_keeps_groups_whole() -> None:
    labels = _kmeans(max_clusters=2).cluster(THREE_GROUPS).labels
    assert len(set(labels)) == 2
    for start in (0, 6, 12):
        assert len(set(labels[start : start + 6])) == 1


def test_weak_structure_gives_single_cluster() -> None:
    result = _kmeans(min_silhouette=1.0).cluster(THREE_GROUPS)
    assert result.cluster_count == 1
    assert result.labels == [0] * 18
    assert result.cluster_persistence == {0: 1.0}


def test_identical_points_form_one_cluster() -> None:
    result = _kmeans().cluster(_vectors([(1.0, 1.0)] * 6))
    assert result.cluster_count == 1
    assert all(a.confidence == 1.0 for a in result.assignments)


def test_deterministic_for_seed() -> None:
    first = _kmeans(seed=7).cluster(THREE_GROUPS).labels
    second = _kmeans(seed=7).cluster(list(THREE_GROUPS)).labels
    assert first == second


def test_degenerate_inputs() -> None:
    assert _kmeans().cluster([]).cluster_count == 0
    assert _kmeans().cluster(THREE_GROUPS[:1]).labels == [0]


def test_building_blocks() -> None:
    matrix = np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 0.0], [10.0, 1.0]])
    seeds = kmeans_plus_plus(matrix, 2, np.random.default_rng(0))
    assert seeds.shape == (2, 2)
    labels, centroids, wcss = lloyd(matrix, matrix[[0, 2]], 10)
    assert labels.tolist() == [0, 0, 1, 1]
    assert centroids.tolist() == [[0.0, 0.5], [10.0, 0.5]]
    assert wcss == pytest.approx(1.0)
    dist = np.array([[0.0, 1.0, 4.0], [1.0, 0.0, 4.0], [4.0, 4.0, 0.0]])
    scores = silhouette_scores(dist, np.array([0, 0, 1]))
    assert scores.tolist() == [pytest.approx(0.75), pytest.approx(0.75), 0.0]
    assert not silhouette_scores(dist, np.zeros(3, dtype=int)).any()


def test_selected_by_algorithm() -> None:
    assert isinstance(get_clusterer(ClusteringSettings(algorithm="kmeans")), KMeansClusterer)
