"""Clustering strategies for feature vectors."""

from .base import (
    OUTLIER,
    ClusterAssignment,
    ClusteringAlgorithm,
    ClusteringResult,
    ClusterSummary,
    get_clusterer,
    summarize_clusters,
)
from .consensus import ConsensusClusterer
from .hdbscan import DensityClusterer
from .kmeans import KMeansClusterer

__all__ = [
    "OUTLIER",
    "ClusterAssignment",
    "ClusteringAlgorithm",
    "ClusteringResult",
    "ClusterSummary",
    "ConsensusClusterer",
    "DensityClusterer",
    "KMeansClusterer",
    "get_clusterer",
    "summarize_clusters",
]
