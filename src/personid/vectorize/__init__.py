"""TF-IDF feature extraction over normalized evidence."""

from .tfidf import (
    EvidenceItem,
    FeatureVector,
    TfidfVectorizer,
    Vocabulary,
    build_vocabulary,
    cosine_similarity,
    jaccard_similarity,
)

__all__ = [
    "EvidenceItem",
    "FeatureVector",
    "TfidfVectorizer",
    "Vocabulary",
    "build_vocabulary",
    "cosine_similarity",
    "jaccard_similarity",
]
