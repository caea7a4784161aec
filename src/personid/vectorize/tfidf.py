"""TF-IDF vectorization of normalized evidence.

Each evidence record is rendered as a synthetic document (names and handles
appear twice so that they weigh more than incidental keywords, emails
contribute their domain and years are appended as context), tokenized into
unigrams and ``a_b`` bigrams, and scored against a corpus vocabulary.

Rules
-----
1. **Tokens** – lowercase alphanumeric runs longer than two characters that
   are not stop words; bigrams join adjacent surviving unigrams.
2. **Vocabulary** – a term is kept when ``min_doc_freq <= df`` and
   ``df <= floor(max_doc_freq * N)``; order is first appearance.
3. **Weights** – ``tf = count / distinct vocabulary terms in the document``
   and ``idf = ln(N / df)``.
4. **Reduction** – columns are mean-centred and reduced to
   ``D = min(target_components, vocabulary size)`` dimensions, either by
   projecting on the leading right singular vectors (``svd``) or by keeping
   the first ``D`` vocabulary columns (``truncate``).
5. **Normalization** – rows are optionally scaled to unit length.  A document
   without any vocabulary term is kept at the all-zero vector through
   centring and normalization.

The vectorizer keeps the fitted vocabulary, document frequencies and idf
values of its last run for inspection.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from ..config.schema import VectorizerSettings
from ..preprocess.evidence import NormalizedEvidence
from ..utils.constants import VECTOR_STOP_WORDS

__all__ = [
    "EvidenceItem",
    "FeatureVector",
    "Vocabulary",
    "TfidfVectorizer",
    "document_text",
    "tokenize",
    "build_vocabulary",
    "cosine_similarity",
    "jaccard_similarity",
]

logger = logging.getLogger(__name__)

_NON_WORD_RX = re.compile(r"[^\w\s]")


@dataclass(slots=True, frozen=True)
class EvidenceItem:
    """Evidence of one document together with its origin."""

    evidence: NormalizedEvidence
    url: str
    platform: str | None = None
    handle: str | None = None


@dataclass(slots=True, frozen=True, eq=False)
class FeatureVector:
    """Fixed length numeric representation of one document.

    ``features`` is a read-only :class:`numpy.ndarray`; ``feature_names`` has
    the same length.
    """

    document_index: int
    url: str
    features: np.ndarray
    feature_names: tuple[str, ...]
    platform: str | None = None
    handle: str | None = None

    @property
    def dimensions(self) -> int:
        """Return the number of features."""

        return int(self.features.shape[0])


@dataclass(slots=True, frozen=True)
class Vocabulary:
    """Ordered vocabulary with document frequencies."""

    terms: tuple[str, ...]
    document_frequencies: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: object) -> bool:
        return term in self.document_frequencies


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def document_text(item: EvidenceItem) -> str:
    """Render ``item`` as the synthetic document used for term counting.

    Names and handles count twice.  Emails contribute their domain only and
    years close the document as context.
    """

    evidence = item.evidence
    parts: list[str] = []
    for name in evidence.names:
        parts.extend((name, name))
    handles = [h.handle for h in evidence.handles]
    if item.handle and item.handle.lower() not in handles:
        handles.append(item.handle.lower())
    for handle in handles:
        parts.extend((handle, handle))
    parts.extend(evidence.organizations)
    parts.extend(evidence.locations)
    for email in evidence.emails:
        domain = email.partition("@")[2]
        if domain:
            parts.append(domain)
    parts.extend(evidence.domains)
    parts.extend(evidence.keywords)
    parts.extend(str(year) for year in evidence.years)
    return " ".join(parts)


def tokenize(text: str, settings: VectorizerSettings) -> list[str]:
    """Return the unigram and bigram terms of ``text`` in order."""

    cleaned = _NON_WORD_RX.sub(" ", text.lower())
    words = [w for w in cleaned.split() if len(w) > 2 and w not in VECTOR_STOP_WORDS]
    terms: list[str] = []
    if settings.use_unigrams:
        terms.extend(words)
    if settings.use_bigrams:
        terms.extend(f"{a}_{b}" for a, b in zip(words, words[1:]))
    return terms


def build_vocabulary(
    documents: Sequence[Sequence[str]], settings: VectorizerSettings
) -> Vocabulary:
    """Return the vocabulary of tokenized ``documents`` under ``settings``."""

    n_docs = len(documents)
    df: Counter[str] = Counter()
    order: dict[str, None] = {}
    for terms in documents:
        for term in terms:
            order.setdefault(term, None)
        df.update(set(terms))
    max_df = math.floor(settings.max_doc_freq * n_docs)
    kept = tuple(t for t in order if settings.min_doc_freq <= df[t] <= max_df)
    return Vocabulary(kept, {t: df[t] for t in kept})


# ---------------------------------------------------------------------------
# Similarity helpers
# ---------------------------------------------------------------------------


def cosine_similarity(a: np.ndarray | Sequence[float], b: np.ndarray | Sequence[float]) -> float:
    """Return the cosine of ``a`` and ``b``; ``0`` for empty or zero vectors."""

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.size == 0 or va.shape != vb.shape:
        return 0.0
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


def jaccard_similarity(a: set[str], b: set[str]) -> float:
    """Return ``|a ∩ b| / |a ∪ b|``; ``0`` when both sets are empty."""

    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


# ---------------------------------------------------------------------------
# Vectorizer
# ---------------------------------------------------------------------------


def _svd_reduce(centered: np.ndarray, dims: int) -> np.ndarray:
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    k = min(dims, vt.shape[0])
    components = vt[:k]
    # Deterministic sign: the largest absolute loading of each component is positive.
    pivots = np.argmax(np.abs(components), axis=1)
    signs = np.sign(components[np.arange(k), pivots])
    signs[signs == 0] = 1.0
    projected = centered @ (components * signs[:, None]).T
    if k < dims:
        projected = np.hstack([projected, np.zeros((centered.shape[0], dims - k))])
    return projected


class TfidfVectorizer:
    """Turn evidence records into fixed length feature vectors."""

    def __init__(self, settings: VectorizerSettings | None = None) -> None:
        self.settings = settings or VectorizerSettings()
        self.vocabulary = Vocabulary(())
        self.idf: dict[str, float] = {}

    @property
    def document_frequencies(self) -> dict[str, int]:
        """Return document frequencies of the last fitted vocabulary."""

        return dict(self.vocabulary.document_frequencies)

    def feature_importance(self) -> list[tuple[str, float]]:
        """Return vocabulary terms sorted by idf (rarest first)."""

        return sorted(self.idf.items(), key=lambda kv: (-kv[1], kv[0]))

    def vectorize(self, items: Sequence[EvidenceItem]) -> list[FeatureVector]:
        """Return one :class:`FeatureVector` per item, in input order."""

        settings = self.settings
        n_docs = len(items)
        documents = [tokenize(document_text(item), settings) for item in items]
        self.vocabulary = build_vocabulary(documents, settings)
        terms = self.vocabulary.terms
        self.idf = {
            t: math.log(n_docs / df) for t, df in self.vocabulary.document_frequencies.items()
        }
        dims = min(settings.target_components, len(terms))
        logger.debug(
            "vectorizing %d documents with %d terms into %d dims", n_docs, len(terms), dims
        )

        matrix = np.zeros((n_docs, len(terms)))
        column = {t: i for i, t in enumerate(terms)}
        for row, doc_terms in enumerate(documents):
            counts = Counter(t for t in doc_terms if t in column)
            if not counts:
                continue
            distinct = len(counts)
            for term, count in counts.items():
                matrix[row, column[term]] = (count / distinct) * self.idf[term]

        if dims == 0 or n_docs == 0:
            reduced = np.zeros((n_docs, 0))
            names: tuple[str, ...] = ()
        else:
            centered = matrix - matrix.mean(axis=0)
            if settings.reduction == "svd":
                reduced = _svd_reduce(centered, dims)
                names = tuple(f"svd_{i}" for i in range(dims))
            else:
                reduced = centered[:, :dims]
                names = terms[:dims]
            # Documents without vocabulary terms stay at the origin.
            reduced[~matrix.any(axis=1)] = 0.0

        if settings.l2_normalize and reduced.size:
            norms = np.linalg.norm(reduced, axis=1)
            nonzero = norms > 1e-12
            reduced[nonzero] = reduced[nonzero] / norms[nonzero, None]
            reduced[~nonzero] = 0.0

        vectors: list[FeatureVector] = []
        for row, item in enumerate(items):
            features = np.array(reduced[row], dtype=float)
            features.flags.writeable = False
            vectors.append(
                FeatureVector(
                    document_index=row,
                    url=item.url,
                    features=features,
                    feature_names=names,
                    platform=item.platform,
                    handle=item.handle,
                )
            )
        return vectors
