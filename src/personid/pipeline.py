"""End-to-end identity resolution over a batch of evidence documents.

:func:`analyze` runs the stages in order and keeps every intermediate result:

1. **normalize** – one :class:`~personid.preprocess.evidence.NormalizedEvidence`
   per document (hints are validated, not trusted).
2. **vectorize** – TF-IDF feature vectors.  The origin platform and handle
   of each vector come from the validated document hints or, failing that,
   from the document's own source URL when it is a profile page.
3. **cluster** – density clustering (or the consensus ensemble).
4. **resolve** – entity clusters with canonical handles.
5. **aggregate** – outlier penalties, low-evidence filtering and ranking.

Each stage reports ``(stage, elapsed_ms, count)`` to the optional event sink.
All state is local to the call.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .cluster import ClusteringResult, get_clusterer
from .config.schema import ConfigModel, default_config
from .link import EntityCluster, EntityResolver, PersonCluster, aggregate
from .preprocess.evidence import (
    EvidenceDocument,
    EvidenceNormalizer,
    NormalizedEvidence,
    trusted_hint,
)
from .utils.errors import InvalidInputError
from .utils.events import EventSink, null_sink
from .utils.timing import Timing
from .utils.urls import validate_url
from .vectorize import EvidenceItem, FeatureVector, TfidfVectorizer

__all__ = ["PipelineStats", "QualityMetrics", "PipelineResult", "analyze", "quality_metrics"]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PipelineStats:
    """Counts and per-stage timings of one run."""

    documents: int
    dimensions: int
    clusters: int
    outliers: int
    entities: int
    persons: int
    timings_ms: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "documents": self.documents,
            "dimensions": self.dimensions,
            "clusters": self.clusters,
            "outliers": self.outliers,
            "entities": self.entities,
            "persons": self.persons,
            "timings_ms": dict(self.timings_ms),
        }


@dataclass(slots=True, frozen=True)
class QualityMetrics:
    """Summary scores of the final persons.

    ``handle_deduplication`` is the share of alternate handles that were
    rejected as duplicates; it is ``1.0`` when there are no alternates.
    """

    average_confidence: float
    canonical_share: float
    handle_deduplication: float

    def to_dict(self) -> dict[str, object]:
        return {
            "average_confidence": self.average_confidence,
            "canonical_share": self.canonical_share,
            "handle_deduplication": self.handle_deduplication,
        }


@dataclass(slots=True, frozen=True)
class PipelineResult:
    """Every intermediate and final product of :func:`analyze`."""

    evidence: tuple[NormalizedEvidence, ...]
    vectors: tuple[FeatureVector, ...]
    clustering: ClusteringResult
    entity_clusters: tuple[EntityCluster, ...]
    persons: tuple[PersonCluster, ...]
    stats: PipelineStats
    quality: QualityMetrics

    def to_dict(self) -> dict[str, object]:
        """Return a JSON serialisable projection of the result."""

        return {
            "persons": [p.to_dict() for p in self.persons],
            "entity_clusters": [c.to_dict() for c in self.entity_clusters],
            "clustering": self.clustering.to_dict(),
            "stats": self.stats.to_dict(),
            "quality": self.quality.to_dict(),
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_documents(documents: Sequence[EvidenceDocument]) -> None:
    for position, document in enumerate(documents):
        if document.index != position:
            raise InvalidInputError(
                f"document index {document.index} found at position {position}"
            )


def _origin(document: EvidenceDocument) -> tuple[str | None, str | None]:
    hint = trusted_hint(document)
    if hint is not None:
        return hint
    if document.source_url:
        source = validate_url(document.source_url)
        if source.is_person_profile:
            return source.platform, source.handle
    return None, None


def quality_metrics(persons: Sequence[PersonCluster]) -> QualityMetrics:
    """Return the :class:`QualityMetrics` of ``persons``."""

    if not persons:
        return QualityMetrics(0.0, 0.0, 1.0)
    alternates = [h for p in persons for h in p.alternate_handles]
    rejected = sum(1 for h in alternates if h.status == "rejected")
    return QualityMetrics(
        average_confidence=sum(p.confidence for p in persons) / len(persons),
        canonical_share=sum(1 for p in persons if p.canonical_handle) / len(persons),
        handle_deduplication=rejected / len(alternates) if alternates else 1.0,
    )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def analyze(
    documents: Sequence[EvidenceDocument],
    config: ConfigModel | None = None,
    events: EventSink | None = None,
) -> PipelineResult:
    """Run the full pipeline over ``documents``."""

    cfg = config or default_config()
    emit = events or null_sink
    _check_documents(documents)
    timings: dict[str, float] = {}

    def report(stage: str, timing: Timing, count: int) -> None:
        timings[stage] = timing.ms
        emit(stage, {"stage": stage, "elapsed_ms": timing.ms, "count": count})
        logger.debug("%s: %d items in %.1f ms", stage, count, timing.ms)

    with Timing() as t:
        normalizer = EvidenceNormalizer(cfg.normalizer)
        evidence = [normalizer.normalize_document(doc) for doc in documents]
    report("normalize", t, len(evidence))

    with Timing() as t:
        items: list[EvidenceItem] = []
        for doc, record in zip(documents, evidence):
            platform, handle = _origin(doc)
            items.append(EvidenceItem(record, doc.source_url, platform, handle))
        vectors = TfidfVectorizer(cfg.vectorizer).vectorize(items)
    report("vectorize", t, len(vectors))

    with Timing() as t:
        clustering = get_clusterer(cfg.clustering).cluster(vectors)
    report("cluster", t, clustering.cluster_count)

    with Timing() as t:
        entity_clusters = EntityResolver(cfg.resolver).resolve(vectors, evidence, documents)
    report("resolve", t, len(entity_clusters))

    with Timing() as t:
        aggregated = aggregate(
            entity_clusters,
            clustering,
            cfg.aggregation,
            min_cluster_size=cfg.clustering.min_cluster_size,
        )
    report("aggregate", t, len(aggregated.persons))

    stats = PipelineStats(
        documents=len(documents),
        dimensions=vectors[0].dimensions if vectors else 0,
        clusters=clustering.cluster_count,
        outliers=len(clustering.outlier_indices),
        entities=len(entity_clusters),
        persons=len(aggregated.persons),
        timings_ms=timings,
    )
    logger.info(
        "analyzed %d documents into %d persons (%d density clusters)",
        stats.documents,
        stats.persons,
        stats.clusters,
    )
    return PipelineResult(
        evidence=tuple(evidence),
        vectors=tuple(vectors),
        clustering=clustering,
        entity_clusters=aggregated.entity_clusters,
        persons=aggregated.persons,
        stats=stats,
        quality=quality_metrics(aggregated.persons),
    )
