"""Tests for outlier penalties, filtering and ranking of persons."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pytest

from personid.cluster import ClusterAssignment, ClusteringResult
from personid.config.schema import AggregationSettings
from personid.link import EntityCluster, EntityResolver, aggregate
from personid.link.aggregate import entity_matches, rationale, top_terms
from personid.preprocess.evidence import NormalizedEvidence, SocialHandle
from personid.vectorize import FeatureVector

JANE_AXIS = (1.0, 0.0)
JOHN_AXIS = (0.0, 1.0)

JANE = NormalizedEvidence(
    names=("jane doe",),
    emails=("jane@x.org",),
    organizations=("acme corp",),
    keywords=("designer", "posters"),
    handles=(SocialHandle("instagram", "janedoe", "https://instagram.com/janedoe", 0.8),),
    confidence=0.75,
)
JOHN = NormalizedEvidence(names=("john smith",), emails=("john@y.org",), confidence=0.55)


def _entities() -> list[EntityCluster]:
    axes = [JANE_AXIS, JANE_AXIS, JOHN_AXIS, JANE_AXIS, JOHN_AXIS]
    urls = ["https://instagram.com/janedoe"] + [f"https://example.com/{i}" for i in range(1, 5)]
    vectors = [
        FeatureVector(i, urls[i], np.array(axis), ("a", "b")) for i, axis in enumerate(axes)
    ]
    evidence = [JANE, JANE, JOHN, JANE, JOHN]
    return EntityResolver().resolve(vectors, evidence)


def _clustering(outliers: Sequence[int] = ()) -> ClusteringResult:
    assignments = tuple(
        ClusterAssignment(i, -1 if i in outliers else 0, 0.5, 0.5) for i in range(5)
    )
    return ClusteringResult(assignments, 1, tuple(outliers))


def test_ranked_by_confidence() -> None:
    result = aggregate(_entities(), _clustering())
    assert [p.person_id for p in result.persons] == ["entity_1", "entity_2"]
    assert result.dropped == ()
    jane = result.persons[0]
    assert jane.confidence == pytest.approx(0.95)
    assert jane.is_outlier is False and jane.outlier_ratio == 0.0
    assert jane.canonical_handle is not None
    assert jane.canonical_handle.handle == "janedoe"


def test_outlier_penalty_and_low_evidence_drop() -> None:
    entities = _entities()
    kept = aggregate(entities, _clustering([2, 4]), min_cluster_size=2)
    john = kept.persons[1]
    assert john.is_outlier is True
    assert john.outlier_ratio == 1.0
    assert john.confidence == pytest.approx(0.275)
    assert kept.entity_clusters[1].confidence == pytest.approx(0.275)

    dropped = aggregate(entities, _clustering([2, 4]), min_cluster_size=12)
    assert [p.person_id for p in dropped.persons] == ["entity_1"]
    assert dropped.dropped == ("entity_2",)


def test_minority_outliers_are_not_penalised() -> None:
    result = aggregate(_entities(), _clustering([0]))
    jane = result.persons[0]
    assert jane.outlier_ratio == pytest.approx(1 / 3)
    assert jane.is_outlier is False
    assert jane.confidence == pytest.approx(0.95)


def test_penalty_is_configurable() -> None:
    settings = AggregationSettings(outlier_penalty=1.0)
    result = aggregate(_entities(), _clustering([2, 4]), settings)
    assert result.persons[1].confidence == pytest.approx(0.55)


def test_ties_rank_by_size() -> None:
    settings = AggregationSettings(outlier_penalty=0.0, confidence_floor=0.0)
    result = aggregate(
        _entities(), _clustering([0, 1, 2, 3, 4]), settings, min_cluster_size=2
    )
    assert [p.person_id for p in result.persons] == ["entity_1", "entity_2"]
    assert all(p.confidence == 0.0 for p in result.persons)


def test_projections() -> None:
    jane = _entities()[0]
    assert top_terms(jane) == ("designer", "posters")
    assert top_terms(jane, 1) == ("designer",)
    matches = entity_matches(jane)
    assert matches == (
        "names: jane doe",
        "emails: jane@x.org",
        "organizations: acme corp",
    )
    text = rationale(jane, top_terms(jane), matches)
    assert text.startswith("Identified from 3 profiles with 95.0% confidence")
    assert "Key terms: designer, posters" in text
    assert "Primary instagram handle: @janedoe" in text


def test_profiles_and_dict() -> None:
    person = aggregate(_entities(), _clustering()).persons[0]
    assert [p.document_index for p in person.profiles] == [0, 1, 3]
    assert person.profiles[0].platform == "instagram"
    assert person.profiles[1].platform == "unknown"
    assert person.profiles[0].why_included == "Evidence confidence: 75.0%"
    data = person.to_dict()
    assert data["person_id"] == "entity_1"
    assert data["canonical_handle"] == {
        "platform": "instagram",
        "handle": "janedoe",
        "url": "https://instagram.com/janedoe",
        "confidence": 1.0,
    }
    assert data["top_terms"] == ["designer", "posters"]
