"""Tests for entity resolution and canonical handle election."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pytest

from personid.config.schema import MultiAccountSettings, ResolverSettings
from personid.link import EntityResolver, MultiAccountPolicy, resolve
from personid.link.matching import EntityNode
from personid.preprocess.evidence import EvidenceDocument, NormalizedEvidence, SocialHandle
from personid.utils.errors import InvalidInputError
from personid.vectorize import FeatureVector

JANE_AXIS = (1.0, 0.0)
JOHN_AXIS = (0.0, 1.0)


def _handle(platform: str, value: str) -> SocialHandle:
    return SocialHandle(platform, value, f"https://{platform}.com/{value}", 0.8)


def _jane(*handles: SocialHandle, **fields: object) -> NormalizedEvidence:
    values: dict[str, object] = {
        "names": ("jane doe",),
        "emails": ("jane@x.org",),
        "keywords": ("designer", "posters"),
        "handles": handles,
        "confidence": 0.75,
    }
    values.update(fields)
    return NormalizedEvidence(**values)  # type: ignore[arg-type]


def _john() -> NormalizedEvidence:
    return NormalizedEvidence(names=("john smith",), emails=("john@y.org",), confidence=0.55)


def _vectors(axes: Sequence[tuple[float, float]]) -> list[FeatureVector]:
    return [
        FeatureVector(i, f"https://example.com/{i}", np.array(axis), ("a", "b"))
        for i, axis in enumerate(axes)
    ]


def _people() -> tuple[list[FeatureVector], list[NormalizedEvidence]]:
    ig = _handle("instagram", "janedoe")
    evidence = [_jane(ig), _jane(ig), _john(), _jane(ig), _john()]
    axes = [JANE_AXIS, JANE_AXIS, JOHN_AXIS, JANE_AXIS, JOHN_AXIS]
    return _vectors(axes), evidence


def test_two_people_are_separated() -> None:
    vectors, evidence = _people()
    clusters = EntityResolver().resolve(vectors, evidence)
    assert [c.entity_id for c in clusters] == ["entity_1", "entity_2"]
    assert [c.document_indices for c in clusters] == [(0, 1, 3), (2, 4)]
    jane, john = clusters
    assert {(e.source, e.target) for e in jane.edges} == {(0, 1), (0, 3), (1, 3)}
    assert [(e.source, e.target) for e in john.edges] == [(2, 4)]
    assert jane.confidence == pytest.approx(0.95)
    assert john.confidence == pytest.approx(0.55)
    assert john.canonical_handle is None


def test_canonical_handle_vote() -> None:
    vectors, evidence = _people()
    jane = EntityResolver().resolve(vectors, evidence)[0]
    canonical = jane.canonical_handle
    assert canonical is not None
    assert (canonical.platform, canonical.handle) == ("instagram", "janedoe")
    assert canonical.url == "https://instagram.com/janedoe"
    assert canonical.occurrences == 3
    assert canonical.score == pytest.approx(2.25)
    assert canonical.confidence == 1.0
    assert canonical.reason == "highest_vote(freq=3, weight=0.75)"
    assert jane.alternate_handles == ()


def _alternates(
    settings: ResolverSettings | None = None, **alt_fields: object
) -> list[tuple[str, str, str]]:
    main = _handle("instagram", "janedoe")
    other = _handle("instagram", "jane.d")
    evidence = [_jane(main), _jane(main), _jane(other, **alt_fields)]
    clusters = EntityResolver(settings).resolve(_vectors([JANE_AXIS] * 3), evidence)
    assert len(clusters) == 1
    canonical = clusters[0].canonical_handle
    assert canonical is not None and canonical.handle == "janedoe"
    return [(h.handle, h.status, h.reason) for h in clusters[0].alternate_handles]


def test_duplicate_handle_rejected() -> None:
    assert _alternates() == [("jane.d", "rejected", "insufficient_evidence")]


def test_multi_account_keyword_accepts_alternate() -> None:
    result = _alternates(keywords=("backup",))
    assert result == [("jane.d", "accepted", "legitimate_multi_account")]


def test_disabled_policy_rejects_alternate() -> None:
    settings = ResolverSettings(multi_account=MultiAccountSettings(enabled=False))
    result = _alternates(settings, keywords=("backup",))
    assert result == [("jane.d", "rejected", "insufficient_evidence")]


def test_handles_elected_per_platform() -> None:
    ig = _handle("instagram", "janedoe")
    gh = _handle("github", "jdoe")
    evidence = [_jane(ig), _jane(ig), _jane(gh)]
    cluster = EntityResolver().resolve(_vectors([JANE_AXIS] * 3), evidence)[0]
    assert set(cluster.canonical_handles) == {"instagram", "github"}
    canonical = cluster.canonical_handle
    assert canonical is not None and canonical.platform == "instagram"
    assert cluster.alternate_handles == ()


def test_singletons_without_edges() -> None:
    evidence = [NormalizedEvidence(), NormalizedEvidence()]
    clusters = resolve(_vectors([(0.0, 0.0), (0.0, 0.0)]), evidence)
    assert [c.document_indices for c in clusters] == [(0,), (1,)]
    assert all(c.confidence == 0.0 for c in clusters)


def test_invalid_inputs() -> None:
    vectors, evidence = _people()
    resolver = EntityResolver()
    with pytest.raises(InvalidInputError):
        resolver.resolve(vectors, evidence[:-1])
    with pytest.raises(InvalidInputError):
        resolver.resolve(list(reversed(vectors)), evidence)
    documents = [EvidenceDocument(i + 1, "", "") for i in range(len(vectors))]
    with pytest.raises(InvalidInputError):
        resolver.resolve(vectors, evidence, documents)


def test_cluster_dict() -> None:
    vectors, evidence = _people()
    data = EntityResolver().resolve(vectors, evidence)[0].to_dict()
    assert data["entity_id"] == "entity_1"
    assert data["documents"] == [0, 1, 3]
    assert data["canonical_handle"]["handle"] == "janedoe"  # type: ignore[index]
    assert len(data["edges"]) == 3  # type: ignore[arg-type]


def _nodes(*evidence: NormalizedEvidence) -> list[EntityNode]:
    return [EntityNode.build(v, e) for v, e in zip(_vectors([JANE_AXIS] * len(evidence)), evidence)]


def test_policy_keywords_match_whole_words() -> None:
    policy = MultiAccountPolicy.from_settings(MultiAccountSettings(keywords=["Backup"]))
    assert policy.has_keyword_evidence(_nodes(_jane(keywords=("backup",))))
    assert not policy.has_keyword_evidence(_nodes(_jane(keywords=("backups",))))


def test_policy_context_split() -> None:
    policy = MultiAccountPolicy.from_settings()
    with_org = _nodes(_jane(organizations=("acme corp",)), _jane(organizations=("acme corp",)))
    without_org = _nodes(_jane(keywords=()))
    assert policy.has_context_split(with_org, without_org)
    assert not policy.has_context_split(with_org, with_org)
    assert policy.is_legitimate(with_org, without_org, with_org + without_org)
    disabled = MultiAccountPolicy(policy.keywords, enabled=False)
    assert not disabled.is_legitimate(with_org, without_org, with_org + without_org)
