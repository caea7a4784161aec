"""Tests for evidence records and the evidence normalizer."""

from __future__ import annotations

import pytest

from personid.detect.base import TokenType
from personid.detect.email import EmailExtractor
from personid.preprocess.evidence import (
    EvidenceDocument,
    EvidenceNormalizer,
    document_confidence,
    normalize,
    normalize_document,
)

PROFILE_TEXT = (
    "Jane Doe is a designer at Acme Corp. Email jane.doe@gmail.com or follow @janedoe."
)


def test_empty_document() -> None:
    evidence = normalize("")
    assert evidence.confidence == 0.0
    assert evidence.names == () and evidence.handles == () and evidence.keywords == ()
    assert normalize(None).confidence == 0.0


def test_grouped_values_and_confidence() -> None:
    evidence = normalize(PROFILE_TEXT)
    assert evidence.names == ("jane doe",)
    assert evidence.emails == ("jane.doe@gmail.com",)
    assert evidence.organizations == ("acme corp",)
    assert "gmail.com" in evidence.domains
    assert "jane.doe" not in evidence.domains
    assert [(h.platform, h.handle) for h in evidence.handles] == [("instagram", "janedoe")]
    assert evidence.handles[0].url == "https://instagram.com/janedoe"
    assert "designer" in evidence.keywords
    assert evidence.confidence == pytest.approx(0.85)


def test_handles_deduplicated_keeping_best() -> None:
    evidence = normalize("I am @janedoe", source_url="https://instagram.com/janedoe")
    assert len(evidence.handles) == 1
    assert evidence.handles[0].confidence == pytest.approx(0.9)


def test_valid_hint_added() -> None:
    doc = EvidenceDocument(
        0, "https://janedoe.dev", "Hello there", platform_hint="Instagram", handle_hint="@JaneDoe"
    )
    evidence = normalize_document(doc)
    assert [(h.platform, h.handle, h.confidence) for h in evidence.handles] == [
        ("instagram", "janedoe", pytest.approx(0.7))
    ]


def test_hint_contradicting_source_rejected() -> None:
    doc = EvidenceDocument(
        0,
        "https://instagram.com/janedoe",
        "hi",
        platform_hint="instagram",
        handle_hint="someone_else",
    )
    evidence = normalize_document(doc)
    assert [h.handle for h in evidence.handles] == ["janedoe"]


def test_generic_hint_rejected() -> None:
    doc = EvidenceDocument(0, "", "hi", platform_hint="instagram", handle_hint="admin")
    assert normalize_document(doc).handles == ()


def test_document_confidence_weights() -> None:
    assert document_confidence([]) == 0.0
    assert document_confidence([TokenType.NAME, TokenType.NAME]) == pytest.approx(0.3)
    assert document_confidence([TokenType.KEYWORD, TokenType.URL]) == 0.0
    every = [
        TokenType.NAME,
        TokenType.EMAIL,
        TokenType.HANDLE,
        TokenType.ORGANIZATION,
        TokenType.LOCATION,
        TokenType.PHONE,
    ]
    assert document_confidence(every) == pytest.approx(1.0)


def test_custom_extractors() -> None:
    normalizer = EvidenceNormalizer(extractors=[EmailExtractor()])
    evidence = normalizer.normalize(PROFILE_TEXT)
    assert evidence.emails == ("jane.doe@gmail.com",)
    assert evidence.names == () and evidence.handles == ()
    assert evidence.confidence == pytest.approx(0.25)


def test_all_tokens_and_dict() -> None:
    evidence = normalize(PROFILE_TEXT)
    tokens = evidence.all_tokens()
    assert {"jane doe", "janedoe", "acme corp", "jane.doe@gmail.com"} <= tokens
    data = evidence.to_dict()
    assert data["names"] == ["jane doe"]
    assert data["handles"][0]["platform"] == "instagram"  # type: ignore[index]
    assert evidence.handle_keys() == {("instagram", "janedoe")}
