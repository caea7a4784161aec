from typing import List

from personid.detect import default_extractors
from personid.detect.base import EvidenceToken, ExtractionContext, Extractor, TokenType
from personid.preprocess.normalizer import NormalizationResult, normalize_text


class DummyExtractor:
    def name(self) -> str:  # pragma: no cover - trivial
        return "dummy"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> List[EvidenceToken]:
        _ = context
        return [EvidenceToken(TokenType.KEYWORD, text.folded, 1.0, "")]


def test_dummy_extractor_runtime_checkable() -> None:
    dummy = DummyExtractor()
    assert isinstance(dummy, Extractor)
    tokens = dummy.extract(normalize_text("Test"))
    assert tokens and tokens[0].value == "test"


def test_default_extractors_follow_protocol() -> None:
    extractors = default_extractors()
    assert all(isinstance(e, Extractor) for e in extractors)
    names = [e.name() for e in extractors]
    assert len(names) == len(set(names)) == 10


def test_token_confidence_validated() -> None:
    import pytest

    with pytest.raises(ValueError):
        EvidenceToken(TokenType.NAME, "jane doe", 1.5, "")
