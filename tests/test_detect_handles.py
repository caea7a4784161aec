import pytest

from personid.detect.base import ExtractionContext, TokenType
from personid.detect.handles import HandleExtractor
from personid.preprocess.normalizer import normalize_text


@pytest.fixture
def ext() -> HandleExtractor:
    return HandleExtractor()


def test_mentions_and_links(ext: HandleExtractor) -> None:
    text = normalize_text("Follow @janedoe and see github.com/jdoe-dev. Mail jane@ex.com")
    tokens = {(t.platform, t.value): t.confidence for t in ext.extract(text)}
    assert tokens == {
        ("instagram", "janedoe"): pytest.approx(0.8),
        ("github", "jdoe-dev"): pytest.approx(0.9),
    }


def test_source_profile_wins(ext: HandleExtractor) -> None:
    context = ExtractionContext(source_url="https://instagram.com/janedoe")
    tokens = ext.extract(normalize_text("I am @JaneDoe"), context)
    assert len(tokens) == 1
    assert tokens[0].type is TokenType.HANDLE
    assert tokens[0].value == "janedoe"
    assert tokens[0].confidence == pytest.approx(0.9)


def test_linkedin_link(ext: HandleExtractor) -> None:
    tokens = ext.extract(normalize_text("https://www.linkedin.com/in/jane-doe/"))
    assert [(t.platform, t.value) for t in tokens] == [("linkedin", "jane-doe")]
    assert tokens[0].confidence == pytest.approx(0.85)


def test_generic_handles_rejected(ext: HandleExtractor) -> None:
    text = normalize_text("@admin @ab @123456 instagram.com/explore")
    assert ext.extract(text) == []
