import pytest

from personid.detect.keywords import KeywordExtractor
from personid.preprocess.normalizer import normalize_text


def test_repeated_and_domain_words() -> None:
    text = normalize_text("Designer. Jane designs posters; posters and more posters.")
    tokens = {t.value: t.confidence for t in KeywordExtractor().extract(text)}
    assert tokens == {"designer": pytest.approx(0.4), "posters": pytest.approx(0.6)}


def test_addresses_numbers_and_stop_words_skipped() -> None:
    text = normalize_text("jane.doe@x.com jane.doe@x.com 2024 2024 the the follow follow")
    assert KeywordExtractor().extract(text) == []


def test_multi_account_vocabulary() -> None:
    text = normalize_text("My backup account")
    assert [t.value for t in KeywordExtractor().extract(text)] == ["backup"]


def test_confidence_is_capped() -> None:
    text = normalize_text(" ".join(["poster"] * 20))
    tokens = KeywordExtractor().extract(text)
    assert tokens[0].confidence == pytest.approx(0.9)
