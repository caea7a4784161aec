import pytest

from personid.detect.base import ExtractionContext
from personid.detect.urls import UrlExtractor
from personid.detect.years import YearExtractor
from personid.preprocess.normalizer import normalize_text


def test_years_within_range() -> None:
    text = normalize_text("Class of 1998, joined in 2015; 1949 and 2031 are out, 2015 again")
    context = ExtractionContext(current_year=2024)
    values = [t.value for t in YearExtractor().extract(text, context)]
    assert values == ["1998", "2015"]


def test_next_year_allowed() -> None:
    context = ExtractionContext(current_year=2024)
    values = [t.value for t in YearExtractor().extract(normalize_text("in 2025"), context)]
    assert values == ["2025"]


def test_urls_classified() -> None:
    text = normalize_text(
        "See https://janedoe.dev/about-me/, https://instagram.com/janedoe and "
        "https://example.com/?utm_source=x"
    )
    tokens = UrlExtractor().extract(text)
    assert [(t.value, t.platform) for t in tokens] == [
        ("https://janedoe.dev/about-me/", None),
        ("https://instagram.com/janedoe", "instagram"),
    ]
    assert tokens[0].confidence == pytest.approx(0.6)
    assert tokens[1].confidence == pytest.approx(0.9)
