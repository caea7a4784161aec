import pytest

from personid.detect.base import TokenType
from personid.detect.phone import PhoneExtractor
from personid.preprocess.normalizer import normalize_text


@pytest.fixture
def ext() -> PhoneExtractor:
    return PhoneExtractor()


def test_valid_number_scores_higher(ext: PhoneExtractor) -> None:
    tokens = ext.extract(normalize_text("Call me at +1 650-253-0000 today"))
    assert len(tokens) == 1
    assert tokens[0].type is TokenType.PHONE
    assert tokens[0].value == "16502530000"
    assert tokens[0].confidence == pytest.approx(0.9)


def test_invalid_number_keeps_base_score(ext: PhoneExtractor) -> None:
    tokens = ext.extract(normalize_text("Phone: (123) 456-7890"))
    assert [t.value for t in tokens] == ["1234567890"]
    assert tokens[0].confidence == pytest.approx(0.8)


def test_short_numbers_ignored(ext: PhoneExtractor) -> None:
    assert ext.extract(normalize_text("Room 555-1234, ext 42")) == []


def test_same_digits_collapse(ext: PhoneExtractor) -> None:
    text = normalize_text("+1 650-253-0000 or +1 (650) 253-0000")
    assert len(ext.extract(text)) == 1


@pytest.mark.parametrize(
    ("text", "digits"),
    [
        ("call +44 20 7946 0958 now", "442079460958"),
        ("tel +49 30 1234567", "49301234567"),
        ("Office: +33 1 42 68 53 00.", "33142685300"),
        ("Reach me at (650) 253-0000", "6502530000"),
    ],
)
def test_international_groupings_found(ext: PhoneExtractor, text: str, digits: str) -> None:
    tokens = ext.extract(normalize_text(text))
    assert [t.value for t in tokens] == [digits]


@pytest.mark.parametrize(
    "text",
    [
        "Order #12345 shipped",
        "Call 650-253 later",
        "Released in 2019 and 2020",
        "",
    ],
)
def test_non_numbers_ignored(ext: PhoneExtractor, text: str) -> None:
    assert ext.extract(normalize_text(text)) == []
