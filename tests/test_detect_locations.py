from personid.detect.locations import LocationExtractor
from personid.preprocess.normalizer import normalize_text


def _locations(text: str) -> list[str]:
    return [t.value for t in LocationExtractor().extract(normalize_text(text))]


def test_city_state() -> None:
    assert _locations("Office in Austin, TX") == ["austin"]


def test_cues() -> None:
    assert _locations("Jane lives in San Francisco.") == ["san francisco"]
    assert _locations("Based in Berlin") == ["berlin"]


def test_area_suffix() -> None:
    assert _locations("somewhere in the Bay Area") == ["bay"]


def test_duplicates_and_order() -> None:
    values = _locations("Austin, TX. She lives in Austin and loves the Bay Area")
    assert values == ["austin", "bay"]
