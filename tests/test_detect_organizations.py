from personid.detect.organizations import OrganizationExtractor
from personid.preprocess.normalizer import normalize_text


def _orgs(text: str) -> list[str]:
    return [t.value for t in OrganizationExtractor().extract(normalize_text(text))]


def test_legal_suffix_and_cue() -> None:
    values = _orgs("Jane works at Acme Corp. Previously employed by Globex.")
    assert values == ["acme corp", "globex"]


def test_leading_article_dropped() -> None:
    assert _orgs("She is at The Daily Planet") == ["daily planet"]


def test_lowercase_phrases_ignored() -> None:
    assert _orgs("works at home with a cat") == []
