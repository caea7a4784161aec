"""Tests for URL classification, normalization and handle checks."""

from __future__ import annotations

import pytest

from personid.utils.urls import (
    is_social_platform,
    normalize_url,
    profile_url,
    validate_social_handle,
    validate_url,
)


@pytest.mark.parametrize(
    "url,platform,handle",
    [
        ("https://instagram.com/janedoe", "instagram", "janedoe"),
        ("https://www.instagram.com/Jane.Doe/", "instagram", "jane.doe"),
        ("https://github.com/janedoe", "github", "janedoe"),
        ("https://www.linkedin.com/in/jane-doe", "linkedin", "jane-doe"),
        ("https://twitter.com/jane_doe", "twitter", "jane_doe"),
        ("https://x.com/janedoe", "x", "janedoe"),
        ("https://www.tiktok.com/@janedoe", "tiktok", "janedoe"),
        ("https://youtube.com/@janedoe", "youtube", "janedoe"),
        ("https://facebook.com/jane.doe", "facebook", "jane.doe"),
    ],
)
def test_profile_urls(url: str, platform: str, handle: str) -> None:
    result = validate_url(url)
    assert result.is_valid and result.is_person_profile
    assert result.platform == platform
    assert result.handle == handle
    assert result.normalized_url is not None
    assert result.normalized_url.startswith("https://")


@pytest.mark.parametrize(
    "url",
    [
        "https://instagram.com/explore",
        "https://github.com/login",
        "https://www.facebook.com/",
        "https://linkedin.com/company/acme",
        "https://example.com/about?utm_source=newsletter",
        "https://example.com/page#section",
        "https://www.youtube.com/watch?v=abc",
    ],
)
def test_generic_pages_rejected(url: str) -> None:
    result = validate_url(url)
    assert result.is_valid is False
    assert result.is_person_profile is False


def test_social_page_that_is_not_a_profile() -> None:
    result = validate_url("https://instagram.com/p/abc123/comments")
    assert result.is_valid is False
    assert "not a profile" in result.reason


def test_other_sites_are_valid_non_profiles() -> None:
    result = validate_url("http://www.janedoe.dev/portfolio/")
    assert result.is_valid is True
    assert result.is_person_profile is False
    assert result.platform is None
    assert result.normalized_url == "https://janedoe.dev/portfolio/"


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com/file", "https://"])
def test_malformed_urls(url: str) -> None:
    assert validate_url(url).is_valid is False


def test_normalize_url_drops_noise() -> None:
    assert normalize_url("http://www.Example.com/") == "https://example.com"
    assert (
        normalize_url("https://example.com/a?utm_source=x&id=3#top")
        == "https://example.com/a?id=3"
    )
    assert (
        normalize_url("https://facebook.com/jane?fref=ts", "facebook")
        == "https://facebook.com/jane"
    )


@pytest.mark.parametrize(
    "handle,platform,expected",
    [
        ("janedoe", "instagram", True),
        ("jane.d", "instagram", True),
        ("_jane", "instagram", False),
        ("jd", "instagram", False),
        ("admin", "instagram", False),
        ("123456", "instagram", False),
        ("a123", "instagram", False),
        ("qwerty", "instagram", False),
        ("followme", "instagram", False),
        ("j", "github", True),
        ("-jane", "github", False),
        ("averyveryverylonghandle", "twitter", False),
        ("jane_doe", "twitter", True),
    ],
)
def test_validate_social_handle(handle: str, platform: str, expected: bool) -> None:
    assert validate_social_handle(handle, platform) is expected


def test_profile_url_and_social_hosts() -> None:
    assert profile_url("instagram", "janedoe") == "https://instagram.com/janedoe"
    assert profile_url("linkedin", "jane-doe") == "https://linkedin.com/in/jane-doe"
    assert profile_url("myspace", "janedoe") is None
    assert is_social_platform("www.instagram.com")
    assert is_social_platform("m.facebook.com")
    assert not is_social_platform("janedoe.dev")
