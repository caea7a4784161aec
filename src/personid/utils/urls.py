"""URL validation, normalization and social handle checks.

The validator separates three kinds of URLs:

* **profile URLs** on a known social platform (``instagram.com/<handle>``,
  ``linkedin.com/in/<handle>`` ...).  They are valid and carry a platform and
  a handle.
* **generic pages** such as login forms, help centres, company pages, URLs
  with tracking parameters or fragments, and any social platform URL that is
  not a profile.  They are rejected.
* **other sites** (personal homepages, academic pages ...).  They are valid
  but carry no platform.

Rules
-----
Blacklist patterns are checked before profile patterns so that
``instagram.com/explore`` never counts as a profile for a user named
``explore``.  Platforms are reported as lowercase identifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

__all__ = [
    "UrlValidation",
    "SOCIAL_DOMAINS",
    "validate_url",
    "normalize_url",
    "validate_social_handle",
    "profile_url",
    "is_social_platform",
]


@dataclass(slots=True, frozen=True)
class UrlValidation:
    """Outcome of :func:`validate_url`."""

    is_valid: bool
    is_person_profile: bool
    reason: str
    platform: str | None = None
    handle: str | None = None
    normalized_url: str | None = None


# ---------------------------------------------------------------------------
# Pattern tables
# ---------------------------------------------------------------------------

_PROFILE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("instagram", re.compile(r"^https?://(?:www\.)?instagram\.com/([a-zA-Z0-9_.]+)/?$")),
    ("github", re.compile(r"^https?://(?:www\.)?github\.com/([a-zA-Z0-9_-]+)/?$")),
    ("facebook", re.compile(r"^https?://(?:www\.)?facebook\.com/([a-zA-Z0-9_.]+)/?$")),
    ("linkedin", re.compile(r"^https?://(?:www\.)?linkedin\.com/in/([a-zA-Z0-9_-]+)/?$")),
    ("twitter", re.compile(r"^https?://(?:www\.)?twitter\.com/([a-zA-Z0-9_]+)/?$")),
    ("x", re.compile(r"^https?://(?:www\.)?x\.com/([a-zA-Z0-9_]+)/?$")),
    ("tiktok", re.compile(r"^https?://(?:www\.)?tiktok\.com/@([a-zA-Z0-9_.]+)/?$")),
    ("youtube", re.compile(r"^https?://(?:www\.)?youtube\.com/channel/([a-zA-Z0-9_-]+)/?$")),
    ("youtube", re.compile(r"^https?://(?:www\.)?youtube\.com/@([a-zA-Z0-9_-]+)/?$")),
)

_GENERIC_SEGMENTS = (
    "login", "register", "signup", "features", "enterprise", "business", "help",
    "support", "contact", "about", "privacy", "terms", "policy", "legal",
    "careers", "jobs", "press", "news", "blog", "explore", "discover",
    "trending", "popular", "search", "accounts", "settings", "preferences",
    "team", "company", "organization", "public", "directory", "people",
    "profiles",
)  # fmt: skip

_GENERIC_SECTIONS = (
    "pages", "groups", "events", "marketplace", "gaming", "watch",
    "fundraisers", "explore", "reels", "stories", "igtv", "shopping",
    "features", "topics", "trending", "sponsors", "collections",
    "organizations", "enterprises", "company", "school", "showcase", "jobs",
    "learning", "pub/dir", "feed", "music", "shorts",
)  # fmt: skip

_BLACKLIST: tuple[re.Pattern[str], ...] = (
    re.compile(rf"/(?:{'|'.join(_GENERIC_SEGMENTS)})/?$", re.IGNORECASE),
    re.compile(rf"/(?:{'|'.join(_GENERIC_SECTIONS)})/", re.IGNORECASE),
    re.compile(r"/(?:watch|playlist|results)\?", re.IGNORECASE),
    re.compile(
        r"^https?://(?:www\.)?(?:instagram|facebook|twitter|linkedin|github|youtube)\.com/?$",
        re.IGNORECASE,
    ),
    re.compile(r"[?&](?:utm_|fbclid=|gclid=|ref=|source=|campaign=)", re.IGNORECASE),
    re.compile(r"#.*$"),
)

SOCIAL_DOMAINS: tuple[str, ...] = (
    "instagram.com", "facebook.com", "twitter.com", "linkedin.com", "github.com",
    "youtube.com", "tiktok.com", "snapchat.com", "pinterest.com", "reddit.com",
    "medium.com", "x.com",
)  # fmt: skip

_TRACKING_PARAMS = frozenset(
    {
        "utm_source", "utm_medium", "utm_campaign", "utm_content", "utm_term",
        "fbclid", "gclid", "ref", "source", "campaign", "_gl", "mc_cid", "mc_eid",
    }
)  # fmt: skip

_PLATFORM_PARAMS: dict[str, frozenset[str]] = {
    "facebook": frozenset({"fref", "pnref", "_rdc", "_rdr"}),
    "linkedin": frozenset({"trk", "trkInfo"}),
    "github": frozenset({"tab"}),
}

_PROFILE_TEMPLATES: dict[str, str] = {
    "instagram": "https://instagram.com/{handle}",
    "github": "https://github.com/{handle}",
    "facebook": "https://facebook.com/{handle}",
    "linkedin": "https://linkedin.com/in/{handle}",
    "twitter": "https://twitter.com/{handle}",
    "x": "https://x.com/{handle}",
    "tiktok": "https://tiktok.com/@{handle}",
    "youtube": "https://youtube.com/@{handle}",
}

_GENERIC_HANDLE_RX: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?:test|admin|user|temp|demo|sample)$", re.IGNORECASE),
    re.compile(r"^\d+$"),
    re.compile(r"^[a-z]\d+$", re.IGNORECASE),
    re.compile(r"^(?:abc|xyz|qwe|asd|zxc)", re.IGNORECASE),
    re.compile(r"^(?:follow|like|subscribe|click)", re.IGNORECASE),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_social_platform(host: str) -> bool:
    """Return ``True`` when ``host`` belongs to a known social platform."""

    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return any(host == domain or host.endswith("." + domain) for domain in SOCIAL_DOMAINS)


def normalize_url(url: str, platform: str | None = None) -> str:
    """Return a canonical form of ``url``.

    The scheme becomes ``https``, a ``www.`` prefix and the fragment are
    removed, tracking parameters (and platform specific noise parameters when
    ``platform`` is given) are dropped and a bare trailing slash is trimmed.
    Unparsable input is returned unchanged.
    """

    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url
    if not parts.netloc:
        return url
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    drop = _TRACKING_PARAMS | _PLATFORM_PARAMS.get((platform or "").lower(), frozenset())
    query = urlencode(
        [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in drop]
    )
    path = parts.path
    if path == "/":
        path = ""
    return urlunsplit(("https", host, path, query, ""))


def validate_url(url: str) -> UrlValidation:
    """Classify ``url`` as a profile, a generic page or another valid site."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return UrlValidation(False, False, "invalid URL format")
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        return UrlValidation(False, False, "invalid URL format")

    if any(rx.search(url) for rx in _BLACKLIST):
        return UrlValidation(False, False, "generic or non-person page")

    for platform, rx in _PROFILE_PATTERNS:
        match = rx.match(url)
        if match:
            handle = match.group(1).lower()
            return UrlValidation(
                True,
                True,
                f"{platform} profile",
                platform=platform,
                handle=handle,
                normalized_url=normalize_url(url, platform),
            )

    if is_social_platform(parts.hostname):
        return UrlValidation(False, False, "social platform page that is not a profile")

    return UrlValidation(True, False, "non-social site", normalized_url=normalize_url(url))


def validate_social_handle(handle: str, platform: str) -> bool:
    """Return ``True`` when ``handle`` looks like a genuine account name."""

    if not handle or any(rx.search(handle) for rx in _GENERIC_HANDLE_RX):
        return False
    size = len(handle)
    platform = platform.lower()
    if platform == "instagram":
        return 3 <= size <= 30 and handle[0] not in "._"
    if platform == "github":
        return 1 <= size <= 39 and not handle.startswith("-")
    if platform in {"twitter", "x"}:
        return 1 <= size <= 15
    return 3 <= size <= 30


def profile_url(platform: str, handle: str) -> str | None:
    """Return the canonical profile URL for ``handle`` on ``platform``."""

    template = _PROFILE_TEMPLATES.get(platform.lower())
    return template.format(handle=handle) if template else None
