"""Shared word lists and character helpers for extractors and the vectorizer."""

from __future__ import annotations

__all__ = [
    "RIGHT_TRIM_CHARS",
    "RIGHT_TRIM",
    "rtrim_index",
    "KEYWORD_STOP_WORDS",
    "VECTOR_STOP_WORDS",
    "DOMAIN_KEYWORDS",
    "MULTI_ACCOUNT_KEYWORDS",
    "ORG_SUFFIXES",
    "PLATFORM_NAMES",
]

RIGHT_TRIM_CHARS: str = ")]};:,.!?»\"'>"

RIGHT_TRIM: frozenset[str] = frozenset(RIGHT_TRIM_CHARS)


def rtrim_index(text: str, end: int) -> int:
    """Return ``end`` moved left past trailing ``RIGHT_TRIM`` characters."""

    while end > 0 and text[end - 1] in RIGHT_TRIM:
        end -= 1
    return end


# ---------------------------------------------------------------------------
# Stop words
# ---------------------------------------------------------------------------

_BASIC_STOP_WORDS = frozenset(
    {
        "the", "is", "at", "which", "on", "a", "an", "and", "or", "but", "in",
        "with", "to", "for", "of", "as", "by", "that", "this", "it", "from",
        "they", "we", "you", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "must", "can", "about", "up",
        "out", "if", "what", "when", "where", "who", "why", "how", "all", "any",
        "both", "each", "few", "more", "most", "other", "some", "such", "no",
        "nor", "not", "only", "own", "same", "so", "than", "too", "very", "just",
        "now", "here", "there", "then", "get", "got", "new", "use", "work",
        "first", "well", "way", "even", "back", "good", "see", "know", "come",
        "its", "over", "think", "also", "your", "after", "through", "take",
        "two", "our", "her", "his", "she", "him", "are", "was", "were", "been",
        "their", "them", "into",
    }
)  # fmt: skip

_SOCIAL_STOP_WORDS = frozenset(
    {
        "follow", "like", "share", "comment", "post", "profile", "page",
        "account", "user", "login", "signup", "register", "features", "help",
        "contact", "privacy", "terms", "policy", "blog", "news", "explore",
        "discover", "trending", "popular",
    }
)  # fmt: skip

#: Words never reported as salient keywords.
KEYWORD_STOP_WORDS: frozenset[str] = _BASIC_STOP_WORDS | _SOCIAL_STOP_WORDS

#: Words never used as vocabulary terms.  Broader than the keyword list since
#: generic web and profile vocabulary carries no identity signal.
VECTOR_STOP_WORDS: frozenset[str] = KEYWORD_STOP_WORDS | frozenset(
    {
        "users", "following", "followers", "likes", "shares", "comments",
        "posts", "photo", "photos", "video", "videos", "image", "images", "view",
        "views", "click", "join", "member", "members", "home", "support",
        "article", "articles", "read", "search", "find", "browse", "recent",
        "latest", "update", "updates", "edit", "save", "delete", "instagram",
        "facebook", "twitter", "linkedin", "github", "youtube", "google",
        "apple", "microsoft", "amazon", "netflix", "spotify", "website", "site",
        "link", "url", "email", "phone", "address", "copyright", "reserved",
        "rights", "inc", "corp", "llc", "ltd", "biography", "bio",
        "description", "info", "information", "details", "location", "based",
        "lives", "works", "studied", "went", "graduated", "degree",
        "university", "college", "school", "education", "https", "http", "www",
        "com",
    }
)  # fmt: skip

# ---------------------------------------------------------------------------
# Domain vocabularies
# ---------------------------------------------------------------------------

#: Roles and titles kept as keywords even when they occur once.
DOMAIN_KEYWORDS: tuple[str, ...] = (
    "developer", "engineer", "programmer", "analyst", "architect", "scientist",
    "manager", "director", "consultant", "specialist", "researcher", "designer",
    "professor", "student", "graduate", "phd", "masters", "bachelor",
    "university", "college", "research", "academic", "founder", "ceo", "cto",
    "entrepreneur", "executive", "leader", "coordinator", "associate",
    "senior", "junior",
)  # fmt: skip

#: Vocabulary that signals a person deliberately runs several accounts.
MULTI_ACCOUNT_KEYWORDS: tuple[str, ...] = (
    "alt",
    "alternative",
    "backup",
    "second",
    "business",
    "personal",
)

ORG_SUFFIXES: tuple[str, ...] = (
    "Inc",
    "LLC",
    "Corp",
    "Corporation",
    "Company",
    "Ltd",
    "Limited",
)

#: Proper nouns that look like names but denote platforms.
PLATFORM_NAMES: frozenset[str] = frozenset(
    {
        "instagram", "facebook", "twitter", "linkedin", "github", "youtube",
        "tiktok", "google", "apple", "microsoft", "amazon", "netflix", "spotify",
        "reddit", "medium",
    }
)  # fmt: skip
