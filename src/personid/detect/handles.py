"""Social handle extractor.

Three sources of handles are recognised:

* ``@handle`` mentions (3–30 characters) that are not part of an email
  address or a URL path; they are attributed to Instagram with confidence
  ``0.8``.
* Profile links inside the text, with or without a scheme
  (``github.com/janedoe``, ``https://linkedin.com/in/jane-doe``).  GitHub
  links score ``0.9``, other platforms ``0.85``.
* The document's own source URL when it is a profile URL, scoring ``0.9``.

Every handle is lowercased and must pass
:func:`personid.utils.urls.validate_social_handle` for its platform.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import rtrim_index
from ..utils.urls import validate_social_handle, validate_url
from .base import EvidenceToken, ExtractionContext, TokenType

__all__ = ["HandleExtractor", "get_extractor"]

MENTION_RX: re.Pattern[str] = re.compile(r"(?<![\w@./])@([A-Za-z0-9_.]{1,30})")
PROFILE_LINK_RX: re.Pattern[str] = re.compile(
    r"(?<![\w.])(?:https?://)?(?:www\.)?"
    r"(?:instagram|github|facebook|linkedin|twitter|x|tiktok|youtube)\.com/[^\s<>\"'()]+",
    re.IGNORECASE,
)

MENTION_CONFIDENCE = 0.8
GITHUB_CONFIDENCE = 0.9
PROFILE_LINK_CONFIDENCE = 0.85
SOURCE_PROFILE_CONFIDENCE = 0.9


def _profile_token(url: str, source: str, confidence: float | None) -> EvidenceToken | None:
    if not url.lower().startswith(("http://", "https://")):
        url = "https://" + url
    result = validate_url(url)
    if not (result.is_person_profile and result.platform and result.handle):
        return None
    if not validate_social_handle(result.handle, result.platform):
        return None
    if confidence is None:
        confidence = GITHUB_CONFIDENCE if result.platform == "github" else PROFILE_LINK_CONFIDENCE
    return EvidenceToken(TokenType.HANDLE, result.handle, confidence, source, result.platform)


class HandleExtractor:
    """Extract social handles from mentions, profile links and the source URL."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "handle"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract handle tokens from ``text`` and the context source URL."""

        source = context.source_url if context is not None else ""
        found: list[EvidenceToken] = []

        for match in MENTION_RX.finditer(text.text):
            handle = match.group(1).rstrip(".").lower()
            if 3 <= len(handle) <= 30 and validate_social_handle(handle, "instagram"):
                found.append(
                    EvidenceToken(TokenType.HANDLE, handle, MENTION_CONFIDENCE, source, "instagram")
                )

        for match in PROFILE_LINK_RX.finditer(text.folded):
            end = rtrim_index(text.folded, match.end())
            token = _profile_token(text.folded[match.start() : end], source, None)
            if token is not None:
                found.append(token)

        if source:
            token = _profile_token(source, source, SOURCE_PROFILE_CONFIDENCE)
            if token is not None:
                found.append(token)

        tokens: dict[tuple[str | None, str], EvidenceToken] = {}
        for token in found:
            key = (token.platform, token.value)
            previous = tokens.get(key)
            if previous is None or previous.confidence < token.confidence:
                tokens[key] = token
        return list(tokens.values())


def get_extractor() -> HandleExtractor:
    """Return a :class:`HandleExtractor` instance."""

    return HandleExtractor()
