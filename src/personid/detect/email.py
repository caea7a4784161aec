"""Strict email address extractor.

This module provides :class:`EmailExtractor`, a high-precision extractor for
email addresses inspired by RFC5322.  After a raw regex match the extractor
trims trailing prose punctuation and validates local and domain parts.

Scoring
-------
Every address starts at ``0.7``; ``+0.1`` when its length is within 5–100
characters, ``+0.1`` for a common mail provider, ``+0.1`` for an ``.edu``
domain and ``-0.5`` for no-reply mailboxes.  Addresses scoring at or below the
configured ``min_email_confidence`` are dropped, so automated senders never
become identity evidence.

IP-literal domains (e.g. ``user@[1.2.3.4]``) are intentionally excluded in
favour of precision.
"""

from __future__ import annotations

import re

from ..preprocess.normalizer import NormalizationResult
from ..utils.constants import rtrim_index
from .base import EvidenceToken, ExtractionContext, TokenType, clamp, settings_from

__all__ = ["EmailExtractor", "email_confidence", "get_extractor"]

# ---------------------------------------------------------------------------
# Regular expression
# ---------------------------------------------------------------------------
LOCAL_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
LOCAL_DOT_ATOM = rf"{LOCAL_ATOM}(?:\.{LOCAL_ATOM})*"
LOCAL_PART = LOCAL_DOT_ATOM

DOMAIN_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
TLD = r"[A-Za-z]{2,63}"
DOMAIN = rf"(?:{DOMAIN_LABEL}\.)+{TLD}"

EMAIL_RX: re.Pattern[str] = re.compile(
    rf"""
    (?<![A-Za-z0-9!#$%&'*+/=?^_`{{|}}~.-])   # ensure preceding boundary
    ({LOCAL_PART}@{DOMAIN})
    (?=[^A-Za-z0-9-]|$)                     # ensure following boundary
    """,
    re.VERBOSE | re.IGNORECASE,
)

COMMON_PROVIDERS: frozenset[str] = frozenset(
    {"gmail.com", "yahoo.com", "outlook.com", "hotmail.com", "icloud.com", "protonmail.com"}
)

_NO_REPLY = ("noreply", "no-reply", "donotreply")


def _validate_local(local: str) -> bool:
    if local.startswith(".") or local.endswith("."):
        return False
    return ".." not in local


def _validate_domain(domain: str) -> bool:
    if ".." in domain:
        return False
    labels = domain.split(".")
    if len(labels) < 2:
        return False
    tld = labels[-1]
    if not tld.isalpha() or not (2 <= len(tld) <= 63):
        return False
    return all(label and not label.startswith("-") and not label.endswith("-") for label in labels)


def email_confidence(email: str) -> float:
    """Return the evidence confidence of a lowercase ``email`` address."""

    score = 0.7
    if 5 <= len(email) <= 100:
        score += 0.1
    domain = email.rsplit("@", 1)[-1]
    if domain in COMMON_PROVIDERS:
        score += 0.1
    if domain.endswith(".edu"):
        score += 0.1
    if any(marker in email for marker in _NO_REPLY):
        score -= 0.5
    return clamp(score)


class EmailExtractor:
    """Extract email addresses from text."""

    def name(self) -> str:  # pragma: no cover - trivial
        return "email"

    def extract(
        self, text: NormalizationResult, context: ExtractionContext | None = None
    ) -> list[EvidenceToken]:
        """Extract email tokens from the folded form of ``text``."""

        settings = settings_from(context)
        source = context.source_url if context is not None else ""
        folded = text.folded
        tokens: dict[str, EvidenceToken] = {}
        for match in EMAIL_RX.finditer(folded):
            start, end = match.span(1)
            end = rtrim_index(folded, end)
            email = folded[start:end]
            if "@" not in email:
                continue
            local, domain = email.rsplit("@", 1)
            if not (_validate_local(local) and _validate_domain(domain)):
                continue
            confidence = email_confidence(email)
            if confidence <= settings.min_email_confidence:
                continue
            if email not in tokens:
                tokens[email] = EvidenceToken(TokenType.EMAIL, email, confidence, source)
        return list(tokens.values())


def get_extractor() -> EmailExtractor:
    """Return an :class:`EmailExtractor` instance."""

    return EmailExtractor()
