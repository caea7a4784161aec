"""Deterministic text normalization for evidence extraction.

The :func:`normalize_text` function prepares raw page text for the token
extractors.  It never raises and performs no I/O.

Rules
-----
The following transforms are applied in order:

1. **Unicode NFKC** – compatibility composition, so full-width letters and
   ligatures compare equal to their ASCII forms.
2. **Zero-width removal** – ``\\u200b``, ``\\u200c``, ``\\u200d``, ``\\ufeff``
   and the soft hyphen are deleted.
3. **Quote normalization** – curly quotes and apostrophes become straight
   ASCII quotes.
4. **Whitespace collapse** – every run of whitespace (including newlines and
   no-break spaces) becomes one space and the result is trimmed.

The result keeps letter case in ``text`` because title-case cues matter for
name, organization and location extraction; ``folded`` is the lowercase form
read by every other extractor.

Example
-------

>>> normalize_text("  Jane\\u00a0Doe\\n")
NormalizationResult(text='Jane Doe', folded='jane doe', changed=True)
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

__all__ = ["NormalizationResult", "normalize_text"]

_ZERO_WIDTHS = {
    "\u200b",  # ZERO WIDTH SPACE
    "\u200c",  # ZERO WIDTH NON-JOINER
    "\u200d",  # ZERO WIDTH JOINER
    "\ufeff",  # ZERO WIDTH NO-BREAK SPACE
    "\u00ad",  # SOFT HYPHEN
}

_QUOTE_MAP = {
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
}

_WS_RX = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class NormalizationResult:
    """Result of :func:`normalize_text`.

    Attributes
    ----------
    text:
        Normalized text with letter case preserved.
    folded:
        ``text`` lowercased.
    changed:
        ``True`` if ``text`` differs from the input.
    """

    text: str
    folded: str
    changed: bool


def normalize_text(raw: str | None) -> NormalizationResult:
    """Normalize ``raw`` according to the module rules.

    ``None`` is treated as the empty string.
    """

    source = raw or ""
    text = unicodedata.normalize("NFKC", source)
    text = "".join(_QUOTE_MAP.get(ch, ch) for ch in text if ch not in _ZERO_WIDTHS)
    text = _WS_RX.sub(" ", text).strip()
    return NormalizationResult(text=text, folded=text.lower(), changed=text != source)
