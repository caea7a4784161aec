"""Policy deciding whether an alternate handle is a legitimate second account.

The heuristic is deliberately small and replaceable.  An alternate handle is
accepted when either

* any document of the entity carries a multi-account keyword (``alt``,
  ``business``, ``personal`` ...), or
* the documents of the two handles split on context: most documents of one
  handle mention an organization while most documents of the other do not.

A disabled policy rejects every alternate.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..config.schema import MultiAccountSettings
from .matching import EntityNode

__all__ = ["MultiAccountPolicy"]


def _org_share(nodes: Sequence[EntityNode]) -> float:
    if not nodes:
        return 0.0
    return sum(1 for n in nodes if n.evidence.organizations) / len(nodes)


@dataclass(slots=True, frozen=True)
class MultiAccountPolicy:
    """Keyword and context rules for accepting alternate handles."""

    keywords: frozenset[str]
    enabled: bool = True

    @classmethod
    def from_settings(cls, settings: MultiAccountSettings | None = None) -> "MultiAccountPolicy":
        settings = settings or MultiAccountSettings()
        return cls(frozenset(k.lower() for k in settings.keywords), settings.enabled)

    def has_keyword_evidence(self, nodes: Iterable[EntityNode]) -> bool:
        """Return ``True`` when any node mentions a multi-account keyword."""

        return any(k.lower() in self.keywords for n in nodes for k in n.evidence.keywords)

    def has_context_split(
        self, canonical: Sequence[EntityNode], alternate: Sequence[EntityNode]
    ) -> bool:
        """Return ``True`` when exactly one side mostly mentions organizations."""

        return (_org_share(canonical) > 0.5) != (_org_share(alternate) > 0.5)

    def is_legitimate(
        self,
        canonical: Sequence[EntityNode],
        alternate: Sequence[EntityNode],
        component: Sequence[EntityNode],
    ) -> bool:
        """Return ``True`` when ``alternate`` should be kept as a second account."""

        if not self.enabled:
            return False
        return self.has_keyword_evidence(component) or self.has_context_split(canonical, alternate)
