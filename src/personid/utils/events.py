"""Optional structured event callback.

Pipeline stages report progress through an :data:`EventSink`, a plain callable
receiving an event name and a mapping of JSON friendly fields.  The default
sink discards everything so algorithms stay silent unless a caller opts in.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

__all__ = ["EventSink", "null_sink", "CollectingSink"]

EventSink = Callable[[str, Mapping[str, object]], None]


def null_sink(event: str, fields: Mapping[str, object]) -> None:
    """Discard ``event``."""

    _ = (event, fields)


class CollectingSink:
    """Event sink that records events in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def __call__(self, event: str, fields: Mapping[str, object]) -> None:
        self.events.append((event, dict(fields)))

    def names(self) -> list[str]:
        """Return the recorded event names in order."""

        return [name for name, _ in self.events]
