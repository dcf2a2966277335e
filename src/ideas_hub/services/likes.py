"""Per-idea like ledger."""

from __future__ import annotations

import logging

from ideas_hub.services.errors import IdeaNotFound

logger = logging.getLogger(__name__)


class LikeLedger:
    """Map of idea ID -> {who key -> liked}.

    Absence of an entry and ``False`` mean the same thing, so entries are
    removed when unliked. The ledger performs no locking; ``IdeaStore``
    serializes access per idea.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, bool]] = {}

    def open_row(self, idea_id: str, entries: dict[str, bool] | None = None) -> None:
        """Create the row for a new idea, optionally seeded from a snapshot."""
        self._rows[idea_id] = {who: True for who, liked in (entries or {}).items() if liked}

    def drop_row(self, idea_id: str) -> None:
        """Remove the row of a deleted idea. Unknown IDs are ignored."""
        self._rows.pop(idea_id, None)

    def _row(self, idea_id: str) -> dict[str, bool]:
        try:
            return self._rows[idea_id]
        except KeyError:
            raise IdeaNotFound(idea_id) from None

    def row(self, idea_id: str) -> dict[str, bool]:
        """Return a copy of the row for snapshots."""
        return dict(self._row(idea_id))

    def count(self, idea_id: str) -> int:
        """Return the number of who keys currently liking the idea."""
        return sum(1 for liked in self._row(idea_id).values() if liked)

    def is_liked(self, idea_id: str, who: str) -> bool:
        return self._row(idea_id).get(who, False)

    def set(self, idea_id: str, who: str, liked: bool) -> int:
        """Set the liked state and return the authoritative count.

        Setting the current value again changes nothing.
        """
        row = self._row(idea_id)
        if liked:
            row[who] = True
        else:
            row.pop(who, None)
        count = self.count(idea_id)
        logger.debug("like set idea=%s who=%s liked=%s count=%d", idea_id, who, liked, count)
        return count

    def toggle(self, idea_id: str, who: str) -> tuple[int, bool]:
        """Flip the liked state and return ``(count, liked)``."""
        liked = not self.is_liked(idea_id, who)
        return self.set(idea_id, who, liked), liked
