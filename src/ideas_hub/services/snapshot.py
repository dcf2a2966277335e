"""JSON snapshot persistence for the idea store."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from ideas_hub.services.ideas import IdeaStore

logger = logging.getLogger(__name__)


class SnapshotFile:
    """Load the store from a JSON file on boot and rewrite it after mutations.

    Failures are logged and never surface to request handlers.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def read(self) -> list[dict[str, Any]]:
        """Return the stored entries, or an empty list if the file is missing or unreadable."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.warning("could not read snapshot %s: %s", self.path, exc)
            return []
        if isinstance(raw, dict):
            raw = raw.get("ideas", [])
        if not isinstance(raw, list):
            logger.warning("snapshot %s has unexpected shape; ignoring", self.path)
            return []
        return [entry for entry in raw if isinstance(entry, dict)]

    def write(self, entries: list[dict[str, Any]]) -> bool:
        """Atomically replace the snapshot file. Returns False on failure."""
        with self._write_lock:
            return self._replace(entries)

    def save(self, store: IdeaStore) -> bool:
        """Export ``store`` and write it while holding the write lock.

        Snapshots reach the file in the order they were exported.
        """
        with self._write_lock:
            return self._replace(store.export())

    def _replace(self, entries: list[dict[str, Any]]) -> bool:
        payload = json.dumps({"ideas": entries}, indent=2)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.warning("could not write snapshot %s: %s", self.path, exc)
            return False
        return True

    def attach(self, store: IdeaStore) -> int:
        """Load existing entries into ``store`` and persist every later change."""
        loaded = store.load(self.read())
        logger.info("loaded %d ideas from %s", loaded, self.path)
        store.set_change_hook(lambda: self.save(store))
        return loaded
