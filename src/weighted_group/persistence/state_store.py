"""State store — JSON snapshot of the registry.

The host owns the registry's lifetime; this store only makes the latest
committed state durable between invocations. Writes go to a temporary
file first and replace the snapshot in one step, so a crash mid-write
leaves the previous snapshot intact.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from weighted_group.registry.engine import MembershipRegistry


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class StateStore:
    """Single-snapshot JSON store for a MembershipRegistry."""

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def exists(self) -> bool:
        return self._storage_path.exists()

    def save_registry(self, registry: MembershipRegistry) -> None:
        """Persist registry state. Raises OSError on write failure."""
        document = {"version": SNAPSHOT_VERSION, "registry": registry.to_record()}
        self._write_json(document)
        logger.debug("Saved registry snapshot to %s", self._storage_path)

    def load_registry(self) -> Optional[MembershipRegistry]:
        """Load the stored registry, or None if nothing is stored.

        Raises:
            ValueError: If the snapshot is malformed or from an unknown version.
        """
        document = self.load_raw()
        if document is None:
            return None
        record = document["registry"]
        if not isinstance(record, dict):
            raise ValueError(
                f"Corrupt state snapshot {self._storage_path}: registry is not an object"
            )
        try:
            return MembershipRegistry.from_record(record)
        except (KeyError, TypeError) as e:
            raise ValueError(
                f"Corrupt state snapshot {self._storage_path}: bad registry record ({e!r})"
            ) from e

    def load_raw(self) -> Optional[dict[str, Any]]:
        """Return the snapshot document without building a registry."""
        if not self._storage_path.exists():
            return None
        with self._storage_path.open("r", encoding="utf-8") as handle:
            try:
                document = json.load(handle)
            except json.JSONDecodeError as e:
                raise ValueError(f"Corrupt state snapshot {self._storage_path}: {e}") from e
        if not isinstance(document, dict):
            raise ValueError(f"Corrupt state snapshot {self._storage_path}: not an object")
        if document.get("version") != SNAPSHOT_VERSION:
            raise ValueError(
                f"Unsupported state snapshot version: {document.get('version')}"
            )
        if "registry" not in document:
            raise ValueError("State snapshot has no registry record")
        return document

    def _write_json(self, document: dict[str, Any]) -> None:
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._storage_path.with_name(self._storage_path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(document, handle, indent=2, sort_keys=True)
            handle.write("\n")
        os.replace(tmp_path, self._storage_path)
