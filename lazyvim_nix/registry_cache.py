"""Persistent cache of package registry answers, keyed by registry snapshot."""

import hashlib
import json
import logging
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1


def compute_snapshot_key(settings: dict[str, Any]) -> str:
    """Compute a stable hash of the registry settings.

    Uses canonical JSON serialization (sorted keys).
    """
    settings_json = json.dumps(settings, sort_keys=True, ensure_ascii=True)
    return hashlib.sha256(settings_json.encode("utf-8")).hexdigest()


class RegistryCache:
    """Caches exists/missing answers for one registry snapshot."""

    def __init__(self, path: str | Path, snapshot_key: str) -> None:
        """Initialize the cache with a storage path and snapshot key."""
        self.path = Path(path)
        self.snapshot_key = snapshot_key
        self.answers: dict[str, bool] = {}
        self.dirty = False
        self._lock = threading.Lock()

    def load(self) -> None:
        """Load answers from disk, ignoring caches for other snapshots."""
        if not self.path.exists():
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Error loading registry cache %s", self.path)
            return

        meta = data.get("meta", {})
        schema_ver = meta.get("schema_version", 0)
        if schema_ver != CURRENT_SCHEMA_VERSION:
            logger.warning(
                "Schema version mismatch (%s != %s). Ignoring cache.",
                schema_ver,
                CURRENT_SCHEMA_VERSION,
            )
            return
        if meta.get("snapshot_key") != self.snapshot_key:
            logger.info("Registry snapshot changed. Ignoring cache.")
            return

        self.answers = {
            str(name): bool(exists)
            for name, exists in data.get("answers", {}).items()
        }

    def lookup(self, name: str) -> bool | None:
        """Return the cached answer for a package name, if any."""
        with self._lock:
            return self.answers.get(name)

    def update(self, name: str, exists: bool) -> None:  # noqa: FBT001
        """Record an answer for a package name."""
        with self._lock:
            if self.answers.get(name) != exists:
                self.answers[name] = exists
                self.dirty = True

    def save(self) -> None:
        """Write the cache to disk when it changed."""
        if not self.dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            payload = {
                "meta": {
                    "schema_version": CURRENT_SCHEMA_VERSION,
                    "snapshot_key": self.snapshot_key,
                },
                "answers": self.answers,
            }
            self.path.write_text(
                json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
            )
            self.dirty = False
