# regtree/snapshot.py
"""
Whole-store snapshots.

A snapshot is the entire key tree serialized as one JSON document, keys
listed flat in pre-order so nesting depth does not grow with the tree:

    {
        "format": "regtree-snapshot",
        "version": 1,
        "keys": [ {"path": ["HKEY_SOFTWARE", "App"], "values": [...]}, ... ]
    }

SnapshotFile persists snapshots on disk. A snapshot that cannot be loaded
never stops startup: the caller gets a fresh store and a logged warning.
Failed saves are raised, since memory and disk have then diverged.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from .errors import PersistenceError
from .store import RegistryStore

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "regtree-snapshot"
SNAPSHOT_VERSION = 1


def save(store: RegistryStore) -> bytes:
    """Serialize a store to snapshot bytes."""
    data = {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        **store.to_dict(),
    }
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def load(data: bytes) -> RegistryStore:
    """
    Deserialize snapshot bytes into a store.

    Raises:
        PersistenceError: data is not a readable snapshot
    """
    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise PersistenceError(f"Snapshot is not valid JSON: {e}")

    if not isinstance(document, dict) or document.get("format") != SNAPSHOT_FORMAT:
        raise PersistenceError("Not a registry snapshot")
    version = document.get("version")
    if version != SNAPSHOT_VERSION:
        raise PersistenceError(f"Unsupported snapshot version: {version}")

    try:
        return RegistryStore.from_dict(document)
    except (KeyError, TypeError, ValueError, AttributeError, RecursionError) as e:
        raise PersistenceError(f"Corrupt snapshot: {e}")


class SnapshotFile:
    """
    A snapshot stored in a single file.

    Writes go to a temporary file in the same directory which then
    replaces the target, so a failed save leaves the previous snapshot
    intact.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists() and self.path.stat().st_size > 0

    def read(self) -> RegistryStore:
        """
        Load the snapshot.

        Raises:
            PersistenceError: the file cannot be read or parsed
        """
        try:
            with open(self.path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise PersistenceError(f"Cannot read snapshot: {e}", str(self.path))
        try:
            return load(data)
        except PersistenceError as e:
            raise PersistenceError(e.message, str(self.path))

    def load_or_create(self, roots: Optional[Iterable[str]] = None) -> RegistryStore:
        """
        Load the snapshot, or start a fresh store seeded with roots.

        Never raises: a missing, empty or unreadable snapshot yields a
        fresh store.
        """
        if not self.exists():
            logger.info(f"No snapshot at {self.path}, starting a new registry")
            return RegistryStore(roots)
        try:
            store = self.read()
        except PersistenceError as e:
            logger.warning(f"Failed to load snapshot, starting a new registry: {e}")
            return RegistryStore(roots)
        logger.info(f"Loaded registry from {self.path} ({len(store)} keys)")
        return store

    def save(self, store: RegistryStore) -> Path:
        """
        Write the store to the snapshot file.

        Raises:
            PersistenceError: the file could not be written
        """
        data = save(store)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f"Failed to save registry to {self.path}: {e}")
            raise PersistenceError(f"Cannot write snapshot: {e}", str(self.path))
        logger.debug(f"Saved registry to {self.path}")
        return self.path
