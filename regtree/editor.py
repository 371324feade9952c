# regtree/editor.py
"""
Registry editor session.

Ties a RegistryStore to its snapshot file. Mutations go through the
editor so each successful change is committed to disk; reads go straight
to the store.

    editor = Editor.open(load_settings())
    editor.create_key("HKEY_SOFTWARE\\App")
    editor.set_value("HKEY_SOFTWARE\\App", "Version", "String", "2.0.0")
"""

import logging
from pathlib import Path
from typing import Optional

from .codec.exporter import export_all, export_subtree, write_export
from .codec.importer import ImportResult, import_file
from .config import Settings
from .model import ValueType
from .snapshot import SnapshotFile
from .store import RegistryStore

logger = logging.getLogger(__name__)


class Editor:
    """
    A store plus the snapshot it is committed to.

    Args:
        store: The registry store
        snapshot: Where to commit; None keeps everything in memory
        auto_save: Commit after every successful mutation
    """

    def __init__(
        self,
        store: RegistryStore,
        snapshot: Optional[SnapshotFile] = None,
        auto_save: bool = True,
    ):
        self.store = store
        self.snapshot = snapshot
        self.auto_save = auto_save

    @classmethod
    def open(cls, settings: Settings) -> "Editor":
        """Load the configured snapshot, falling back to a fresh store."""
        snapshot = SnapshotFile(settings.resolved_snapshot_path)
        store = snapshot.load_or_create(settings.roots)
        return cls(store, snapshot, auto_save=settings.auto_save)

    def save(self) -> Optional[Path]:
        """
        Commit the store to its snapshot.

        Raises:
            PersistenceError: the snapshot could not be written
        """
        if self.snapshot is None:
            return None
        return self.snapshot.save(self.store)

    def _committed(self, changed: bool) -> bool:
        if changed and self.auto_save:
            self.save()
        return changed

    # Mutations

    def create_key(self, path: str) -> bool:
        return self._committed(self.store.create_key(path))

    def add_key(self, parent_path: str, name: str) -> bool:
        return self._committed(self.store.add_key(parent_path, name))

    def delete_key(self, path: str) -> bool:
        return self._committed(self.store.delete_key(path))

    def rename_key(self, path: str, new_name: str) -> bool:
        return self._committed(self.store.rename_key(path, new_name))

    def set_value(self, key_path: str, name: str, value_type: ValueType | str, payload: str) -> bool:
        return self._committed(self.store.set_value(key_path, name, value_type, payload))

    def add_value(self, key_path: str, name: str, value_type: ValueType | str, payload: str) -> bool:
        return self._committed(self.store.add_value(key_path, name, value_type, payload))

    def update_value(self, key_path: str, name: str, payload: str) -> bool:
        return self._committed(self.store.update_value(key_path, name, payload))

    def rename_value(self, key_path: str, old_name: str, new_name: str) -> bool:
        return self._committed(self.store.rename_value(key_path, old_name, new_name))

    def delete_value(self, key_path: str, name: str) -> bool:
        return self._committed(self.store.delete_value(key_path, name))

    # Interchange

    def import_file(self, path: Path | str) -> ImportResult:
        """Import an interchange file. The snapshot is always committed."""
        return import_file(self.store, path, snapshot=self.snapshot)

    def export_text(self, key_path: Optional[str] = None) -> str:
        if key_path is None:
            return export_all(self.store)
        return export_subtree(self.store, key_path)

    def export_file(self, path: Path | str, key_path: Optional[str] = None) -> Path:
        """
        Export the whole registry, or the subtree at key_path, to a file.

        Raises:
            KeyNotFoundError: key_path does not exist
        """
        return write_export(self.export_text(key_path), path)
