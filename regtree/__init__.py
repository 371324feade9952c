# regtree - Hierarchical registry store with a .reg-style interchange format
#
# A tree of named keys, each holding typed name/value pairs, persisted as a
# whole-store snapshot and exchanged as UTF-16LE text for backup and migration.
#
# Core concepts:
# - KeyNode: A named key with child keys and values
# - ValueRecord: A named value with a type tag and a textual payload
# - RegistryStore: The roots (HKEY_*) and path-based CRUD over the tree
# - Interchange codec: export_all/export_subtree and import_text/import_file
# - SnapshotFile: Whole-store persistence across process runs

from .model import KeyNode, ValueRecord, ValueType
from .store import RegistryStore, DEFAULT_ROOTS
from .errors import (
    RegistryError,
    KeyNotFoundError,
    ImportFormatError,
    EmptyFileError,
    UnsupportedFormatError,
    InvalidKeyPathError,
    MalformedValueLineError,
    PersistenceError,
)
from .codec import export_all, export_subtree, write_export, import_text, import_file, ImportResult
from .snapshot import SnapshotFile
from .config import Settings, load_settings
from .editor import Editor

__all__ = [
    # Model
    "KeyNode",
    "ValueRecord",
    "ValueType",
    "RegistryStore",
    "DEFAULT_ROOTS",
    # Errors
    "RegistryError",
    "KeyNotFoundError",
    "ImportFormatError",
    "EmptyFileError",
    "UnsupportedFormatError",
    "InvalidKeyPathError",
    "MalformedValueLineError",
    "PersistenceError",
    # Interchange
    "export_all",
    "export_subtree",
    "write_export",
    "import_text",
    "import_file",
    "ImportResult",
    # Persistence and configuration
    "SnapshotFile",
    "Settings",
    "load_settings",
    "Editor",
]

__version__ = "0.1.0"
