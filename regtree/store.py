# regtree/store.py
"""
The registry store.

Owns the root keys (analogous to HKEY_*) and provides path-based
create/read/update/delete over the key tree.

Paths are resolved in one of three modes:
- resolve: lookup only
- resolve_or_create_strict: the root must exist, missing descendants are created
- resolve_or_create_any: missing roots are created too (interchange import)

Example:
    store = RegistryStore()
    store.create_key("HKEY_SOFTWARE\\App")
    store.set_value("HKEY_SOFTWARE\\App", "Version", ValueType.STRING, "2.0.0")
    store.get_value("HKEY_SOFTWARE\\App", "Version").payload  # "2.0.0"
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .model import KeyNode, ValueRecord, ValueType, canonical_name
from .paths import child_path, is_valid_path, join_path, split_path

logger = logging.getLogger(__name__)

DEFAULT_ROOTS: Tuple[str, ...] = ("HKEY_MACHINE", "HKEY_SOFTWARE", "HKEY_USERS")


class RegistryStore:
    """
    A tree of keys hanging off a set of named roots.

    Root keys can never be removed with delete_key. Import may add roots
    that are not part of the initial set.
    """

    def __init__(self, roots: Optional[Iterable[str]] = None):
        self.roots: Dict[str, KeyNode] = {}
        for name in (DEFAULT_ROOTS if roots is None else roots):
            self.roots[name] = KeyNode(name)

    # Resolution

    def resolve(self, path: str) -> Optional[KeyNode]:
        """Walk path from its root. Returns None if any segment is absent."""
        segments = split_path(path)
        if not segments:
            return None
        node = self.roots.get(segments[0])
        for name in segments[1:]:
            if node is None:
                return None
            node = node.get_child(name)
        return node

    def resolve_or_create_strict(self, path: str) -> Optional[KeyNode]:
        """Resolve path, creating missing keys below an existing root."""
        if not is_valid_path(path):
            return None
        segments = split_path(path)
        node = self.roots.get(segments[0])
        if node is None:
            return None
        return _descend_creating(node, segments[1:])

    def resolve_or_create_any(self, path: str) -> Optional[KeyNode]:
        """Resolve path, creating missing keys and, if needed, the root."""
        if not is_valid_path(path):
            return None
        segments = split_path(path)
        node = self.roots.get(segments[0])
        if node is None:
            logger.info(f"Creating root key: {segments[0]}")
            node = self.roots[segments[0]] = KeyNode(segments[0])
        return _descend_creating(node, segments[1:])

    # Keys

    def create_key(self, path: str) -> bool:
        """
        Create the key at path along with any missing intermediate keys.

        The root must already exist. Creating an existing key succeeds
        without changing anything.
        """
        return self.resolve_or_create_strict(path) is not None

    def add_key(self, parent_path: str, name: str) -> bool:
        """Create a single child key. Fails if it already exists."""
        parent = self.resolve(parent_path)
        if parent is None or not name or parent.get_child(name) is not None:
            return False
        parent.add_child(KeyNode(name))
        return True

    def get_key_by_path(self, path: str) -> Optional[KeyNode]:
        return self.resolve(path)

    def delete_key(self, path: str) -> bool:
        """
        Delete a key and everything below it.

        Roots cannot be deleted.
        """
        segments = split_path(path)
        if len(segments) <= 1:
            return False
        parent = self.resolve(join_path(segments[:-1]))
        if parent is None:
            return False
        removed = parent.remove_child(segments[-1])
        if removed:
            logger.debug(f"Deleted key: {path}")
        return removed

    def rename_key(self, path: str, new_name: str) -> bool:
        """Rename a non-root key. Fails if a sibling already has new_name."""
        segments = split_path(path)
        if len(segments) <= 1 or not new_name:
            return False
        parent = self.resolve(join_path(segments[:-1]))
        if parent is None:
            return False
        return parent.rename_child(segments[-1], new_name)

    def is_root(self, path: str) -> bool:
        segments = split_path(path)
        return len(segments) == 1 and segments[0] in self.roots

    def root_names(self) -> List[str]:
        return list(self.roots)

    # Values

    def set_value(
        self,
        key_path: str,
        name: str,
        value_type: ValueType | str,
        payload: str,
    ) -> bool:
        """Insert or overwrite a value. Fails if the key does not exist."""
        key = self.resolve(key_path)
        if key is None:
            return False
        key.put_value(ValueRecord(canonical_name(name), ValueType.parse(value_type), payload))
        return True

    def add_value(
        self,
        key_path: str,
        name: str,
        value_type: ValueType | str,
        payload: str,
    ) -> bool:
        """Create a value. Fails if the key is missing or the name is taken."""
        key = self.resolve(key_path)
        if key is None or key.get_value(name) is not None:
            return False
        key.put_value(ValueRecord(canonical_name(name), ValueType.parse(value_type), payload))
        return True

    def get_value(self, key_path: str, name: str) -> Optional[ValueRecord]:
        key = self.resolve(key_path)
        if key is None:
            return None
        return key.get_value(name)

    def update_value(self, key_path: str, name: str, payload: str) -> bool:
        """Replace the payload of an existing value, keeping its type."""
        key = self.resolve(key_path)
        if key is None:
            return False
        record = key.get_value(name)
        if record is None:
            return False
        key.put_value(record.with_payload(payload))
        return True

    def rename_value(self, key_path: str, old_name: str, new_name: str) -> bool:
        """Rename a value, keeping type and payload."""
        key = self.resolve(key_path)
        if key is None:
            return False
        record = key.get_value(old_name)
        if record is None:
            return False
        if canonical_name(old_name) == canonical_name(new_name):
            return True
        if key.get_value(new_name) is not None:
            return False
        key.remove_value(old_name)
        key.put_value(record.renamed(canonical_name(new_name)))
        return True

    def delete_value(self, key_path: str, name: str) -> bool:
        key = self.resolve(key_path)
        if key is None:
            return False
        return key.remove_value(name)

    # Traversal

    def iter_keys(self, path: Optional[str] = None) -> Iterator[Tuple[str, KeyNode]]:
        """
        Walk keys depth-first, parents before children.

        Yields (full_path, node). Without a path, every root is walked.
        """
        if path is None:
            starts = [(name, node) for name, node in self.roots.items()]
        else:
            node = self.resolve(path)
            starts = [] if node is None else [(join_path(split_path(path)), node)]
        for start_path, start in starts:
            yield from walk_keys(start_path, start)

    def traverse_all(self) -> Iterator[Tuple[str, ValueRecord]]:
        """
        Yield (key_path, value) for every value in the store.

        A key's own values come before its children's. Each call returns
        a fresh generator.
        """
        for key_path, node in self.iter_keys():
            for record in node.iter_values():
                yield key_path, record

    def path_of(self, target: KeyNode) -> Optional[str]:
        """Full path of an attached node, found by identity."""
        for key_path, node in self.iter_keys():
            if node is target:
                return key_path
        return None

    def __contains__(self, path: str) -> bool:
        return self.resolve(path) is not None

    def __len__(self) -> int:
        return sum(root.count_keys() for root in self.roots.values())

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """
        Flat pre-order list of keys, each addressed by its segment list.

        Segments are kept as a list so a name containing the delimiter
        survives.
        """
        keys = []
        for root in self.roots.values():
            stack = [([root.name], root)]
            while stack:
                segments, node = stack.pop()
                keys.append({
                    "path": segments,
                    "values": [v.to_dict() for v in node.iter_values()],
                })
                for child in reversed(list(node.iter_children())):
                    stack.append((segments + [child.name], child))
        return {"keys": keys}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryStore":
        store = cls(roots=())
        nodes: Dict[Tuple[str, ...], KeyNode] = {}
        for key_data in data.get("keys", []):
            path = key_data["path"]
            if not isinstance(path, list):
                raise ValueError(f"Invalid key path in snapshot: {path!r}")
            segments = tuple(path)
            if not segments or not all(isinstance(s, str) and s for s in segments):
                raise ValueError(f"Invalid key path in snapshot: {list(segments)}")
            if len(segments) == 1:
                node = store.roots.setdefault(segments[0], KeyNode(segments[0]))
            else:
                parent = nodes.get(segments[:-1])
                if parent is None:
                    raise ValueError(f"Key listed before its parent: {list(segments)}")
                node = parent.ensure_child(segments[-1])
            for value_data in key_data.get("values", []):
                node.put_value(ValueRecord.from_dict(value_data))
            nodes[segments] = node
        return store


def _descend_creating(node: KeyNode, names: List[str]) -> KeyNode:
    for name in names:
        node = node.ensure_child(name)
    return node


def walk_keys(path: str, node: KeyNode) -> Iterator[Tuple[str, KeyNode]]:
    """
    Walk a subtree depth-first, parents before children.

    Uses an explicit stack, so depth is limited only by memory.
    """
    stack = [(path, node)]
    while stack:
        key_path, key = stack.pop()
        yield key_path, key
        children = list(key.iter_children())
        for child in reversed(children):
            stack.append((child_path(key_path, child.name), child))
