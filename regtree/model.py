# regtree/model.py
"""
Core registry data structures.

A KeyNode holds named child keys and named ValueRecords. Values are stored
as text: numeric and binary payloads keep their hex digits, nothing is
decoded to native form.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterator, Optional

DEFAULT_VALUE_ALIAS = "@"


class ValueType(Enum):
    """Value type tags, valued by their display label."""
    STRING = "String"
    DWORD = "DWord"
    QWORD = "QWord"
    BINARY = "Binary"
    MULTI_STRING = "Multi-String"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: "ValueType | str") -> "ValueType":
        """
        Parse a type tag.

        Accepts the enum name ("MULTI_STRING") or the label ("Multi-String"),
        case-insensitively. "MultiString" is accepted as well.
        """
        if isinstance(text, ValueType):
            return text
        wanted = str(text).strip().lower().replace("-", "").replace("_", "")
        for value_type in cls:
            if wanted in (
                value_type.name.lower().replace("_", ""),
                value_type.value.lower().replace("-", ""),
            ):
                return value_type
        raise ValueError(f"Unknown value type: {text!r}")


def is_default_name(name: str) -> bool:
    """True if name addresses a key's default value."""
    return name == "" or name == DEFAULT_VALUE_ALIAS


def canonical_name(name: str) -> str:
    """Map the "@" alias to the empty default-value name."""
    return "" if is_default_name(name) else name


@dataclass(frozen=True)
class ValueRecord:
    """
    A named, typed value attached to a key.

    Attributes:
        name: Value name ("" or "@" for the key's default value)
        value_type: Type tag
        payload: Textual payload (hex digits for DWord/QWord/Binary)
    """
    name: str
    value_type: ValueType
    payload: str = ""

    @property
    def is_default(self) -> bool:
        return is_default_name(self.name)

    def with_payload(self, payload: str) -> "ValueRecord":
        return replace(self, payload=payload)

    def renamed(self, name: str) -> "ValueRecord":
        return replace(self, name=name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.value_type.name,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValueRecord":
        return cls(
            name=data["name"],
            value_type=ValueType.parse(data["type"]),
            payload=data.get("payload", ""),
        )


@dataclass
class KeyNode:
    """
    A key in the registry tree.

    Attributes:
        name: Key name, unique among its siblings
        children: Child keys by name
        values: Values by name
    """
    name: str
    children: Dict[str, "KeyNode"] = field(default_factory=dict)
    values: Dict[str, ValueRecord] = field(default_factory=dict)

    # Child keys

    def get_child(self, name: str) -> Optional["KeyNode"]:
        return self.children.get(name)

    def add_child(self, child: "KeyNode") -> "KeyNode":
        """Attach a child, replacing any child with the same name."""
        self.children[child.name] = child
        return child

    def ensure_child(self, name: str) -> "KeyNode":
        """Return the named child, creating it if missing."""
        child = self.children.get(name)
        if child is None:
            child = self.add_child(KeyNode(name))
        return child

    def remove_child(self, name: str) -> bool:
        if name not in self.children:
            return False
        del self.children[name]
        return True

    def rename_child(self, old_name: str, new_name: str) -> bool:
        """Re-key a child under a new name. Fails if new_name is taken."""
        child = self.children.get(old_name)
        if child is None:
            return False
        if old_name == new_name:
            return True
        if new_name in self.children:
            return False
        del self.children[old_name]
        child.name = new_name
        self.children[new_name] = child
        return True

    def iter_children(self) -> Iterator["KeyNode"]:
        return iter(list(self.children.values()))

    # Values

    def get_value(self, name: str) -> Optional[ValueRecord]:
        return self.values.get(canonical_name(name))

    def put_value(self, record: ValueRecord) -> ValueRecord:
        """Insert or overwrite a value, keyed by its canonical name."""
        name = canonical_name(record.name)
        if record.name != name:
            record = record.renamed(name)
        self.values[name] = record
        return record

    def remove_value(self, name: str) -> bool:
        name = canonical_name(name)
        if name not in self.values:
            return False
        del self.values[name]
        return True

    def iter_values(self) -> Iterator[ValueRecord]:
        return iter(list(self.values.values()))

    def count_keys(self) -> int:
        """Number of keys in this subtree, including this one."""
        count = 0
        stack = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children.values())
        return count

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """Nested dict of this subtree, built without recursion."""
        out = self._shallow_dict()
        stack = [(self, out)]
        while stack:
            node, data = stack.pop()
            for child in node.children.values():
                child_data = child._shallow_dict()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return out

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "values": [v.to_dict() for v in self.values.values()],
            "children": [],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeyNode":
        root = cls._shallow_from_dict(data)
        stack = [(root, data)]
        while stack:
            node, node_data = stack.pop()
            for child_data in node_data.get("children", []):
                child = node.add_child(cls._shallow_from_dict(child_data))
                stack.append((child, child_data))
        return root

    @classmethod
    def _shallow_from_dict(cls, data: Dict[str, Any]) -> "KeyNode":
        node = cls(name=data["name"])
        for value_data in data.get("values", []):
            node.put_value(ValueRecord.from_dict(value_data))
        return node
