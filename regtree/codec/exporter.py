# regtree/codec/exporter.py
"""
Interchange export.

Writes the whole store, or one subtree, as text:

    DataOS Registry Editor Version 1.00

    ["HKEY_SOFTWARE\\App"]
    "Version"="2.0.0"
    @="default"

Keys are written parents first, each block followed by a blank line.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from ..errors import KeyNotFoundError
from ..model import KeyNode, ValueRecord
from ..store import RegistryStore, walk_keys
from .types import encode_value

logger = logging.getLogger(__name__)

HEADER = "DataOS Registry Editor Version 1.00"
ENCODING = "utf-16-le"
NEWLINE = "\r\n"


def format_value_line(record: ValueRecord) -> str:
    """Render one value as "name"=<typed value>, or @=<typed value> for the default."""
    rhs = encode_value(record.value_type, record.payload)
    if record.is_default:
        return f"@={rhs}"
    return f'"{record.name}"={rhs}'


def format_key_header(path: str) -> str:
    return f'["{path}"]'


def _render(blocks: Iterable[Tuple[str, KeyNode]]) -> str:
    lines: List[str] = [HEADER, ""]
    for path, node in blocks:
        lines.append(format_key_header(path))
        lines.extend(format_value_line(record) for record in node.iter_values())
        lines.append("")
    return "\n".join(lines) + "\n"


def export_all(store: RegistryStore) -> str:
    """Export every root and everything below it."""
    return _render(store.iter_keys())


def export_subtree(store: RegistryStore, key: KeyNode | str) -> str:
    """
    Export one key and everything below it.

    Args:
        store: The store the key belongs to
        key: A KeyNode or a key path

    The full path of a node is found by searching the roots; a node that
    is not attached to the store is written under its own name.
    """
    if isinstance(key, str):
        node = store.resolve(key)
        if node is None:
            raise KeyNotFoundError(key)
    else:
        node = key
    path = store.path_of(node)
    if path is None:
        logger.debug(f"Key {node.name} is not attached to the store")
        path = node.name
    return _render(walk_keys(path, node))


def write_export(text: str, path: Path | str) -> Path:
    """
    Write exported text to a file.

    The file is UTF-16LE without a byte order mark, with CRLF line ends.
    """
    path = Path(path)
    with open(path, "w", encoding=ENCODING, newline=NEWLINE) as f:
        f.write(text)
    logger.info(f"Exported registry to {path}")
    return path
