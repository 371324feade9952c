# regtree/codec/importer.py
"""
Interchange import.

Parses the text written by the exporter and merges it into a store:
- the first line must be the header
- ["path"] lines select (and create, if needed) the current key
- "name"=value lines write values into the current key, last one wins

Format errors are detected before anything is written. Import is still not
a transaction: the caller's snapshot is only committed after a clean pass.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import (
    EmptyFileError,
    ImportFormatError,
    InvalidKeyPathError,
    MalformedValueLineError,
    UnsupportedFormatError,
)
from ..model import ValueRecord, canonical_name
from ..paths import is_valid_path
from ..snapshot import SnapshotFile
from ..store import RegistryStore
from .exporter import ENCODING, HEADER
from .types import decode_value

logger = logging.getLogger(__name__)

BOM = "\ufeff"

# Only CR/LF break lines; other separators are payload text
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class ImportResult:
    """Summary of one import pass."""
    keys: List[str] = field(default_factory=list)
    values_written: int = 0
    lines_ignored: int = 0

    @property
    def keys_touched(self) -> int:
        return len(self.keys)


def split_lines(text: str) -> List[str]:
    """Split text into lines. A final line break does not start a new line."""
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_key_header(line: str) -> Optional[str]:
    """
    Extract the key path from a ["path"] line.

    Quotes are removed and doubled backslashes collapsed. Returns None if
    the line is not a key header.
    """
    if not (line.startswith("[") and line.endswith("]")):
        return None
    return line[1:-1].replace('"', "").replace("\\\\", "\\")


def parse_value_line(line: str, line_number: Optional[int] = None) -> ValueRecord:
    """Parse a "name"=value line into a ValueRecord."""
    parts = line.split("=", 1)
    if len(parts) != 2:
        raise MalformedValueLineError(line, line_number)
    name = canonical_name(parts[0].strip().strip('"'))
    value_type, payload = decode_value(parts[1].strip())
    return ValueRecord(name, value_type, payload)


def import_text(store: RegistryStore, text: str) -> ImportResult:
    """
    Merge interchange text into a store.

    Every line is parsed before the store is touched, so a format error
    leaves the store unchanged.

    Raises:
        EmptyFileError: text has no lines
        UnsupportedFormatError: the first line is not the header
        InvalidKeyPathError: a key header cannot be resolved
        MalformedValueLineError: a value line has no "="
    """
    lines = split_lines(text)
    if not lines:
        raise EmptyFileError()

    header = lines[0].lstrip(BOM).strip()
    if header != HEADER:
        raise UnsupportedFormatError(header)

    result = ImportResult()
    blocks: List[Tuple[str, int, List[ValueRecord]]] = []

    for line_number, raw in enumerate(lines[1:], start=2):
        line = raw.strip()
        if not line:
            continue

        path = parse_key_header(line)
        if path is not None:
            if not is_valid_path(path):
                raise InvalidKeyPathError(path, line_number)
            blocks.append((path, line_number, []))
            continue

        if not blocks:
            logger.debug(f"Ignoring line {line_number} outside any key: {line}")
            result.lines_ignored += 1
            continue

        blocks[-1][2].append(parse_value_line(line, line_number))

    for path, line_number, records in blocks:
        key = store.resolve_or_create_any(path)
        if key is None:
            raise InvalidKeyPathError(path, line_number)
        for record in records:
            key.put_value(record)
        result.keys.append(path)
        result.values_written += len(records)

    logger.info(
        f"Imported {result.values_written} values into {result.keys_touched} keys"
    )
    return result


def read_interchange(path: Path | str) -> str:
    """Read an interchange file (UTF-16LE), dropping a leading BOM."""
    path = Path(path)
    try:
        with open(path, "r", encoding=ENCODING, newline="") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise ImportFormatError(f"Cannot decode {path} as UTF-16LE: {e}")
    return text[1:] if text.startswith(BOM) else text


def import_file(
    store: RegistryStore,
    path: Path | str,
    snapshot: Optional[SnapshotFile] = None,
) -> ImportResult:
    """
    Import an interchange file and commit the store.

    The snapshot is saved only after every line was imported.
    """
    logger.info(f"Importing registry file {path}")
    result = import_text(store, read_interchange(path))
    if snapshot is not None:
        snapshot.save(store)
    return result
