# regtree/codec/types.py
"""
Value codecs for the interchange format.

Each ValueType has a codec that turns a payload into the right-hand side of
a value line and back. Codecs are registered by type and looked up during
export; import sniffs the wire form against them in a fixed order.

Wire forms:
    String, Multi-String   "escaped text"
    DWord                  dword:<hex>
    QWord                  hex(7):<hex>
    Binary                 hex:<hex>
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple, Type

from ..model import ValueType

logger = logging.getLogger(__name__)

_CODECS: Dict[ValueType, Type["ValueCodec"]] = {}

# Order in which import tries the registered wire forms
SNIFF_ORDER: List[ValueType] = [
    ValueType.STRING,
    ValueType.DWORD,
    ValueType.QWORD,
    ValueType.BINARY,
]

EMPTY_STRING = '""'

_ESCAPES = {'"': '\\"', "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", '"': '"'}


def escape_string(text: str) -> str:
    """Escape double quotes, LF and CR. Backslashes are written as-is."""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def unescape_string(text: str) -> str:
    """
    Undo string escapes in a single left-to-right pass.

    Recognises \\\\, \\n, \\r and \\". Any other backslash is kept. An escaped
    backslash never pairs with the character after it, so \\\\n reads as a
    backslash followed by n rather than as a newline.
    """
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class ValueCodec(ABC):
    """
    Base class for value codecs.

    Subclasses implement encode(), matches() and decode().
    """

    value_type: ValueType

    @abstractmethod
    def encode(self, payload: str) -> str:
        """Render a payload as the right-hand side of a value line."""
        pass

    @abstractmethod
    def matches(self, text: str) -> bool:
        """True if text is in this codec's wire form."""
        pass

    @abstractmethod
    def decode(self, text: str) -> Tuple[ValueType, str]:
        """Parse a wire form into (type, payload)."""
        pass


def register_codec(value_type: ValueType) -> Callable:
    """
    Decorator to register a codec for a value type.

    Usage:
        @register_codec(ValueType.DWORD)
        class DWordCodec(ValueCodec):
            ...
    """
    def decorator(cls: Type[ValueCodec]) -> Type[ValueCodec]:
        if value_type in _CODECS:
            logger.warning(f"Overwriting codec for {value_type.label}")
        cls.value_type = value_type
        _CODECS[value_type] = cls
        return cls
    return decorator


def get_codec(value_type: ValueType) -> Optional[ValueCodec]:
    """Get a codec instance for a value type, or None if unregistered."""
    codec_cls = _CODECS.get(value_type)
    if codec_cls is None:
        return None
    return codec_cls()


def list_codecs() -> Dict[str, Type[ValueCodec]]:
    """List registered codecs by type label."""
    return {k.label: v for k, v in _CODECS.items()}


@register_codec(ValueType.STRING)
class StringCodec(ValueCodec):
    """
    Quoted, escaped text.

    A decoded payload containing NUL is reported as Multi-String, whose
    items are NUL-joined. A Multi-String without NUL, such as a single
    item, is indistinguishable from a String and reads back as one.
    """

    def encode(self, payload: str) -> str:
        return f'"{escape_string(payload)}"'

    def matches(self, text: str) -> bool:
        return len(text) >= 2 and text.startswith('"') and text.endswith('"')

    def decode(self, text: str) -> Tuple[ValueType, str]:
        payload = unescape_string(text[1:-1])
        if "\x00" in payload:
            return ValueType.MULTI_STRING, payload
        return ValueType.STRING, payload


@register_codec(ValueType.MULTI_STRING)
class MultiStringCodec(StringCodec):
    """Written exactly like String."""


class PrefixCodec(ValueCodec):
    """A wire form of prefix + hex digits."""

    prefix: str = ""
    lowercase: bool = False

    def encode(self, payload: str) -> str:
        return self.prefix + (payload.lower() if self.lowercase else payload)

    def matches(self, text: str) -> bool:
        return text.lower().startswith(self.prefix)

    def decode(self, text: str) -> Tuple[ValueType, str]:
        return self.value_type, self.clean(text[len(self.prefix):])

    def clean(self, digits: str) -> str:
        return digits.replace(",", "")


@register_codec(ValueType.DWORD)
class DWordCodec(PrefixCodec):
    prefix = "dword:"
    lowercase = True

    def clean(self, digits: str) -> str:
        return digits


@register_codec(ValueType.QWORD)
class QWordCodec(PrefixCodec):
    prefix = "hex(7):"
    lowercase = True


@register_codec(ValueType.BINARY)
class BinaryCodec(PrefixCodec):
    prefix = "hex:"


def encode_value(value_type: ValueType, payload: str) -> str:
    """Wire form of a typed payload."""
    codec = get_codec(value_type)
    if codec is None:
        raise ValueError(f"No codec for value type: {value_type.label}")
    return codec.encode(payload)


def decode_value(text: str) -> Tuple[ValueType, str]:
    """
    Sniff the type of a wire form and parse its payload.

    Anything unrecognised is read as a String with surrounding quotes
    stripped.
    """
    if text == EMPTY_STRING:
        return ValueType.STRING, ""
    for value_type in SNIFF_ORDER:
        codec = get_codec(value_type)
        if codec is not None and codec.matches(text):
            return codec.decode(text)
    return ValueType.STRING, text.strip('"')
