# regtree/codec/__init__.py
"""
Interchange format codec.

Text form of a registry, compatible with the DataOS registry editor:

    DataOS Registry Editor Version 1.00

    ["HKEY_SOFTWARE\\App"]
    "Version"="2.0.0"
    "Flags"=dword:0000002a

Example:
    text = export_all(store)
    import_text(RegistryStore(), text)
"""

from .exporter import HEADER, export_all, export_subtree, write_export
from .importer import ImportResult, import_file, import_text, read_interchange
from .types import decode_value, encode_value, get_codec, register_codec

__all__ = [
    "HEADER",
    "export_all",
    "export_subtree",
    "write_export",
    "ImportResult",
    "import_file",
    "import_text",
    "read_interchange",
    "decode_value",
    "encode_value",
    "get_codec",
    "register_codec",
]
