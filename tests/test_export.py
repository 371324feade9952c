# tests/test_export.py
"""Tests for interchange export."""

import pytest

from regtree import KeyNotFoundError, RegistryStore, ValueType
from regtree.codec import HEADER, export_all, export_subtree, import_text, write_export
from regtree.codec.exporter import format_value_line
from regtree.model import KeyNode, ValueRecord

APP = "HKEY_SOFTWARE\\App"


class TestFormatValueLine:
    """Test single value lines."""

    def test_named_string(self):
        assert format_value_line(ValueRecord("Version", ValueType.STRING, "2.0.0")) == '"Version"="2.0.0"'

    def test_default_value(self):
        assert format_value_line(ValueRecord("", ValueType.STRING, "x")) == '@="x"'

    def test_dword(self):
        assert format_value_line(ValueRecord("Flag", ValueType.DWORD, "0000002A")) == '"Flag"=dword:0000002a'

    def test_escaped_string(self):
        record = ValueRecord("Msg", ValueType.STRING, 'a "b"\nc')
        assert format_value_line(record) == '"Msg"="a \\"b\\"\\nc"'


class TestExportSubtree:
    """Test subtree export."""

    def test_single_key(self, app_store):
        text = export_subtree(app_store, APP)
        assert text == (
            "DataOS Registry Editor Version 1.00\n"
            "\n"
            '["HKEY_SOFTWARE\\App"]\n'
            '"Version"="2.0.0"\n'
            "\n"
        )

    def test_parents_before_children(self, app_store):
        app_store.create_key(APP + "\\Sub")
        app_store.set_value(APP + "\\Sub", "", ValueType.DWORD, "1")

        lines = export_subtree(app_store, APP).split("\n")

        assert lines.index('["HKEY_SOFTWARE\\App"]') < lines.index('["HKEY_SOFTWARE\\App\\Sub"]')
        assert "@=dword:1" in lines

    def test_accepts_node(self, app_store):
        node = app_store.get_key_by_path(APP)
        assert export_subtree(app_store, node) == export_subtree(app_store, APP)

    def test_unattached_node_uses_own_name(self, store):
        node = KeyNode("Loose")
        node.put_value(ValueRecord("v", ValueType.STRING, "1"))
        assert '["Loose"]' in export_subtree(store, node).split("\n")

    def test_missing_key(self, store):
        with pytest.raises(KeyNotFoundError):
            export_subtree(store, "HKEY_SOFTWARE\\Missing")

    def test_empty_key_still_written(self, store):
        store.create_key(APP)
        assert '["HKEY_SOFTWARE\\App"]' in export_subtree(store, APP)


class TestExportAll:
    """Test whole-store export."""

    def test_starts_with_header(self, store):
        assert export_all(store).startswith(HEADER + "\n\n")

    def test_all_roots_written(self, store):
        text = export_all(store)
        for root in store.root_names():
            assert f'["{root}"]' in text

    def test_contains_values(self, app_store):
        assert '"Version"="2.0.0"' in export_all(app_store).split("\n")

    def test_deep_tree(self, store, deep_path):
        """A key nested past the recursion limit exports and re-imports."""
        store.create_key(deep_path)
        store.set_value(deep_path, "Leaf", ValueType.STRING, "bottom")

        text = export_all(store)
        lines = text.split("\n")

        assert lines.index(f'["{deep_path}"]') > lines.index('["HKEY_SOFTWARE\\k0"]')
        assert export_subtree(store, "HKEY_SOFTWARE\\k0").count("\n[") == 1500
        restored = RegistryStore()
        import_text(restored, text)
        assert restored.get_value(deep_path, "Leaf").payload == "bottom"


class TestWriteExport:
    """Test writing export files."""

    def test_utf16le_crlf_no_bom(self, app_store, temp_dir):
        path = write_export(export_subtree(app_store, APP), temp_dir / "out.reg")

        data = path.read_bytes()

        assert not data.startswith(b"\xff\xfe")
        assert data.startswith("DataOS".encode("utf-16-le"))
        assert b"\r\x00\n\x00" in data
        assert data.decode("utf-16-le").count("\r\n") == 5
