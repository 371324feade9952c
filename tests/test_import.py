# tests/test_import.py
"""Tests for interchange import."""

import pytest

from regtree import (
    EmptyFileError,
    ImportFormatError,
    InvalidKeyPathError,
    MalformedValueLineError,
    RegistryStore,
    SnapshotFile,
    UnsupportedFormatError,
    ValueType,
)
from regtree.codec import export_all, export_subtree, import_file, import_text, write_export
from regtree.codec.importer import parse_key_header, parse_value_line, split_lines

HEADER = "DataOS Registry Editor Version 1.00"
APP = "HKEY_SOFTWARE\\App"


def reg(*lines: str) -> str:
    return "\n".join((HEADER, "") + lines) + "\n"


class TestLineParsing:
    """Test line-level helpers."""

    def test_split_lines_mixed_breaks(self):
        assert split_lines("a\r\nb\nc\rd") == ["a", "b", "c", "d"]

    def test_split_lines_trailing_break(self):
        assert split_lines("a\r\n") == ["a"]
        assert split_lines("") == []

    def test_split_lines_keeps_other_separators(self):
        assert split_lines("a\x0bb c") == ["a\x0bb c"]

    def test_parse_key_header(self):
        assert parse_key_header('["HKEY_SOFTWARE\\App"]') == APP
        assert parse_key_header('["HKEY_SOFTWARE\\\\App"]') == APP
        assert parse_key_header("[HKEY_SOFTWARE\\App]") == APP
        assert parse_key_header('"Version"="1"') is None

    def test_parse_value_line(self):
        record = parse_value_line('"Version"="2.0.0"')
        assert (record.name, record.value_type, record.payload) == ("Version", ValueType.STRING, "2.0.0")

    def test_parse_default_value_line(self):
        assert parse_value_line('@="x"').name == ""
        assert parse_value_line('"@"="x"').is_default

    def test_value_split_on_first_equals(self):
        assert parse_value_line('"Expr"="a=b"').payload == "a=b"

    def test_missing_equals(self):
        with pytest.raises(MalformedValueLineError) as exc_info:
            parse_value_line("garbage", 7)
        assert exc_info.value.line_number == 7
        assert "line 7" in str(exc_info.value)


class TestImportText:
    """Test import_text."""

    def test_basic_import(self, store):
        result = import_text(store, reg('["HKEY_SOFTWARE\\App"]', '"Version"="2.0.0"', '"Flag"=dword:00000001'))

        assert store.get_value(APP, "Version").payload == "2.0.0"
        flag = store.get_value(APP, "Flag")
        assert (flag.value_type, flag.payload) == (ValueType.DWORD, "00000001")
        assert result.values_written == 2
        assert result.keys_touched == 1

    def test_creates_missing_roots(self, store):
        import_text(store, reg('["HKEY_CUSTOM\\Vendor\\Tool"]', '"x"="1"'))
        assert "HKEY_CUSTOM" in store.roots
        assert store.get_value("HKEY_CUSTOM\\Vendor\\Tool", "x").payload == "1"

    def test_merges_into_existing(self, app_store):
        import_text(app_store, reg('["HKEY_SOFTWARE\\App"]', '"Other"="x"'))
        assert app_store.get_value(APP, "Version").payload == "2.0.0"
        assert app_store.get_value(APP, "Other").payload == "x"

    def test_last_writer_wins(self, store):
        import_text(store, reg(
            '["HKEY_SOFTWARE\\App"]',
            '"Version"="1.0"',
            '"Version"=dword:00000002',
        ))
        record = store.get_value(APP, "Version")
        assert (record.value_type, record.payload) == (ValueType.DWORD, "00000002")

    def test_lines_before_first_key_ignored(self, store):
        result = import_text(store, reg('"Orphan"="x"', '["HKEY_SOFTWARE\\App"]', '"v"="1"'))
        assert result.lines_ignored == 1
        assert result.values_written == 1

    def test_tolerates_crlf_and_whitespace(self, store):
        text = HEADER + "\r\n\r\n  [\"HKEY_SOFTWARE\\App\"]  \r\n  \"v\" = \"1\"\r\n"
        import_text(store, text)
        assert store.get_value(APP, "v").payload == "1"

    def test_leading_bom(self, store):
        import_text(store, "\ufeff" + reg('["HKEY_SOFTWARE\\App"]', '"v"="1"'))
        assert store.get_value(APP, "v").payload == "1"

    def test_comma_separated_hex(self, store):
        import_text(store, reg(
            '["HKEY_SOFTWARE\\App"]',
            '"Q"=hex(7):00,00,00,00,00,00,00,ff',
            '"B"=hex:01,02,ab',
        ))
        assert store.get_value(APP, "Q").payload == "00000000000000ff"
        assert store.get_value(APP, "B").payload == "0102ab"

    def test_uppercase_dword_exported_lowercase(self, store):
        import_text(store, reg('["HKEY_SOFTWARE\\App"]', '"Flag"=DWORD:0000002A'))
        assert '"Flag"=dword:0000002a' in export_subtree(store, APP)

    def test_escaped_string(self, store):
        import_text(store, reg('["HKEY_SOFTWARE\\App"]', '"Msg"="say \\"hi\\"\\nbye"'))
        assert store.get_value(APP, "Msg").payload == 'say "hi"\nbye'

    def test_escaped_backslash_before_n(self, store):
        """An escaped backslash followed by n stays a backslash and an n."""
        import_text(store, reg('["HKEY_SOFTWARE\\App"]', '"Path"="C:\\\\new"'))
        assert store.get_value(APP, "Path").payload == "C:\\new"


class TestImportErrors:
    """Test that malformed files raise and leave the store unchanged."""

    def test_empty_text(self, store):
        with pytest.raises(EmptyFileError):
            import_text(store, "")

    def test_wrong_header(self, app_store):
        before = app_store.to_dict()
        with pytest.raises(UnsupportedFormatError) as exc_info:
            import_text(app_store, "Windows Registry Editor Version 5.00\n\n[\"HKEY_SOFTWARE\\New\"]\n")
        assert exc_info.value.line_number == 1
        assert app_store.to_dict() == before

    def test_missing_equals_creates_nothing(self, store):
        text = reg('["HKEY_SOFTWARE\\App"]', '"Good"="1"', "garbage")
        with pytest.raises(MalformedValueLineError) as exc_info:
            import_text(store, text)
        assert exc_info.value.line_number == 5
        assert store.get_key_by_path(APP) is None

    def test_empty_key_header(self, store):
        with pytest.raises(InvalidKeyPathError):
            import_text(store, reg("[]", '"v"="1"'))

    def test_errors_are_value_errors(self, store):
        with pytest.raises(ValueError):
            import_text(store, "nonsense\n")


class TestRoundTrip:
    """Test export followed by import."""

    def test_every_value_type(self, store):
        store.create_key(APP + "\\Sub")
        store.set_value(APP, "", ValueType.STRING, "default")
        store.set_value(APP, "Text", ValueType.STRING, 'quote " and\r\nbreaks')
        store.set_value(APP, "Flag", ValueType.DWORD, "0000002a")
        store.set_value(APP, "Big", ValueType.QWORD, "00000000000000ff")
        store.set_value(APP, "Blob", ValueType.BINARY, "0102ab")
        store.set_value(APP + "\\Sub", "List", ValueType.MULTI_STRING, "one\x00two\x00")

        restored = RegistryStore()
        import_text(restored, export_all(store))

        assert list(restored.traverse_all()) == list(store.traverse_all())

    def test_multi_string_without_nul_reads_back_as_string(self, store):
        """Without a NUL in the payload the wire form cannot tell the types apart."""
        store.create_key(APP)
        store.set_value(APP, "List", ValueType.MULTI_STRING, "one")

        restored = RegistryStore()
        import_text(restored, export_all(store))

        record = restored.get_value(APP, "List")
        assert (record.value_type, record.payload) == (ValueType.STRING, "one")

    def test_file_roundtrip_commits_snapshot(self, app_store, temp_dir):
        path = write_export(export_all(app_store), temp_dir / "backup.reg")
        snapshot = SnapshotFile(temp_dir / "registry.json")

        restored = RegistryStore()
        result = import_file(restored, path, snapshot=snapshot)

        assert result.values_written == 1
        assert restored.get_value(APP, "Version").payload == "2.0.0"
        assert snapshot.read().get_value(APP, "Version").payload == "2.0.0"

    def test_failed_import_does_not_commit(self, store, temp_dir):
        path = temp_dir / "bad.reg"
        path.write_bytes("not a registry\r\n".encode("utf-16-le"))
        snapshot = SnapshotFile(temp_dir / "registry.json")

        with pytest.raises(ImportFormatError):
            import_file(store, path, snapshot=snapshot)
        assert not snapshot.exists()

    def test_file_with_bom(self, store, temp_dir):
        path = temp_dir / "bom.reg"
        path.write_bytes(("\ufeff" + reg('["HKEY_SOFTWARE\\App"]', '"v"="1"')).encode("utf-16-le"))
        import_file(store, path)
        assert store.get_value(APP, "v").payload == "1"
