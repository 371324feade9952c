#!/usr/bin/env python3
"""
regtree CLI

Command-line front end for the registry store:
  regtree create-key <path>
  regtree set <path> <name> <value> [--type DWord]
  regtree get <path> <name>
  regtree delete-value <path> <name>
  regtree delete-key <path>
  regtree rename-key <path> <new-name>
  regtree rename-value <path> <old-name> <new-name>
  regtree list [<path>]
  regtree tree [<path>]
  regtree export <file> [--key <path>]
  regtree import <file>

Use "@" as the value name to address a key's default value.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_settings
from .editor import Editor
from .errors import RegistryError
from .model import DEFAULT_VALUE_ALIAS, ValueRecord, ValueType
from .paths import split_path

TYPE_CHOICES = [t.label for t in ValueType]


def _display_name(record: ValueRecord) -> str:
    return DEFAULT_VALUE_ALIAS if record.is_default else record.name


def _report(ok: bool, success: str, failure: str) -> int:
    if ok:
        print(success)
        return 0
    print(f"Error: {failure}", file=sys.stderr)
    return 1


def cmd_create_key(editor: Editor, args) -> int:
    return _report(
        editor.create_key(args.path),
        f"Created {args.path}",
        f"Cannot create {args.path} (unknown root or invalid path)",
    )


def cmd_set(editor: Editor, args) -> int:
    return _report(
        editor.set_value(args.path, args.name, args.type, args.value),
        f"Set {args.path} [{args.name}] = {args.value} ({args.type})",
        f"Key not found: {args.path}",
    )


def cmd_get(editor: Editor, args) -> int:
    record = editor.store.get_value(args.path, args.name)
    if record is None:
        print(f"Error: Value not found: {args.path} [{args.name}]", file=sys.stderr)
        return 1
    print(f"{record.value_type.label}\t{record.payload}")
    return 0


def cmd_delete_value(editor: Editor, args) -> int:
    return _report(
        editor.delete_value(args.path, args.name),
        f"Deleted {args.path} [{args.name}]",
        f"Value not found: {args.path} [{args.name}]",
    )


def cmd_delete_key(editor: Editor, args) -> int:
    if editor.store.is_root(args.path):
        print(f"Error: Root key {args.path} cannot be deleted", file=sys.stderr)
        return 1
    return _report(
        editor.delete_key(args.path),
        f"Deleted {args.path}",
        f"Key not found: {args.path}",
    )


def cmd_rename_key(editor: Editor, args) -> int:
    return _report(
        editor.rename_key(args.path, args.new_name),
        f"Renamed {args.path} -> {args.new_name}",
        f"Cannot rename {args.path} to {args.new_name}",
    )


def cmd_rename_value(editor: Editor, args) -> int:
    return _report(
        editor.rename_value(args.path, args.old_name, args.new_name),
        f"Renamed {args.path} [{args.old_name}] -> [{args.new_name}]",
        f"Cannot rename {args.path} [{args.old_name}] to [{args.new_name}]",
    )


def cmd_list(editor: Editor, args) -> int:
    """Print every value, one per line: path, name, type, payload."""
    if args.path is not None and args.path not in editor.store:
        print(f"Error: Key not found: {args.path}", file=sys.stderr)
        return 1
    count = 0
    for key_path, node in editor.store.iter_keys(args.path):
        for record in node.iter_values():
            print(f"{key_path}\t{_display_name(record)}\t{record.value_type.label}\t{record.payload}")
            count += 1
    if count == 0:
        print("No values.")
    return 0


def cmd_tree(editor: Editor, args) -> int:
    """Print keys as an indented tree."""
    if args.path is not None and args.path not in editor.store:
        print(f"Error: Key not found: {args.path}", file=sys.stderr)
        return 1
    base = len(split_path(args.path)) if args.path else 1
    for key_path, node in editor.store.iter_keys(args.path):
        depth = len(split_path(key_path)) - base
        suffix = f"  ({len(node.values)} values)" if node.values else ""
        print(f"{'  ' * depth}{node.name}{suffix}")
    return 0


def cmd_export(editor: Editor, args) -> int:
    path = editor.export_file(args.file, key_path=args.key)
    print(f"Registry exported to: {path}")
    return 0


def cmd_import(editor: Editor, args) -> int:
    result = editor.import_file(args.file)
    print(f"Imported {result.values_written} values into {result.keys_touched} keys")
    if result.lines_ignored:
        print(f"Ignored {result.lines_ignored} lines outside any key")
    return 0


COMMANDS = {
    "create-key": cmd_create_key,
    "set": cmd_set,
    "get": cmd_get,
    "delete-value": cmd_delete_value,
    "delete-key": cmd_delete_key,
    "rename-key": cmd_rename_key,
    "rename-value": cmd_rename_value,
    "list": cmd_list,
    "tree": cmd_tree,
    "export": cmd_export,
    "import": cmd_import,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regtree",
        description="Hierarchical registry store with .reg-style import/export",
    )
    parser.add_argument("--config", help="Settings YAML file")
    parser.add_argument("--snapshot", help="Snapshot file (overrides settings)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p = subparsers.add_parser("create-key", help="Create a key and its missing parents")
    p.add_argument("path", help="Key path, e.g. HKEY_SOFTWARE\\App")

    p = subparsers.add_parser("set", help="Set a value")
    p.add_argument("path", help="Key path")
    p.add_argument("name", help="Value name (@ for the default value)")
    p.add_argument("value", help="Payload (hex digits for DWord/QWord/Binary)")
    p.add_argument("--type", "-t", default="String", choices=TYPE_CHOICES,
                   help="Value type (default: String)")

    p = subparsers.add_parser("get", help="Print a value")
    p.add_argument("path", help="Key path")
    p.add_argument("name", help="Value name")

    p = subparsers.add_parser("delete-value", help="Delete a value")
    p.add_argument("path", help="Key path")
    p.add_argument("name", help="Value name")

    p = subparsers.add_parser("delete-key", help="Delete a key and its subtree")
    p.add_argument("path", help="Key path")

    p = subparsers.add_parser("rename-key", help="Rename a key")
    p.add_argument("path", help="Key path")
    p.add_argument("new_name", help="New key name")

    p = subparsers.add_parser("rename-value", help="Rename a value")
    p.add_argument("path", help="Key path")
    p.add_argument("old_name", help="Current value name")
    p.add_argument("new_name", help="New value name")

    p = subparsers.add_parser("list", help="List values")
    p.add_argument("path", nargs="?", help="Only list this subtree")

    p = subparsers.add_parser("tree", help="Show the key tree")
    p.add_argument("path", nargs="?", help="Only show this subtree")

    p = subparsers.add_parser("export", help="Export to an interchange file")
    p.add_argument("file", help="Output .reg file")
    p.add_argument("--key", help="Export only this subtree")

    p = subparsers.add_parser("import", help="Import an interchange file")
    p.add_argument("file", help="Input .reg file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: Cannot load settings: {e}", file=sys.stderr)
        return 1
    if args.snapshot:
        settings.snapshot_path = Path(args.snapshot)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    editor = Editor.open(settings)
    try:
        return COMMANDS[args.command](editor, args)
    except (RegistryError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
