#!/usr/bin/env python3
"""
Walk through a registry session locally.

Creates a key, sets and deletes values, saves a snapshot, then exports
the key and imports it into a second registry. Everything is written to a
temporary directory.
"""

import logging
import sys
import tempfile
from pathlib import Path

# Add regtree to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from regtree import Editor, Settings


def main():
    settings_path = Path(__file__).parent / "regtree.yaml"
    if not settings_path.exists():
        print(f"Settings not found: {settings_path}")
        return 1

    settings = Settings.from_file(settings_path)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        workdir = Path(tmpdir)
        settings.snapshot_path = workdir / "registry.json"
        editor = Editor.open(settings)

        app = "HKEY_MACHINE\\SOFTWARE\\MyApplication"
        print(f"Create {app}: {editor.create_key(app)}")
        print(f"Set Version: {editor.set_value(app, 'Version', 'String', '2.0.0')}")
        print(f"Set InstallPath: {editor.set_value(app, 'InstallPath', 'String', 'C:/Program Files/MyApplication')}")
        print(f"Set IsEnabled: {editor.set_value(app, 'IsEnabled', 'DWord', '1')}")
        print(f"Delete IsEnabled: {editor.delete_value(app, 'IsEnabled')}")
        print(f"Snapshot: {settings.snapshot_path}")
        print()

        print("=== All values ===")
        for path, record in editor.store.traverse_all():
            print(f"  {path} [{record.name or '@'}] {record.value_type.label}: {record.payload}")
        print()

        export_path = editor.export_file(workdir / "myapp.reg", key_path=app)
        print("=== Export ===")
        print(export_path.read_bytes().decode("utf-16-le"))

        settings.snapshot_path = workdir / "restored.json"
        restored = Editor.open(settings)
        result = restored.import_file(export_path)
        print(f"Imported {result.values_written} values into {result.keys_touched} keys")
        print(f"Version after import: {restored.store.get_value(app, 'Version').payload}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
