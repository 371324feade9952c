# tests/conftest.py
"""Shared fixtures."""

import tempfile
from pathlib import Path

import pytest

from regtree import RegistryStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    """Fresh store seeded with the default roots."""
    return RegistryStore()


@pytest.fixture
def app_store(store):
    """Store with HKEY_SOFTWARE\\App holding a Version string."""
    store.create_key("HKEY_SOFTWARE\\App")
    store.set_value("HKEY_SOFTWARE\\App", "Version", "String", "2.0.0")
    return store


@pytest.fixture
def deep_path():
    """A key path nested deeper than the default recursion limit."""
    return "HKEY_SOFTWARE\\" + "\\".join(f"k{i}" for i in range(1500))
