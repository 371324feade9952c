# regtree/config.py
"""
Settings file.

    # regtree.yaml
    snapshot: ~/.regtree/registry.json
    roots: [HKEY_MACHINE, HKEY_SOFTWARE, HKEY_USERS]
    log_level: INFO
    auto_save: true

Every key is optional. The file is found through --config, then the
REGTREE_CONFIG environment variable; REGTREE_SNAPSHOT overrides the
snapshot path.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .store import DEFAULT_ROOTS

logger = logging.getLogger(__name__)

CONFIG_ENV = "REGTREE_CONFIG"
SNAPSHOT_ENV = "REGTREE_SNAPSHOT"
DEFAULT_SNAPSHOT = Path("~/.regtree/registry.json")


@dataclass
class Settings:
    """Runtime settings."""
    snapshot_path: Path = DEFAULT_SNAPSHOT
    roots: List[str] = field(default_factory=lambda: list(DEFAULT_ROOTS))
    log_level: str = "WARNING"
    auto_save: bool = True

    @property
    def resolved_snapshot_path(self) -> Path:
        return self.snapshot_path.expanduser()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        settings = cls()
        if data.get("snapshot"):
            settings.snapshot_path = Path(str(data["snapshot"]))
        roots = data.get("roots")
        if isinstance(roots, str):
            roots = [roots]
        if roots:
            settings.roots = [str(r) for r in roots]
        if data.get("log_level"):
            settings.log_level = str(data["log_level"]).upper()
        if "auto_save" in data:
            settings.auto_save = bool(data["auto_save"])
        return settings

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "Settings":
        """Parse settings from YAML. An empty document gives the defaults."""
        data = yaml.safe_load(yaml_content) or {}
        if not isinstance(data, dict):
            raise ValueError("Settings file must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path | str) -> "Settings":
        """Load settings from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())


def load_settings(
    path: Optional[Path | str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Load settings from path, or from the file named by REGTREE_CONFIG.

    Falls back to defaults when neither is given.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = env.get(CONFIG_ENV) or None

    if path is not None:
        logger.debug(f"Loading settings from {path}")
        settings = Settings.from_file(path)
    else:
        settings = Settings()

    if env.get(SNAPSHOT_ENV):
        settings.snapshot_path = Path(env[SNAPSHOT_ENV])
    return settings
