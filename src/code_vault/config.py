# Code Vault - Personal code snippet vault with similarity search
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Configuration file support for the vault.

Looks for .vaultrc or .vault.toml in current directory or project root.
All thresholds are tunable defaults, not calibrated values.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Dict, Any, List
import sys

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


CONFIG_NAMES = [".vaultrc", ".vault.toml"]
DEFAULT_DB_NAME = "code-vault.db"


@dataclass
class VaultConfig:
    """Tunable settings. Field names match the keys of the [vault] table."""

    db_path: str = DEFAULT_DB_NAME
    suggestion_threshold: float = 0.3
    similar_threshold: float = 0.5
    very_similar_threshold: float = 0.7
    duplicate_threshold: float = 0.8
    max_suggestions: int = 5
    recent_ttl: float = 60.0
    cluster_threshold: float = 0.5
    min_cluster: int = 2
    min_selection_chars: int = 20
    min_file_chars: int = 100
    capture_tags: List[str] = field(default_factory=lambda: ["auto-captured", "vscode"])

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "VaultConfig":
        """Build a config from a [vault] table, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for .vaultrc or .vault.toml in start_path and parent directories.

    Searches up to the root directory or until a config file is found.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_path.resolve()

    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load the [vault] section of the nearest config file.

    Returns empty dict if no config file is found or it cannot be parsed.

    Example config file (.vaultrc or .vault.toml):
        [vault]
        db_path = "~/.local/share/code-vault/vault.db"
        suggestion_threshold = 0.3
        duplicate_threshold = 0.8
        max_suggestions = 5
        recent_ttl = 60
        capture_tags = ["auto-captured", "cli"]
    """
    config_path = find_config_file(path)

    if config_path is None:
        return {}

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return data.get("vault", {})

    except (OSError, tomllib.TOMLDecodeError):
        return {}
