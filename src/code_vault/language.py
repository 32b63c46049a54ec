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
Language helpers.

detect_language() is a best-effort guess from superficial text markers.
It is low-confidence and only reported back to the caller; nothing in the
similarity core depends on it.
"""

from pathlib import Path
from typing import Optional


UNKNOWN_LANGUAGE = "unknown"

# Extension to language mapping
EXTENSION_MAP = {
    ".py": "python",
    ".pyw": "python",
    ".swift": "swift",
    ".rs": "rust",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".lua": "lua",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".sql": "sql",
    ".html": "html",
    ".css": "css",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
}

# Editor language ids that differ from vault language tags
EDITOR_LANGUAGE_MAP = {
    "javascriptreact": "javascript",
    "typescriptreact": "typescript",
    "shellscript": "shell",
}


def detect_language(code: str) -> str:
    """
    Guess the language of a code string from telltale substrings.

    Checked in order; the first hit wins. Returns "unknown" otherwise.
    """
    if "function" in code and "=>" in code:
        return "javascript"
    if "def " in code and ":" in code:
        return "python"
    if "public class" in code or "void main" in code:
        return "java"
    if "#include" in code or "using namespace" in code:
        return "cpp"
    if "func " in code and "package" in code:
        return "go"
    if "<?php" in code:
        return "php"
    return UNKNOWN_LANGUAGE


def language_from_path(file_path: Path) -> Optional[str]:
    """Detect language from file extension."""
    return EXTENSION_MAP.get(file_path.suffix.lower())


def map_language_id(language_id: str) -> str:
    """Map an editor language id to the tag stored in the vault."""
    return EDITOR_LANGUAGE_MAP.get(language_id, language_id)
