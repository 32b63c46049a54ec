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
Directory importer - captures source files from a tree into the vault.

Every file goes through the same duplicate guard as an editor capture, so
re-importing a tree is a no-op.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional
import fnmatch
import logging
import os

from .language import language_from_path, EXTENSION_MAP
from .service import VaultService

logger = logging.getLogger(__name__)


# Default patterns to always exclude
DEFAULT_EXCLUDES = [
    "*.git/*",
    "*node_modules/*",
    "*__pycache__/*",
    "*venv/*",
    "*.egg-info/*",
    "*build/*",
    "*dist/*",
    "*.tox/*",
    "*target/*",
    "*.cache/*",
]


@dataclass
class ImportSummary:
    """Counts from one import run."""

    saved: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.saved) + len(self.duplicates) + len(self.skipped)


def import_directory(
    root_path: Path,
    service: VaultService,
    exclude_patterns: Optional[List[str]] = None,
    focus_patterns: Optional[List[str]] = None,
    forced_language: Optional[str] = None,
    min_chars: Optional[int] = None,
    max_files: int = 500,
    tags: Optional[List[str]] = None,
    on_progress: Optional[Callable[[int, int, str], None]] = None,
) -> ImportSummary:
    """
    Capture every matching source file under root_path.

    Args:
        root_path: Root directory to scan
        service: Vault to capture into
        exclude_patterns: Glob patterns to exclude (added to defaults)
        focus_patterns: Only include files matching these patterns
        forced_language: Language tag for every file instead of detecting it
        min_chars: Skip files this size or smaller (default from config)
        max_files: Stop after this many files (safety limit)
        tags: Tags for imported snippets (default: ["imported"])
        on_progress: Called with (current, total, path) after each file

    Returns:
        ImportSummary with relative paths per outcome
    """
    min_chars = service.config.min_file_chars if min_chars is None else min_chars
    tags = tags if tags is not None else ["imported"]

    source_files = _find_source_files(
        root_path=root_path,
        exclude_patterns=DEFAULT_EXCLUDES + (exclude_patterns or []),
        focus_patterns=focus_patterns,
        forced_language=forced_language,
    )[:max_files]

    logger.debug(f"Found {len(source_files)} source files under {root_path}")

    # Read in parallel, capture in order so duplicates resolve deterministically
    with ThreadPoolExecutor(max_workers=os.cpu_count()) as executor:
        contents = list(executor.map(_read_file, source_files))

    summary = ImportSummary()
    for i, (file_path, content) in enumerate(zip(source_files, contents), start=1):
        rel_path = str(file_path.relative_to(root_path))

        if content is None or len(content) <= min_chars or not content.strip():
            summary.skipped.append(rel_path)
        else:
            result = service.capture(
                code=content,
                language=forced_language or language_from_path(file_path),
                title=f"File: {rel_path}",
                tags=tags,
            )
            if result.saved:
                summary.saved.append(rel_path)
            else:
                summary.duplicates.append(rel_path)

        if on_progress:
            on_progress(i, len(source_files), rel_path)

    logger.info(
        f"Imported {len(summary.saved)} files "
        f"({len(summary.duplicates)} duplicates, {len(summary.skipped)} skipped)"
    )
    return summary


def _find_source_files(
    root_path: Path,
    exclude_patterns: List[str],
    focus_patterns: Optional[List[str]],
    forced_language: Optional[str],
) -> List[Path]:
    """Find all source files matching criteria, sorted by path."""
    if forced_language:
        extensions = {ext for ext, lang in EXTENSION_MAP.items() if lang == forced_language.lower()}
    else:
        extensions = set(EXTENSION_MAP)

    source_files = []
    for file_path in sorted(root_path.rglob("*")):
        if not file_path.is_file():
            continue

        if file_path.suffix.lower() not in extensions:
            continue

        rel_path = str(file_path.relative_to(root_path))

        if any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(str(file_path), pat)
               for pat in exclude_patterns):
            continue

        # If focus patterns are given, file must match at least one
        if focus_patterns:
            if not any(fnmatch.fnmatch(rel_path, pat) or fnmatch.fnmatch(file_path.name, pat)
                       for pat in focus_patterns):
                continue

        source_files.append(file_path)

    return source_files


def _read_file(file_path: Path) -> Optional[str]:
    try:
        return file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Failed to read {file_path}: {e}")
        return None
