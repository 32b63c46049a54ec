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
Code Vault - Personal code snippet vault with similarity search.

Stores titled snippets, ranks them against new code by token overlap, and
keeps editor captures from piling up duplicates.

No network. Everything lives in one local SQLite file.
"""

__version__ = "0.1.0"

from .models import Snippet, Suggestion, SnippetCluster, CaptureResult
from .ranker import rank
from .dedup import DuplicateGuard, is_duplicate
from .explainer import explain
from .language import detect_language
from .store import SnippetStore
from .service import VaultService
from .config import load_config, find_config_file

__all__ = [
    "__version__",
    "Snippet",
    "Suggestion",
    "SnippetCluster",
    "CaptureResult",
    "rank",
    "DuplicateGuard",
    "is_duplicate",
    "explain",
    "detect_language",
    "SnippetStore",
    "VaultService",
    "load_config",
    "find_config_file",
]
