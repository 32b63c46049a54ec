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
Per-process vault state.

Holds everything that outlives a single call: the recently processed
fingerprints, the cached snippet list and the token cache. One VaultState
is created by the caller and passed to the service and capture client;
close() drops it all.
"""

from typing import Dict, List, Optional, Tuple
import threading

from .models import Snippet
from .tokenizer import tokenize
from .dedup import RecentlyProcessed, DEFAULT_TTL


class TokenCache:
    """
    Token lists per snippet, keyed by (id, content hash).

    An edited snippet gets a new content hash, so stale entries are never
    served even before invalidate() is called.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[str, List[str]]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def tokens_for(self, snippet: Snippet) -> List[str]:
        content_hash = snippet.content_hash
        with self._lock:
            entry = self._entries.get(snippet.id)
            if entry is not None and entry[0] == content_hash:
                self.hits += 1
                return entry[1]
            self.misses += 1

        tokens = tokenize(snippet.code)
        with self._lock:
            self._entries[snippet.id] = (content_hash, tokens)
        return tokens

    def invalidate(self, snippet_id: str):
        with self._lock:
            self._entries.pop(snippet_id, None)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class VaultState:
    """Explicitly owned replacement for module-level caches."""

    def __init__(self, recent_ttl: float = DEFAULT_TTL, recent: Optional[RecentlyProcessed] = None):
        self.recent = recent if recent is not None else RecentlyProcessed(ttl=recent_ttl)
        self.tokens = TokenCache()
        self.active = True
        self._snippets: List[Snippet] = []
        self._lock = threading.Lock()

    @property
    def snippets(self) -> List[Snippet]:
        """Copy of the cached snippet list, newest first."""
        with self._lock:
            return list(self._snippets)

    def replace_snippets(self, snippets: List[Snippet]):
        """
        Swap in a fresh corpus.

        Token entries are keyed by content hash, so unchanged snippets stay cached.
        """
        with self._lock:
            self._snippets = list(snippets)

    def add_snippet(self, snippet: Snippet):
        """Put snippet at the front, replacing any cached copy with the same id."""
        with self._lock:
            self._snippets = [snippet] + [s for s in self._snippets if s.id != snippet.id]

    def update_snippet(self, snippet: Snippet):
        with self._lock:
            self._snippets = [snippet if s.id == snippet.id else s for s in self._snippets]
        self.tokens.invalidate(snippet.id)

    def remove_snippet(self, snippet_id: str):
        with self._lock:
            self._snippets = [s for s in self._snippets if s.id != snippet_id]
        self.tokens.invalidate(snippet_id)

    def close(self):
        """Tear down: deactivate and drop every cache."""
        self.active = False
        self.recent.clear()
        self.tokens.clear()
        with self._lock:
            self._snippets = []

    def __enter__(self) -> "VaultState":
        return self

    def __exit__(self, *exc_info):
        self.close()
