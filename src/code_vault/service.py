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
Vault service - the request boundary around the similarity core.

Validates requests, fetches the corpus from the store, and shapes
responses. Owns no state of its own; the VaultState passed in carries the
caches and the recently processed window.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from .config import VaultConfig
from .dedup import DuplicateGuard
from .language import detect_language
from .models import CaptureResult, Snippet, SnippetCluster, Suggestion
from .ranker import rank
from .state import VaultState
from .store import SnippetStore

logger = logging.getLogger(__name__)


class InvalidRequestError(ValueError):
    """A request is missing required input."""


class VaultService:
    """Snippet CRUD, analysis and server-side capture over one store."""

    def __init__(
        self,
        store: SnippetStore,
        state: Optional[VaultState] = None,
        config: Optional[VaultConfig] = None,
    ):
        self.store = store
        self.config = config or VaultConfig()
        self.state = state if state is not None else VaultState(recent_ttl=self.config.recent_ttl)
        self.guard = DuplicateGuard(
            recent=self.state.recent,
            threshold=self.config.duplicate_threshold,
        )

    def suggest(self, code: str) -> List[Suggestion]:
        """Rank stored snippets against code."""
        return self._rank(code, self.store.all())

    def _rank(self, code: str, snippets: List[Snippet]) -> List[Suggestion]:
        return rank(
            code,
            snippets,
            threshold=self.config.suggestion_threshold,
            max_results=self.config.max_suggestions,
            very_similar=self.config.very_similar_threshold,
            similar=self.config.similar_threshold,
            token_lookup=self.state.tokens.tokens_for,
        )

    def analyze(self, code: Optional[str], language: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the analysis response for a piece of code.

        The declared language is accepted for symmetry with capture requests
        but the reported language is always the heuristic guess.

        Raises:
            InvalidRequestError: If code is empty
        """
        if not code or not code.strip():
            raise InvalidRequestError("Code is required")

        snippets = self.store.all()
        suggestions = self._rank(code, snippets)

        return {
            "suggestions": [s.to_dict() for s in suggestions],
            "analysis": {
                "totalSnippets": len(snippets),
                "relevantMatches": len(suggestions),
                "language": detect_language(code),
            },
        }

    def add(
        self,
        title: str,
        code: str,
        language: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Snippet:
        snippet = self.store.create(title, code, language, description, tags)
        self.state.add_snippet(snippet)
        return snippet

    def update(
        self,
        snippet_id: str,
        title: str,
        code: str,
        language: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Snippet:
        snippet = self.store.update(snippet_id, title, code, language, description, tags)
        self.state.update_snippet(snippet)
        return snippet

    def delete(self, snippet_id: str):
        self.store.delete(snippet_id)
        self.state.remove_snippet(snippet_id)

    def capture(
        self,
        code: Optional[str],
        language: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> CaptureResult:
        """
        Persist code unless the vault already holds it.

        The duplicate check runs against the full stored corpus. A capture
        that passes is remembered in the recently processed window before it
        is saved; if the save fails the fingerprint is forgotten again.

        Raises:
            InvalidRequestError: If code is empty
        """
        if not code or not code.strip():
            raise InvalidRequestError("Code is required")

        match = self.guard.find_duplicate(code, self.store.all())
        if match is not None:
            logger.info(f"Skipped capture: {match.describe()}")
            status = "recent" if match.stage == "recent" else "duplicate"
            return CaptureResult(status=status, snippet=match.snippet, detail=match.describe())

        language = language or detect_language(code)
        self.guard.remember(code)
        try:
            snippet = self.add(
                title=title or f"Code from {datetime.now():%Y-%m-%d %H:%M:%S}",
                code=code,
                language=language,
                description=description,
                tags=tags if tags is not None else list(self.config.capture_tags),
            )
        except Exception:
            self.guard.forget(code)
            raise

        return CaptureResult(status="saved", snippet=snippet)

    def clusters(self) -> List[SnippetCluster]:
        """Group related stored snippets."""
        from .clusterer import cluster_snippets

        return cluster_snippets(
            self.store.all(),
            threshold=self.config.cluster_threshold,
            min_cluster_size=self.config.min_cluster,
            token_lookup=self.state.tokens.tokens_for,
        )
