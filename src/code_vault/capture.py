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
Capture client - pushes code from an editor into the vault.

The client keeps its own snippet cache and recently processed window so it
can pre-check captures without a round trip. The vault behind it is reached
through three callables:

    load_corpus()   -> list of Snippet          (authoritative duplicate check)
    save(**fields)  -> Snippet                  (persist a capture)
    suggest(code)   -> list of Suggestion       (server-side ranking)

Any of them may raise StoreUnavailableError. The client then falls back to
its cache for the duplicate check and to local ranking for suggestions.
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from .config import VaultConfig
from .dedup import DuplicateGuard, DuplicateMatch
from .models import CaptureResult, Snippet, Suggestion
from .language import map_language_id
from .ranker import rank
from .state import VaultState
from .store import StoreUnavailableError
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


MIN_SHARED_TOKENS = 3


class CaptureClient:
    """Editor-side capture with local duplicate suppression."""

    def __init__(
        self,
        load_corpus: Callable[[], List[Snippet]],
        save: Callable[..., Snippet],
        suggest: Optional[Callable[[str], List[Suggestion]]] = None,
        state: Optional[VaultState] = None,
        config: Optional[VaultConfig] = None,
    ):
        self.config = config or VaultConfig()
        self.state = state if state is not None else VaultState(recent_ttl=self.config.recent_ttl)
        self.guard = DuplicateGuard(recent=self.state.recent, threshold=self.config.duplicate_threshold)
        self._load_corpus = load_corpus
        self._save = save
        self._suggest = suggest

    def refresh(self) -> bool:
        """Reload the snippet cache. Returns False if the vault is unreachable."""
        try:
            self.state.replace_snippets(self._load_corpus())
        except StoreUnavailableError as e:
            logger.warning(f"Failed to load existing snippets: {e}")
            return False
        logger.debug(f"Loaded {len(self.state.snippets)} existing snippets into cache")
        return True

    def find_duplicate(self, code: str) -> Optional[DuplicateMatch]:
        """
        Check whether code is already in the vault.

        Order: recently processed window, stored corpus (cached copy if the
        vault can't be reached), then server-side ranking.
        """
        if not self.refresh():
            logger.info("Vault unreachable, checking against cached snippets only")

        match = self.guard.find_duplicate(code, self.state.snippets)
        if match is not None:
            return match

        if self._suggest is not None:
            try:
                suggestions = self._suggest(code)
            except StoreUnavailableError as e:
                logger.debug(f"Server similarity check failed, using cache only: {e}")
            else:
                for suggestion in suggestions:
                    if suggestion.confidence > self.config.duplicate_threshold:
                        return DuplicateMatch(
                            stage="near",
                            snippet=suggestion.snippet,
                            score=suggestion.confidence,
                        )

        return None

    def capture(
        self,
        code: str,
        language_id: str,
        title: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> CaptureResult:
        """
        Save code unless it duplicates something already captured.

        Raises:
            StoreUnavailableError: If the save itself fails
            SnippetValidationError: If the saver rejects the fields
        """
        if not self.state.active:
            return CaptureResult(status="inactive", detail="capture client is closed")

        match = self.find_duplicate(code)
        if match is not None:
            logger.info(f"Skip capture - {match.describe()}")
            status = "recent" if match.stage == "recent" else "duplicate"
            return CaptureResult(status=status, snippet=match.snippet, detail=match.describe())

        self.guard.remember(code)
        try:
            snippet = self._save(
                title=title,
                code=code,
                language=map_language_id(language_id),
                description=description or "",
                tags=tags if tags is not None else list(self.config.capture_tags),
            )
        except Exception:
            # Nothing was stored, so a corrected resubmission must not hit the window
            self.guard.forget(code)
            raise

        self.state.add_snippet(snippet)
        logger.info(f"Captured {snippet.title!r} as {snippet.id}")
        return CaptureResult(status="saved", snippet=snippet)

    def capture_selection(self, code: str, language_id: str, file_name: str) -> CaptureResult:
        """Capture a selection; short selections are ignored."""
        if len(code) <= self.config.min_selection_chars:
            return CaptureResult(status="too_short", detail=f"{len(code)} characters")
        return self.capture(code, language_id, title=f"Selection - {file_name}")

    def capture_file(self, code: str, language_id: str, file_name: str) -> CaptureResult:
        """Capture a whole file; small files are ignored."""
        if len(code) <= self.config.min_file_chars:
            return CaptureResult(status="too_short", detail=f"{len(code)} characters")
        return self.capture(code, language_id, title=f"File: {file_name}")

    def suggestions(self, code: str) -> List[Suggestion]:
        """Server-side ranking, or local ranking over the cache if that fails."""
        if self._suggest is not None:
            try:
                return self._suggest(code)
            except StoreUnavailableError as e:
                logger.warning(f"Server ranking failed, ranking locally: {e}")

        return rank(
            code,
            self.state.snippets,
            threshold=self.config.suggestion_threshold,
            max_results=self.config.max_suggestions,
            very_similar=self.config.very_similar_threshold,
            similar=self.config.similar_threshold,
            token_lookup=self.state.tokens.tokens_for,
        )

    def relevant_snippets(self, code: str, language_id: str) -> List[Snippet]:
        """Cached snippets in the same language or sharing enough tokens with code."""
        language = map_language_id(language_id)
        return [
            s for s in self.state.snippets
            if s.language == language or shares_tokens(s.code, code)
        ]

    def status(self) -> Dict[str, Any]:
        reachable = self.refresh()
        return {
            "active": self.state.active,
            "reachable": reachable,
            "cached_snippets": len(self.state.snippets),
            "recently_processed": len(self.state.recent),
        }

    def close(self):
        self.state.close()


def shares_tokens(code_a: str, code_b: str, min_shared: int = MIN_SHARED_TOKENS) -> bool:
    """
    Loose relatedness test: more than min_shared tokens of code_a occur in code_b.

    Counts repeats in code_a, unlike jaccard().
    """
    tokens_b = set(tokenize(code_b))
    shared = [t for t in tokenize(code_a) if t in tokens_b]
    return len(shared) > min_shared
