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
Duplicate guard for captured code.

Two stages, stopping at the first hit:

1. exact   - normalized fingerprint matches a recently processed capture
             or a stored snippet
2. near    - normalized line-set similarity to a stored snippet exceeds
             the duplicate threshold

The recently processed set is a short local window against rapid-fire
resubmission. The stored corpus is the authoritative check.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence
import logging
import threading
import time

from .models import Snippet
from .tokenizer import fingerprint, normalized_lines
from .similarity import jaccard

logger = logging.getLogger(__name__)


DEFAULT_TTL = 60.0
DEFAULT_DUPLICATE_THRESHOLD = 0.8
MIN_LINE_LENGTH = 6


class RecentlyProcessed:
    """
    Thread-safe set of fingerprints that expire after a fixed TTL.

    Expired entries are dropped lazily on access. There is no capacity
    bound beyond expiry.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._expiry: Dict[str, float] = {}
        self._lock = threading.Lock()

    def add(self, key: str):
        with self._lock:
            self._expiry[key] = self._clock() + self.ttl

    def discard(self, key: str):
        with self._lock:
            self._expiry.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            deadline = self._expiry.get(key)
            if deadline is None:
                return False
            if deadline <= self._clock():
                del self._expiry[key]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._expiry)

    def clear(self):
        with self._lock:
            self._expiry.clear()

    def _purge(self):
        now = self._clock()
        for key in [k for k, deadline in self._expiry.items() if deadline <= now]:
            del self._expiry[key]


@dataclass
class DuplicateMatch:
    """Why a candidate was judged a duplicate."""

    stage: str                         # "recent", "exact" or "near"
    snippet: Optional[Snippet] = None  # None for "recent"
    score: float = 1.0

    def describe(self) -> str:
        if self.stage == "recent":
            return "recently processed"
        if self.stage == "exact":
            return f"exact match with '{self.snippet.title}'"
        return f"{self.score:.0%} similar to '{self.snippet.title}'"


class DuplicateGuard:
    """Decides whether candidate code is already in the vault."""

    def __init__(
        self,
        recent: Optional[RecentlyProcessed] = None,
        threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
        min_line_length: int = MIN_LINE_LENGTH,
    ):
        self.recent = recent if recent is not None else RecentlyProcessed()
        self.threshold = threshold
        self.min_line_length = min_line_length

    def find_duplicate(self, code: str, corpus: Sequence[Snippet]) -> Optional[DuplicateMatch]:
        """
        Run both stages without touching the recently processed set.

        Returns:
            The first match found, or None
        """
        code_print = fingerprint(code)

        if code_print in self.recent:
            logger.debug("Duplicate: fingerprint recently processed")
            return DuplicateMatch(stage="recent")

        for snippet in corpus:
            if fingerprint(snippet.code) == code_print:
                logger.debug(f"Duplicate: exact match with {snippet.id}")
                return DuplicateMatch(stage="exact", snippet=snippet)

        candidate_lines = normalized_lines(code, self.min_line_length)
        for snippet in corpus:
            score = jaccard(candidate_lines, normalized_lines(snippet.code, self.min_line_length))
            if score > self.threshold:
                logger.debug(f"Duplicate: {score:.0%} line overlap with {snippet.id}")
                return DuplicateMatch(stage="near", snippet=snippet, score=score)

        return None

    def is_duplicate(
        self,
        code: str,
        corpus: Sequence[Snippet],
        record: bool = True,
    ) -> bool:
        """
        Duplicate verdict for a capture about to be persisted.

        On a negative verdict the fingerprint is remembered (when record is
        True), so a resubmission within the TTL is caught even before the
        corpus contains the first copy.
        """
        if self.find_duplicate(code, corpus) is not None:
            return True
        if record:
            self.remember(code)
        return False

    def remember(self, code: str):
        """Add the code's fingerprint to the recently processed set."""
        self.recent.add(fingerprint(code))

    def forget(self, code: str):
        """Drop the code's fingerprint, e.g. when the save it guarded failed."""
        self.recent.discard(fingerprint(code))


def is_duplicate(
    candidate_code: str,
    corpus: Sequence[Snippet],
    recent: RecentlyProcessed,
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
) -> bool:
    """Functional form of DuplicateGuard.is_duplicate."""
    return DuplicateGuard(recent=recent, threshold=threshold).is_duplicate(candidate_code, corpus)
