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
Data models for code-vault.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any
import hashlib


class SnippetValidationError(ValueError):
    """A snippet is missing a required field."""


@dataclass
class Snippet:
    """A titled code snippet stored in the vault."""

    id: str                          # Opaque, assigned by the store
    title: str
    code: str                        # The comparison subject
    language: str                    # Free-form tag
    description: str = ""
    tags: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None  # None until first edit

    @property
    def content_hash(self) -> str:
        """SHA-256 of the raw code, used to key token caches."""
        return hashlib.sha256(self.code.encode("utf-8")).hexdigest()

    @property
    def line_count(self) -> int:
        """Number of lines in the code body."""
        return len(self.code.split("\n"))

    def preview(self, max_chars: int = 60) -> str:
        """Short preview of the content."""
        first_line = self.code.strip().split('\n')[0].strip()
        if len(first_line) > max_chars:
            return first_line[:max_chars-3] + "..."
        return first_line

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used by the vault clients."""
        return {
            "id": self.id,
            "title": self.title,
            "code": self.code,
            "language": self.language,
            "description": self.description,
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


def validate_snippet_fields(title: Optional[str], code: Optional[str], language: Optional[str]):
    """
    Check the fields every persisted snippet must carry.

    Raises:
        SnippetValidationError: If title, code or language is empty
    """
    missing = [
        name for name, value in (("title", title), ("code", code), ("language", language))
        if not value or not value.strip()
    ]
    if missing:
        raise SnippetValidationError(
            f"Title, code, and language are required (missing: {', '.join(missing)})"
        )


@dataclass
class Suggestion:
    """A stored snippet ranked against a query."""

    snippet: Snippet
    confidence: float       # Jaccard similarity, 0.0 - 1.0
    reason: str             # Banded label
    context: str            # Overlap summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snippet": self.snippet.to_dict(),
            "reason": self.reason,
            "confidence": self.confidence,
            "context": self.context,
        }


@dataclass
class SnippetCluster:
    """A group of related snippets."""

    id: int
    snippets: List[Snippet]
    similarity_score: float           # Average pairwise similarity
    centroid_idx: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.snippets)

    @property
    def languages(self) -> List[str]:
        """Distinct languages, in first-seen order."""
        return list(dict.fromkeys(s.language for s in self.snippets))

    @property
    def representative(self) -> Snippet:
        """Most representative snippet (closest to the others)."""
        if self.centroid_idx is not None:
            return self.snippets[self.centroid_idx]
        return self.snippets[0]

    def total_lines(self) -> int:
        return sum(s.line_count for s in self.snippets)


@dataclass
class CaptureResult:
    """Outcome of a capture attempt."""

    status: str                       # "saved", "duplicate", "recent", "too_short", "inactive"
    snippet: Optional[Snippet] = None
    detail: str = ""

    @property
    def saved(self) -> bool:
        return self.status == "saved"
