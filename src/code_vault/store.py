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
Snippet storage for code-vault.

SQLite-backed CRUD store. Tags are kept as a JSON array, timestamps as
ISO-8601 text. Any sqlite3 failure surfaces as StoreUnavailableError so
callers can fall back to cached data.
"""

import contextlib
import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .models import Snippet, validate_snippet_fields

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS snippets (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    code TEXT NOT NULL,
    language TEXT NOT NULL,
    description TEXT,
    tags TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_language ON snippets(language);
CREATE INDEX IF NOT EXISTS idx_created_at ON snippets(created_at);
"""

SORT_COLUMNS = {"created_at", "updated_at", "title", "language"}

SAMPLE_SNIPPETS = [
    {
        "title": "React Hook Form Setup",
        "code": "const { register, handleSubmit, formState: { errors } } = useForm();\n"
                "const onSubmit = data => console.log(data);",
        "language": "typescript",
        "description": "Basic setup for React Hook Form with TypeScript",
        "tags": ["react", "form", "hook"],
    },
    {
        "title": "API Fetch Wrapper",
        "code": "async function apiFetch(url, options = {}) {\n"
                "  const response = await fetch(url, {\n"
                "    headers: { 'Content-Type': 'application/json' },\n"
                "    ...options\n"
                "  });\n"
                "  return response.json();\n"
                "}",
        "language": "javascript",
        "description": "Generic fetch wrapper for API calls",
        "tags": ["api", "utility", "http"],
    },
    {
        "title": "Express Server Setup",
        "code": "const express = require('express');\n"
                "const app = express();\n"
                "app.use(express.json());\n"
                "app.listen(3000, () => console.log('Server running'));",
        "language": "javascript",
        "description": "Basic Express.js server setup",
        "tags": ["express", "server", "nodejs"],
    },
    {
        "title": "Python Flask API",
        "code": "from flask import Flask, jsonify\n"
                "app = Flask(__name__)\n"
                "\n"
                "@app.route('/api/data')\n"
                "def get_data():\n"
                "    return jsonify({\"message\": \"Hello World\"})\n"
                "\n"
                "if __name__ == '__main__':\n"
                "    app.run(debug=True)",
        "language": "python",
        "description": "Simple Flask API endpoint",
        "tags": ["python", "flask", "api"],
    },
]


class StoreUnavailableError(RuntimeError):
    """The snippet database could not be opened or queried."""


class SnippetNotFoundError(LookupError):
    """No snippet has the requested id."""

    def __init__(self, snippet_id: str):
        super().__init__(f"Snippet not found: {snippet_id}")
        self.snippet_id = snippet_id


class SnippetStore:
    """
    CRUD access to the snippets table.

    Args:
        db_path: Database file, or ":memory:"
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._lock = threading.Lock()
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
                self.db_path = str(Path(self.db_path).expanduser())
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open snippet database {self.db_path}: {e}") from e

    @contextlib.contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            try:
                cursor = self._conn.cursor()
                yield cursor
                self._conn.commit()
            except sqlite3.Error as e:
                # rollback fails too once the connection is closed
                with contextlib.suppress(sqlite3.Error):
                    self._conn.rollback()
                raise StoreUnavailableError(f"Snippet database error: {e}") from e

    def close(self):
        self._conn.close()

    def __enter__(self) -> "SnippetStore":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def create(
        self,
        title: str,
        code: str,
        language: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Snippet:
        """
        Insert a new snippet and return it with its assigned id.

        Raises:
            SnippetValidationError: If title, code or language is empty
        """
        validate_snippet_fields(title, code, language)

        snippet = Snippet(
            id=uuid.uuid4().hex,
            title=title,
            code=code,
            language=language,
            description=description or "",
            tags=_dedupe(tags or []),
            created_at=datetime.now(),
        )

        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO snippets (id, title, code, language, description, tags, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, NULL)
                """,
                (snippet.id, snippet.title, snippet.code, snippet.language,
                 snippet.description, json.dumps(snippet.tags), snippet.created_at.isoformat())
            )

        logger.info(f"Created snippet {snippet.id} ({snippet.title!r})")
        return snippet

    def get(self, snippet_id: str) -> Snippet:
        """
        Fetch one snippet.

        Raises:
            SnippetNotFoundError: If no snippet has this id
        """
        with self._cursor() as cur:
            row = cur.execute("SELECT * FROM snippets WHERE id = ?", (snippet_id,)).fetchone()

        if row is None:
            raise SnippetNotFoundError(snippet_id)
        return _row_to_snippet(row)

    def update(
        self,
        snippet_id: str,
        title: str,
        code: str,
        language: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Snippet:
        """
        Replace every mutable field of a snippet and stamp updated_at.

        Raises:
            SnippetValidationError: If title, code or language is empty
            SnippetNotFoundError: If no snippet has this id
        """
        validate_snippet_fields(title, code, language)
        updated_at = datetime.now()

        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE snippets
                SET title = ?, code = ?, language = ?, description = ?, tags = ?, updated_at = ?
                WHERE id = ?
                """,
                (title, code, language, description or "", json.dumps(_dedupe(tags or [])),
                 updated_at.isoformat(), snippet_id)
            )
            matched = cur.rowcount

        if matched == 0:
            raise SnippetNotFoundError(snippet_id)

        logger.info(f"Updated snippet {snippet_id}")
        return self.get(snippet_id)

    def delete(self, snippet_id: str):
        """
        Remove a snippet.

        Raises:
            SnippetNotFoundError: If no snippet has this id
        """
        with self._cursor() as cur:
            cur.execute("DELETE FROM snippets WHERE id = ?", (snippet_id,))
            deleted = cur.rowcount

        if deleted == 0:
            raise SnippetNotFoundError(snippet_id)
        logger.info(f"Deleted snippet {snippet_id}")

    def list(
        self,
        search: Optional[str] = None,
        language: Optional[str] = None,
        tag: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> List[Snippet]:
        """
        List snippets with optional filters.

        Args:
            search: Case-insensitive substring of title, code, description or a tag
            language: Exact language, "all" or None for any
            tag: Exact tag, "all" or None for any
            sort_by: One of created_at, updated_at, title, language
            sort_order: "asc" or "desc"

        Raises:
            ValueError: On an unknown sort column or order
        """
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"Cannot sort by {sort_by!r}; choose from {', '.join(sorted(SORT_COLUMNS))}")
        if sort_order not in ("asc", "desc"):
            raise ValueError(f"Sort order must be 'asc' or 'desc', not {sort_order!r}")

        clauses = []
        params: list = []
        if language and language != "all":
            clauses.append("language = ?")
            params.append(language)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = sort_order.upper()
        sql = f"SELECT * FROM snippets {where} ORDER BY {sort_by} {direction}, rowid {direction}"

        with self._cursor() as cur:
            rows = cur.execute(sql, params).fetchall()

        snippets = [_row_to_snippet(row) for row in rows]

        if search:
            needle = search.lower()
            snippets = [s for s in snippets if _matches_search(s, needle)]
        if tag and tag != "all":
            snippets = [s for s in snippets if tag in s.tags]

        return snippets

    def all(self) -> List[Snippet]:
        """Every snippet, newest first. This is the comparison corpus."""
        return self.list()

    def search(self, query: str) -> List[Snippet]:
        """Snippets matching a free-text query, newest first."""
        if not query:
            raise ValueError("Search query is required")
        return self.list(search=query)

    def count(self) -> int:
        with self._cursor() as cur:
            return cur.execute("SELECT COUNT(*) FROM snippets").fetchone()[0]

    def languages(self) -> List[str]:
        """Distinct languages, sorted."""
        with self._cursor() as cur:
            rows = cur.execute("SELECT DISTINCT language FROM snippets ORDER BY language").fetchall()
        return [row[0] for row in rows]

    def tags(self) -> List[str]:
        """Distinct tags across all snippets, in first-seen order (oldest first)."""
        with self._cursor() as cur:
            rows = cur.execute("SELECT tags FROM snippets ORDER BY created_at, rowid").fetchall()

        seen = {}
        for row in rows:
            for tag in json.loads(row[0] or "[]"):
                seen.setdefault(tag, None)
        return list(seen)

    def seed_samples(self) -> int:
        """Insert the sample snippets if the store is empty. Returns count inserted."""
        if self.count() > 0:
            return 0
        for sample in SAMPLE_SNIPPETS:
            self.create(**sample)
        logger.info(f"Inserted {len(SAMPLE_SNIPPETS)} sample snippets")
        return len(SAMPLE_SNIPPETS)


def _row_to_snippet(row: sqlite3.Row) -> Snippet:
    return Snippet(
        id=row["id"],
        title=row["title"],
        code=row["code"],
        language=row["language"],
        description=row["description"] or "",
        tags=json.loads(row["tags"] or "[]"),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None,
    )


def _matches_search(snippet: Snippet, needle: str) -> bool:
    return (
        needle in snippet.title.lower()
        or needle in snippet.code.lower()
        or needle in snippet.description.lower()
        or any(needle in tag.lower() for tag in snippet.tags)
    )


def _dedupe(tags: List[str]) -> List[str]:
    """Drop repeated tags, keeping first-seen order."""
    return list(dict.fromkeys(tags))
