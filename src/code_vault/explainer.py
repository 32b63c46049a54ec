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
Human-readable context for why two snippets matched.
"""

from typing import Iterable, List

FALLBACK_CONTEXT = "Structural similarity detected"


def common_tokens(snippet_tokens: Iterable[str], query_tokens: Iterable[str]) -> List[str]:
    """Tokens present in both, de-duplicated, in snippet order."""
    query_set = set(query_tokens)
    return [t for t in dict.fromkeys(snippet_tokens) if t in query_set]


def explain(
    snippet_tokens: Iterable[str],
    query_tokens: Iterable[str],
    max_terms: int = 3,
) -> str:
    """
    Summarize the token overlap between a stored snippet and a query.

    Args:
        snippet_tokens: Tokens of the stored snippet (order matters)
        query_tokens: Tokens of the query code
        max_terms: How many shared tokens to list

    Returns:
        "Common patterns: a, b, c" or the structural fallback
    """
    common = common_tokens(snippet_tokens, query_tokens)
    if common:
        return f"Common patterns: {', '.join(common[:max_terms])}"
    return FALLBACK_CONTEXT
