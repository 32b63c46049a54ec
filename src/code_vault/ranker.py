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
Suggestion ranker - scores stored snippets against a query.

Every snippet in the corpus is compared with the query by token Jaccard
similarity. Matches above the inclusion threshold are sorted (stable, so
ties keep corpus order), truncated, labeled and annotated.
"""

from typing import Callable, List, Optional, Sequence

from .models import Snippet, Suggestion
from .tokenizer import tokenize
from .similarity import jaccard
from .explainer import explain


DEFAULT_THRESHOLD = 0.3
DEFAULT_MAX_RESULTS = 5
VERY_SIMILAR_THRESHOLD = 0.7
SIMILAR_THRESHOLD = 0.5

REASON_VERY_SIMILAR = "Very similar implementation"
REASON_SIMILAR = "Similar logic and structure"
REASON_RELATED = "Related code patterns"
REASON_WEAK = "Some common elements"


def similarity_reason(
    confidence: float,
    very_similar: float = VERY_SIMILAR_THRESHOLD,
    similar: float = SIMILAR_THRESHOLD,
    related: float = DEFAULT_THRESHOLD,
) -> str:
    """
    Band a confidence score into a label.

    With the default inclusion filter the last band is never reached by
    rank(); it exists for callers that label unfiltered scores.
    """
    if confidence > very_similar:
        return REASON_VERY_SIMILAR
    if confidence > similar:
        return REASON_SIMILAR
    if confidence > related:
        return REASON_RELATED
    return REASON_WEAK


def rank(
    query_code: str,
    corpus: Sequence[Snippet],
    threshold: float = DEFAULT_THRESHOLD,
    max_results: int = DEFAULT_MAX_RESULTS,
    very_similar: float = VERY_SIMILAR_THRESHOLD,
    similar: float = SIMILAR_THRESHOLD,
    token_lookup: Optional[Callable[[Snippet], List[str]]] = None,
) -> List[Suggestion]:
    """
    Rank corpus snippets by similarity to the query code.

    Args:
        query_code: Code to find matches for
        corpus: Stored snippets, in the order ties should keep
        threshold: Scores must be strictly greater than this
        max_results: Maximum suggestions returned
        very_similar: Band boundary for the strongest label
        similar: Band boundary for the middle label
        token_lookup: Returns tokens for a snippet (e.g. a cache). Must give
            the same result as tokenize(snippet.code).

    Returns:
        Suggestions sorted by descending confidence
    """
    query_tokens = tokenize(query_code)
    if not query_tokens:
        return []

    lookup = token_lookup or (lambda snippet: tokenize(snippet.code))

    scored = []
    for snippet in corpus:
        snippet_tokens = lookup(snippet)
        confidence = jaccard(query_tokens, snippet_tokens)
        if confidence > threshold:
            scored.append((snippet, snippet_tokens, confidence))

    # sorted() is stable, ties keep corpus order
    scored = sorted(scored, key=lambda item: item[2], reverse=True)[:max_results]

    return [
        Suggestion(
            snippet=snippet,
            confidence=confidence,
            reason=similarity_reason(confidence, very_similar, similar, threshold),
            context=explain(snippet_tokens, query_tokens),
        )
        for snippet, snippet_tokens, confidence in scored
    ]
