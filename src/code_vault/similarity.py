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
Similarity scoring.

Jaccard similarity over token sets and over normalized line sets. Scores
are symmetric and bounded to [0.0, 1.0]; they are not a distance metric,
so do not chain them transitively.
"""

from typing import Iterable, List, Sequence
import numpy as np

from .tokenizer import tokenize, normalized_lines


def jaccard(tokens_a: Iterable[str], tokens_b: Iterable[str]) -> float:
    """
    Jaccard similarity |A ∩ B| / |A ∪ B| of two token collections.

    Repeats within one collection carry no extra weight. Two empty inputs
    score 0.0.
    """
    set_a = set(tokens_a)
    set_b = set(tokens_b)

    union = set_a | set_b
    if not union:
        return 0.0

    return len(set_a & set_b) / len(union)


def token_similarity(code_a: str, code_b: str) -> float:
    """Tokenize both code strings and score them."""
    return jaccard(tokenize(code_a), tokenize(code_b))


def line_similarity(code_a: str, code_b: str, min_line_length: int = 6) -> float:
    """
    Jaccard similarity of the normalized line sets of two code strings.

    Lines shorter than min_line_length after normalization are ignored.
    """
    return jaccard(
        normalized_lines(code_a, min_line_length),
        normalized_lines(code_b, min_line_length),
    )


def similarity_matrix(token_sets: Sequence[Iterable[str]]) -> np.ndarray:
    """
    Pairwise Jaccard similarity matrix for a list of token collections.

    Builds a binary incidence matrix so intersections come from one matrix
    product. Entries match jaccard() exactly; the diagonal is 1.0 for
    non-empty sets and 0.0 for empty ones.

    Returns:
        Array of shape (n, n), dtype float64
    """
    sets: List[set] = [set(tokens) for tokens in token_sets]
    n = len(sets)
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)

    vocabulary = {token: i for i, token in enumerate(sorted(set().union(*sets)))}
    incidence = np.zeros((n, len(vocabulary)), dtype=np.float64)
    for row, tokens in enumerate(sets):
        for token in tokens:
            incidence[row, vocabulary[token]] = 1.0

    intersection = incidence @ incidence.T
    sizes = incidence.sum(axis=1)
    union = sizes[:, None] + sizes[None, :] - intersection

    # Empty union means both sets are empty, which scores 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        matrix = np.where(union > 0, intersection / np.where(union > 0, union, 1.0), 0.0)

    return matrix
