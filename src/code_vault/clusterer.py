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
Snippet clusterer - groups related snippets in the vault.

Uses Agglomerative Clustering over a precomputed Jaccard distance matrix
for deterministic grouping.
"""

from typing import Callable, Dict, List, Optional
import logging

import numpy as np
from sklearn.cluster import AgglomerativeClustering

from .models import Snippet, SnippetCluster
from .similarity import similarity_matrix
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def cluster_snippets(
    snippets: List[Snippet],
    threshold: float = 0.5,
    min_cluster_size: int = 2,
    token_lookup: Optional[Callable[[Snippet], List[str]]] = None,
) -> List[SnippetCluster]:
    """
    Cluster snippets by token similarity.

    Args:
        snippets: Snippets to group
        threshold: Similarity threshold (0.0-1.0)
        min_cluster_size: Minimum members per cluster
        token_lookup: Returns tokens for a snippet (defaults to tokenize)

    Returns:
        List of SnippetCluster objects, sorted by similarity (highest first)
    """
    lookup = token_lookup or (lambda snippet: tokenize(snippet.code))

    # Snippets with no tokens can't be related to anything
    candidates = [s for s in snippets if lookup(s)]
    if len(candidates) < 2:
        return []

    similarities = similarity_matrix([lookup(s) for s in candidates])
    distances = 1.0 - similarities
    np.fill_diagonal(distances, 0.0)

    clustering = AgglomerativeClustering(
        n_clusters=None,
        distance_threshold=1.0 - threshold,
        metric="precomputed",
        linkage="average",
    )
    labels = clustering.fit_predict(distances)

    cluster_map: Dict[int, List[int]] = {}
    for idx, label in enumerate(labels):
        cluster_map.setdefault(int(label), []).append(idx)

    cluster_map = {k: v for k, v in cluster_map.items() if len(v) >= min_cluster_size}

    logger.debug(f"Raw clusters: {len(set(labels))}, filtered: {len(cluster_map)}")

    clusters = []
    for label, indices in cluster_map.items():
        sub_matrix = similarities[np.ix_(indices, indices)]
        clusters.append(SnippetCluster(
            id=label,
            snippets=[candidates[i] for i in indices],
            similarity_score=_mean_pairwise(sub_matrix),
            centroid_idx=_find_centroid_idx(sub_matrix),
        ))

    # Most similar first, ties by size
    clusters.sort(key=lambda c: (c.similarity_score, c.size), reverse=True)

    for i, cluster in enumerate(clusters):
        cluster.id = i + 1

    return clusters


def _mean_pairwise(sub_matrix: np.ndarray) -> float:
    """Average similarity over distinct pairs."""
    n = len(sub_matrix)
    if n < 2:
        return 1.0
    upper_tri = sub_matrix[np.triu_indices(n, k=1)]
    return float(np.mean(upper_tri))


def _find_centroid_idx(sub_matrix: np.ndarray) -> int:
    """Index of the member with the highest total similarity to the others."""
    if len(sub_matrix) == 1:
        return 0
    totals = sub_matrix.sum(axis=1) - np.diag(sub_matrix)
    return int(np.argmax(totals))
