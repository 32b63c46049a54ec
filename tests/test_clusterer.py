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

import pytest

from code_vault.clusterer import cluster_snippets


class TestClusterSnippets:
    def test_pairs_related_snippets(self, make_snippet) -> None:
        a = make_snippet("alpha beta gamma delta")
        b = make_snippet("alpha beta gamma epsilon")
        c = make_snippet("zulu yankee xray whiskey")

        clusters = cluster_snippets([a, b, c])

        assert len(clusters) == 1
        assert clusters[0].snippets == [a, b]
        assert clusters[0].similarity_score == pytest.approx(0.6)

    def test_threshold_controls_grouping(self, make_snippet) -> None:
        snippets = [make_snippet("alpha beta gamma delta"), make_snippet("alpha beta gamma epsilon")]
        assert cluster_snippets(snippets, threshold=0.7) == []

    def test_sorted_by_similarity_and_renumbered(self, make_snippet) -> None:
        snippets = [
            make_snippet("alpha beta gamma delta"),
            make_snippet("alpha beta gamma epsilon"),
            make_snippet("fetch json response"),
            make_snippet("fetch json response"),
        ]

        clusters = cluster_snippets(snippets)

        assert [c.id for c in clusters] == [1, 2]
        assert clusters[0].similarity_score == 1.0
        assert clusters[1].similarity_score == pytest.approx(0.6)

    def test_min_cluster_size(self, make_snippet) -> None:
        snippets = [make_snippet("alpha beta gamma"), make_snippet("alpha beta gamma")]
        assert cluster_snippets(snippets, min_cluster_size=3) == []

    def test_tokenless_snippets_are_dropped(self, make_snippet) -> None:
        assert cluster_snippets([make_snippet("a b"), make_snippet("alpha beta")]) == []

    def test_fewer_than_two_snippets(self, make_snippet) -> None:
        assert cluster_snippets([]) == []
        assert cluster_snippets([make_snippet("alpha beta")]) == []

    def test_representative_is_most_connected(self, make_snippet) -> None:
        hub = make_snippet("alpha beta gamma delta", title="Hub")
        left = make_snippet("alpha beta gamma", title="Left")
        right = make_snippet("beta gamma delta", title="Right")

        clusters = cluster_snippets([left, hub, right], threshold=0.4)

        assert len(clusters) == 1
        assert clusters[0].representative.title == "Hub"
