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

import dataclasses

from code_vault.state import TokenCache, VaultState


class TestTokenCache:
    def test_second_lookup_hits(self, make_snippet) -> None:
        cache = TokenCache()
        snippet = make_snippet("fetch data from api")

        assert cache.tokens_for(snippet) == ["fetch", "data", "from", "api"]
        cache.tokens_for(snippet)
        assert (cache.hits, cache.misses) == (1, 1)

    def test_edited_code_is_retokenized(self, make_snippet) -> None:
        cache = TokenCache()
        snippet = make_snippet("fetch data")
        cache.tokens_for(snippet)

        edited = dataclasses.replace(snippet, code="sort items")
        assert cache.tokens_for(edited) == ["sort", "items"]
        assert cache.misses == 2
        assert len(cache) == 1

    def test_invalidate(self, make_snippet) -> None:
        cache = TokenCache()
        snippet = make_snippet("fetch data")
        cache.tokens_for(snippet)
        cache.invalidate(snippet.id)
        cache.tokens_for(snippet)
        assert cache.misses == 2


class TestVaultState:
    def test_add_prepends(self, make_snippet) -> None:
        state = VaultState()
        first, second = make_snippet("one_code()"), make_snippet("two_code()")
        state.add_snippet(first)
        state.add_snippet(second)
        assert [s.id for s in state.snippets] == [second.id, first.id]

    def test_snippets_is_a_copy(self, make_snippet) -> None:
        state = VaultState()
        state.snippets.append(make_snippet("x_code()"))
        assert state.snippets == []

    def test_update_and_remove(self, make_snippet) -> None:
        state = VaultState()
        snippet = make_snippet("old_code()")
        state.replace_snippets([snippet])

        state.update_snippet(dataclasses.replace(snippet, title="Renamed"))
        assert state.snippets[0].title == "Renamed"

        state.remove_snippet(snippet.id)
        assert state.snippets == []

    def test_replace_keeps_token_cache(self, make_snippet) -> None:
        state = VaultState()
        snippet = make_snippet("cached_code()")
        state.tokens.tokens_for(snippet)

        state.replace_snippets([snippet])
        state.tokens.tokens_for(snippet)

        assert state.tokens.hits == 1
        assert state.tokens.misses == 1

    def test_replace_with_edited_code_retokenizes(self, make_snippet) -> None:
        state = VaultState()
        snippet = make_snippet("cached_code()")
        state.tokens.tokens_for(snippet)

        edited = dataclasses.replace(snippet, code="edited_code()")
        state.replace_snippets([edited])

        assert state.tokens.tokens_for(edited) == ["edited_code"]
        assert state.tokens.misses == 2

    def test_close_tears_everything_down(self, make_snippet) -> None:
        with VaultState() as state:
            state.add_snippet(make_snippet("code_here()"))
            state.recent.add("fingerprint")
        assert state.active is False
        assert state.snippets == []
        assert len(state.recent) == 0

    def test_uses_given_window(self, recent) -> None:
        assert VaultState(recent=recent).recent is recent
