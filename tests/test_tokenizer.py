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

"""Tests for tokenization and fingerprint normalization."""

import pytest

from code_vault.tokenizer import (
    fingerprint,
    normalize_for_fingerprint,
    normalized_lines,
    strip_comments,
    tokenize,
)


class TestTokenize:
    def test_lowercases_and_drops_stopwords(self) -> None:
        tokens = tokenize("function fetchData(url) { return fetch(url); }")
        assert tokens == ["fetchdata", "url", "fetch", "url"]

    def test_drops_short_tokens(self) -> None:
        assert tokenize("a = b + cc") == []

    def test_keeps_three_character_tokens(self) -> None:
        assert tokenize("api") == ["api"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
    def test_blank_input_gives_no_tokens(self, text: str) -> None:
        assert tokenize(text) == []

    def test_every_stopword_is_dropped(self) -> None:
        code = "function const let var if else for while return class import export"
        assert tokenize(code) == []

    def test_underscores_and_digits_stay_in_tokens(self) -> None:
        assert tokenize("my_var = abc123") == ["my_var", "abc123"]

    def test_stopword_inside_identifier_is_kept(self) -> None:
        assert tokenize("returnValue") == ["returnvalue"]

    def test_strict_mode_strips_comments_and_strings(self) -> None:
        code = 'label = "hello world" // trailing note'
        assert tokenize(code) == ["label", "hello", "world", "trailing", "note"]
        assert tokenize(code, strict=True) == ["label"]


class TestFingerprint:
    def test_comments_whitespace_and_integers_are_ignored(self) -> None:
        assert fingerprint("const x = 1; // note") == fingerprint("const   x = 42;")

    def test_string_contents_are_ignored(self) -> None:
        assert fingerprint('print("a")') == fingerprint('print("something else")')

    def test_quote_style_is_significant(self) -> None:
        assert fingerprint("say('a')") != fingerprint('say("a")')

    def test_block_comments_are_ignored(self) -> None:
        assert fingerprint("alpha /* spanning\n lines */ beta") == fingerprint("alpha beta")

    def test_case_is_ignored(self) -> None:
        assert fingerprint("Const X = Y;") == fingerprint("const x = y;")

    def test_different_code_differs(self) -> None:
        assert fingerprint("total = price * qty") != fingerprint("total = price + qty")

    def test_is_sha256_hex(self) -> None:
        digest = fingerprint("anything")
        assert len(digest) == 64
        int(digest, 16)

    def test_normalized_form(self) -> None:
        assert normalize_for_fingerprint('Call("x", 7) // go') == 'call("",0)'


class TestNormalizedLines:
    def test_collapses_inline_whitespace_and_drops_short_lines(self) -> None:
        assert normalized_lines("  Foo   bar  \n x\n") == ["foo bar"]

    def test_keeps_line_structure(self) -> None:
        code = "first_line();\nsecond_line();"
        assert normalized_lines(code) == ["first_line();", "second_line();"]

    def test_comment_only_lines_vanish(self) -> None:
        assert normalized_lines("// just a comment here\nreal_code();") == ["real_code();"]

    def test_min_length_is_inclusive(self) -> None:
        assert normalized_lines("abcdef\nabcde") == ["abcdef"]


class TestStripComments:
    def test_removes_both_comment_styles(self) -> None:
        assert strip_comments("a // b\nc /* d */ e") == "a \nc  e"
