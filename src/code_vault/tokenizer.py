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
Code tokenizer and normalizer.

Turns source text into comparable tokens for similarity scoring, and into
literal-insensitive normalized forms for duplicate fingerprinting.
"""

import hashlib
import re
from typing import List


# Language-structural keywords that carry no signal about what code does
STOPWORDS = frozenset({
    "function", "const", "let", "var", "if", "else", "for", "while",
    "return", "class", "import", "export",
})

MIN_TOKEN_LENGTH = 3

STRING_SENTINEL_DOUBLE = '""'
STRING_SENTINEL_SINGLE = "''"
NUMBER_SENTINEL = "0"

_SPLIT_RE = re.compile(r"[^\w]")
_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_DOUBLE_QUOTED_RE = re.compile(r'"([^"\\]|\\.)*"')
_SINGLE_QUOTED_RE = re.compile(r"'([^'\\]|\\.)*'")
_INTEGER_RE = re.compile(r"\b\d+\b")
_ALL_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_WHITESPACE_RE = re.compile(r"[^\S\n]+")


def tokenize(text: str, strict: bool = False) -> List[str]:
    """
    Split code into lower-cased tokens.

    Tokens of length <= 2 and stoplisted keywords are dropped. Order and
    repeats are kept; scorers convert to sets themselves.

    Args:
        text: Source text
        strict: Strip comments and collapse string/number literals first

    Returns:
        List of tokens (empty for empty or whitespace-only input)
    """
    if not text or not text.strip():
        return []

    text = text.lower()
    if strict:
        text = normalize_literals(strip_comments(text))

    return [
        token for token in _SPLIT_RE.split(text)
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS
    ]


def strip_comments(code: str) -> str:
    """Remove // line comments and /* */ block comments."""
    code = _LINE_COMMENT_RE.sub("", code)
    return _BLOCK_COMMENT_RE.sub("", code)


def normalize_literals(code: str) -> str:
    """Replace quoted string contents and standalone integers with sentinels."""
    code = _DOUBLE_QUOTED_RE.sub(STRING_SENTINEL_DOUBLE, code)
    code = _SINGLE_QUOTED_RE.sub(STRING_SENTINEL_SINGLE, code)
    return _INTEGER_RE.sub(NUMBER_SENTINEL, code)


def normalize_for_fingerprint(code: str) -> str:
    """
    Normalize code for exact-duplicate detection.

    Lower-cases, strips comments, removes all whitespace (newlines included),
    then collapses literals. Two snippets that differ only in formatting,
    comments, string contents or integer values normalize identically.
    """
    code = strip_comments(code.lower())
    code = _ALL_WHITESPACE_RE.sub("", code)
    return normalize_literals(code)


def normalized_lines(code: str, min_length: int = 6) -> List[str]:
    """
    Normalize code like normalize_for_fingerprint but keep line structure.

    Runs of horizontal whitespace collapse to one space and each line is
    stripped. Only lines at least min_length characters long are returned.
    """
    code = strip_comments(code.lower())
    code = _INLINE_WHITESPACE_RE.sub(" ", code)
    code = normalize_literals(code)
    lines = (line.strip() for line in code.split("\n"))
    return [line for line in lines if len(line) >= min_length]


def fingerprint(code: str) -> str:
    """Stable SHA-256 hex digest of the normalized code."""
    return hashlib.sha256(normalize_for_fingerprint(code).encode("utf-8")).hexdigest()
