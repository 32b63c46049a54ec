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

from pathlib import Path

import pytest

from code_vault.language import detect_language, language_from_path, map_language_id


class TestDetectLanguage:
    @pytest.mark.parametrize("code, expected", [
        ("const f = function() { return items.map(x => x * 2) }", "javascript"),
        ("def greet(name):\n    return name", "python"),
        ("public class Main { }", "java"),
        ("static void main(String[] args) {}", "java"),
        ("#include <stdio.h>", "cpp"),
        ("using namespace std;", "cpp"),
        ("package main\n\nfunc main() {}", "go"),
        ("<?php echo $name;", "php"),
        ("SELECT * FROM users", "unknown"),
        ("", "unknown"),
    ])
    def test_detects(self, code: str, expected: str) -> None:
        assert detect_language(code) == expected

    def test_first_matching_rule_wins(self) -> None:
        code = "function run() { return () => null }\ndef helper(x): pass"
        assert detect_language(code) == "javascript"

    def test_arrow_without_function_keyword_is_not_javascript(self) -> None:
        assert detect_language("items.map(x => x)") == "unknown"


class TestLanguageFromPath:
    def test_known_extensions(self) -> None:
        assert language_from_path(Path("app/main.py")) == "python"
        assert language_from_path(Path("Component.TSX")) == "typescript"
        assert language_from_path(Path("deploy.sh")) == "shell"

    def test_unknown_extension(self) -> None:
        assert language_from_path(Path("notes.txt")) is None


class TestMapLanguageId:
    def test_editor_ids_are_mapped(self) -> None:
        assert map_language_id("javascriptreact") == "javascript"
        assert map_language_id("typescriptreact") == "typescript"

    def test_other_ids_pass_through(self) -> None:
        assert map_language_id("python") == "python"
