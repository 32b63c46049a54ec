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

"""Tests for importing a source tree."""

from pathlib import Path

import pytest

from code_vault.importer import import_directory

PY_CODE = (
    "def moving_average(values, window):\n"
    "    totals = [sum(values[i:i + window]) for i in range(len(values) - window + 1)]\n"
    "    return [t / window for t in totals]\n"
)

JS_CODE = (
    "export async function loadUsers(client) {\n"
    "  const response = await client.get('/users');\n"
    "  return response.data.filter(user => user.active);\n"
    "}\n"
)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "lib").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)

    (root / "average.py").write_text(PY_CODE)
    (root / "lib" / "users.js").write_text(JS_CODE)
    (root / "copy_of_average.py").write_text(PY_CODE)
    (root / "tiny.py").write_text("x = 1\n")
    (root / "notes.txt").write_text("plain text " * 20)
    (root / "node_modules" / "dep" / "index.js").write_text(JS_CODE.replace("Users", "Deps"))
    return root


class TestImportDirectory:
    def test_saves_new_files_and_reports_the_rest(self, project: Path, service) -> None:
        summary = import_directory(project, service)

        assert summary.saved == ["average.py", str(Path("lib") / "users.js")]
        assert summary.duplicates == ["copy_of_average.py"]
        assert summary.skipped == ["tiny.py"]
        assert summary.total == 4

    def test_snippet_fields(self, project: Path, service) -> None:
        import_directory(project, service)

        by_title = {s.title: s for s in service.store.all()}
        assert set(by_title) == {"File: average.py", f"File: {Path('lib') / 'users.js'}"}
        assert by_title["File: average.py"].language == "python"
        assert by_title["File: average.py"].tags == ["imported"]

    def test_reimport_saves_nothing(self, project: Path, service) -> None:
        import_directory(project, service)
        summary = import_directory(project, service)
        assert summary.saved == []
        assert len(summary.duplicates) == 3

    def test_forced_language(self, project: Path, service) -> None:
        summary = import_directory(project, service, forced_language="javascript")
        assert summary.saved == [str(Path("lib") / "users.js")]
        assert service.store.all()[0].language == "javascript"

    def test_focus_and_exclude(self, project: Path, service) -> None:
        summary = import_directory(project, service, focus_patterns=["*.py"], exclude_patterns=["copy_*"])
        assert summary.saved == ["average.py"]
        assert summary.duplicates == []

    def test_progress_and_limits(self, project: Path, service) -> None:
        calls = []
        summary = import_directory(
            project, service, max_files=2, tags=["batch"],
            on_progress=lambda current, total, path: calls.append((current, total)),
        )

        assert calls == [(1, 2), (2, 2)]
        assert summary.total == 2
        assert service.store.all()[0].tags == ["batch"]
