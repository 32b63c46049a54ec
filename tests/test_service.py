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

"""Tests for the vault service boundary."""

import pytest

from code_vault.service import InvalidRequestError, VaultService
from code_vault.state import VaultState
from code_vault.store import StoreUnavailableError

FETCH_CODE = (
    "async function apiFetch(url, options = {}) {\n"
    "  const response = await fetch(url, options);\n"
    "  return response.json();\n"
    "}"
)


class TestAnalyze:
    def test_response_shape(self, service: VaultService) -> None:
        service.add("API Fetch", FETCH_CODE, "javascript")
        service.add("Unrelated", "SELECT name FROM users", "sql")

        response = service.analyze(FETCH_CODE)

        assert response["analysis"] == {
            "totalSnippets": 2,
            "relevantMatches": 1,
            "language": "unknown",
        }
        suggestion = response["suggestions"][0]
        assert suggestion["snippet"]["title"] == "API Fetch"
        assert suggestion["confidence"] == 1.0
        assert suggestion["reason"] == "Very similar implementation"

    def test_reports_detected_language(self, service: VaultService) -> None:
        response = service.analyze("def total(items):\n    return sum(items)", language="javascript")
        assert response["analysis"]["language"] == "python"
        assert response["suggestions"] == []

    @pytest.mark.parametrize("code", [None, "", "   \n"])
    def test_code_is_required(self, service: VaultService, code) -> None:
        with pytest.raises(InvalidRequestError, match="Code is required"):
            service.analyze(code)

    def test_respects_configured_threshold(self, service: VaultService) -> None:
        service.add("Half", "alpha beta gamma delta", "text")
        assert service.analyze("alpha beta")["suggestions"]

        service.config.suggestion_threshold = 0.5
        assert service.analyze("alpha beta")["suggestions"] == []


class TestCrudSync:
    def test_add_update_delete_track_state(self, service: VaultService) -> None:
        snippet = service.add("T", "code_here()", "python")
        assert [s.id for s in service.state.snippets] == [snippet.id]

        service.update(snippet.id, "Renamed", "code_here()", "python")
        assert service.state.snippets[0].title == "Renamed"

        service.delete(snippet.id)
        assert service.state.snippets == []


class TestCapture:
    def test_saves_new_code_with_defaults(self, service: VaultService) -> None:
        result = service.capture(FETCH_CODE, "javascript")

        assert result.status == "saved"
        assert result.snippet.title.startswith("Code from ")
        assert result.snippet.tags == ["auto-captured", "vscode"]
        assert service.store.count() == 1

    def test_resubmission_is_recent(self, service: VaultService) -> None:
        service.capture(FETCH_CODE, "javascript")
        result = service.capture(FETCH_CODE, "javascript")

        assert result.status == "recent"
        assert service.store.count() == 1

    def test_stored_copy_is_duplicate(self, store, config) -> None:
        VaultService(store, config=config).capture(FETCH_CODE, "javascript", title="First")

        # Fresh window, so only the stored corpus can catch it
        later = VaultService(store, state=VaultState(), config=config)
        reformatted = "// fetch helper\n" + FETCH_CODE.replace("  ", "    ")
        result = later.capture(reformatted, "javascript")

        assert result.status == "duplicate"
        assert result.snippet.title == "First"
        assert "exact match" in result.detail

    def test_language_falls_back_to_detection(self, service: VaultService) -> None:
        result = service.capture("def total(items):\n    return sum(items)", None)
        assert result.snippet.language == "python"

    def test_explicit_fields(self, service: VaultService) -> None:
        result = service.capture("print_report()", "python", title="Report", description="d", tags=[])
        assert result.snippet.title == "Report"
        assert result.snippet.description == "d"
        assert result.snippet.tags == []

    def test_code_is_required(self, service: VaultService) -> None:
        with pytest.raises(InvalidRequestError):
            service.capture("  ", "python")

    def test_failed_save_is_not_remembered(self, service: VaultService, monkeypatch) -> None:
        def broken_create(*args, **kwargs):
            raise StoreUnavailableError("disk full")

        monkeypatch.setattr(service.store, "create", broken_create)
        with pytest.raises(StoreUnavailableError):
            service.capture(FETCH_CODE, "javascript")

        assert len(service.state.recent) == 0


class TestClusters:
    def test_groups_related_snippets(self, service: VaultService) -> None:
        service.add("Fetch A", "fetch json response headers", "javascript")
        service.add("Fetch B", "fetch json response options", "javascript")
        service.add("Sort", "sorted items reverse key", "python")

        clusters = service.clusters()

        assert len(clusters) == 1
        assert {s.title for s in clusters[0].snippets} == {"Fetch A", "Fetch B"}
