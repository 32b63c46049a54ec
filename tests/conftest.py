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
Shared pytest fixtures.

Kept small: an in-memory store, a service over it, a controllable clock,
and a factory for unsaved snippets.
"""

import itertools

import pytest

from code_vault.config import VaultConfig
from code_vault.dedup import RecentlyProcessed
from code_vault.models import Snippet
from code_vault.service import VaultService
from code_vault.state import VaultState
from code_vault.store import SnippetStore


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recent(clock: FakeClock) -> RecentlyProcessed:
    return RecentlyProcessed(ttl=60.0, clock=clock)


@pytest.fixture()
def store():
    with SnippetStore(":memory:") as s:
        yield s


@pytest.fixture()
def config() -> VaultConfig:
    return VaultConfig(db_path=":memory:")


@pytest.fixture()
def state(recent: RecentlyProcessed) -> VaultState:
    return VaultState(recent=recent)


@pytest.fixture()
def service(store: SnippetStore, state: VaultState, config: VaultConfig) -> VaultService:
    return VaultService(store, state=state, config=config)


@pytest.fixture()
def make_snippet():
    """Factory for Snippet objects that never touch a store."""
    counter = itertools.count(1)

    def _make(code: str, title: str = None, language: str = "javascript", **kwargs) -> Snippet:
        n = next(counter)
        return Snippet(
            id=kwargs.pop("id", f"s{n}"),
            title=title or f"Snippet {n}",
            code=code,
            language=language,
            **kwargs,
        )

    return _make
