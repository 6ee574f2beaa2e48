"""Shared fixtures for the lazyvim-nix tests."""

from collections.abc import Iterable

import pytest

from lazyvim_nix.registry import RegistryAnswer


class FakeRegistry:
    """Registry double that records every queried name."""

    def __init__(self, existing: Iterable[str] = (), errors: Iterable[str] = ()) -> None:
        self.existing = set(existing)
        self.errors = set(errors)
        self.queries: list[str] = []

    def query(self, name: str) -> RegistryAnswer:
        self.queries.append(name)
        if name in self.errors:
            return RegistryAnswer.ERROR
        if name in self.existing:
            return RegistryAnswer.EXISTS
        return RegistryAnswer.MISSING


@pytest.fixture
def fake_registry() -> type[FakeRegistry]:
    """Return the registry double class."""
    return FakeRegistry
