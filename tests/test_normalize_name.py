"""Tests for plugin name normalization."""

import pytest

from lazyvim_nix.errors import MalformedIdentifierError
from lazyvim_nix.normalize_name import normalize_name, repo_segment


def test_owner_repo_passes_through() -> None:
    """Verify that full identifiers are returned unchanged."""
    assert normalize_name("folke/snacks.nvim") == "folke/snacks.nvim"
    assert normalize_name("L3MON4D3/LuaSnip") == "L3MON4D3/LuaSnip"
    assert normalize_name("nvim-mini/mini.ai") == "nvim-mini/mini.ai"


def test_known_alias_is_expanded() -> None:
    """Verify that bare short names are expanded via the alias table."""
    assert normalize_name("mason.nvim") == "mason-org/mason.nvim"
    assert normalize_name("snacks.nvim") == "folke/snacks.nvim"


def test_custom_alias_table() -> None:
    """Verify that a custom alias table replaces the default one."""
    aliases = {"tokyonight": "folke/tokyonight.nvim"}
    assert normalize_name("tokyonight", aliases) == "folke/tokyonight.nvim"
    with pytest.raises(MalformedIdentifierError):
        normalize_name("mason.nvim", aliases)


@pytest.mark.parametrize(
    "raw", ["unknown.nvim", "", "owner/", "/repo", "a/b/c", "owner/repo name", None, 42]
)
def test_malformed_identifiers_are_rejected(raw: object) -> None:
    """Verify that unparseable names raise an error naming the input."""
    with pytest.raises(MalformedIdentifierError) as exc:
        normalize_name(raw)
    assert repr(raw) in str(exc.value)


def test_repo_segment() -> None:
    """Verify extraction of the repository part."""
    assert repo_segment("folke/todo-comments.nvim") == "todo-comments.nvim"
