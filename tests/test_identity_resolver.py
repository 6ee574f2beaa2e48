"""Tests for the identity resolver strategies."""

import pytest

from lazyvim_nix.identity_resolver import IdentityResolver
from lazyvim_nix.models import ResolutionMethod
from lazyvim_nix.override_tables import OverrideTables, parse_override_table


@pytest.fixture
def tables() -> OverrideTables:
    """Curated and generated tables used across the tests."""
    return OverrideTables(
        curated=parse_override_table(
            {
                "L3MON4D3/LuaSnip": "luasnip",
                "folke/snacks.nvim": "snacks-custom",
                "nvim-mini/mini.ai": {"package": "mini-nvim", "module": "mini.ai"},
            }
        ),
        generated=parse_override_table({"owner/pending.nvim": "pending-real"}),
    )


def test_direct_override_wins(tables, fake_registry) -> None:
    """Verify that a direct override is used even when the automatic name exists."""
    registry = fake_registry(existing={"snacks-nvim"})
    result = IdentityResolver(tables, registry).resolve("folke/snacks.nvim")
    assert result.local_package == "snacks-custom"
    assert result.resolution_method is ResolutionMethod.OVERRIDE
    assert result.verified
    assert registry.queries == []


def test_multi_module_override(tables, fake_registry) -> None:
    """Verify that multi-module entries carry the module name."""
    result = IdentityResolver(tables, fake_registry()).resolve("nvim-mini/mini.ai")
    assert result.resolution_method is ResolutionMethod.MULTI_MODULE_OVERRIDE
    assert result.local_package == "mini-nvim"
    assert result.module_name == "mini.ai"


def test_automatic_when_registry_has_candidate(tables, fake_registry) -> None:
    """Verify automatic resolution when the derived name exists."""
    registry = fake_registry(existing={"todo-comments-nvim"})
    result = IdentityResolver(tables, registry).resolve("folke/todo-comments.nvim")
    assert result.resolution_method is ResolutionMethod.AUTOMATIC
    assert result.local_package == "todo-comments-nvim"
    assert result.verified
    assert registry.queries == ["todo-comments-nvim"]


@pytest.mark.parametrize("existing", [set(), None])
def test_unresolved_when_registry_misses(tables, fake_registry, existing) -> None:
    """Verify that a missing or failing lookup leaves the plugin unresolved."""
    registry = (
        fake_registry(errors={"foo_bar"}) if existing is None else fake_registry()
    )
    result = IdentityResolver(tables, registry).resolve("example/foo-bar")
    assert result.resolution_method is ResolutionMethod.UNRESOLVED
    assert result.local_package is None
    assert not result.verified
    assert result.candidate == "foo_bar"


def test_generated_table_requires_opt_in(tables, fake_registry) -> None:
    """Verify that the generated table is only consulted when accepted."""
    ident = "owner/pending.nvim"
    assert not IdentityResolver(tables, fake_registry()).resolve(ident).is_resolved

    result = IdentityResolver(
        tables, fake_registry(), accept_generated=True
    ).resolve(ident)
    assert result.local_package == "pending-real"
    assert result.resolution_method is ResolutionMethod.OVERRIDE


def test_curated_wins_over_generated(fake_registry) -> None:
    """Verify that the curated table takes precedence when both map a plugin."""
    tables = OverrideTables(
        curated=parse_override_table({"o/r": "curated"}),
        generated=parse_override_table({"o/r": "generated"}),
    )
    resolver = IdentityResolver(tables, fake_registry(), accept_generated=True)
    assert resolver.resolve("o/r").local_package == "curated"


def test_resolve_all_preserves_order(tables, fake_registry) -> None:
    """Verify that parallel resolution returns results in input order."""
    identifiers = [f"owner/plugin{i}.nvim" for i in range(20)]
    registry = fake_registry(existing={f"plugin{i}-nvim" for i in range(0, 20, 2)})
    results = IdentityResolver(tables, registry).resolve_all(identifiers, max_workers=4)
    assert [r.identifier for r in results] == identifiers
    assert [r.is_resolved for r in results] == [i % 2 == 0 for i in range(20)]


def test_resolution_is_deterministic(tables, fake_registry) -> None:
    """Verify that repeated runs on the same inputs agree."""
    registry = fake_registry(existing={"lualine-nvim"})
    resolver = IdentityResolver(tables, registry)
    ids = ["nvim-lualine/lualine.nvim", "L3MON4D3/LuaSnip", "example/foo-bar"]
    assert resolver.resolve_all(ids) == resolver.resolve_all(ids)
