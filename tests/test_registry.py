"""Tests for registry queries and the registry cache."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from lazyvim_nix.init_registry import init_registry
from lazyvim_nix.load_config import load_config
from lazyvim_nix.registry import ManifestRegistry, NixRegistry, RegistryAnswer
from lazyvim_nix.registry_cache import (
    CURRENT_SCHEMA_VERSION,
    RegistryCache,
    compute_snapshot_key,
)


def _completed(stdout: str) -> MagicMock:
    proc = MagicMock()
    proc.stdout = stdout
    return proc


def test_build_command_checks_attribute_set() -> None:
    """Verify the evaluated expression targets the pinned snapshot."""
    registry = NixRegistry("https://example.invalid/nixpkgs.tar.gz")
    cmd = registry.build_command("yanky-nvim")
    assert cmd[0] == "nix"
    assert "--raw" in cmd
    expr = cmd[-1]
    assert 'fetchTarball "https://example.invalid/nixpkgs.tar.gz"' in expr
    assert 'pkgs.vimPlugins ? "yanky-nvim"' in expr


def test_query_exists_and_missing() -> None:
    """Verify that evaluator output is mapped to answers."""
    registry = NixRegistry()
    with patch("lazyvim_nix.registry.subprocess.run") as run:
        run.return_value = _completed("exists")
        assert registry.query("yanky-nvim") is RegistryAnswer.EXISTS
        run.return_value = _completed("missing\n")
        assert registry.query("nope-nvim") is RegistryAnswer.MISSING
    assert run.call_args.kwargs["timeout"] == 60.0  # noqa: PLR2004


def test_query_timeout_is_error() -> None:
    """Verify that a timed out lookup is reported as an error, not as missing."""
    registry = NixRegistry(timeout=1)
    with patch(
        "lazyvim_nix.registry.subprocess.run",
        side_effect=subprocess.TimeoutExpired(["nix"], 1),
    ):
        assert registry.query("slow-nvim") is RegistryAnswer.ERROR


def test_query_failures_are_errors() -> None:
    """Verify that evaluator failures and odd output are errors."""
    registry = NixRegistry()
    with patch(
        "lazyvim_nix.registry.subprocess.run",
        side_effect=subprocess.CalledProcessError(1, ["nix"], stderr="bad"),
    ):
        assert registry.query("a-nvim") is RegistryAnswer.ERROR
    with patch("lazyvim_nix.registry.subprocess.run", side_effect=FileNotFoundError):
        assert registry.query("a-nvim") is RegistryAnswer.ERROR
    with patch("lazyvim_nix.registry.subprocess.run") as run:
        run.return_value = _completed("warning: something")
        assert registry.query("a-nvim") is RegistryAnswer.ERROR


def test_invalid_names_never_reach_the_evaluator() -> None:
    """Verify that names unsafe for the expression are rejected up front."""
    registry = NixRegistry()
    with patch("lazyvim_nix.registry.subprocess.run") as run:
        assert registry.query('x" || true') is RegistryAnswer.MISSING
        run.assert_not_called()


def test_cache_is_used_and_filled(tmp_path: Path) -> None:
    """Verify that answers are cached and errors are not."""
    cache = RegistryCache(tmp_path / "cache.json", "key")
    registry = NixRegistry(cache=cache)
    with patch("lazyvim_nix.registry.subprocess.run") as run:
        run.return_value = _completed("exists")
        registry.query("yanky-nvim")
        registry.query("yanky-nvim")
        assert run.call_count == 1

        run.side_effect = subprocess.TimeoutExpired(["nix"], 1)
        registry.query("slow-nvim")
    assert cache.lookup("slow-nvim") is None
    assert cache.lookup("yanky-nvim") is True


def test_cache_persists_per_snapshot(tmp_path: Path) -> None:
    """Verify that a saved cache is only reused for the same snapshot."""
    path = tmp_path / "nested" / "cache.json"
    cache = RegistryCache(path, "snap-a")
    cache.update("yanky-nvim", True)  # noqa: FBT003
    cache.update("nope", False)  # noqa: FBT003
    cache.save()

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["meta"]["schema_version"] == CURRENT_SCHEMA_VERSION

    same = RegistryCache(path, "snap-a")
    same.load()
    assert same.lookup("yanky-nvim") is True
    assert same.lookup("nope") is False

    other = RegistryCache(path, "snap-b")
    other.load()
    assert other.lookup("yanky-nvim") is None


def test_corrupt_cache_is_ignored(tmp_path: Path) -> None:
    """Verify that an unreadable cache file starts empty."""
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    cache = RegistryCache(path, "key")
    cache.load()
    assert cache.answers == {}


def test_snapshot_key_stability() -> None:
    """Verify that the snapshot key ignores key order."""
    assert compute_snapshot_key({"a": 1, "b": 2}) == compute_snapshot_key(
        {"b": 2, "a": 1}
    )
    assert compute_snapshot_key({"a": 1}) != compute_snapshot_key({"a": 2})


def test_manifest_registry() -> None:
    """Verify membership answers from a package manifest."""
    registry = ManifestRegistry(["yanky-nvim"])
    assert registry.query("yanky-nvim") is RegistryAnswer.EXISTS
    assert registry.query("other") is RegistryAnswer.MISSING


def test_init_registry_from_settings(tmp_path: Path) -> None:
    """Verify that settings produce a configured client with a loaded cache."""
    config = load_config()
    config["registry"]["cache"] = str(tmp_path / "cache.json")
    config["registry"]["timeout_seconds"] = 5
    client, key = init_registry(config)
    assert client.timeout == 5.0  # noqa: PLR2004
    assert client.cache is not None
    assert client.cache.snapshot_key == key
