"""Construct the registry client and its lookup cache from settings."""

from typing import Any

from lazyvim_nix.load_config import registry_settings
from lazyvim_nix.registry import NixRegistry
from lazyvim_nix.registry_cache import RegistryCache, compute_snapshot_key


def init_registry(config: dict[str, Any]) -> tuple[NixRegistry, str]:
    """Return a ``NixRegistry`` for the configured snapshot and its cache key."""
    registry = config["registry"]
    snapshot_key = compute_snapshot_key(registry_settings(config))

    cache = None
    if registry.get("cache"):
        cache = RegistryCache(registry["cache"], snapshot_key)
        cache.load()

    client = NixRegistry(
        snapshot_url=registry["snapshot_url"],
        attribute_set=registry["attribute_set"],
        timeout=float(registry["timeout_seconds"]),
        nix_command=registry["nix_command"],
        cache=cache,
    )
    return client, snapshot_key
