"""Logic for loading and merging the lazyvim-nix settings file."""

import copy
from pathlib import Path
from typing import Any

import yaml

from lazyvim_nix.deep_merge import deep_merge
from lazyvim_nix.errors import LazyNixError
from lazyvim_nix.normalize_name import SHORT_ALIASES
from lazyvim_nix.registry import DEFAULT_SNAPSHOT_URL

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "nvim",
    "data": {
        "plugins": "data/plugins.json",
        "extras": "data/extras.json",
        "starter": "data/starter-lazy.lua",
        "starter_version": "data/starter-version.txt",
    },
    "mappings": {
        "curated": "data/mappings.yml",
        "generated": "data/mappings.generated.yml",
        "accept_generated": False,
    },
    "aliases": dict(SHORT_ALIASES),
    "registry": {
        "snapshot_url": DEFAULT_SNAPSHOT_URL,
        "attribute_set": "vimPlugins",
        "timeout_seconds": 60,
        "nix_command": ["nix"],
        "cache": ".cache/registry-cache.json",
        "verify": False,
    },
    "resolution": {
        "max_workers": 8,
    },
    "packages": {
        "manifest": None,
        "store_dir": None,
    },
    "output": {
        "config_dir": "result/nvim",
        "dev_path": "result/dev-path",
        "report": "data/mapping-analysis-report.md",
        "resolution_report": "data/resolution-report.json",
    },
    "config_files": None,
    "config": {
        "autocmds": "",
        "keymaps": "",
        "options": "",
    },
    "plugins": {},
    "extras": {},
    "extra_plugins": [],
}


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load settings from a YAML file and merge them over the defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if not p.exists():
            msg = f"Settings file not found: {p}"
            raise LazyNixError(msg)
        user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(user_config, dict):
            msg = f"Settings file {p} must contain a mapping at the top level"
            raise LazyNixError(msg)
        config = deep_merge(config, user_config)
    return config


def registry_settings(config: dict[str, Any]) -> dict[str, Any]:
    """The part of the settings that identifies a registry snapshot."""
    registry = config["registry"]
    return {
        "snapshot_url": registry["snapshot_url"],
        "attribute_set": registry["attribute_set"],
    }
