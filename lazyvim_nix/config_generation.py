"""Generated Lua files that accompany the patched starter config."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from lazyvim_nix.errors import LazyNixError

logger = logging.getLogger(__name__)

DEFAULT_PLUGIN_FILE = "lua/plugins/_lazyvim_nix_default.lua"
HEALTHCHECK_FILE = "lua/plugins/_lazyvim_nix_healthcheck.lua"

DEFAULT_PLUGIN_TEXT = """\
-- Default plugin specification to ensure plugins directory is valid
-- This prevents "No specs found for module 'plugins'" error
return {}
"""

HEALTHCHECK_TEXT = """\
-- [NIX] Disable treesitter healthcheck - parsers are pre-built by Nix
-- LazyVim's healthcheck expects tree-sitter CLI and C compiler which aren't needed
vim.api.nvim_create_autocmd("User", {
  pattern = "VeryLazy",
  once = true,
  callback = function()
    local ok, ts = pcall(require, "lazyvim.util.treesitter")
    if ok and ts then
      ts.check = function()
        return true, { ["nix"] = true }
      end
    end
  end,
})
return {}
"""


@dataclass(frozen=True)
class EnabledExtra:
    """A LazyVim extra switched on in the settings."""

    category: str
    name: str
    import_path: str
    config: str = ""

    @property
    def source_file(self) -> str:
        """Scanner ``source_file`` value of plugins declared by this extra."""
        return f"extras.{self.category}.{self.name}"


def load_extras_metadata(path: str | Path | None) -> dict[str, Any]:
    """Load ``extras.json`` (category -> name -> metadata)."""
    if not path or not Path(path).exists():
        return {}
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if p.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        msg = f"Extras metadata file {p} is not valid: {e}"
        raise LazyNixError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Extras metadata file {p} must map categories to extras"
        raise LazyNixError(msg)
    return data


def _extra_settings(category: str, name: str, settings: Any) -> dict[str, Any]:
    """Accept ``name: true`` as shorthand for ``name: {enable: true}``."""
    if settings is None or isinstance(settings, bool):
        return {"enable": bool(settings)}
    if isinstance(settings, Mapping):
        return dict(settings)
    msg = (
        f"Invalid settings for extra {category}.{name}: expected true, false "
        f"or a mapping with 'enable', got {settings!r}"
    )
    raise LazyNixError(msg)


def get_enabled_extras(
    extras_config: Mapping[str, Any], metadata: Mapping[str, Any]
) -> list[EnabledExtra]:
    """Return enabled extras that have metadata, sorted by category and name."""
    enabled = []
    for category, extras in sorted(extras_config.items()):
        if extras is not None and not isinstance(extras, Mapping):
            msg = f"Extras category {category!r} must map extra names to settings"
            raise LazyNixError(msg)
        for name, raw in sorted((extras or {}).items()):
            settings = _extra_settings(category, name, raw)
            if not settings.get("enable", False):
                continue
            meta = (metadata.get(category) or {}).get(name)
            if meta is None:
                logger.warning("Unknown LazyVim extra %s.%s, ignoring", category, name)
                continue
            enabled.append(
                EnabledExtra(
                    category=category,
                    name=name,
                    import_path=meta.get(
                        "import", f"lazyvim.plugins.extras.{category}.{name}"
                    ),
                    config=(settings.get("config") or ""),
                )
            )
    return enabled


def extras_import_specs(enabled: list[EnabledExtra]) -> list[str]:
    """Lua ``import`` specs for enabled extras."""
    return [f'{{ import = "{extra.import_path}" }},' for extra in enabled]


def extras_config_files(enabled: list[EnabledExtra]) -> dict[str, str]:
    """Override files for extras that carry custom configuration."""
    files = {}
    for extra in enabled:
        if not extra.config:
            continue
        path = f"lua/plugins/extras-{extra.category}-{extra.name}.lua"
        files[path] = (
            f"-- Extra configuration override for {extra.category}/{extra.name} "
            "(configured via Nix)\n"
            "-- This file overrides the default configuration from the LazyVim extra\n"
            f"{extra.config.rstrip()}\n"
        )
    return files


def support_files(*, has_user_plugins: bool) -> dict[str, str]:
    """Files always generated next to the user's config."""
    files = {HEALTHCHECK_FILE: HEALTHCHECK_TEXT}
    if not has_user_plugins:
        files[DEFAULT_PLUGIN_FILE] = DEFAULT_PLUGIN_TEXT
    return files
