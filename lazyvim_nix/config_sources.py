"""Collect user configuration from a scanned directory and inline declarations.

A user may supply LazyVim config either as files under a directory or inline
in the settings file. Both are merged into one set of fragments; a logical unit
claimed by both sources is an error, never silently resolved.
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from lazyvim_nix.errors import ConfigConflictError, MissingConfigSourceError
from lazyvim_nix.models import CONFIG_UNITS, ConfigFragment, ConfigOrigin

logger = logging.getLogger(__name__)

# (config dir, plugins dir) relative to the root, nested layout first
LAYOUTS = (
    (Path("lua/config"), Path("lua/plugins")),
    (Path("config"), Path("plugins")),
)


def describe_origin(fragment: ConfigFragment) -> str:
    """Human readable origin of a fragment, for error messages."""
    if fragment.origin is ConfigOrigin.SCANNED_FILE:
        return f"config file {fragment.source}"
    return "inline declaration"


def _add(fragments: dict[str, ConfigFragment], fragment: ConfigFragment) -> None:
    existing = fragments.get(fragment.logical_unit)
    if existing is not None:
        raise ConfigConflictError(
            fragment.logical_unit, describe_origin(existing), describe_origin(fragment)
        )
    fragments[fragment.logical_unit] = fragment


def scan_config_files(root: str | Path | None) -> list[ConfigFragment]:
    """Scan ``root`` for config and plugin files in nested or flat layout.

    ``None`` means no directory was configured. A configured directory that
    does not exist raises ``MissingConfigSourceError``.
    """
    if root is None:
        return []
    base = Path(root).expanduser()
    if not base.is_dir():
        raise MissingConfigSourceError(base)

    found: dict[str, ConfigFragment] = {}
    for config_dir, plugins_dir in LAYOUTS:
        for path in sorted((base / config_dir).glob("*.lua")):
            if path.stem not in CONFIG_UNITS:
                logger.warning("Ignoring unknown config file %s", path)
                continue
            _add(found, _scanned(path.stem, path))
        for path in sorted((base / plugins_dir).glob("*.lua")):
            _add(found, _scanned(f"plugins/{path.stem}", path))

    logger.info("Scanned %d config files from %s", len(found), base)
    return list(found.values())


def _scanned(unit: str, path: Path) -> ConfigFragment:
    return ConfigFragment(
        logical_unit=unit,
        origin=ConfigOrigin.SCANNED_FILE,
        content=path.read_text(encoding="utf-8"),
        source=str(path),
    )


def inline_fragments(
    config: Mapping[str, str] | None = None, plugins: Mapping[str, str] | None = None
) -> list[ConfigFragment]:
    """Build fragments from inline ``config`` units and ``plugins`` files."""
    fragments = []
    for unit in CONFIG_UNITS:
        content = (config or {}).get(unit) or ""
        if content:
            fragments.append(
                ConfigFragment(unit, ConfigOrigin.INLINE_DECLARATION, content)
            )
    for name, content in sorted((plugins or {}).items()):
        fragments.append(
            ConfigFragment(f"plugins/{name}", ConfigOrigin.INLINE_DECLARATION, content)
        )
    return fragments


def merge_config_sources(
    scanned: Iterable[ConfigFragment], inline: Iterable[ConfigFragment]
) -> dict[str, ConfigFragment]:
    """Merge both origins into ``target path -> fragment``.

    Raises ``ConfigConflictError`` when a logical unit has content from both
    origins. Content is passed through unchanged.
    """
    merged: dict[str, ConfigFragment] = {}
    for fragment in [*scanned, *inline]:
        _add(merged, fragment)
    return {f.target_path: f for f in sorted(merged.values(), key=lambda f: f.target_path)}
