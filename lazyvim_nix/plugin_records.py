"""Read the scanner's plugin records and select the plugins to package."""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from lazyvim_nix.config_generation import EnabledExtra
from lazyvim_nix.errors import LazyNixError
from lazyvim_nix.models import PluginRecord, ResolvedPlugin
from lazyvim_nix.normalize_name import normalize_name

logger = logging.getLogger(__name__)


def parse_plugin_record(raw: Mapping[str, Any]) -> PluginRecord:
    """Build a ``PluginRecord`` from one scanner JSON object."""
    deps = raw.get("dependencies") or []
    if isinstance(deps, str):
        deps = [deps]
    return PluginRecord(
        name=raw.get("name"),
        dependencies=[d for d in deps if isinstance(d, str)],
        multi_module=raw.get("multiModule"),
        source_file=str(raw.get("source_file") or ""),
        is_core=bool(raw.get("is_core", False)),
        user_plugin=bool(raw.get("user_plugin", False)),
    )


def load_plugin_records(path: str | Path) -> tuple[dict[str, Any], list[PluginRecord]]:
    """Load ``plugins.json``; returns the document metadata and its records."""
    p = Path(path)
    if not p.exists():
        msg = f"Plugin data file not found: {p}"
        raise LazyNixError(msg)
    try:
        doc = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"Plugin data file {p} is not valid JSON: {e}"
        raise LazyNixError(msg) from e

    records = [
        parse_plugin_record(item)
        for item in doc.get("plugins") or []
        if isinstance(item, Mapping)
    ]
    meta = {k: v for k, v in doc.items() if k != "plugins"}
    return meta, records


def select_plugins(
    records: Iterable[PluginRecord], enabled_extras: Iterable[EnabledExtra]
) -> list[PluginRecord]:
    """Keep core plugins, plugins of enabled extras, and user plugins."""
    enabled_files = {extra.source_file for extra in enabled_extras}
    return [
        r
        for r in records
        if r.is_core or r.user_plugin or r.source_file in enabled_files
    ]


def plugin_identifiers(
    records: Iterable[PluginRecord],
    aliases: Mapping[str, str] | None = None,
    extra: Iterable[str] = (),
) -> list[str]:
    """Normalize record names and their dependencies into unique identifiers.

    Order is preserved: each record is followed by its dependencies, then any
    ``extra`` names. The first occurrence of an identifier wins.
    """
    seen: dict[str, None] = {}
    for record in records:
        seen.setdefault(normalize_name(record.name, aliases), None)
        for dep in record.dependencies:
            seen.setdefault(normalize_name(dep, aliases), None)
    for name in extra:
        seen.setdefault(normalize_name(name, aliases), None)
    return list(seen)


def check_multi_module(
    records: Iterable[PluginRecord],
    resolved: Iterable[ResolvedPlugin],
    aliases: Mapping[str, str] | None = None,
) -> list[str]:
    """Compare the scanner's multi-module hints with the resolution results.

    Returns the identifiers whose hinted package or module differs from how
    they were resolved. Unresolved identifiers are left to the unmapped report.
    """
    by_identifier = {r.identifier: r for r in resolved}
    mismatched = []
    for record in records:
        hint = record.multi_module
        if not isinstance(hint, Mapping):
            continue
        identifier = normalize_name(record.name, aliases)
        result = by_identifier.get(identifier)
        if result is None or not result.is_resolved:
            continue
        expected = (hint.get("basePackage"), hint.get("module"))
        actual = (result.local_package, result.module_name)
        if expected != actual:
            logger.warning(
                "%s: scanner reports multi-module package %s (module %s) but it "
                "resolved to %s (module %s) via %s",
                identifier,
                expected[0],
                expected[1],
                actual[0],
                actual[1],
                result.resolution_method.value,
            )
            mismatched.append(identifier)
    return mismatched
