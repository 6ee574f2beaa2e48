"""Append reviewed, verified mappings to the curated override table."""

import logging
from pathlib import Path

import yaml

from lazyvim_nix.errors import LazyNixError, MappingMergeError
from lazyvim_nix.mapping_report import extract_fragment
from lazyvim_nix.override_tables import (
    format_override_fragment,
    load_override_table,
    parse_override_table,
)

logger = logging.getLogger(__name__)

MERGE_HEADER = "# Verified mappings merged from the mapping analysis"


def read_fragment(path: str | Path) -> dict[str, str]:
    """Read direct mappings from a fragment file or a Markdown report."""
    p = Path(path)
    if not p.exists():
        msg = f"Mapping fragment not found: {p}"
        raise LazyNixError(msg)
    text = p.read_text(encoding="utf-8")
    if p.suffix == ".md":
        text = extract_fragment(text)
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        msg = f"Mapping fragment {p} must contain a mapping"
        raise LazyNixError(msg)
    table = parse_override_table(data, str(p))
    if table.multi_module:
        msg = f"Mapping fragment {p} may only contain direct mappings"
        raise LazyNixError(msg)
    return dict(table.direct)


def merge_mappings(curated_path: str | Path, fragment_path: str | Path) -> int:
    """Append new mappings from ``fragment_path`` to the curated table.

    Existing entries are never rewritten. A fragment entry that disagrees with
    the curated table aborts the merge before anything is written. Returns the
    number of mappings added.
    """
    curated = load_override_table(curated_path)
    fragment = read_fragment(fragment_path)

    new: dict[str, str] = {}
    for identifier, package in sorted(fragment.items()):
        if identifier in curated.multi_module:
            msg = (
                f"Cannot merge '{identifier}': the curated table maps it as a "
                "multi-module plugin"
            )
            raise MappingMergeError(msg)
        current = curated.direct.get(identifier)
        if current is None:
            new[identifier] = package
        elif current != package:
            msg = (
                f"Cannot merge '{identifier}' -> '{package}': the curated table "
                f"already maps it to '{current}'"
            )
            raise MappingMergeError(msg)

    if not new:
        logger.info("No new mappings to merge into %s", curated_path)
        return 0

    p = Path(curated_path)
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if existing and not existing.endswith("\n"):
        existing += "\n"
    separator = "\n" if existing else ""
    p.write_text(
        existing + separator + MERGE_HEADER + "\n" + format_override_fragment(new),
        encoding="utf-8",
    )
    return len(new)
