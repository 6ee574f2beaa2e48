"""Loading of the curated and generated plugin override tables."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from lazyvim_nix.errors import LazyNixError
from lazyvim_nix.models import MultiModuleEntry

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class OverrideTable:
    """Read-only view over one override table."""

    direct: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    multi_module: Mapping[str, MultiModuleEntry] = field(
        default_factory=lambda: _EMPTY
    )
    source: str = ""

    def __len__(self) -> int:
        """Return the number of entries of both kinds."""
        return len(self.direct) + len(self.multi_module)

    def __contains__(self, identifier: object) -> bool:
        """Check whether the table has any entry for ``identifier``."""
        return identifier in self.direct or identifier in self.multi_module


@dataclass(frozen=True)
class OverrideTables:
    """The curated table plus the generated table pending review."""

    curated: OverrideTable = field(default_factory=OverrideTable)
    generated: OverrideTable = field(default_factory=OverrideTable)


def parse_override_table(data: Mapping[str, Any], source: str = "") -> OverrideTable:
    """Split raw mapping data into direct and multi-module entries."""
    direct: dict[str, str] = {}
    multi: dict[str, MultiModuleEntry] = {}
    for identifier, value in data.items():
        if str(identifier).startswith("_"):
            continue
        if isinstance(value, str):
            direct[str(identifier)] = value
        elif isinstance(value, Mapping) and value.get("package") and value.get(
            "module"
        ):
            multi[str(identifier)] = MultiModuleEntry(
                package=str(value["package"]),
                module=str(value["module"]),
                subpath=str(value.get("subpath") or ""),
            )
        else:
            msg = (
                f"Invalid override entry for {identifier!r} in {source or '<table>'}: "
                "expected a package name or a {package, module} mapping"
            )
            raise LazyNixError(msg)
    return OverrideTable(MappingProxyType(direct), MappingProxyType(multi), source)


def load_override_table(path: str | Path | None) -> OverrideTable:
    """Load an override table from YAML (or JSON), empty if the file is absent."""
    if not path:
        return OverrideTable()
    p = Path(path)
    if not p.exists():
        logger.info("Override table %s not found, using an empty table", p)
        return OverrideTable(source=str(p))
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        msg = f"Override table {p} must contain a mapping at the top level"
        raise LazyNixError(msg)
    table = parse_override_table(data, str(p))
    logger.info(
        "Loaded %d standard mappings and %d multi-module mappings from %s",
        len(table.direct),
        len(table.multi_module),
        p,
    )
    return table


def load_override_tables(
    curated_path: str | Path | None, generated_path: str | Path | None
) -> OverrideTables:
    """Load both override tables for one run."""
    return OverrideTables(
        curated=load_override_table(curated_path),
        generated=load_override_table(generated_path),
    )


def format_override_fragment(mappings: Mapping[str, str]) -> str:
    """Render direct mappings in the syntax of the curated table."""
    if not mappings:
        return ""
    return yaml.safe_dump(
        dict(sorted(mappings.items())),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
