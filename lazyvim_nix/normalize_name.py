"""Canonicalize raw plugin names into ``owner/repo`` identifiers."""

import re
from collections.abc import Mapping

from lazyvim_nix.errors import MalformedIdentifierError

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]+/[A-Za-z0-9_.-]+$")

# Short names LazyVim uses without an owner segment.
SHORT_ALIASES: dict[str, str] = {
    "mason.nvim": "mason-org/mason.nvim",
    "gitsigns.nvim": "lewis6991/gitsigns.nvim",
    "snacks.nvim": "folke/snacks.nvim",
}


def normalize_name(raw: object, aliases: Mapping[str, str] | None = None) -> str:
    """Return the canonical identifier for a raw plugin name.

    Full ``owner/repo`` names pass through unchanged. Bare names are expanded
    through the alias table; anything else is rejected.
    """
    if not isinstance(raw, str):
        raise MalformedIdentifierError(raw)

    name = raw.strip()
    if IDENTIFIER_RE.match(name):
        return name

    table = SHORT_ALIASES if aliases is None else aliases
    expanded = table.get(name)
    if expanded is None or not IDENTIFIER_RE.match(expanded):
        raise MalformedIdentifierError(raw)
    return expanded


def repo_segment(identifier: str) -> str:
    """Return the repository part of an ``owner/repo`` identifier."""
    return identifier.split("/", 1)[1]
