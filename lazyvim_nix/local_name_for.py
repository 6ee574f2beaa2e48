"""Deterministic mapping from a repository name to a nixpkgs attribute name."""

from lazyvim_nix.normalize_name import repo_segment

PLUGIN_SUFFIX = ".nvim"
NORMALIZED_SUFFIX = "-nvim"
PLUGIN_PREFIX = "nvim-"


def local_name_for(identifier: str) -> str:
    """Derive the single automatic candidate for ``identifier``.

    Rules, first match wins:
    - ``name.nvim`` becomes ``name-nvim``.
    - ``name-nvim`` is kept.
    - ``nvim-name`` is kept.
    - Otherwise hyphens become underscores and dots become hyphens.
    """
    repo = repo_segment(identifier)
    if repo.endswith(PLUGIN_SUFFIX):
        return repo[: -len(PLUGIN_SUFFIX)] + NORMALIZED_SUFFIX
    if repo.endswith(NORMALIZED_SUFFIX):
        return repo
    if repo.startswith(PLUGIN_PREFIX):
        return repo
    return repo.replace("-", "_").replace(".", "-")
