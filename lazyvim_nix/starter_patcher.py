"""Patch the upstream LazyVim starter ``lazy.lua`` for Nix-managed plugins.

The starter is patched by exact substring replacement. Anchors must match the
upstream text byte for byte (two-space indentation included); if upstream
changes the file, patching fails instead of producing a half-patched config.
"""

from collections.abc import Sequence

from lazyvim_nix.errors import UpstreamDriftError
from lazyvim_nix.models import AnchorPatch

STARTER_SOURCE = "data/starter-lazy.lua"

UPSTREAM_SPEC_ANCHOR = (
    "  spec = {\n"
    "    -- add LazyVim and import its plugins\n"
    '    { "LazyVim/LazyVim", import = "lazyvim.plugins" },\n'
    "    -- import/override with your plugins\n"
    '    { import = "plugins" },\n'
    "  },"
)
SPEC_MARKER = "-- add LazyVim and import its plugins"

UPSTREAM_CHECKER_ANCHOR = (
    "  checker = {\n"
    "    enabled = true, -- check for plugin updates periodically\n"
    "    notify = false, -- notify on update\n"
    "  }, -- automatically check for plugin updates"
)
CHECKER_MARKER = "enabled = true, -- check for plugin updates periodically"

NIX_CHECKER_REPLACEMENT = (
    "  checker = {\n"
    "    enabled = false, -- [NIX] Disabled - Nix manages plugin versions\n"
    "    notify = false,\n"
    "  },\n"
    "  -- [NIX] Disable config change notifications since Nix generates config\n"
    "  change_detection = { notify = false },"
)

DISABLED_PLUGINS = (
    "mason-org/mason.nvim",
    "mason-org/mason-lspconfig.nvim",
    "jay-babu/mason-nvim-dap.nvim",
)

DEFAULT_TREESITTER_SPEC = """{
      "nvim-treesitter/nvim-treesitter",
      event = { "BufReadPost", "BufNewFile", "BufWritePre", "VeryLazy" },
      cmd = { "TSUpdate", "TSInstall", "TSLog", "TSUninstall" },
      -- [NIX] Parser compilation is skipped when using Nix
      build = false,
      opts = {
        auto_install = false,
        ensure_installed = {},
        highlight = { enable = true },
        indent = { enable = true },
        incremental_selection = {
          enable = true,
          keymaps = {
            init_selection = "<C-space>",
            node_incremental = "<C-space>",
            scope_incremental = false,
            node_decremental = "<bs>",
          },
        },
      },
      dev = true,
      pin = true,
    },"""


def _lua_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def nix_spec_content(
    dev_path: str,
    extras_import_specs: Sequence[str],
    available_dev_specs: Sequence[str],
    treesitter_spec: str = DEFAULT_TREESITTER_SPEC,
) -> str:
    """Build the ``spec``/``dev`` block that replaces the upstream spec section."""
    disabled = [f'{{ "{name}", enabled = false }},' for name in DISABLED_PLUGINS]
    lines = [
        "  spec = {",
        "    -- [NIX] LazyVim with dev mode for Nix-managed packages",
        '    { "LazyVim/LazyVim", import = "lazyvim.plugins", dev = true, pin = true },',
        "    -- [NIX] LazyVim extras",
        *(f"    {spec}" for spec in extras_import_specs),
        "    -- [NIX] Mason disabled - Nix provides tools via extraPackages",
        *(f"    {spec}" for spec in disabled),
        "    -- [NIX] Treesitter configured for Nix-managed parsers",
        f"    {treesitter_spec}",
        "    -- [NIX] Available plugins marked as dev (Nix-managed)",
        *(f"    {spec}" for spec in available_dev_specs),
        "    -- User plugins",
        '    { import = "plugins" },',
        "  },",
        "  -- [NIX] Dev path for Nix-symlinked plugins",
        "  dev = {",
        f'    path = "{_lua_string(dev_path)}",',
        "    patterns = {},  -- Don't automatically match, use explicit dev = true",
        "    fallback = false,",
        "  },",
    ]
    return "\n".join(lines)


def starter_patches(
    dev_path: str,
    extras_import_specs: Sequence[str],
    available_dev_specs: Sequence[str],
    treesitter_spec: str = DEFAULT_TREESITTER_SPEC,
) -> list[AnchorPatch]:
    """Return the ordered patches applied to the starter."""
    return [
        AnchorPatch(
            name="spec",
            anchor_text=UPSTREAM_SPEC_ANCHOR,
            replacement_text=nix_spec_content(
                dev_path, extras_import_specs, available_dev_specs, treesitter_spec
            ),
            marker=SPEC_MARKER,
        ),
        AnchorPatch(
            name="checker",
            anchor_text=UPSTREAM_CHECKER_ANCHOR,
            replacement_text=NIX_CHECKER_REPLACEMENT,
            marker=CHECKER_MARKER,
        ),
    ]


def apply_anchor_patches(
    text: str, patches: Sequence[AnchorPatch], source_name: str = STARTER_SOURCE
) -> str:
    """Apply patches in order and assert every anchor is gone afterwards.

    Each anchor must be present verbatim before it is replaced. Any miss
    raises ``UpstreamDriftError``; there is no partially patched result.
    """
    for patch in patches:
        if patch.anchor_text not in text:
            raise UpstreamDriftError(patch.name, patch.marker, source_name)
        text = text.replace(patch.anchor_text, patch.replacement_text)

    for patch in patches:
        if patch.anchor_text in text or patch.marker in text:
            raise UpstreamDriftError(patch.name, patch.marker, source_name)
    return text


def patch_starter_config(
    starter_lua: str,
    *,
    dev_path: str,
    extras_import_specs: Sequence[str] = (),
    available_dev_specs: Sequence[str] = (),
    treesitter_spec: str = DEFAULT_TREESITTER_SPEC,
    starter_version: str = "unknown",
    source_name: str = STARTER_SOURCE,
) -> str:
    """Patch the starter config and prepend a provenance header."""
    patched = apply_anchor_patches(
        starter_lua,
        starter_patches(
            dev_path, extras_import_specs, available_dev_specs, treesitter_spec
        ),
        source_name,
    )
    header = [
        "-- LazyVim Nix Configuration",
        f"-- Based on LazyVim/starter (commit: {starter_version})",
        "-- Patched for Nix compatibility by lazyvim-nix",
        "-- Sections marked [NIX] are Nix-specific modifications",
        "",
    ]
    return "\n".join(header) + "\n" + patched
