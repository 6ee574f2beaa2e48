"""Command line entry point for lazyvim-nix.

Subcommands:

- ``generate``: resolve plugins, build the dev path and write the config tree.
- ``suggest``: analyze unmapped plugins and write the mapping report.
- ``merge-mappings``: append verified mappings to the curated table.
"""

import argparse
import logging
from pathlib import Path

from lazyvim_nix.errors import LazyNixError
from lazyvim_nix.load_config import load_config
from lazyvim_nix.merge_mappings import merge_mappings
from lazyvim_nix.run_generation import run_generation
from lazyvim_nix.run_suggestions import run_suggestions


def _run_merge(args: argparse.Namespace) -> int:
    mappings = load_config(args.config)["mappings"]
    curated = args.curated or mappings["curated"]
    fragment = args.fragment or mappings["generated"]
    if not args.fragment and not Path(fragment).exists():
        print(f"No generated mappings to merge ({fragment} does not exist)")
        return 0
    added = merge_mappings(curated, fragment)
    print(f"Merged {added} mappings into {curated}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    ap = argparse.ArgumentParser(
        prog="lazyvim-nix",
        description="Package LazyVim plugins from nixpkgs into a dev path overlay.",
    )
    ap.add_argument("--config", help="Path to the settings file (YAML)")
    ap.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = ap.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate the dev path and config tree")
    gen.add_argument("--out-dir", type=Path, help="Config tree output directory")
    gen.add_argument("--dev-path", type=Path, help="Dev path overlay directory")
    gen.add_argument(
        "--accept-generated",
        action="store_true",
        help="Also consult the generated override table (pending review)",
    )
    gen.add_argument("--max-workers", type=int, help="Parallel resolution workers")
    gen.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and validate without writing files",
    )
    gen.set_defaults(func=run_generation)

    sug = sub.add_parser("suggest", help="Suggest mappings for unmapped plugins")
    sug.add_argument(
        "--verify",
        action="store_true",
        help="Verify candidate names against the nixpkgs registry",
    )
    sug.add_argument("--report", help="Path of the Markdown report")
    sug.add_argument("--max-workers", type=int, help="Parallel lookup workers")
    sug.add_argument(
        "--dry-run", action="store_true", help="Analyze without writing files"
    )
    sug.set_defaults(func=run_suggestions)

    merge = sub.add_parser(
        "merge-mappings", help="Merge verified mappings into the curated table"
    )
    merge.add_argument(
        "fragment",
        nargs="?",
        help=(
            "Generated mapping table or mapping analysis report (.md) "
            "(default: mappings.generated from settings)"
        ),
    )
    merge.add_argument(
        "--curated", help="Curated mapping table (default: from settings)"
    )
    merge.set_defaults(func=_run_merge)
    return ap


def main(argv: list[str] | None = None) -> int:
    """Run the selected subcommand."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except LazyNixError as e:
        msg = f"Error: {e}"
        raise SystemExit(msg) from e


if __name__ == "__main__":
    raise SystemExit(main())
