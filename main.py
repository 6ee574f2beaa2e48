"""Main orchestration script for refreshing plugin mappings and the LazyVim config."""

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path


def run_command(cmd_list: Sequence[str | Path], cwd: Path | str | None = None) -> None:
    """Run a command and exit if it fails."""
    cmd_str = " ".join(str(x) for x in cmd_list)
    print(f"Running: {cmd_str}")
    try:
        subprocess.run(cmd_list, check=True, cwd=cwd)
    except subprocess.CalledProcessError as e:
        print(f"Error executing command: {cmd_str}")
        sys.exit(e.returncode)


def main() -> None:
    """Run the mapping analysis followed by config generation."""
    parser = argparse.ArgumentParser(
        description="Analyze plugin mappings and generate the LazyVim config."
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Verify suggested mappings against nixpkgs",
    )
    parser.add_argument(
        "--merge-verified",
        action="store_true",
        help="Merge verified suggestions into the curated mapping table first",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Analyze and validate without writing files",
    )
    parser.add_argument(
        "--config",
        help="Path to settings file",
    )
    args = parser.parse_args()

    root_dir = Path(__file__).parent
    base_cmd = [sys.executable, "-m", "lazyvim_nix.cli"]
    if args.config:
        base_cmd.extend(["--config", args.config])

    print("--- Step 1: Analyzing unmapped plugins ---")
    suggest_cmd = [*base_cmd, "suggest"]
    if args.verify:
        suggest_cmd.append("--verify")
    if args.dry_run:
        suggest_cmd.append("--dry-run")
    run_command(suggest_cmd, cwd=root_dir)

    if args.merge_verified and not args.dry_run:
        print("\n--- Step 2: Merging verified mappings ---")
        run_command([*base_cmd, "merge-mappings"], cwd=root_dir)

    print("\n--- Step 3: Generating dev path and config tree ---")
    generate_cmd = [*base_cmd, "generate"]
    if args.dry_run:
        generate_cmd.append("--dry-run")
    run_command(generate_cmd, cwd=root_dir)

    print("\nSUCCESS: LazyVim configuration generated")


if __name__ == "__main__":
    main()
