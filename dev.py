"""Development script to run checks (linting, tests) and the generation pipeline."""

import argparse
import subprocess
import sys

COVERAGE_THRESHOLD = 85


def run_command(command: list[str], step_name: str) -> None:
    """Run a shell command as a step in the development process."""
    print(f"\n--- Running Step: {step_name} ---")
    print(f"$ {' '.join(command)}")
    try:
        subprocess.run(command, check=True)
    except subprocess.CalledProcessError:
        print(f"\n❌ Failed: {step_name}")
        sys.exit(1)


def check_steps() -> list[tuple[list[str], str]]:
    """Lint and test commands shared by local and CI runs."""
    return [
        (["ruff", "check", "."], "Ruff Linting"),
        (["ruff", "format", "--check", "."], "Ruff Format Check"),
        (
            [
                sys.executable,
                "-m",
                "pytest",
                "--cov=lazyvim_nix",
                "--cov-report=term-missing",
                f"--cov-fail-under={COVERAGE_THRESHOLD}",
            ],
            "Tests",
        ),
    ]


def main() -> None:
    """Run the development checks and optionally a dry run of main.py."""
    parser = argparse.ArgumentParser(
        description="Run development checks and a dry run of the pipeline."
    )
    parser.add_argument(
        "--ci", action="store_true", help="Run checks and tests only, skipping main.py"
    )
    parser.add_argument(
        "--config",
        help="Settings file for the pipeline dry run (it needs packages.manifest "
        "or packages.store_dir)",
    )
    args = parser.parse_args()

    if not args.ci:
        run_command(["ruff", "format", "."], "Ruff Formatting")
        run_command(["ruff", "check", "--fix", "."], "Ruff Linting & Fixes")

    for command, step_name in check_steps():
        run_command(command, step_name)

    if args.ci or not args.config:
        print("\n✅ Checks passed successfully. Skipping execution of main.py.")
        return

    run_command(
        [sys.executable, "main.py", "--dry-run", "--config", args.config],
        "Pipeline Dry Run",
    )

    print("\n✅ All development checks and the pipeline dry run passed successfully.")


if __name__ == "__main__":
    main()
