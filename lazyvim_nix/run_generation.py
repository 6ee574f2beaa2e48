"""Orchestration logic for generating the Nix-managed LazyVim configuration."""

import argparse
from pathlib import Path
from typing import Any

from lazyvim_nix.config_generation import (
    EnabledExtra,
    extras_config_files,
    extras_import_specs,
    get_enabled_extras,
    load_extras_metadata,
    support_files,
)
from lazyvim_nix.config_sources import (
    describe_origin,
    inline_fragments,
    merge_config_sources,
    scan_config_files,
)
from lazyvim_nix.config_tree import write_config_tree
from lazyvim_nix.dev_path import (
    DevPathPlan,
    build_dev_path,
    dev_plugin_specs,
    load_package_manifest,
    plan_dev_path,
)
from lazyvim_nix.errors import ConfigConflictError, LazyNixError
from lazyvim_nix.identity_resolver import IdentityResolver
from lazyvim_nix.init_registry import init_registry
from lazyvim_nix.load_config import load_config, registry_settings
from lazyvim_nix.models import ConfigFragment, ResolvedPlugin
from lazyvim_nix.override_tables import load_override_tables
from lazyvim_nix.plugin_records import (
    check_multi_module,
    load_plugin_records,
    plugin_identifiers,
    select_plugins,
)
from lazyvim_nix.registry import ManifestRegistry
from lazyvim_nix.registry_cache import compute_snapshot_key
from lazyvim_nix.resolution_report import ResolutionReport
from lazyvim_nix.starter_patcher import patch_starter_config


def run_generation(args: argparse.Namespace) -> int:
    """Execute the full generation pipeline.

    Everything that can fail is computed first; the dev path and config tree
    are written only once all inputs have been validated.
    """
    config = _init_config(args)

    source_meta, records = load_plugin_records(config["data"]["plugins"])
    enabled_extras = get_enabled_extras(
        config["extras"], load_extras_metadata(config["data"]["extras"])
    )
    selected = select_plugins(records, enabled_extras)
    identifiers = plugin_identifiers(
        selected, config["aliases"], extra=config["extra_plugins"]
    )

    package_roots = load_package_manifest(config["packages"]["manifest"])
    resolved, snapshot_key, cache = _resolve(identifiers, config, package_roots)
    check_multi_module(selected, resolved, config["aliases"])

    plan = plan_dev_path(resolved, package_roots, config["packages"]["store_dir"])
    dev_path = Path(config["output"]["dev_path"]).resolve()

    files = _assemble_files(config, plan, dev_path, enabled_extras)

    report = ResolutionReport(snapshot_key, source_meta)
    report.add_results(resolved)
    report.skipped_in_dev_path = len(plan.skipped)

    _print_summary(resolved, plan)

    if args.dry_run:
        print(f"Dry run complete. {len(files)} files would be written.")
        return 0

    build_dev_path(plan.entries, dev_path)
    written = write_config_tree(files, config["output"]["config_dir"])
    report.generate_report(config["output"]["resolution_report"])
    if cache is not None:
        cache.save()

    print(f"Linked {len(plan.entries)} plugins into: {dev_path}")
    print(f"Generated {written} config files into: {config['output']['config_dir']}")
    if report.unresolved:
        print(
            f"{len(report.unresolved)} plugins are unmapped. "
            "Run 'lazyvim-nix suggest' to generate mapping suggestions."
        )
    return 0


def _init_config(args: argparse.Namespace) -> dict[str, Any]:
    """Load settings and apply command line overrides."""
    config = load_config(args.config)
    if getattr(args, "out_dir", None):
        config["output"]["config_dir"] = str(args.out_dir)
    if getattr(args, "dev_path", None):
        config["output"]["dev_path"] = str(args.dev_path)
    if getattr(args, "accept_generated", False):
        config["mappings"]["accept_generated"] = True
    if getattr(args, "max_workers", None):
        config["resolution"]["max_workers"] = args.max_workers
    packages = config["packages"]
    if not packages.get("manifest") and not packages.get("store_dir"):
        msg = (
            "Set packages.manifest or packages.store_dir in the settings file; "
            "generate needs one of them to locate built plugins"
        )
        raise LazyNixError(msg)
    return config


def _resolve(
    identifiers: list[str], config: dict[str, Any], package_roots: dict[str, str]
) -> tuple[list[ResolvedPlugin], str, Any]:
    """Resolve identifiers against the manifest or the live registry."""
    tables = load_override_tables(
        config["mappings"]["curated"], config["mappings"]["generated"]
    )
    if package_roots:
        registry: Any = ManifestRegistry(package_roots)
        snapshot_key = compute_snapshot_key(
            {"manifest": config["packages"]["manifest"], **registry_settings(config)}
        )
        cache = None
    else:
        registry, snapshot_key = init_registry(config)
        cache = registry.cache

    resolver = IdentityResolver(
        tables, registry, accept_generated=config["mappings"]["accept_generated"]
    )
    resolved = resolver.resolve_all(
        identifiers, max_workers=int(config["resolution"]["max_workers"])
    )
    return resolved, snapshot_key, cache


def _read_starter(config: dict[str, Any]) -> tuple[str, str, str]:
    """Read the upstream starter and its version tag."""
    starter_path = Path(config["data"]["starter"])
    if not starter_path.exists():
        msg = f"Upstream starter config not found: {starter_path}"
        raise LazyNixError(msg)
    version_path = Path(config["data"]["starter_version"])
    version = (
        version_path.read_text(encoding="utf-8").strip()
        if version_path.exists()
        else "unknown"
    )
    return starter_path.read_text(encoding="utf-8"), version, str(starter_path)


def _assemble_files(
    config: dict[str, Any],
    plan: DevPathPlan,
    dev_path: Path,
    enabled_extras: list[EnabledExtra],
) -> dict[str, str]:
    """Compute every file of the config tree in memory."""
    starter_lua, starter_version, starter_source = _read_starter(config)
    init_lua = patch_starter_config(
        starter_lua,
        dev_path=str(dev_path),
        extras_import_specs=extras_import_specs(enabled_extras),
        available_dev_specs=dev_plugin_specs(plan.entries),
        starter_version=starter_version,
        source_name=starter_source,
    )

    fragments = merge_config_sources(
        scan_config_files(config["config_files"]),
        inline_fragments(config["config"], config["plugins"]),
    )

    files: dict[str, str] = {"init.lua": init_lua}
    files.update({path: f.content for path, f in fragments.items()})
    has_user_plugins = any(p.startswith("lua/plugins/") for p in fragments)

    _add_generated(files, fragments, extras_config_files(enabled_extras), "extras")
    _add_generated(
        files,
        fragments,
        support_files(has_user_plugins=has_user_plugins),
        "lazyvim-nix support",
    )
    return files


def _add_generated(
    files: dict[str, str],
    fragments: dict[str, ConfigFragment],
    generated: dict[str, str],
    kind: str,
) -> None:
    """Add generated files, refusing to replace a user fragment."""
    for path, text in generated.items():
        if path in files:
            owner = fragments.get(path)
            raise ConfigConflictError(
                path,
                f"{kind} configuration",
                describe_origin(owner) if owner else "generated configuration",
            )
        files[path] = text


def _print_summary(resolved: list[ResolvedPlugin], plan: DevPathPlan) -> None:
    counts: dict[str, int] = {}
    for r in resolved:
        counts[r.resolution_method.value] = counts.get(r.resolution_method.value, 0) + 1
    print("=== Plugin Resolution Summary ===")
    print(f"Total plugins: {len(resolved)}")
    for method, count in sorted(counts.items()):
        print(f"  {method}: {count}")
    print(f"Dev path links: {len(plan.entries)} (skipped unresolved: {len(plan.skipped)})")
