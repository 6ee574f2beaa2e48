"""Orchestration logic for analyzing unmapped plugins and suggesting mappings."""

import argparse
from pathlib import Path

from lazyvim_nix.identity_resolver import IdentityResolver
from lazyvim_nix.init_registry import init_registry
from lazyvim_nix.load_config import load_config
from lazyvim_nix.mapping_report import write_report
from lazyvim_nix.override_tables import load_override_tables
from lazyvim_nix.plugin_records import load_plugin_records, plugin_identifiers
from lazyvim_nix.resolution_report import ResolutionReport
from lazyvim_nix.suggest_mappings import MappingAnalysis, SuggestionEngine


def run_suggestions(args: argparse.Namespace) -> int:
    """Resolve every scanned plugin and report mappings for the unresolved ones."""
    config = load_config(args.config)
    verify = bool(args.verify or config["registry"]["verify"])

    source_meta, records = load_plugin_records(config["data"]["plugins"])
    identifiers = plugin_identifiers(
        records, config["aliases"], extra=config["extra_plugins"]
    )

    tables = load_override_tables(
        config["mappings"]["curated"], config["mappings"]["generated"]
    )
    registry, snapshot_key = init_registry(config)
    resolver = IdentityResolver(tables, registry)
    workers = int(args.max_workers or config["resolution"]["max_workers"])
    resolved = resolver.resolve_all(identifiers, max_workers=workers)

    report = ResolutionReport(snapshot_key, source_meta)
    report.add_results(resolved)
    unresolved = report.unresolved

    print("=== Plugin Mapping Summary ===")
    print(f"Total plugins: {len(resolved)}")
    print(f"Mapped plugins: {len(resolved) - len(unresolved)}")
    print(f"Unmapped plugins: {len(unresolved)}")

    engine = SuggestionEngine(registry, verify=verify, max_workers=workers)
    analysis = engine.analyze(unresolved)

    report_path = args.report or config["output"]["report"]
    if not args.dry_run:
        write_report(analysis, report_path, curated_table=config["mappings"]["curated"])
        report.generate_report(config["output"]["resolution_report"])
        _write_generated_table(analysis, config["mappings"]["generated"])
        if registry.cache is not None:
            registry.cache.save()
        print(f"Generated mapping analysis report: {report_path}")

    if unresolved:
        print(f"Verified mappings: {len(analysis.verified)}")
        print(f"Unverified suggestions: {len(analysis.unverified)}")
        print(
            f"Review {report_path} and merge approved mappings with "
            "'lazyvim-nix merge-mappings'"
        )
    return 0


def _write_generated_table(analysis: MappingAnalysis, path: str) -> None:
    """Replace the generated table with this run's verified mappings.

    A run without verified mappings removes the table, so entries from an
    earlier run never outlive the registry answer that produced them.
    """
    generated = Path(path)
    fragment = analysis.override_fragment()
    if not fragment:
        if generated.exists():
            generated.unlink()
            print(f"No verified mappings; removed stale {generated}")
        return
    generated.parent.mkdir(parents=True, exist_ok=True)
    generated.write_text(fragment, encoding="utf-8")
    print(f"Wrote {len(analysis.verified)} verified mappings to {generated}")
