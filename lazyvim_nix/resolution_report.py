"""Machine-readable summary of a resolution run."""

import json
import time
from pathlib import Path
from typing import Any

from lazyvim_nix.models import ResolutionMethod, ResolvedPlugin


class ResolutionReport:
    """Collects resolved plugins and summarizes how they were mapped."""

    def __init__(self, snapshot_key: str, source: dict[str, Any] | None = None) -> None:
        """Initialize the report with registry and scanner metadata."""
        self.snapshot_key = snapshot_key
        self.source = source or {}
        self.results: list[ResolvedPlugin] = []
        self.skipped_in_dev_path = 0
        self.start_time = time.time()

    def add_results(self, results: list[ResolvedPlugin]) -> None:
        """Add resolution results to the report."""
        self.results.extend(results)

    @property
    def unresolved(self) -> list[str]:
        """Identifiers that could not be mapped."""
        return [r.identifier for r in self.results if not r.is_resolved]

    def to_dict(self) -> dict[str, Any]:
        """Build the JSON payload."""
        return {
            "meta": {
                "timestamp": time.time(),
                "duration": time.time() - self.start_time,
                "snapshot_key": self.snapshot_key,
                "lazyvim_version": self.source.get("version"),
                "lazyvim_commit": self.source.get("commit"),
                "total_plugins": len(self.results),
            },
            "results": [
                {
                    "identifier": r.identifier,
                    "local_package": r.local_package,
                    "module": r.module_name,
                    "resolution_method": r.resolution_method.value,
                    "verified": r.verified,
                    "candidate": r.candidate,
                }
                for r in self.results
            ],
            "stats": self._compute_stats(),
        }

    def generate_report(self, path: str | Path) -> None:
        """Write the summary report to a JSON file."""
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    def _compute_stats(self) -> dict[str, Any]:
        method_counts = {m.value: 0 for m in ResolutionMethod}
        packages: dict[str, int] = {}
        for r in self.results:
            method_counts[r.resolution_method.value] += 1
            if r.local_package:
                packages[r.local_package] = packages.get(r.local_package, 0) + 1

        total = len(self.results)
        unresolved = method_counts[ResolutionMethod.UNRESOLVED.value]
        return {
            "method_counts": method_counts,
            "mapped_plugins": total - unresolved,
            "unmapped_plugins": unresolved,
            "multi_module_plugins": method_counts[
                ResolutionMethod.MULTI_MODULE_OVERRIDE.value
            ],
            "shared_packages": sorted(p for p, c in packages.items() if c > 1),
            "skipped_in_dev_path": self.skipped_in_dev_path,
            "mapped_share": ((total - unresolved) / total) if total > 0 else 0,
        }
