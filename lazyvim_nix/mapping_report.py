"""Markdown report for unresolved plugin identifiers and suggested mappings."""

from datetime import datetime, timezone
from pathlib import Path

from lazyvim_nix.md_table import md_table
from lazyvim_nix.suggest_mappings import MappingAnalysis, PluginSuggestion

VERIFIED_HEADING = "## ✅ Verified Mappings"
UNVERIFIED_HEADING = "## ⚠️ Unverified Suggestions"
NO_CANDIDATES_HEADING = "## ❓ No Suggestions"


def format_report(
    analysis: MappingAnalysis, *, curated_table: str = "data/mappings.yml"
) -> str:
    """Render the mapping analysis as Markdown."""
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    parts = [
        "# Plugin Mapping Analysis Report",
        "",
        f"Generated: {generated}",
        "",
        f"- Unmapped plugins analyzed: {analysis.total}",
        f"- Verified mappings: {len(analysis.verified)}",
        f"- Unverified suggestions: {len(analysis.unverified)}",
        f"- Without suggestions: {len(analysis.no_candidates)}",
        (
            "- Registry verification: "
            + ("enabled" if analysis.verification_enabled else "disabled")
        ),
        "",
    ]

    parts += [VERIFIED_HEADING, ""]
    verified = analysis.verified_mappings()
    if verified:
        parts += [
            "These candidates were confirmed to exist in the package registry.",
            "",
            md_table(
                ["Plugin", "Package", "Rule"],
                [
                    [f"`{s.identifier}`", f"`{s.verified_name}`", _rule_for(s)]
                    for s in analysis.verified
                ],
            ),
            "",
            f"Append this fragment to `{curated_table}`:",
            "",
            "```yaml",
            analysis.override_fragment().rstrip(),
            "```",
            "",
        ]
    else:
        parts += ["No verified mappings.", ""]

    parts += [UNVERIFIED_HEADING, ""]
    if analysis.unverified:
        parts += [
            "These names are plausible but were not confirmed. Review them by hand.",
            "",
        ]
        for s in analysis.unverified:
            parts += [f"### `{s.identifier}`", ""]
            parts.append(
                md_table(
                    ["Candidate", "Confidence", "Rule", "Status"],
                    [
                        [f"`{c.name}`", c.confidence, c.rule, c.status]
                        for c in s.candidates
                    ],
                )
            )
            parts.append("")
    else:
        parts += ["No unverified suggestions.", ""]

    if analysis.no_candidates:
        parts += [NO_CANDIDATES_HEADING, ""]
        parts.extend(f"- `{identifier}`" for identifier in analysis.no_candidates)
        parts.append("")

    return "\n".join(parts).rstrip() + "\n"


def _rule_for(suggestion: PluginSuggestion) -> str:
    for c in suggestion.candidates:
        if c.name == suggestion.verified_name:
            return c.rule
    return ""


def extract_fragment(report_text: str) -> str:
    """Return the override fragment embedded in the verified section, if any."""
    start = report_text.find(VERIFIED_HEADING)
    if start == -1:
        return ""
    end = report_text.find(UNVERIFIED_HEADING, start)
    section = report_text[start : end if end != -1 else None]
    fence = section.find("```yaml\n")
    if fence == -1:
        return ""
    body_start = fence + len("```yaml\n")
    body_end = section.find("```", body_start)
    return section[body_start:body_end]


def write_report(analysis: MappingAnalysis, path: str | Path, **kwargs: str) -> Path:
    """Write the report to ``path`` and return it."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(format_report(analysis, **kwargs), encoding="utf-8")
    return out
