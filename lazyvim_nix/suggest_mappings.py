"""Candidate mapping suggestions for identifiers the resolver could not map.

Unlike ``local_name_for``, these heuristics enumerate several plausible
nixpkgs names per identifier and rank them. They only run on identifiers the
resolver left unresolved.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from lazyvim_nix.local_name_for import local_name_for
from lazyvim_nix.override_tables import format_override_fragment
from lazyvim_nix.registry import PACKAGE_NAME_RE, RegistryAnswer

logger = logging.getLogger(__name__)

SUFFIXES = (".nvim", "-nvim", ".vim", "-vim", ".lua", "-lua")
PREFIXES = ("nvim-", "vim-")
GENERIC_REPO_NAMES = {"nvim", "vim", "neovim", "lua"}

HIGH = "high"
MEDIUM = "medium"
LOW = "low"


@dataclass
class Candidate:
    """A single proposed local package name."""

    name: str
    rule: str
    confidence: str
    status: str = "unchecked"  # unchecked/exists/missing/error


@dataclass
class PluginSuggestion:
    """All candidates proposed for one unresolved identifier."""

    identifier: str
    candidates: list[Candidate] = field(default_factory=list)
    verified_name: str | None = None


@dataclass
class MappingAnalysis:
    """Suggestions partitioned by verification outcome."""

    verified: list[PluginSuggestion] = field(default_factory=list)
    unverified: list[PluginSuggestion] = field(default_factory=list)
    no_candidates: list[str] = field(default_factory=list)
    verification_enabled: bool = False

    @property
    def total(self) -> int:
        """Return the number of analyzed identifiers."""
        return len(self.verified) + len(self.unverified) + len(self.no_candidates)

    def verified_mappings(self) -> dict[str, str]:
        """Return identifier -> package for verified suggestions only."""
        return {
            s.identifier: s.verified_name
            for s in self.verified
            if s.verified_name is not None
        }

    def override_fragment(self) -> str:
        """Return the verified mappings as an override table fragment."""
        return format_override_fragment(self.verified_mappings())


def _strip_affixes(repo: str) -> str:
    base = repo
    for suffix in SUFFIXES:
        if base.lower().endswith(suffix):
            base = base[: -len(suffix)]
            break
    for prefix in PREFIXES:
        if base.lower().startswith(prefix):
            base = base[len(prefix) :]
            break
    return base


def candidate_names(identifier: str) -> list[Candidate]:
    """Enumerate ranked candidate package names for ``identifier``."""
    owner, repo = identifier.split("/", 1)
    proposals: list[tuple[str, str, str]] = [
        (local_name_for(identifier), "automatic", HIGH),
        (repo.replace(".", "-"), "dots_to_hyphens", HIGH),
        (repo.replace("-", "_").replace(".", "_"), "all_underscores", MEDIUM),
        (repo.replace(".", "-").replace("_", "-"), "all_hyphens", MEDIUM),
        (repo.lower(), "lowercase", MEDIUM),
        (repo.lower().replace(".", "-"), "lowercase_dots_to_hyphens", MEDIUM),
    ]

    base = _strip_affixes(repo)
    if base and base != repo:
        proposals += [
            (f"{base}-nvim", "normalized_suffix", MEDIUM),
            (base, "stripped_affixes", LOW),
            (base.replace("-", "_"), "stripped_affixes_underscores", LOW),
            (f"nvim-{base}", "nvim_prefix", LOW),
        ]

    if repo.lower() in GENERIC_REPO_NAMES or _strip_affixes(repo) == "":
        proposals += [
            (f"{owner}-{repo}".replace(".", "-"), "owner_qualified", MEDIUM),
            (f"{owner}-{repo}".lower().replace(".", "-"), "owner_qualified_lower", MEDIUM),
            (owner, "owner_only", LOW),
            (owner.lower(), "owner_only_lower", LOW),
        ]

    seen: set[str] = set()
    out: list[Candidate] = []
    for name, rule, confidence in proposals:
        if not name or name in seen or not PACKAGE_NAME_RE.match(name):
            continue
        seen.add(name)
        out.append(Candidate(name=name, rule=rule, confidence=confidence))
    return out


class SuggestionEngine:
    """Proposes and optionally verifies mappings for unresolved identifiers."""

    def __init__(
        self, registry: object, *, verify: bool = False, max_workers: int = 4
    ) -> None:
        """Configure registry access; ``verify`` enables registry lookups."""
        self.registry = registry
        self.verify = verify
        self.max_workers = max_workers

    def suggest(self, identifier: str) -> PluginSuggestion:
        """Build and (optionally) verify candidates for one identifier."""
        suggestion = PluginSuggestion(identifier, candidate_names(identifier))
        if not self.verify:
            return suggestion

        for candidate in suggestion.candidates:
            try:
                answer = self.registry.query(candidate.name)
            except Exception:
                logger.exception(
                    "Registry lookup for %s (%s) failed", candidate.name, identifier
                )
                answer = RegistryAnswer.ERROR

            candidate.status = answer.value
            if answer is RegistryAnswer.EXISTS:
                suggestion.verified_name = candidate.name
                break
            if answer is RegistryAnswer.ERROR:
                logger.warning(
                    "Could not verify %s for %s; treating it as not found",
                    candidate.name,
                    identifier,
                )
        return suggestion

    def analyze(self, identifiers: Sequence[str]) -> MappingAnalysis:
        """Analyze all unresolved identifiers and partition the results."""
        unique = list(dict.fromkeys(identifiers))
        if self.max_workers > 1 and len(unique) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                suggestions = list(pool.map(self.suggest, unique))
        else:
            suggestions = [self.suggest(i) for i in unique]

        analysis = MappingAnalysis(verification_enabled=self.verify)
        for s in suggestions:
            if s.verified_name is not None:
                analysis.verified.append(s)
            elif s.candidates:
                analysis.unverified.append(s)
            else:
                analysis.no_candidates.append(s.identifier)
        return analysis
