"""Map canonical plugin identifiers to local nixpkgs packages."""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from lazyvim_nix.local_name_for import local_name_for
from lazyvim_nix.models import ResolutionMethod, ResolvedPlugin
from lazyvim_nix.override_tables import OverrideTable, OverrideTables
from lazyvim_nix.registry import RegistryAnswer

logger = logging.getLogger(__name__)

Strategy = Callable[[str], ResolvedPlugin | None]


class IdentityResolver:
    """Resolves identifiers through an ordered list of strategies.

    Strategies are tried in order and the first one that returns a result
    wins; later strategies are never consulted for that identifier.
    """

    def __init__(
        self,
        tables: OverrideTables,
        registry: object,
        *,
        accept_generated: bool = False,
    ) -> None:
        """Bind the override snapshot and the registry used for existence checks."""
        self.tables = tables
        self.registry = registry
        self.override_tables: tuple[OverrideTable, ...] = (
            (tables.curated, tables.generated) if accept_generated else (tables.curated,)
        )
        self.strategies: tuple[Strategy, ...] = (
            self._multi_module_override,
            self._direct_override,
            self._automatic,
        )

    def resolve(self, identifier: str) -> ResolvedPlugin:
        """Resolve a single identifier. Always returns exactly one result."""
        for strategy in self.strategies:
            result = strategy(identifier)
            if result is not None:
                return result
        return ResolvedPlugin(
            identifier=identifier,
            local_package=None,
            resolution_method=ResolutionMethod.UNRESOLVED,
            verified=False,
            candidate=local_name_for(identifier),
        )

    def resolve_all(
        self, identifiers: Sequence[str], max_workers: int = 8
    ) -> list[ResolvedPlugin]:
        """Resolve identifiers concurrently, keeping input order."""
        if max_workers <= 1 or len(identifiers) <= 1:
            return [self.resolve(i) for i in identifiers]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(self.resolve, identifiers))

    def _multi_module_override(self, identifier: str) -> ResolvedPlugin | None:
        for table in self.override_tables:
            entry = table.multi_module.get(identifier)
            if entry is not None:
                return ResolvedPlugin(
                    identifier=identifier,
                    local_package=entry.package,
                    resolution_method=ResolutionMethod.MULTI_MODULE_OVERRIDE,
                    verified=True,
                    module_name=entry.module,
                    subpath=entry.subpath,
                )
        return None

    def _direct_override(self, identifier: str) -> ResolvedPlugin | None:
        for table in self.override_tables:
            package = table.direct.get(identifier)
            if package is not None:
                return ResolvedPlugin(
                    identifier=identifier,
                    local_package=package,
                    resolution_method=ResolutionMethod.OVERRIDE,
                    verified=True,
                )
        return None

    def _automatic(self, identifier: str) -> ResolvedPlugin | None:
        candidate = local_name_for(identifier)
        answer = self.registry.query(candidate)
        if answer is RegistryAnswer.EXISTS:
            logger.debug("Found %s -> %s", identifier, candidate)
            return ResolvedPlugin(
                identifier=identifier,
                local_package=candidate,
                resolution_method=ResolutionMethod.AUTOMATIC,
                verified=True,
                candidate=candidate,
            )
        logger.debug("Not found %s -> %s (%s)", identifier, candidate, answer.value)
        return None
