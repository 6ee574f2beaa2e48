"""Existence checks against the package registry (nixpkgs ``vimPlugins``)."""

import logging
import re
import subprocess
from collections.abc import Iterable, Sequence
from enum import Enum

from lazyvim_nix.registry_cache import RegistryCache

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_URL = (
    "https://github.com/NixOS/nixpkgs/archive/nixos-unstable.tar.gz"
)
PACKAGE_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.+-]*$")


class RegistryAnswer(str, Enum):
    """Result of a single registry query."""

    EXISTS = "exists"
    MISSING = "missing"
    ERROR = "error"


class NixRegistry:
    """Query a pinned nixpkgs snapshot through ``nix eval`` in read-only mode."""

    def __init__(
        self,
        snapshot_url: str = DEFAULT_SNAPSHOT_URL,
        attribute_set: str = "vimPlugins",
        timeout: float = 60.0,
        nix_command: Sequence[str] = ("nix",),
        cache: RegistryCache | None = None,
    ) -> None:
        """Configure the snapshot, the attribute set and the per-call timeout."""
        self.snapshot_url = snapshot_url
        self.attribute_set = attribute_set
        self.timeout = timeout
        self.nix_command = list(nix_command)
        self.cache = cache

    def build_command(self, name: str) -> list[str]:
        """Return the argv used to check one package name."""
        expr = (
            f'let pkgs = import (fetchTarball "{self.snapshot_url}") {{}}; '
            f'in if pkgs.{self.attribute_set} ? "{name}" '
            'then "exists" else "missing"'
        )
        return [
            *self.nix_command,
            "--extra-experimental-features",
            "nix-command",
            "eval",
            "--impure",
            "--raw",
            "--expr",
            expr,
        ]

    def query(self, name: str) -> RegistryAnswer:
        """Check whether ``name`` exists in the registry snapshot."""
        if not PACKAGE_NAME_RE.match(name):
            return RegistryAnswer.MISSING

        if self.cache is not None:
            cached = self.cache.lookup(name)
            if cached is not None:
                return RegistryAnswer.EXISTS if cached else RegistryAnswer.MISSING

        cmd = self.build_command(name)
        logger.debug("Checking %s: %s", name, " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Registry query for %s timed out after %ss", name, self.timeout)
            return RegistryAnswer.ERROR
        except subprocess.CalledProcessError as e:
            logger.warning(
                "Registry query for %s failed (exit %s): %s",
                name,
                e.returncode,
                (e.stderr or "").strip(),
            )
            return RegistryAnswer.ERROR
        except OSError as e:
            logger.warning("Could not run registry query for %s: %s", name, e)
            return RegistryAnswer.ERROR

        result = proc.stdout.strip()
        if result not in {"exists", "missing"}:
            logger.warning("Unexpected registry answer for %s: %r", name, result)
            return RegistryAnswer.ERROR

        exists = result == "exists"
        if self.cache is not None:
            self.cache.update(name, exists)
        return RegistryAnswer.EXISTS if exists else RegistryAnswer.MISSING


class ManifestRegistry:
    """Answer existence checks from a fixed set of package names.

    Used when the build system has already produced a manifest of the
    packages it can provide, so no evaluator call is needed.
    """

    def __init__(self, names: Iterable[str]) -> None:
        """Store the known package names."""
        self.names = frozenset(names)

    def query(self, name: str) -> RegistryAnswer:
        """Check membership in the manifest."""
        return RegistryAnswer.EXISTS if name in self.names else RegistryAnswer.MISSING
