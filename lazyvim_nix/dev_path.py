"""Build the dev path overlay that lazy.nvim loads Nix-built plugins from."""

import logging
import os
import shutil
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from lazyvim_nix.errors import LazyNixError, LinkCollisionError
from lazyvim_nix.models import DevPathEntry, ResolvedPlugin
from lazyvim_nix.normalize_name import repo_segment

logger = logging.getLogger(__name__)

_dir_locks: dict[str, threading.Lock] = {}
_dir_locks_guard = threading.Lock()


@dataclass
class DevPathPlan:
    """Links to create plus the plugins that were left out."""

    entries: list[DevPathEntry] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # unresolved identifiers


def load_package_manifest(path: str | Path | None) -> dict[str, str]:
    """Load the build system's ``package name -> built path`` manifest."""
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        msg = f"Package manifest does not exist: {p}"
        raise LazyNixError(msg)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        msg = f"Package manifest {p} must map package names to paths"
        raise LazyNixError(msg)
    return {str(k): str(v) for k, v in data.items()}


def package_root(
    package: str, package_roots: Mapping[str, str], store_dir: str | Path | None
) -> str:
    """Return the built location of ``package``."""
    if package in package_roots:
        return package_roots[package]
    if store_dir is not None:
        return str(Path(store_dir) / package)
    msg = f"No built path known for package '{package}'"
    raise LazyNixError(msg)


def link_name_for(plugin: ResolvedPlugin) -> str:
    """Return the overlay link name lazy.nvim expects for ``plugin``."""
    if plugin.module_name:
        return plugin.module_name
    return repo_segment(plugin.identifier)


def plan_dev_path(
    resolved: Iterable[ResolvedPlugin],
    package_roots: Mapping[str, str] | None = None,
    store_dir: str | Path | None = None,
) -> DevPathPlan:
    """Expand resolved plugins into overlay entries.

    Multi-module plugins produce one link per module, all pointing into the
    same built package. Raises ``LinkCollisionError`` when two identifiers
    claim one link name.
    """
    roots = package_roots or {}
    plan = DevPathPlan()
    owners: dict[str, str] = {}

    for plugin in resolved:
        if not plugin.is_resolved or plugin.local_package is None:
            plan.skipped.append(plugin.identifier)
            continue

        link_name = link_name_for(plugin)
        if link_name in {"", ".", ".."} or "/" in link_name:
            msg = f"Invalid dev path link name {link_name!r} for {plugin.identifier}"
            raise LazyNixError(msg)

        existing = owners.get(link_name)
        if existing is not None:
            if existing == plugin.identifier:
                continue
            raise LinkCollisionError(link_name, existing, plugin.identifier)
        owners[link_name] = plugin.identifier

        root = package_root(plugin.local_package, roots, store_dir)
        target = str(Path(root) / plugin.subpath) if plugin.subpath else root
        plan.entries.append(
            DevPathEntry(
                link_name=link_name,
                target_path=target,
                identifier=plugin.identifier,
                source_module=plugin.module_name,
            )
        )

    plan.entries.sort(key=lambda e: e.link_name)
    if plan.skipped:
        logger.info("Skipped %d unresolved plugins in dev path", len(plan.skipped))
    return plan


def _lock_for(out_dir: Path) -> threading.Lock:
    key = str(out_dir.resolve())
    with _dir_locks_guard:
        return _dir_locks.setdefault(key, threading.Lock())


def build_dev_path(entries: Iterable[DevPathEntry], out_dir: str | Path) -> Path:
    """Create the overlay directory of symlinks.

    Links are created in a staging directory which replaces ``out_dir`` only
    after every link exists.
    """
    out = Path(out_dir)
    out.parent.mkdir(parents=True, exist_ok=True)
    staging = out.parent / f".{out.name}.staging-{os.getpid()}"

    with _lock_for(out):
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir()
        try:
            for entry in entries:
                link = staging / entry.link_name
                if link.is_symlink() or link.exists():
                    raise LinkCollisionError(entry.link_name, "<overlay>", entry.identifier)
                link.symlink_to(entry.target_path, target_is_directory=True)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        if out.is_symlink():
            out.unlink()
        elif out.exists():
            shutil.rmtree(out)
        staging.rename(out)

    return out


def read_dev_path(out_dir: str | Path) -> dict[str, str]:
    """Return ``link name -> target`` for an existing overlay."""
    out = Path(out_dir)
    return {
        p.name: os.readlink(p) for p in sorted(out.iterdir()) if p.is_symlink()
    }


def dev_plugin_specs(entries: Iterable[DevPathEntry]) -> list[str]:
    """Lua plugin specs marking every overlay plugin as dev and pinned."""
    identifiers = sorted({e.identifier for e in entries})
    return [f'{{ "{i}", dev = true, pin = true }},' for i in identifiers]
