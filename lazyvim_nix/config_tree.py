"""Write the generated LazyVim configuration tree to disk."""

import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from lazyvim_nix.errors import LazyNixError


def write_config_tree(files: Mapping[str, str], out_dir: str | Path) -> int:
    """Write ``relative path -> text`` into ``out_dir``, replacing it whole.

    All content is computed by the caller beforehand; files are written to a
    staging directory that replaces ``out_dir`` once complete.
    """
    out = Path(out_dir)
    for rel in files:
        if Path(rel).is_absolute() or ".." in Path(rel).parts:
            msg = f"Refusing to write outside the config tree: {rel}"
            raise LazyNixError(msg)

    out.parent.mkdir(parents=True, exist_ok=True)
    staging = out.parent / f".{out.name}.staging-{os.getpid()}"
    if staging.exists():
        shutil.rmtree(staging)
    try:
        for rel, text in sorted(files.items()):
            target = staging / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if out.exists():
        shutil.rmtree(out)
    staging.rename(out)
    return len(files)
