"""Tests for merging reviewed mappings into the curated table."""

from pathlib import Path

import pytest

from lazyvim_nix.errors import LazyNixError, MappingMergeError
from lazyvim_nix.merge_mappings import MERGE_HEADER, merge_mappings, read_fragment
from lazyvim_nix.override_tables import load_override_table


@pytest.fixture
def curated(tmp_path: Path) -> Path:
    """A small curated table with a comment to preserve."""
    path = tmp_path / "mappings.yml"
    path.write_text(
        "# curated\n"
        '"L3MON4D3/LuaSnip": luasnip\n'
        '"nvim-mini/mini.ai": {package: mini-nvim, module: mini.ai}\n',
        encoding="utf-8",
    )
    return path


def test_new_entries_are_appended(tmp_path: Path, curated: Path) -> None:
    """Verify that new mappings are appended and existing text is kept."""
    fragment = tmp_path / "generated.yml"
    fragment.write_text(
        '"gbprod/yanky.nvim": yanky-nvim\n"L3MON4D3/LuaSnip": luasnip\n',
        encoding="utf-8",
    )
    assert merge_mappings(curated, fragment) == 1

    text = curated.read_text(encoding="utf-8")
    assert text.startswith("# curated\n")
    assert MERGE_HEADER in text
    table = load_override_table(curated)
    assert table.direct["gbprod/yanky.nvim"] == "yanky-nvim"
    assert table.multi_module["nvim-mini/mini.ai"].module == "mini.ai"


def test_conflicting_entry_aborts(tmp_path: Path, curated: Path) -> None:
    """Verify that a disagreeing mapping leaves the curated table untouched."""
    before = curated.read_text(encoding="utf-8")
    fragment = tmp_path / "generated.yml"
    fragment.write_text(
        '"a/new.nvim": new-nvim\n"L3MON4D3/LuaSnip": LuaSnip\n', encoding="utf-8"
    )
    with pytest.raises(MappingMergeError, match="L3MON4D3/LuaSnip"):
        merge_mappings(curated, fragment)
    assert curated.read_text(encoding="utf-8") == before


def test_nothing_to_merge(tmp_path: Path, curated: Path) -> None:
    """Verify that an already merged fragment is a no-op."""
    fragment = tmp_path / "generated.yml"
    fragment.write_text('"L3MON4D3/LuaSnip": luasnip\n', encoding="utf-8")
    before = curated.read_text(encoding="utf-8")
    assert merge_mappings(curated, fragment) == 0
    assert curated.read_text(encoding="utf-8") == before


def test_read_fragment_from_report(tmp_path: Path) -> None:
    """Verify that the fragment is extracted from a Markdown report."""
    report = tmp_path / "report.md"
    report.write_text(
        "# Report\n\n## ✅ Verified Mappings\n\n```yaml\n"
        "gbprod/yanky.nvim: yanky-nvim\n```\n\n## ⚠️ Unverified Suggestions\n",
        encoding="utf-8",
    )
    assert read_fragment(report) == {"gbprod/yanky.nvim": "yanky-nvim"}


def test_read_fragment_rejects_multi_module(tmp_path: Path) -> None:
    """Verify that fragments may only carry direct mappings."""
    fragment = tmp_path / "generated.yml"
    fragment.write_text('"o/r": {package: p, module: m}\n', encoding="utf-8")
    with pytest.raises(LazyNixError):
        read_fragment(fragment)
