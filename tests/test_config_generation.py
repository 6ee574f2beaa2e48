"""Tests for extras handling and generated support files."""

from pathlib import Path

import pytest

from lazyvim_nix.config_generation import (
    DEFAULT_PLUGIN_FILE,
    HEALTHCHECK_FILE,
    EnabledExtra,
    extras_config_files,
    extras_import_specs,
    get_enabled_extras,
    load_extras_metadata,
    support_files,
)
from lazyvim_nix.errors import LazyNixError

METADATA = {
    "coding": {"yanky": {"import": "lazyvim.plugins.extras.coding.yanky"}},
    "lang": {"nix": {}, "python": {"import": "lazyvim.plugins.extras.lang.python"}},
}


def test_enabled_extras_are_sorted_and_filtered() -> None:
    """Verify that only enabled extras with metadata are returned."""
    extras = get_enabled_extras(
        {
            "lang": {"python": {"enable": True}, "nix": {"enable": False}},
            "coding": {"yanky": {"enable": True, "config": "return {}"}},
            "ai": {"unknown": {"enable": True}},
        },
        METADATA,
    )
    assert [(e.category, e.name) for e in extras] == [
        ("coding", "yanky"),
        ("lang", "python"),
    ]
    assert extras[0].config == "return {}"
    assert extras[0].source_file == "extras.coding.yanky"


def test_default_import_path() -> None:
    """Verify the import path used when metadata has none."""
    (extra,) = get_enabled_extras({"lang": {"nix": {"enable": True}}}, METADATA)
    assert extra.import_path == "lazyvim.plugins.extras.lang.nix"
    assert extras_import_specs([extra]) == [
        '{ import = "lazyvim.plugins.extras.lang.nix" },'
    ]


def test_extras_config_files() -> None:
    """Verify override files are only written for extras with config."""
    files = extras_config_files(
        [
            EnabledExtra("lang", "python", "x", config="return { opts = {} }\n\n"),
            EnabledExtra("lang", "nix", "y"),
        ]
    )
    assert list(files) == ["lua/plugins/extras-lang-python.lua"]
    assert files["lua/plugins/extras-lang-python.lua"].endswith("return { opts = {} }\n")


def test_support_files() -> None:
    """Verify the default plugin file is only added without user plugins."""
    assert set(support_files(has_user_plugins=False)) == {
        HEALTHCHECK_FILE,
        DEFAULT_PLUGIN_FILE,
    }
    assert set(support_files(has_user_plugins=True)) == {HEALTHCHECK_FILE}


def test_load_bundled_metadata() -> None:
    """Verify loading the shipped extras metadata."""
    meta = load_extras_metadata(Path(__file__).parents[1] / "data" / "extras.json")
    assert "yanky" in meta["coding"]
    assert load_extras_metadata(None) == {}


def test_short_form_extra_settings() -> None:
    """Verify that ``name: true`` enables an extra and ``false`` skips it."""
    extras = get_enabled_extras(
        {"lang": {"python": True, "nix": False}, "coding": {"yanky": None}}, METADATA
    )
    assert [(e.category, e.name, e.config) for e in extras] == [
        ("lang", "python", "")
    ]


@pytest.mark.parametrize(
    "extras_config",
    [{"lang": {"python": "yes"}}, {"lang": ["python"]}],
)
def test_invalid_extra_settings(extras_config: dict) -> None:
    """Verify that unusable extras settings are reported clearly."""
    with pytest.raises(LazyNixError, match="lang"):
        get_enabled_extras(extras_config, METADATA)


def test_corrupt_metadata_file(tmp_path: Path) -> None:
    """Verify that broken extras metadata is a reported error."""
    path = tmp_path / "extras.json"
    path.write_text('{"lang": ', encoding="utf-8")
    with pytest.raises(LazyNixError, match="not valid"):
        load_extras_metadata(path)
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(LazyNixError, match="must map"):
        load_extras_metadata(path)
