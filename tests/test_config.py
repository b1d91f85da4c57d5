import dataclasses
import os
import typing
from pathlib import Path

import pytest

from merge_feeds import Entry, MergeConfig, load_config


def test_defaults_without_path() -> None:
    cfg = load_config(None)
    assert cfg == MergeConfig()
    assert cfg.feeds == ("funfacts.xml", "wikivoyage.xml", "hackernews.xml", "medium_matteo.xml")
    assert cfg.output_path == os.path.join("./public", "all.xml")


def test_yaml_overrides_and_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "feeds:\n  - a.xml\n  - b.xml\npublic_dir: /srv/feeds\noutput: merged.xml\nauthor: Me\nretries: 3\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.feeds == ("a.xml", "b.xml")
    assert cfg.output_path == os.path.join("/srv/feeds", "merged.xml")
    assert cfg.author == "Me"
    assert cfg.title == MergeConfig().title


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == MergeConfig()


def test_non_mapping_yaml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- a.xml\n- b.xml\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_config_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        MergeConfig().output = "x.xml"


def test_shipped_config_matches_defaults() -> None:
    path = Path(__file__).resolve().parent.parent / "config.yaml"
    assert load_config(str(path)) == MergeConfig()


def test_optional_fields_default_to_none() -> None:
    hints = typing.get_type_hints(MergeConfig)
    assert hints["feed_id"] == typing.Optional[str]
    assert MergeConfig().feed_id is None
    assert typing.get_type_hints(Entry)["source"] == typing.Optional[str]
