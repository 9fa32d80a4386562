"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from shared.config import Config, PathsConfig, load_config

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "app.toml"


def test_defaults_match_original_layout():
    """Test that a bare config needs no file at all."""
    config = Config()

    assert config.get_brain_path() == Path("~/.agents/brain").expanduser().resolve()
    assert config.get_index_path() == config.get_brain_path() / "memory-index.json"
    assert config.search.threshold == 0.3
    assert config.search.max_results == 5
    assert config.relevance.min_overlap == 2
    assert config.relevance.tag_weight == 2
    assert config.embedding_model.model_name == "all-MiniLM-L6-v2"
    assert config.embedding_model.dimension == 384


def test_relative_index_file_resolves_inside_brain(tmp_path):
    config = Config(paths=PathsConfig(brain_dir=str(tmp_path), index_file="idx.json"))
    assert config.get_index_path() == tmp_path.resolve() / "idx.json"


def test_absolute_index_file_is_kept(tmp_path):
    index_file = tmp_path / "elsewhere" / "index.json"
    config = Config(
        paths=PathsConfig(brain_dir=str(tmp_path / "brain"), index_file=str(index_file))
    )
    assert config.get_index_path() == index_file


def test_load_from_file(tmp_path):
    config_file = tmp_path / "app.toml"
    config_file.write_text(
        '[paths]\nbrain_dir = "/data/brain"\n\n[search]\nthreshold = 0.5\n'
    )

    config = Config.load_from_file(str(config_file))

    assert config.paths.brain_dir == "/data/brain"
    assert config.search.threshold == 0.5
    assert config.search.max_results == 5


def test_load_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        Config.load_from_file(str(tmp_path / "missing.toml"))


def test_load_config_from_folder(tmp_path):
    (tmp_path / "app.toml").write_text("[relevance]\nmin_overlap = 3\n")

    config = load_config(config_dir=str(tmp_path))

    assert config.relevance.min_overlap == 3


def test_load_config_explicit_file_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(app_config_path=str(tmp_path / "nope.toml"))


def test_load_config_without_default_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config == Config()


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        Config(search={"threshold": "high"})


def test_shipped_example_config_matches_defaults():
    """The example app.toml documents the built-in defaults."""
    assert load_config(app_config_path=str(REPO_CONFIG)) == Config()
