"""Tests for TOML configuration loaders."""

import tomllib
from pathlib import Path

import pytest

from kinesis_reader.config.loaders import (
    deep_merge_dict,
    load_config_with_includes,
    load_toml,
    save_toml,
)


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_valid_toml(self, tmp_path: Path):
        """Test loading a valid TOML file."""
        config_file = tmp_path / "reader.toml"
        config_file.write_text('[reader]\nstream_name = "clicks"\nlimit = 42\n')

        result = load_toml(config_file)

        assert result == {"reader": {"stream_name": "clicks", "limit": 42}}

    def test_load_toml_with_str_path(self, tmp_path: Path):
        """Test loading TOML with string path."""
        config_file = tmp_path / "reader.toml"
        config_file.write_text('[reader]\nstream_name = "clicks"\n')

        assert load_toml(str(config_file)) == {"reader": {"stream_name": "clicks"}}

    def test_load_nonexistent_file(self, tmp_path: Path):
        """Test loading non-existent file raises FileNotFoundError."""
        missing = tmp_path / "missing.toml"

        with pytest.raises(FileNotFoundError) as exc_info:
            load_toml(missing)

        assert "Configuration file not found" in str(exc_info.value)
        assert str(missing) in str(exc_info.value)

    def test_load_invalid_toml(self, tmp_path: Path):
        """Test loading invalid TOML raises TOMLDecodeError."""
        config_file = tmp_path / "invalid.toml"
        config_file.write_text("[reader\nstream_name = clicks")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(config_file)


class TestSaveToml:
    """Tests for save_toml function."""

    def test_save_and_reload(self, tmp_path: Path):
        """Test a saved configuration loads back unchanged."""
        config = {"reader": {"stream_name": "clicks", "limit": 10, "poll_interval": 0.5}}
        config_file = tmp_path / "reader.toml"

        save_toml(config, config_file)

        assert load_toml(config_file) == config

    def test_creates_parent_directories(self, tmp_path: Path):
        config_file = tmp_path / "nested" / "dir" / "reader.toml"

        save_toml({"reader": {"stream_name": "clicks"}}, config_file)

        assert config_file.exists()

    def test_drops_none_values(self, tmp_path: Path):
        """Test None values are omitted since TOML has no null."""
        config_file = tmp_path / "reader.toml"

        save_toml({"reader": {"stream_name": "clicks", "shard_id": None}}, config_file)

        assert load_toml(config_file) == {"reader": {"stream_name": "clicks"}}


class TestDeepMergeDict:
    """Tests for deep_merge_dict function."""

    def test_override_wins(self):
        assert deep_merge_dict({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_tables_merge(self):
        base = {"reader": {"stream_name": "clicks", "limit": 10}}
        override = {"reader": {"limit": 20}}

        assert deep_merge_dict(base, override) == {"reader": {"stream_name": "clicks", "limit": 20}}

    def test_inputs_not_modified(self):
        base = {"reader": {"limit": 10}}
        override = {"reader": {"limit": 20}}

        deep_merge_dict(base, override)

        assert base == {"reader": {"limit": 10}}
        assert override == {"reader": {"limit": 20}}

    def test_scalar_replaces_table(self):
        assert deep_merge_dict({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


class TestLoadConfigWithIncludes:
    """Tests for load_config_with_includes function."""

    def test_without_includes(self, tmp_path: Path):
        config_file = tmp_path / "reader.toml"
        config_file.write_text('[reader]\nstream_name = "clicks"\n')

        assert load_config_with_includes(config_file) == {"reader": {"stream_name": "clicks"}}

    def test_including_file_wins(self, tmp_path: Path):
        """Test values of the including file override included ones."""
        (tmp_path / "base.toml").write_text(
            '[reader]\nstream_name = "base"\nregion_name = "eu-west-1"\n'
        )
        config_file = tmp_path / "reader.toml"
        config_file.write_text('include = ["base.toml"]\n[reader]\nstream_name = "clicks"\n')

        result = load_config_with_includes(config_file)

        assert result == {"reader": {"stream_name": "clicks", "region_name": "eu-west-1"}}

    def test_single_string_include(self, tmp_path: Path):
        (tmp_path / "base.toml").write_text("[reader]\nlimit = 5\n")
        config_file = tmp_path / "reader.toml"
        config_file.write_text('include = "base.toml"\n[reader]\nstream_name = "clicks"\n')

        assert load_config_with_includes(config_file)["reader"] == {
            "stream_name": "clicks",
            "limit": 5,
        }

    def test_later_includes_win(self, tmp_path: Path):
        (tmp_path / "one.toml").write_text("[reader]\nlimit = 1\n")
        (tmp_path / "two.toml").write_text("[reader]\nlimit = 2\n")
        config_file = tmp_path / "reader.toml"
        config_file.write_text('include = ["one.toml", "two.toml"]\n')

        assert load_config_with_includes(config_file) == {"reader": {"limit": 2}}

    def test_missing_include(self, tmp_path: Path):
        config_file = tmp_path / "reader.toml"
        config_file.write_text('include = ["missing.toml"]\n')

        with pytest.raises(FileNotFoundError):
            load_config_with_includes(config_file)

    def test_circular_include(self, tmp_path: Path):
        """Test files including each other are rejected."""
        (tmp_path / "a.toml").write_text('include = ["b.toml"]\n')
        (tmp_path / "b.toml").write_text('include = ["a.toml"]\n')

        with pytest.raises(RecursionError, match="Circular include"):
            load_config_with_includes(tmp_path / "a.toml")
