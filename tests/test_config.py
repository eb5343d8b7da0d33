"""
Tests for wingetgen.config module.

Tests the ScriptConfig record and YAML profiles including:
- Defaults
- Exclusion normalization, duplicates and removal
- Building configs from mappings
- Profile loading and error handling
"""

from __future__ import annotations

import pytest

from wingetgen.config import DEFAULT_LOG_PATH, ScriptConfig, load_profile
from wingetgen.config.model import normalize_exclusions
from wingetgen.exceptions import ConfigError


class TestDefaults:
    """Tests for documented default values."""

    def test_defaults(self):
        """Test every field's default."""
        config = ScriptConfig()

        assert config.log_path == "C:\\temp\\winget-logs"
        assert config.log_path == DEFAULT_LOG_PATH
        assert config.exclusions == []
        assert config.self_update is True
        assert config.include_unknown is True
        assert config.force_upgrade is False
        assert config.exclude_microsoft is True

    def test_defaults_do_not_share_lists(self):
        """Test each config gets its own exclusion list."""
        first = ScriptConfig()
        second = ScriptConfig()

        first.add_exclusion("git.git")

        assert second.exclusions == []

    def test_value_equality(self):
        """Test configs compare by field values."""
        assert ScriptConfig(exclusions=["Git.Git"]) == ScriptConfig(
            exclusions=["git.git"]
        )
        assert ScriptConfig(force_upgrade=True) != ScriptConfig()


class TestExclusions:
    """Tests for exclusion list editing."""

    def test_add_lowercases_and_strips(self):
        """Test added IDs are normalized."""
        config = ScriptConfig()

        assert config.add_exclusion("  Mozilla.Firefox  ") is True
        assert config.exclusions == ["mozilla.firefox"]

    def test_add_duplicate_rejected(self):
        """Test duplicates are rejected case-insensitively."""
        config = ScriptConfig(exclusions=["git.git"])

        assert config.add_exclusion("GIT.GIT") is False
        assert config.exclusions == ["git.git"]

    def test_add_empty_rejected(self):
        """Test empty and whitespace-only IDs are rejected."""
        config = ScriptConfig()

        assert config.add_exclusion("") is False
        assert config.add_exclusion("   ") is False
        assert config.exclusions == []

    def test_insertion_order_preserved(self):
        """Test IDs keep the order they were added in."""
        config = ScriptConfig()
        for package_id in ["Zoom.Zoom", "Git.Git", "7zip.7zip"]:
            config.add_exclusion(package_id)

        assert config.exclusions == ["zoom.zoom", "git.git", "7zip.7zip"]

    def test_remove(self):
        """Test removing an excluded ID, in any case."""
        config = ScriptConfig(exclusions=["git.git", "zoom.zoom"])

        assert config.remove_exclusion("Git.Git") is True
        assert config.exclusions == ["zoom.zoom"]

    def test_remove_missing(self):
        """Test removing an ID that is not excluded."""
        config = ScriptConfig(exclusions=["git.git"])

        assert config.remove_exclusion("zoom.zoom") is False
        assert config.exclusions == ["git.git"]

    def test_constructor_normalizes(self):
        """Test lists passed to the constructor are normalized."""
        config = ScriptConfig(exclusions=["Git.Git", "", "git.git", " Zoom.Zoom "])

        assert config.exclusions == ["git.git", "zoom.zoom"]

    def test_normalize_exclusions_first_wins(self):
        """Test the first occurrence of a duplicate keeps its position."""
        assert normalize_exclusions(["b", "A", "a", "B"]) == ["b", "a"]


class TestFromDict:
    """Tests for building configs from mappings."""

    def test_full_mapping(self, sample_profile_data):
        """Test every field is taken from the mapping."""
        config = ScriptConfig.from_dict(sample_profile_data)

        assert config.log_path == "D:\\Logs\\winget"
        assert config.exclusions == ["git.git", "mozilla.firefox"]
        assert config.self_update is False
        assert config.force_upgrade is True
        assert config.exclude_microsoft is False

    def test_missing_keys_keep_base(self):
        """Test keys absent from the mapping keep the base values."""
        base = ScriptConfig(log_path="E:\\logs", force_upgrade=True)

        config = ScriptConfig.from_dict({"self_update": False}, base=base)

        assert config.log_path == "E:\\logs"
        assert config.force_upgrade is True
        assert config.self_update is False

    def test_base_not_modified(self):
        """Test the base config is left untouched."""
        base = ScriptConfig(exclusions=["git.git"])

        ScriptConfig.from_dict({"exclusions": ["zoom.zoom"]}, base=base)

        assert base.exclusions == ["git.git"]

    def test_round_trip_dict(self):
        """Test to_dict output rebuilds an equal config."""
        config = ScriptConfig(exclusions=["git.git"], include_unknown=False)

        assert ScriptConfig.from_dict(config.to_dict()) == config

    def test_unknown_key_raises(self):
        """Test unknown keys raise ConfigError."""
        with pytest.raises(ConfigError, match="Unknown configuration key"):
            ScriptConfig.from_dict({"logPath": "C:\\logs"})

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("log_path", 42),
            ("exclusions", "git.git"),
            ("exclusions", ["git.git", 7]),
            ("self_update", "yes"),
            ("force_upgrade", 1),
        ],
    )
    def test_wrong_type_raises(self, key, value):
        """Test values of the wrong type raise ConfigError."""
        with pytest.raises(ConfigError):
            ScriptConfig.from_dict({key: value})


class TestLoadProfile:
    """Tests for YAML profile loading."""

    def test_load_full_profile(self, create_yaml_file, sample_profile_data):
        """Test a complete profile sets every field."""
        profile = create_yaml_file("profile.yaml", sample_profile_data)

        config = load_profile(profile)

        assert config == ScriptConfig.from_dict(sample_profile_data)

    def test_partial_profile_over_base(self, create_yaml_file):
        """Test a partial profile only changes the keys it names."""
        profile = create_yaml_file("partial.yaml", {"force_upgrade": True})
        base = ScriptConfig(exclusions=["git.git"], self_update=False)

        config = load_profile(profile, base=base)

        assert config.force_upgrade is True
        assert config.self_update is False
        assert config.exclusions == ["git.git"]

    def test_windows_path_in_single_quotes(self, tmp_test_dir):
        """Test single-quoted YAML keeps backslashes as written."""
        profile = tmp_test_dir / "profile.yaml"
        profile.write_text("log_path: 'C:\\ProgramData\\logs'\n", encoding="utf-8")

        config = load_profile(profile)

        assert config.log_path == "C:\\ProgramData\\logs"

    def test_missing_file_raises(self, tmp_test_dir):
        """Test a missing profile raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_profile(tmp_test_dir / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_test_dir):
        """Test YAML syntax errors raise ConfigError."""
        profile = tmp_test_dir / "broken.yaml"
        profile.write_text("log_path: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_profile(profile)

    def test_empty_file_raises(self, tmp_test_dir):
        """Test an empty profile raises ConfigError."""
        profile = tmp_test_dir / "empty.yaml"
        profile.write_text("", encoding="utf-8")

        with pytest.raises(ConfigError, match="empty"):
            load_profile(profile)

    def test_non_mapping_raises(self, create_yaml_file):
        """Test a top-level list raises ConfigError."""
        profile = create_yaml_file("list.yaml", ["git.git"])

        with pytest.raises(ConfigError, match="mapping"):
            load_profile(profile)

    def test_unknown_key_names_profile(self, create_yaml_file):
        """Test validation errors mention the profile file."""
        profile = create_yaml_file("client.yaml", {"forceUpgrade": True})

        with pytest.raises(ConfigError, match="client.yaml"):
            load_profile(profile)
