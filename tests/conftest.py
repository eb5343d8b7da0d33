"""
Pytest configuration and shared fixtures for wingetgen tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

from wingetgen.config import ScriptConfig
from wingetgen.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so CLI tests don't leak verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def fixtures_dir() -> Path:
    """Provide path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def fixed_time() -> datetime:
    """Timestamp matching the 'Generated on' line of the fixture scripts."""
    return datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)


@pytest.fixture
def example_config() -> ScriptConfig:
    """
    Provide a configuration that flips every default.

    Matches tests/fixtures/expected_example.ps1.
    """
    return ScriptConfig(
        log_path="C:\\temp\\logs",
        exclusions=["git.git"],
        self_update=False,
        include_unknown=False,
        force_upgrade=True,
        exclude_microsoft=False,
    )


@pytest.fixture
def settings_file(tmp_test_dir: Path) -> Path:
    """Provide a settings file path inside the temporary directory."""
    return tmp_test_dir / "state" / "settings.json"


@pytest.fixture
def sample_profile_data() -> dict[str, Any]:
    """Provide a complete YAML profile."""
    return {
        "log_path": "D:\\Logs\\winget",
        "exclusions": ["Git.Git", "Mozilla.Firefox"],
        "self_update": False,
        "include_unknown": True,
        "force_upgrade": True,
        "exclude_microsoft": False,
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("profile.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
