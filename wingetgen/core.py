# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core orchestration for wingetgen.

This module provides the high-level functions behind the CLI commands. They
combine the pieces that the browser version wired together on every form
change: restore the saved options, apply the user's edits, save them back,
and regenerate the script.

Configuration Layers:

The effective configuration is built in three layers, last wins:

1. Saved settings (state/settings.json), or the defaults when stateless
2. An optional YAML profile
3. Explicit overrides (CLI flags)

Design Principles:

- Each function has a single, clear responsibility
- Functions return structured data (dataclasses) for easy testing
- Error handling uses exceptions; CLI layer formats for user display
- Script generation itself is pure; all I/O happens here

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from wingetgen.core import generate

        result = generate(
            settings_file=Path("state/settings.json"),
            overrides={"force_upgrade": True},
            output_path=Path("winget-updates.ps1"),
        )

        print(f"Steps: {result.step_count}")
        ```
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from wingetgen.build import generate_script, step_numbers
from wingetgen.config import ScriptConfig, load_profile
from wingetgen.exceptions import StorageError
from wingetgen.explain import DEFAULT_MODEL, render_explanation, request_explanation
from wingetgen.logging import get_global_logger
from wingetgen.results import ExplainResult, GenerateResult
from wingetgen.state import SettingsStore, load_config, save_config

DEFAULT_SETTINGS_FILE = Path("state/settings.json")


def load_settings(settings_file: Path = DEFAULT_SETTINGS_FILE) -> ScriptConfig:
    """Restore the saved configuration (defaults for anything missing)."""
    store = SettingsStore(settings_file)
    store.load()
    return load_config(store)


def store_settings(
    config: ScriptConfig, settings_file: Path = DEFAULT_SETTINGS_FILE
) -> None:
    """Save a configuration, replacing whatever was saved before.

    Raises:
        StorageError: If the settings file cannot be written.
    """
    store = SettingsStore(settings_file)
    store.load()
    save_config(store, config)
    store.save()


def resolve_config(
    settings_file: Path = DEFAULT_SETTINGS_FILE,
    profile: Path | None = None,
    overrides: dict[str, Any] | None = None,
    stateless: bool = False,
) -> ScriptConfig:
    """Build the effective configuration from all layers.

    Args:
        settings_file: Saved settings to start from.
        profile: Optional YAML profile applied over the saved settings.
        overrides: Field name -> value mapping applied last. Keys whose
            value is None are ignored, so unset CLI flags change nothing.
            "exclusions" entries are added to the existing list.
        stateless: Ignore saved settings and start from the defaults.

    Returns:
        The effective ScriptConfig.

    Raises:
        ConfigError: If the profile or an override is invalid.
        FileNotFoundError: If the profile file does not exist.
    """
    logger = get_global_logger()

    if stateless:
        logger.verbose("STATE", "Stateless mode: starting from defaults")
        config = ScriptConfig()
    else:
        config = load_settings(settings_file)

    if profile is not None:
        config = load_profile(profile, base=config)

    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    extra_exclusions = overrides.pop("exclusions", [])
    if overrides:
        logger.verbose("CONFIG", f"Applying overrides: {', '.join(overrides)}")
        config = ScriptConfig.from_dict(overrides, base=config)

    for package_id in extra_exclusions:
        if config.add_exclusion(package_id):
            logger.verbose("CONFIG", f"Excluding package: {config.exclusions[-1]}")

    return config


def generate(
    settings_file: Path = DEFAULT_SETTINGS_FILE,
    profile: Path | None = None,
    overrides: dict[str, Any] | None = None,
    output_path: Path | None = None,
    stateless: bool = False,
    generated_at: datetime | None = None,
) -> GenerateResult:
    """Resolve the configuration, save it, and generate the script.

    This is the main entry point for the 'wingetgen generate' command.

    1. Restore saved settings (skipped when stateless)
    2. Apply the profile and overrides
    3. Save the effective configuration for next time (skipped when stateless)
    4. Generate the script and write it to output_path if given

    A failure to save settings is logged and does not stop generation.

    Args:
        settings_file: Saved settings file.
        profile: Optional YAML profile.
        overrides: Explicit field overrides (see resolve_config).
        output_path: File to write the script to (UTF-8). None leaves the
            writing to the caller.
        stateless: Neither read nor write saved settings.
        generated_at: Timestamp for the script header (defaults to now).

    Returns:
        GenerateResult with the script and the configuration used.

    Raises:
        ConfigError: If the profile or an override is invalid.
        OSError: If the script cannot be written to output_path.
    """
    logger = get_global_logger()

    logger.step(1, 3, "Resolving configuration...")
    config = resolve_config(settings_file, profile, overrides, stateless)

    settings_saved = False
    if not stateless:
        logger.step(2, 3, "Saving settings...")
        try:
            store_settings(config, settings_file)
            settings_saved = True
            logger.verbose("STATE", f"Saved settings to {settings_file}")
        except StorageError as err:
            logger.warning("STATE", f"Settings not saved: {err}")
    else:
        logger.step(2, 3, "Skipping saved settings (stateless)")

    logger.step(3, 3, "Generating script...")
    steps = step_numbers(config.self_update)
    logger.debug("BUILD", f"Manual exclusions: {len(config.exclusions)}")
    logger.debug(
        "BUILD",
        f"Microsoft patterns: {'on' if config.exclude_microsoft else 'off'}, "
        f"self-update: {'on' if config.self_update else 'off'}, "
        f"steps: {steps.total}",
    )
    script = generate_script(config, generated_at=generated_at)
    logger.verbose("BUILD", f"[OK] Script generated ({len(script)} characters)")

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(script + "\n", encoding="utf-8")
        logger.verbose("BUILD", f"Wrote script to {output_path}")

    return GenerateResult(
        config=config,
        script=script,
        step_count=steps.total,
        output_path=output_path,
        settings_saved=settings_saved,
    )


def explain(
    script: str,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
) -> ExplainResult:
    """Request a plain-language explanation of a script and render it.

    Raises:
        ConfigError: If no API key is available.
        NetworkError: If the Gemini request fails.
    """
    text = request_explanation(script, api_key=api_key, model=model)
    return ExplainResult(
        model=model,
        explanation=text,
        html=render_explanation(text),
    )
