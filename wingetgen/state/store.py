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

"""Saved settings implementation for wingetgen.

This module persists the script options between runs. The settings file is
a flat JSON object that works like browser local storage: every option is
saved under its own fixed key, and the stored value is itself a JSON-encoded
string.

    {
      "wingetConfig_exclusions": "[\\"git.git\\"]",
      "wingetConfig_selfUpdateWinget": "true",
      ...
    }

Keeping the fields independent means one damaged value never costs the
others: restoring a field whose key is missing, whose value is not valid
JSON, or whose value has the wrong type gives that field's default and
logs the problem at verbose level. Nothing is raised while reading.

Example:
    High-level API with SettingsStore:
        ```python
        from pathlib import Path
        from wingetgen.state import SettingsStore, load_config, save_config

        store = SettingsStore(Path("state/settings.json"))
        store.load()

        config = load_config(store)
        config.add_exclusion("Git.Git")

        save_config(store, config)
        store.save()
        ```
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from wingetgen.config.model import DEFAULT_LOG_PATH, ScriptConfig, normalize_exclusions
from wingetgen.exceptions import StorageError

# Field name -> storage key
STORAGE_KEYS: dict[str, str] = {
    "log_path": "wingetConfig_logPath",
    "exclusions": "wingetConfig_exclusions",
    "self_update": "wingetConfig_selfUpdateWinget",
    "include_unknown": "wingetConfig_includeUnknown",
    "force_upgrade": "wingetConfig_forceUpgrade",
    "exclude_microsoft": "wingetConfig_excludeMs",
}


class SettingsStore:
    """Key-value store backed by a JSON file.

    Values are strings, as in browser local storage. The store is only
    written to disk when save() is called.

    Attributes:
        settings_file: Path to the JSON settings file.
        items: In-memory key -> string value mapping.

    Example:
        Basic usage:
            ```python
            store = SettingsStore(Path("state/settings.json"))
            store.load()
            store.set_item("wingetConfig_forceUpgrade", "true")
            store.save()
            ```
    """

    def __init__(self, settings_file: Path):
        """Initialize the store.

        Args:
            settings_file: Path to JSON settings file. Created on save().
        """
        self.settings_file = settings_file
        self.items: dict[str, str] = {}

    def load(self) -> dict[str, str]:
        """Load items from the settings file.

        A missing file gives an empty store. A file that cannot be read or
        is not a JSON object also gives an empty store, so every option
        restores to its default; the problem is logged, not raised.

        Returns:
            Loaded key -> value mapping.
        """
        from wingetgen.logging import get_global_logger

        logger = get_global_logger()
        self.items = {}

        try:
            raw = self.settings_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.verbose(
                "STATE", f"No saved settings at {self.settings_file}, using defaults"
            )
            return self.items
        except OSError as err:
            logger.verbose("STATE", f"Could not read {self.settings_file}: {err}")
            return self.items
        except UnicodeDecodeError as err:
            logger.verbose(
                "STATE", f"Settings file {self.settings_file} is not UTF-8: {err}"
            )
            return self.items

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as err:
            logger.verbose(
                "STATE", f"Settings file {self.settings_file} is corrupted: {err}"
            )
            return self.items

        if not isinstance(data, dict):
            logger.verbose(
                "STATE", f"Settings file {self.settings_file} is not a JSON object"
            )
            return self.items

        # Non-string values cannot come from set_item(); drop them
        self.items = {k: v for k, v in data.items() if isinstance(v, str)}
        logger.verbose(
            "STATE",
            f"Loaded {len(self.items)} saved value(s) from {self.settings_file}",
        )
        return self.items

    def save(self) -> None:
        """Write all items to the settings file.

        Creates parent directories if needed.

        Raises:
            StorageError: If the file cannot be written.
        """
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with self.settings_file.open("w", encoding="utf-8") as f:
                json.dump(self.items, f, indent=2, sort_keys=True)
                f.write("\n")
        except OSError as err:
            raise StorageError(
                f"Failed to save settings to {self.settings_file}: {err}"
            ) from err

    def get_item(self, key: str) -> str | None:
        """Return the stored string for key, or None."""
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def clear(self) -> None:
        self.items.clear()


def _restore_field(store: SettingsStore, name: str, default: Any) -> Any:
    """Restore one field from the store, or return default."""
    from wingetgen.logging import get_global_logger

    logger = get_global_logger()
    key = STORAGE_KEYS[name]

    raw = store.get_item(key)
    if raw is None:
        return default

    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as err:
        logger.verbose("STATE", f"Ignoring malformed value for {key}: {err}")
        return default

    if name == "log_path":
        # An empty saved path restores the default, like a missing one
        if isinstance(value, str) and value:
            return value
    elif name == "exclusions":
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return normalize_exclusions(value)
    elif isinstance(value, bool):
        return value

    logger.verbose(
        "STATE", f"Ignoring {key}: unexpected {type(value).__name__} value"
    )
    return default


def load_config(store: SettingsStore) -> ScriptConfig:
    """Restore a ScriptConfig from the store.

    Each field is restored independently; any field that is missing or
    malformed gets its documented default.

    Args:
        store: A loaded SettingsStore.

    Returns:
        The restored configuration.
    """
    defaults = ScriptConfig()
    return ScriptConfig(
        log_path=_restore_field(store, "log_path", DEFAULT_LOG_PATH),
        exclusions=_restore_field(store, "exclusions", []),
        self_update=_restore_field(store, "self_update", defaults.self_update),
        include_unknown=_restore_field(
            store, "include_unknown", defaults.include_unknown
        ),
        force_upgrade=_restore_field(store, "force_upgrade", defaults.force_upgrade),
        exclude_microsoft=_restore_field(
            store, "exclude_microsoft", defaults.exclude_microsoft
        ),
    )


def save_config(store: SettingsStore, config: ScriptConfig) -> None:
    """Write every field of config into the store (in memory).

    Call store.save() afterwards to persist.
    """
    for name, value in config.to_dict().items():
        store.set_item(STORAGE_KEYS[name], json.dumps(value))
