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

"""Saved settings for wingetgen.

This module remembers the script options between runs, so the next
'wingetgen generate' starts from the last configuration used.

The settings file is a JSON file that stores each option under its own key:

- wingetConfig_logPath: Log directory on the managed machine
- wingetConfig_exclusions: Excluded package IDs
- wingetConfig_selfUpdateWinget, wingetConfig_includeUnknown,
  wingetConfig_forceUpgrade, wingetConfig_excludeMs: Toggles

Saving is enabled by default and can be disabled with the --stateless flag.

Public API:

- SettingsStore: JSON-file key-value store
- load_config: Restore a ScriptConfig, falling back to defaults per field
- save_config: Store every field of a ScriptConfig

Example:
    Basic usage:

        from pathlib import Path
        from wingetgen.state import SettingsStore, load_config

        store = SettingsStore(Path("state/settings.json"))
        store.load()
        config = load_config(store)

"""

from .store import STORAGE_KEYS, SettingsStore, load_config, save_config

__all__ = ["STORAGE_KEYS", "SettingsStore", "load_config", "save_config"]
