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

"""Script configuration for wingetgen.

This package defines the ScriptConfig record that drives script generation
and the YAML profile loader that fills it from a file.

Public API:

- ScriptConfig: Options for one generated script, with documented defaults
- load_profile: Layer a YAML profile over a base ScriptConfig
- normalize_exclusion: Normalize a package ID the way the exclusion list stores it

Example:
    Basic usage:

        from pathlib import Path
        from wingetgen.config import ScriptConfig, load_profile

        config = load_profile(Path("profiles/client-a.yaml"), base=ScriptConfig())
        config.add_exclusion("Git.Git")

"""

from .loader import load_profile
from .model import DEFAULT_LOG_PATH, ScriptConfig, normalize_exclusion

__all__ = ["DEFAULT_LOG_PATH", "ScriptConfig", "load_profile", "normalize_exclusion"]
