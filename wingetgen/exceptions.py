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

"""Exception hierarchy for wingetgen.

Every error wingetgen raises on purpose derives from WingetGenError:

- ConfigError: Bad profiles or options, or a missing API key
- StorageError: Saved settings could not be written
- NetworkError: Explanation API failures

Script generation itself never raises: any ScriptConfig produces a script.

Example:
    ```python
    from wingetgen.core import explain
    from wingetgen.exceptions import ConfigError, NetworkError

    try:
        result = explain(script)
    except ConfigError:
        print("Set GEMINI_API_KEY first")
    except NetworkError as e:
        print(f"No explanation available: {e}")
    ```
"""

from __future__ import annotations

__all__ = [
    "WingetGenError",
    "ConfigError",
    "StorageError",
    "NetworkError",
]


class WingetGenError(Exception):
    """Base class; the CLI reports any of these as "Error: ..." and exits 1."""

    pass


class ConfigError(WingetGenError):
    """Raised for bad user-supplied configuration.

    Causes:

    - YAML profile parsing (syntax errors, non-mapping documents)
    - Unknown profile keys or values of the wrong type
    - A missing Gemini API key for the explain command

    Example:
        ```python
        try:
            config = load_profile(Path("profile.yaml"))
        except ConfigError as e:
            sys.exit(f"Bad profile: {e}")
        ```
    """

    pass


class StorageError(WingetGenError):
    """Raised when saved settings cannot be written.

    Reading never raises this: unreadable or malformed saved values fall
    back to their defaults.
    """

    pass


class NetworkError(WingetGenError):
    """Raised when no explanation could be obtained.

    Causes:

    - HTTP errors or connection failures talking to the Gemini API
    - Responses that carry no explanation text
    """

    pass
