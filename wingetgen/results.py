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

"""Public API return types for wingetgen.

This module defines dataclasses for return values from the orchestration
functions in wingetgen.core. All dataclasses are frozen (immutable) to
prevent accidental mutation of return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from wingetgen.core import generate

        result = generate(Path("state/settings.json"))
        print(result.step_count)  # Attribute access, not dict access
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like ScriptConfig and StepNumbers) remain co-located with their
    related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wingetgen.config.model import ScriptConfig


@dataclass(frozen=True)
class GenerateResult:
    """Result from generating a script.

    Attributes:
        config: Configuration the script was generated from.
        script: Generated PowerShell script text.
        step_count: Number of "[STEP n/total]" steps in the script.
        output_path: File the script was written to, or None for stdout.
        settings_saved: True if the configuration was saved for next time.
    """

    config: ScriptConfig
    script: str
    step_count: int
    output_path: Path | None
    settings_saved: bool


@dataclass(frozen=True)
class ExplainResult:
    """Result from explaining a script.

    Attributes:
        model: Gemini model that wrote the explanation.
        explanation: Markdown-lite explanation text.
        html: explanation rendered to an HTML fragment.
    """

    model: str
    explanation: str
    html: str
