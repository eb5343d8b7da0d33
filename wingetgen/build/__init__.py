"""
winget update script assembly for wingetgen.

This package turns a ScriptConfig into the PowerShell script that TRMM runs
on managed machines. The fixed script text lives in the fragments module;
the template module fills in the handful of values that depend on the
configuration.

Public API:

generate_script : function
    Generate the complete script text for a configuration.
step_numbers : function
    Step numbering with or without the winget self-update step.
MICROSOFT_EXCLUSION_PATTERNS : tuple
    Wildcard patterns skipped when Microsoft products are excluded.

Example:
    from wingetgen.build import generate_script
    from wingetgen.config import ScriptConfig

    config = ScriptConfig(exclusions=["git.git"], force_upgrade=True)
    print(generate_script(config))
"""

from .fragments import MICROSOFT_EXCLUSION_PATTERNS
from .template import StepNumbers, generate_script, step_numbers

__all__ = [
    "MICROSOFT_EXCLUSION_PATTERNS",
    "StepNumbers",
    "generate_script",
    "step_numbers",
]
