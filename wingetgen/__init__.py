"""
wingetgen - WinGet ScriptGen for TRMM

A Python-based CLI tool that generates a PowerShell script for silently
updating Windows applications with winget, ready to paste into Tactical RMM
(or any RMM agent that runs scripts as SYSTEM).

wingetgen provides:
  - A fixed, well-tested update script with configurable options
  - Package exclusions (case-insensitive) and built-in Microsoft exclusions
  - Optional winget self-update, --include-unknown and --force
  - Saved settings, so the next run starts from the last configuration
  - YAML profiles for per-client configurations
  - Plain-language explanations of the script via the Gemini API

Quick Start
-----------
Generate a script with the saved (or default) options:

    $ wingetgen generate -o winget-updates.ps1

Exclude a package for all future scripts:

    $ wingetgen exclude add Git.Git

For full CLI documentation:

    $ wingetgen --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    ScriptConfig record and YAML profile loading.
build : package
    Script template and assembler.
state : package
    Saved settings.
explain : package
    Gemini explanations and markdown-lite rendering.

Public API
----------
    from wingetgen.build import generate_script
    from wingetgen.config import ScriptConfig, load_profile
    from wingetgen.core import generate
    from wingetgen.state import SettingsStore, load_config, save_config
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "WinGet ScriptGen for TRMM - silent winget update scripts"

# Re-export commonly used functions for convenience
from wingetgen.build import generate_script
from wingetgen.config import ScriptConfig, load_profile
from wingetgen.core import generate

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "generate",
    "generate_script",
    "load_profile",
    "ScriptConfig",
]
