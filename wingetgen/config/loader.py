"""
YAML profile loading for wingetgen.

A profile is a YAML file describing some or all of the script options, so a
team can keep one file per client or per machine group and generate the
matching script from it:

    log_path: 'C:\\ProgramData\\TRMM\\winget-logs'
    exclusions:
      - Git.Git
      - Mozilla.Firefox
    self_update: true
    force_upgrade: false

Keys that the profile leaves out keep the value of the base configuration
(saved settings, or the defaults). Exclusions are normalized the same way
as exclusions added by hand.

Functions
---------
load_profile : function
    Load a profile and layer it over a base ScriptConfig.

Private Helpers
---------------
_load_yaml_file : Load YAML with error handling

Error Handling
--------------
- FileNotFoundError: Profile file doesn't exist
- ConfigError: YAML parse errors, empty files, non-mapping documents,
  unknown keys and wrong value types
- All errors are chained with "from err" for better debugging
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from wingetgen.exceptions import ConfigError

from .model import ScriptConfig


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      FileNotFoundError      - when file does not exist
      ConfigError            - for invalid YAML (parse error) or an empty file
    """
    if not p.exists():
        raise FileNotFoundError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _print_yaml_content(data: dict[str, Any]) -> None:
    """Dump profile content through the debug logger."""
    from wingetgen.logging import get_global_logger

    logger = get_global_logger()
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", f"  {line}")


def load_profile(
    profile_path: Path,
    base: ScriptConfig | None = None,
) -> ScriptConfig:
    """
    Load a YAML profile and apply it on top of a base configuration.

    Steps
      1) Read profile YAML.
      2) Check the top level is a mapping.
      3) Overlay its keys on 'base' (or the defaults), validating types.

    Returns
      A new ScriptConfig. 'base' is not modified.

    Raises
      FileNotFoundError if the profile file is missing,
      ConfigError for YAML errors and invalid content.
    """
    from wingetgen.logging import get_global_logger

    logger = get_global_logger()
    profile_path = profile_path.resolve()

    logger.verbose("CONFIG", f"Loading profile: {profile_path}")

    data = _load_yaml_file(profile_path)
    if not isinstance(data, dict):
        raise ConfigError(
            f"Top-level YAML must be a mapping (dict): {profile_path}"
        )

    logger.debug("CONFIG", f"--- Content from {profile_path.name} ---")
    _print_yaml_content(data)

    try:
        config = ScriptConfig.from_dict(data, base=base)
    except ConfigError as err:
        raise ConfigError(f"Invalid profile {profile_path.name}: {err}") from err

    logger.verbose(
        "CONFIG", f"Applied {len(data)} key(s) from profile: {', '.join(data)}"
    )
    return config
