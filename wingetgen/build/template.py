"""winget update script generation for wingetgen.

This module assembles the PowerShell script that TRMM runs on managed
machines. The fixed payload lives in wingetgen.build.fragments; this module
only computes the substitution values from a ScriptConfig and fills the
``{{NAME}}`` markers of the template.

Private Helpers:
    - _substitution_values: Build the marker -> text mapping for a config
    - _fill_markers: Replace every marker in a single pass

Design Principles:
    - Fixed script text is never re-derived, only copied
    - Generation is pure: no I/O, no mutation of the config, no exceptions
    - The generation timestamp is the only value that varies between calls
    - Inserted user text is never scanned for markers again

Example:
    from pathlib import Path
    from wingetgen.build.template import generate_script
    from wingetgen.config import ScriptConfig

    config = ScriptConfig(log_path="C:\\temp\\logs", exclusions=["git.git"])
    script = generate_script(config)

    Path("winget-updates.ps1").write_text(script, encoding="utf-8")
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import re

from wingetgen.config.model import ScriptConfig

from .fragments import (
    EXCLUSION_INDENT,
    FORCE_STATEMENT,
    INCLUDE_UNKNOWN_STATEMENT,
    MICROSOFT_EXCLUSION_PATTERNS,
    SCRIPT_TEMPLATE,
    SELF_UPDATE_BLOCK,
)

_MARKER_PATTERN = re.compile(r"\{\{([A-Z_]+)\}\}")


@dataclass(frozen=True)
class StepNumbers:
    """Step numbers shown in the script's "[STEP n/total]" log lines.

    Attributes:
        total: Number of steps announced in every step line.
        source_update: Step number of "Updating winget sources".
        app_update: Step number of the application upgrade pass.
    """

    total: int
    source_update: int
    app_update: int


def step_numbers(self_update: bool) -> StepNumbers:
    """Compute step numbering with or without the self-update step.

    Example:
        >>> step_numbers(True)
        StepNumbers(total=4, source_update=3, app_update=4)
        >>> step_numbers(False)
        StepNumbers(total=3, source_update=2, app_update=3)
    """
    offset = 1 if self_update else 0
    return StepNumbers(
        total=3 + offset,
        source_update=2 + offset,
        app_update=3 + offset,
    )


def escape_log_path(path: str) -> str:
    """Double every backslash so the path is a valid PowerShell string literal.

    Example:
        >>> escape_log_path("C:\\temp\\logs")
        'C:\\\\temp\\\\logs'
    """
    return path.replace("\\", "\\\\")


def format_exclusion_block(entries: list[str] | tuple[str, ...]) -> str:
    """Format entries as the body of a PowerShell @( ... ) array.

    Each entry is double-quoted on its own line, indented to match the
    array in the template, and separated by commas. An empty sequence
    gives an empty string, which leaves a valid empty array.

    Args:
        entries: Package IDs or wildcard patterns, in output order.

    Returns:
        Lines joined with ",\\n".

    Example:
        >>> format_exclusion_block(["git.git", "7zip.7zip"])
        '        "git.git",\\n        "7zip.7zip"'
    """
    return ",\n".join(f'{EXCLUSION_INDENT}"{entry}"' for entry in entries)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as an ISO 8601 UTC string with milliseconds.

    Naive datetimes are taken to be UTC already.

    Example:
        >>> format_timestamp(datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=UTC))
        '2025-01-02T03:04:05.678Z'
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    millis = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def _substitution_values(
    config: ScriptConfig, generated_at: datetime
) -> dict[str, str]:
    """Build the marker name -> replacement text mapping for a config."""
    steps = step_numbers(config.self_update)

    microsoft_patterns = (
        MICROSOFT_EXCLUSION_PATTERNS if config.exclude_microsoft else ()
    )

    return {
        "GENERATED_AT": format_timestamp(generated_at),
        "LOG_PATH": escape_log_path(config.log_path),
        "STEP_COUNT": str(steps.total),
        "SELF_UPDATE_BLOCK": SELF_UPDATE_BLOCK if config.self_update else "",
        "SOURCE_UPDATE_STEP": str(steps.source_update),
        "APP_UPDATE_STEP": str(steps.app_update),
        "MANUAL_EXCLUSIONS": format_exclusion_block(config.exclusions),
        "MICROSOFT_EXCLUSIONS": format_exclusion_block(microsoft_patterns),
        "INCLUDE_UNKNOWN_ARG": (
            INCLUDE_UNKNOWN_STATEMENT if config.include_unknown else ""
        ),
        "FORCE_ARG": FORCE_STATEMENT if config.force_upgrade else "",
    }


def _fill_markers(template: str, values: dict[str, str]) -> str:
    """Replace every {{NAME}} marker in one pass over the template.

    re.sub never rescans replacement text, so a log path or exclusion that
    happens to contain "{{...}}" is emitted as-is.
    """
    return _MARKER_PATTERN.sub(lambda match: values[match.group(1)], template)


def generate_script(
    config: ScriptConfig,
    generated_at: datetime | None = None,
) -> str:
    """Generate the winget update script for a configuration.

    The result depends only on the config fields and on generated_at,
    which is written into the header comment. Calling this twice with the
    same config and timestamp returns identical text.

    Args:
        config: Script options. Not modified.
        generated_at: Timestamp for the "Generated on" header. Defaults to
            the current UTC time.

    Returns:
        Complete PowerShell script text, stripped of leading and trailing
            whitespace.

    Example:
        >>> script = generate_script(ScriptConfig(self_update=False))
        >>> "[STEP 1/3] Checking winget version..." in script
        True
    """
    if generated_at is None:
        generated_at = datetime.now(UTC)

    values = _substitution_values(config, generated_at)
    return _fill_markers(SCRIPT_TEMPLATE, values).strip()
