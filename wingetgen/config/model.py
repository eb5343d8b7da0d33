"""
Script configuration record for wingetgen.

ScriptConfig holds every option that shapes the generated script. It is a
plain value type: two configs with the same field values are equal and
produce the same script. It is created with defaults (or restored from saved
settings), edited in place, and handed to the assembler, which never
modifies it.

Exclusion Invariant
-------------------
The exclusion list holds winget package IDs that the generated script skips.
Entries are stripped and lower-cased before they are stored, empty entries
are dropped, and an entry that is already present (case-insensitively) is
rejected. Insertion order is preserved so the emitted script lists
exclusions in the order they were added.

Examples
--------
    >>> config = ScriptConfig()
    >>> config.add_exclusion("  Git.Git ")
    True
    >>> config.add_exclusion("git.git")
    False
    >>> config.exclusions
    ['git.git']
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, fields
from typing import Any

from wingetgen.exceptions import ConfigError

DEFAULT_LOG_PATH = "C:\\temp\\winget-logs"


def normalize_exclusion(value: str) -> str:
    """Normalize a package ID for storage (strip and lower-case)."""
    return value.strip().lower()


def normalize_exclusions(values: Iterable[str]) -> list[str]:
    """Normalize a sequence of package IDs, dropping empties and duplicates.

    The first occurrence of each ID wins, so order is preserved.
    """
    result: list[str] = []
    for value in values:
        entry = normalize_exclusion(value)
        if entry and entry not in result:
            result.append(entry)
    return result


@dataclass
class ScriptConfig:
    """Options for one generated winget update script.

    Attributes:
        log_path: Directory on the managed machine where the script writes
            its transcript. Emitted with backslashes doubled.
        exclusions: Package IDs skipped during the upgrade pass, normalized
            (stripped, lower-cased, unique).
        self_update: Upgrade winget itself before the other packages.
        include_unknown: Pass --include-unknown so packages with an
            undetectable installed version are upgraded too.
        force_upgrade: Pass --force to every upgrade.
        exclude_microsoft: Skip the built-in list of Microsoft package
            patterns (Edge, Office, Teams, .NET, ...).
    """

    log_path: str = DEFAULT_LOG_PATH
    exclusions: list[str] = field(default_factory=list)
    self_update: bool = True
    include_unknown: bool = True
    force_upgrade: bool = False
    exclude_microsoft: bool = True

    def __post_init__(self) -> None:
        self.exclusions = normalize_exclusions(self.exclusions)

    def add_exclusion(self, package_id: str) -> bool:
        """Add a package ID to the exclusion list.

        Args:
            package_id: winget package ID, in any case.

        Returns:
            True if the ID was added, False if it was empty after
                stripping or is already excluded.
        """
        entry = normalize_exclusion(package_id)
        if not entry or entry in self.exclusions:
            return False
        self.exclusions.append(entry)
        return True

    def remove_exclusion(self, package_id: str) -> bool:
        """Remove a package ID from the exclusion list.

        Returns:
            True if the ID was excluded and has been removed, else False.
        """
        entry = normalize_exclusion(package_id)
        if entry not in self.exclusions:
            return False
        self.exclusions.remove(entry)
        return True

    def to_dict(self) -> dict[str, Any]:
        """Return the fields as a plain dict (exclusions copied)."""
        return asdict(self)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], base: ScriptConfig | None = None
    ) -> ScriptConfig:
        """Build a config from a mapping of field names to values.

        Keys missing from data keep the value from base (or the default
        when no base is given).

        Args:
            data: Field name -> value mapping, e.g. a parsed YAML profile.
            base: Config supplying values for missing keys. Not modified.

        Returns:
            A new ScriptConfig.

        Raises:
            ConfigError: If data contains unknown keys or values of the
                wrong type.
        """
        values = (base or cls()).to_dict()

        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise ConfigError(
                f"Unknown configuration key(s): {', '.join(unknown)}. "
                f"Expected: {', '.join(sorted(known))}"
            )

        for key, value in data.items():
            _check_type(key, value)
            values[key] = list(value) if key == "exclusions" else value

        return cls(**values)


def _check_type(key: str, value: Any) -> None:
    """Raise ConfigError unless value has the type field 'key' requires."""
    if key == "log_path":
        if not isinstance(value, str):
            raise ConfigError(
                f"'log_path' must be a string, got {type(value).__name__}"
            )
    elif key == "exclusions":
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError("'exclusions' must be a list of strings")
    elif not isinstance(value, bool):
        raise ConfigError(
            f"{key!r} must be true or false, got {type(value).__name__}"
        )
