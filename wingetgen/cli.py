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

"""Command-line interface for wingetgen.

This module provides the main CLI entry point for the wingetgen tool, offering
commands for generating the winget update script and managing the saved
options it is generated from.

Commands:

    generate: Generate the PowerShell update script
    exclude: Add, remove or list excluded package IDs
    settings: Show or reset the saved options
    explain: Explain the script in plain language (Gemini API)

Example:
    Generate a script to stdout:
        ```bash
        $ wingetgen generate
        ```

    Generate a script file without the winget self-update step:
        ```bash
        $ wingetgen generate --no-self-update -o winget-updates.ps1
        ```

    Exclude packages:
        ```bash
        $ wingetgen exclude add Git.Git Mozilla.Firefox
        ```

    Generate from a YAML profile without touching saved settings:
        ```bash
        $ wingetgen generate --profile profiles/client-a.yaml --stateless
        ```

Exit Codes:

- 0: Success
- 1: Error (invalid profile or option, explanation failure)

Note:
    Each command has its own handler function (cmd_<command>).
    Status output goes to stderr so 'wingetgen generate > script.ps1' works.
    Verbose mode shows full tracebacks on errors for debugging.
"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback

from wingetgen import __version__
from wingetgen.build import MICROSOFT_EXCLUSION_PATTERNS, generate_script
from wingetgen.config import ScriptConfig
from wingetgen.core import (
    DEFAULT_SETTINGS_FILE,
    explain,
    generate,
    load_settings,
    store_settings,
)
from wingetgen.exceptions import StorageError, WingetGenError
from wingetgen.explain import DEFAULT_MODEL
from wingetgen.logging import get_logger, set_global_logger


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        traceback.print_exc()
    return 1


def _print_config(config: ScriptConfig) -> None:
    print(f"Log Directory:        {config.log_path}")
    print(f"Self-Update Winget:   {'yes' if config.self_update else 'no'}")
    print(f"Include Unknown:      {'yes' if config.include_unknown else 'no'}")
    print(f"Force Upgrade:        {'yes' if config.force_upgrade else 'no'}")
    print(
        f"Exclude Microsoft:    {'yes' if config.exclude_microsoft else 'no'}"
        f" ({len(MICROSOFT_EXCLUSION_PATTERNS)} patterns)"
    )
    if config.exclusions:
        print(f"Exclusions ({len(config.exclusions)}):")
        for package_id in config.exclusions:
            print(f"  - {package_id}")
    else:
        print("Exclusions:           None")


def cmd_generate(args: argparse.Namespace) -> int:
    """Handler for 'wingetgen generate' command.

    Resolves the configuration (saved settings, then profile, then flags),
    saves it for next time unless --stateless, and generates the script.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    Note:
        Without --output the script is the only thing printed to stdout.
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    overrides = {
        "log_path": args.log_path,
        "exclusions": args.exclude,
        "self_update": args.self_update,
        "include_unknown": args.include_unknown,
        "force_upgrade": args.force,
        "exclude_microsoft": args.exclude_microsoft,
    }
    output_path = Path(args.output) if args.output else None

    try:
        result = generate(
            settings_file=args.settings_file,
            profile=Path(args.profile) if args.profile else None,
            overrides=overrides,
            output_path=output_path,
            stateless=args.stateless,
        )
    except (WingetGenError, OSError) as err:
        return _report_error(err, args)

    if output_path is None:
        print(result.script)
        return 0

    print("=" * 70)
    print("GENERATED SCRIPT")
    print("=" * 70)
    _print_config(result.config)
    print(f"Steps:                {result.step_count}")
    print(f"Script Path:          {result.output_path}")
    print(f"Settings Saved:       {'yes' if result.settings_saved else 'no'}")
    print("=" * 70)
    print()
    print("[SUCCESS] Script generated successfully!")
    return 0


def cmd_exclude(args: argparse.Namespace) -> int:
    """Handler for 'wingetgen exclude' command.

    Adds or removes package IDs in the saved exclusion list, or lists it.
    IDs are matched case-insensitively and stored lower-case.

    Args:
        args: Parsed command-line arguments containing the action, package
            IDs and settings file.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    config = load_settings(args.settings_file)

    if args.action == "list":
        if not config.exclusions:
            print("No packages excluded.")
        for package_id in config.exclusions:
            print(package_id)
        return 0

    if not args.package_ids:
        print(
            f"Error: 'exclude {args.action}' needs at least one package ID",
            file=sys.stderr,
        )
        return 1

    changed = 0
    for package_id in args.package_ids:
        if args.action == "add":
            if config.add_exclusion(package_id):
                print(f"[OK] Excluded: {config.exclusions[-1]}")
                changed += 1
            else:
                print(f"[SKIPPED] Already excluded or empty: {package_id!r}")
        else:
            if config.remove_exclusion(package_id):
                print(f"[OK] Removed: {package_id.strip().lower()}")
                changed += 1
            else:
                print(f"[SKIPPED] Not excluded: {package_id!r}")

    if changed:
        try:
            store_settings(config, args.settings_file)
        except StorageError as err:
            return _report_error(err, args)

    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    """Handler for 'wingetgen settings' command.

    Shows the saved options, or resets them all to the defaults.

    Args:
        args: Parsed command-line arguments containing the action and
            settings file.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    if args.action == "reset":
        try:
            store_settings(ScriptConfig(), args.settings_file)
        except StorageError as err:
            return _report_error(err, args)
        print(f"[SUCCESS] Settings reset to defaults: {args.settings_file}")
        return 0

    config = load_settings(args.settings_file)
    print("=" * 70)
    print("SAVED SETTINGS")
    print("=" * 70)
    print(f"Settings File:        {args.settings_file}")
    _print_config(config)
    print("=" * 70)
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    """Handler for 'wingetgen explain' command.

    Explains a script in plain language. The script is read from --script,
    or generated from the saved settings (without saving anything).

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    Note:
        Requires a Gemini API key (--api-key or GEMINI_API_KEY).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        if args.script:
            script = Path(args.script).read_text(encoding="utf-8")
        else:
            script = generate_script(load_settings(args.settings_file))

        result = explain(script, api_key=args.api_key, model=args.model)
    except (WingetGenError, OSError) as err:
        return _report_error(err, args)

    print(result.html if args.html else result.explanation)
    return 0


def _add_common_flags(parser: argparse.ArgumentParser, debug: bool = True) -> None:
    parser.add_argument(
        "--settings-file",
        type=Path,
        default=DEFAULT_SETTINGS_FILE,
        help=f"Saved settings file (default: {DEFAULT_SETTINGS_FILE})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    if debug:
        parser.add_argument(
            "-d",
            "--debug",
            action="store_true",
            help="Show detailed debugging output (implies --verbose)",
        )


def _package_version() -> str:
    try:
        return version("wingetgen")
    except PackageNotFoundError:
        return __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="wingetgen",
        description="WinGet ScriptGen for TRMM - generate silent winget update scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"wingetgen {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'generate' command
    parser_generate = subparsers.add_parser(
        "generate",
        help="Generate the PowerShell update script",
        description="Generate the winget update script from saved settings, "
        "an optional profile and command-line options.",
    )
    parser_generate.add_argument(
        "--log-path",
        default=None,
        help="Log directory on the managed machine (e.g. C:\\temp\\logs)",
    )
    parser_generate.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PACKAGE_ID",
        help="Exclude a winget package ID (repeatable, case-insensitive)",
    )
    parser_generate.add_argument(
        "--self-update",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Upgrade winget itself before other apps",
    )
    parser_generate.add_argument(
        "--include-unknown",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Upgrade apps whose installed version winget cannot determine",
    )
    parser_generate.add_argument(
        "--force",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Pass --force to every upgrade",
    )
    parser_generate.add_argument(
        "--exclude-microsoft",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Skip common Microsoft apps like Edge, Office, Teams",
    )
    parser_generate.add_argument(
        "--profile",
        default=None,
        help="YAML profile applied over the saved settings",
    )
    parser_generate.add_argument(
        "--stateless",
        action="store_true",
        help="Start from defaults and do not save settings",
    )
    parser_generate.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the script to this file instead of stdout",
    )
    _add_common_flags(parser_generate)
    parser_generate.set_defaults(func=cmd_generate)

    # 'exclude' command
    parser_exclude = subparsers.add_parser(
        "exclude",
        help="Add, remove or list excluded package IDs",
        description="Manage the saved list of winget package IDs the script skips.",
    )
    parser_exclude.add_argument("action", choices=["add", "remove", "list"])
    parser_exclude.add_argument(
        "package_ids",
        nargs="*",
        metavar="PACKAGE_ID",
        help="winget package IDs (e.g. Git.Git)",
    )
    _add_common_flags(parser_exclude, debug=False)
    parser_exclude.set_defaults(func=cmd_exclude)

    # 'settings' command
    parser_settings = subparsers.add_parser(
        "settings",
        help="Show or reset the saved options",
        description="Show the saved options or reset them to the defaults.",
    )
    parser_settings.add_argument("action", choices=["show", "reset"])
    _add_common_flags(parser_settings, debug=False)
    parser_settings.set_defaults(func=cmd_settings)

    # 'explain' command
    parser_explain = subparsers.add_parser(
        "explain",
        help="Explain the script in plain language (Gemini API)",
        description="Ask Gemini for a plain-language explanation of a script.",
    )
    parser_explain.add_argument(
        "--script",
        default=None,
        help="Script file to explain (default: generate from saved settings)",
    )
    parser_explain.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help=f"Gemini model (default: {DEFAULT_MODEL})",
    )
    parser_explain.add_argument(
        "--api-key",
        default=None,
        help="Gemini API key (default: $GEMINI_API_KEY)",
    )
    parser_explain.add_argument(
        "--html",
        action="store_true",
        help="Print the explanation rendered as HTML",
    )
    _add_common_flags(parser_explain)
    parser_explain.set_defaults(func=cmd_explain)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the wingetgen CLI.

    This function is registered as the 'wingetgen' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Call the appropriate command handler
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
