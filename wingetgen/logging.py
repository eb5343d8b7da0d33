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

"""Status output for wingetgen.

Library code reports progress through a process-wide logger instead of
printing. Everything goes to stderr: stdout is reserved for the generated
script, so 'wingetgen generate > update.ps1' captures nothing else.

Levels:
- step: numbered progress lines, shown whenever a DefaultLogger is active
- warning: problems that did not stop the command, always shown
- verbose: restored settings, applied overrides, HTTP calls (-v)
- debug: profile contents and substitution details (-d, implies -v)

Example:
    ```python
    from wingetgen.logging import get_global_logger

    logger = get_global_logger()
    logger.step(1, 3, "Resolving configuration...")
    logger.verbose("STATE", "Loaded 6 saved value(s)")
    ```

Note:
    Until the CLI installs a DefaultLogger the global logger is a
    SilentLogger, so importing wingetgen as a library prints nothing.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Interface shared by DefaultLogger and SilentLogger."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report progress as '[step/total] message'."""
        ...

    def warning(self, prefix: str, message: str) -> None:
        """Report a non-fatal problem."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report detail shown with --verbose.

        Args:
            prefix: Area tag, one of "CONFIG", "STATE", "BUILD", "EXPLAIN".
            message: Text to print after the tag.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report detail shown with --debug only."""
        ...


class DefaultLogger:
    """Logger that writes tagged lines to a text stream (stderr by default).

    Args:
        verbose: Show verbose lines.
        debug: Show debug lines as well; turns on verbose.
        stream: Where to write. None means sys.stderr at write time, which
            keeps pytest's capsys working.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, stream: TextIO | None = None
    ) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream or sys.stderr)

    def step(self, step: int, total: int, message: str) -> None:
        self._write(f"[{step}/{total}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        self._write(f"[{prefix}] [WARNING] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._write(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._write(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that drops everything."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a stderr logger for the given -v/-d flags."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the logger library code should report through."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Install logger as the process-wide logger.

    The CLI calls this once per command:

        set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))
    """
    global _global_logger
    _global_logger = logger
