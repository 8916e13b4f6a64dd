# SPDX-License-Identifier: MIT
"""Custom exceptions for pthrift.

All pthrift exceptions inherit from PthriftError. Any of them raised
while a task executes aborts the run; there are no retries.
"""

from __future__ import annotations

from pathlib import Path


class PthriftError(Exception):
    """Base class for all pthrift exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(PthriftError):
    """The task configuration cannot produce anything.

    Raised before any process is launched, e.g. when no generator
    has been registered.
    """


class GenerateError(PthriftError):
    """The output directory could not be deleted or created.

    Attributes:
        path: The output directory.
        action: What was attempted ("delete" or "create").
    """

    def __init__(self, path: Path | str, action: str) -> None:
        self.path = Path(path)
        self.action = action
        super().__init__(
            f"Could not {action} thrift output directory: {self.path}"
        )


class CompilerError(PthriftError):
    """The thrift compiler exited with a non-zero status.

    Attributes:
        source: The input file being compiled.
        exit_code: The compiler's exit status.
    """

    def __init__(self, source: Path | str, exit_code: int) -> None:
        self.source = str(source)
        self.exit_code = exit_code
        super().__init__(f"Failed to compile {self.source}, exit={exit_code}")


class LaunchError(PthriftError):
    """The compiler executable could not be started.

    Attributes:
        executable: The program that was invoked.
        cause: The underlying OS error.
    """

    def __init__(self, executable: str, cause: OSError) -> None:
        self.executable = executable
        self.cause = cause
        super().__init__(f"Failed to run {executable}: {cause}")
