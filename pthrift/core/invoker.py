# SPDX-License-Identifier: MIT
"""Running the thrift compiler.

An Executor is anything that takes an argument list, runs it to
completion and returns the exit status. run_process() is the default,
backed by subprocess. Tests substitute a recording fake.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from pthrift.core.errors import CompilerError, LaunchError

logger = logging.getLogger(__name__)


class Executor(Protocol):
    def __call__(self, args: list[str]) -> int:
        """Run ``args`` and return the exit code.

        Raises:
            OSError: If the program cannot be launched.
        """
        ...


def run_process(args: list[str]) -> int:
    """Run a command, blocking until it exits."""
    result = subprocess.run(args)
    return result.returncode


def invoke(
    cmd: list[str],
    source: Path | str,
    executor: Executor = run_process,
) -> None:
    """Run one compiler command and map its outcome to errors.

    Args:
        cmd: Full command line, as produced by build_command().
        source: The input file, for error reporting.
        executor: How to run the command.

    Raises:
        LaunchError: If the executable could not be started.
        CompilerError: If the compiler exited non-zero.
    """
    logger.info("Running: %s", " ".join(cmd))
    try:
        exit_code = executor(cmd)
    except OSError as e:
        raise LaunchError(cmd[0], e) from e

    if exit_code != 0:
        raise CompilerError(source, exit_code)
