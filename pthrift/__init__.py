# SPDX-License-Identifier: MIT
"""
Pthrift: incremental Thrift code generation for Python-described builds.

Pthrift runs the Thrift IDL compiler over a set of .thrift files,
regenerating only what changed where it safely can, and hands the
generated directory to the step that compiles it.
"""

from __future__ import annotations

import json
import os

__version__ = "0.1.0"

# Internal storage for CLI variables
_cli_vars: dict[str, str] | None = None


def get_var(name: str, default: str | None = None) -> str | None:
    """Get a build variable set on the command line or from environment.

    Variables can be set when invoking pthrift:
        pthrift generate THRIFT=/opt/thrift/bin/thrift ...

    Precedence (highest to lowest):
        1. Command line: pthrift VAR=value
        2. Environment variable: VAR=value pthrift

    Args:
        name: Variable name.
        default: Default value if not set.

    Returns:
        The variable value, or default if not set.
    """
    global _cli_vars

    # Lazy-load CLI vars from environment on first access
    if _cli_vars is None:
        pthrift_vars = os.environ.get("PTHRIFT_VARS")
        if pthrift_vars:
            try:
                _cli_vars = json.loads(pthrift_vars)
            except json.JSONDecodeError:
                _cli_vars = {}
        else:
            _cli_vars = {}

    if name in _cli_vars:
        return _cli_vars[name]

    return os.environ.get(name, default)


def set_vars(variables: dict[str, str]) -> None:
    """Override build variables in-process (used by the CLI)."""
    global _cli_vars
    _cli_vars = dict(variables)


# Re-export commonly used classes for convenient imports
from pthrift.configure.config import Configure  # noqa: E402
from pthrift.core.changes import (  # noqa: E402
    ChangeType,
    FileChange,
    InputChanges,
    SnapshotTracker,
)
from pthrift.core.step import CompileStep, SourceConsumer  # noqa: E402
from pthrift.project import Project  # noqa: E402
from pthrift.task import CompileThrift  # noqa: E402

# Public API exports
__all__ = [
    # Version
    "__version__",
    # Build variable access
    "get_var",
    "set_vars",
    # Core classes
    "Project",
    "CompileThrift",
    "CompileStep",
    "SourceConsumer",
    # Change tracking
    "ChangeType",
    "FileChange",
    "InputChanges",
    "SnapshotTracker",
    # Configuration
    "Configure",
]
