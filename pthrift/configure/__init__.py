# SPDX-License-Identifier: MIT
"""Compiler discovery and configuration caching."""

from pthrift.configure.config import Configure, ProgramInfo

__all__ = ["Configure", "ProgramInfo"]
