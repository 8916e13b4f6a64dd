# SPDX-License-Identifier: MIT
"""Rebuild decisions and input resolution.

Given the InputChanges for a run, select_mode() decides whether the
output tree has to be regenerated from scratch or whether only the
changed files need recompiling:

- no incremental history: full rebuild
- any input removed: full rebuild. The compiler has no way of deleting
  what it generated for a removed file, and outputs of files sharing a
  namespace are not isolated from each other, so the whole tree is
  regenerated from the current inputs.
- otherwise: incremental, compiling just the added/modified .thrift files.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from pthrift.core.changes import ChangeType, InputChanges
from pthrift.core.config import THRIFT_SUFFIX

logger = logging.getLogger(__name__)


class RebuildMode(Enum):
    FULL_REBUILD = "full"
    INCREMENTAL = "incremental"


def select_mode(changes: InputChanges) -> RebuildMode:
    """Pick the rebuild strategy for a set of reported changes."""
    if not changes.incremental:
        return RebuildMode.FULL_REBUILD
    if any(c.change_type is ChangeType.REMOVED for c in changes.changes):
        return RebuildMode.FULL_REBUILD
    return RebuildMode.INCREMENTAL


def filter_changes(changes: InputChanges) -> list[Path]:
    """Return the changed interface files to recompile.

    Keeps reported order, drops duplicates and anything that is not a
    .thrift file.
    """
    result: list[Path] = []
    seen: set[Path] = set()
    for change in changes.changes:
        if change.change_type is ChangeType.REMOVED:
            continue
        path = Path(change.path).absolute()
        if path.suffix != THRIFT_SUFFIX or path in seen:
            continue
        seen.add(path)
        result.append(path)
    return result


def resolve_sources(items: Iterable[Path]) -> list[Path]:
    """Expand source items into the full list of files to compile.

    Files are used as given. Directories are searched recursively for
    .thrift files. Entries that are missing, unreadable or neither file
    nor directory are logged and skipped.

    Args:
        items: Source files and directories.

    Returns:
        Absolute file paths, first occurrence wins on duplicates.
    """
    result: list[Path] = []
    seen: set[Path] = set()

    def add(path: Path) -> None:
        path = path.absolute()
        if path not in seen:
            seen.add(path)
            result.append(path)

    for item in items:
        item = Path(item)
        if item.is_file():
            if not os.access(item, os.R_OK):
                logger.warning("Unable to read %s. Will ignore it", item)
                continue
            add(item)
        elif item.is_dir():
            for found in sorted(item.resolve().rglob(f"*{THRIFT_SUFFIX}")):
                if found.is_file():
                    add(found)
        elif not item.exists():
            logger.warning("Could not find %s. Will ignore it", item)
        else:
            logger.warning("Unable to handle %s. Will ignore it", item)

    return result
