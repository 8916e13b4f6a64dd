# SPDX-License-Identifier: MIT
"""Input change tracking.

The generation task never computes diffs itself. It is handed an
InputChanges object: either "not incremental" (no usable history, run
everything) or the list of files added, modified or removed since the
last successful run.

SnapshotTracker is a small file-based oracle producing InputChanges. It
records (mtime, size) for every file under the tracked inputs in a JSON
file in the build directory and compares against it on the next run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class FileChange:
    """A single reported change to an input file."""

    path: Path
    change_type: ChangeType


@dataclass
class InputChanges:
    """Changes reported for a run.

    Attributes:
        incremental: False when there is no usable history and every
            input must be treated as new.
        changes: File changes since the last successful run. Ignored when
            ``incremental`` is False.
    """

    incremental: bool = False
    changes: list[FileChange] = field(default_factory=list)

    @classmethod
    def full(cls) -> InputChanges:
        return cls(incremental=False)



class SnapshotTracker:
    """Detect input changes by comparing file snapshots across runs.

    Example:
        tracker = SnapshotTracker(build_dir / "pthrift_state.json")
        changes = tracker.changes(
            task.config.source_items, fingerprint=task.config.fingerprint()
        )
        task.execute(changes)
        tracker.commit()

    The snapshot from changes() only becomes the new baseline when
    commit() is called, so after a failed run the same changes are
    reported again. A different ``fingerprint`` (the configuration the
    outputs were generated with) makes the next run non-incremental.
    """

    def __init__(self, state_file: Path | str) -> None:
        self.state_file = Path(state_file)
        self._pending: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any] | None:
        if not self.state_file.exists():
            return None
        try:
            with open(self.state_file) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.state_file, e)
            return None
        if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
            logger.warning("Ignoring malformed state file %s", self.state_file)
            return None
        return data

    @staticmethod
    def snapshot(items: Iterable[Path]) -> dict[str, list[int]]:
        """Record (mtime_ns, size) for every file under ``items``."""
        result: dict[str, list[int]] = {}
        for item in items:
            item = Path(item)
            if item.is_file():
                files: Iterable[Path] = [item]
            elif item.is_dir():
                files = sorted(p for p in item.rglob("*") if p.is_file())
            else:
                continue
            for file in files:
                try:
                    st = file.stat()
                except OSError:
                    continue
                result[str(file.absolute())] = [st.st_mtime_ns, st.st_size]
        return result

    def changes(
        self,
        items: Iterable[Path],
        *,
        fingerprint: str | None = None,
    ) -> InputChanges:
        """Compare the current state of ``items`` with the last commit.

        Args:
            items: Tracked source files and directories.
            fingerprint: Identifies the configuration of this run.

        Returns:
            Non-incremental changes if there is no previous snapshot or
            the fingerprint differs, otherwise the per-file changes.
        """
        current = self.snapshot(items)
        self._pending = {"fingerprint": fingerprint, "files": current}

        previous = self._load()
        if previous is None:
            logger.debug("No previous snapshot in %s", self.state_file)
            return InputChanges.full()
        if previous.get("fingerprint") != fingerprint:
            logger.info("Configuration changed since last run")
            return InputChanges.full()

        before: dict[str, Any] = previous["files"]
        result: list[FileChange] = []
        for path, stamp in current.items():
            if path not in before:
                result.append(FileChange(Path(path), ChangeType.ADDED))
            elif list(before[path]) != stamp:
                result.append(FileChange(Path(path), ChangeType.MODIFIED))
        for path in before:
            if path not in current:
                result.append(FileChange(Path(path), ChangeType.REMOVED))

        logger.debug("%d input change(s) since last run", len(result))
        return InputChanges(incremental=True, changes=result)

    def commit(self) -> None:
        """Store the snapshot taken by the last changes() call."""
        if self._pending is None:
            return
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w") as f:
            json.dump(self._pending, f, indent=2, sort_keys=True)
            f.write("\n")
        self._pending = None

    def reset(self) -> None:
        """Delete the committed snapshot so the next run is a full one.

        A snapshot staged by changes() is kept and can still be committed.
        """
        if self.state_file.exists():
            self.state_file.unlink()
