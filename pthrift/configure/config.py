# SPDX-License-Identifier: MIT
"""Compiler discovery for pthrift.

Locating thrift means a PATH search plus one subprocess call for the
version, so results are kept in ``<build_dir>/pthrift_config.json`` and
reused until the recorded executable disappears.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pthrift.core.errors import LaunchError

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass
class ProgramInfo:
    """A located executable.

    Attributes:
        path: Executable path.
        version: First line the program printed for its version flag.
    """

    path: Path
    version: str | None = None

    @property
    def version_tuple(self) -> tuple[int, ...] | None:
        """Numeric version, e.g. (0, 19, 0) for "Thrift version 0.19.0"."""
        if not self.version:
            return None
        match = _VERSION_RE.search(self.version)
        if match is None:
            return None
        return tuple(int(part) for part in match.groups() if part is not None)


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def _probe_version(path: Path, flag: str) -> str | None:
    try:
        result = subprocess.run(
            [str(path), flag], capture_output=True, text=True, timeout=5
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("Version probe of %s failed: %s", path, e)
        return None
    if result.returncode != 0:
        return None
    lines = [line.strip() for line in result.stdout.splitlines()]
    return next((line for line in lines if line), None)


class Configure:
    """Cached lookup of the programs a build runs.

    Example:
        config = Configure(build_dir="build")
        thrift = config.find_program("thrift", required=True)
        print(thrift.path, thrift.version)
        config.save()

    Attributes:
        build_dir: Directory holding the cache file.
    """

    def __init__(
        self,
        *,
        build_dir: Path | str = "build",
        cache_file: str = "pthrift_config.json",
    ) -> None:
        self.build_dir = Path(build_dir)
        self.cache_path = self.build_dir / cache_file
        self._cache: dict[str, Any] = self._read_cache()

    def _read_cache(self) -> dict[str, Any]:
        if not self.cache_path.exists():
            return {}
        try:
            data = json.loads(self.cache_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config cache %s: %s", self.cache_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed config cache %s", self.cache_path)
            return {}
        return data

    def save(self) -> None:
        """Write the cache to disk, creating the build dir if needed."""
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.cache_path.write_text(json.dumps(self._cache, indent=2) + "\n")

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._cache.get(key, default)

    def find_program(
        self,
        name: str,
        *,
        hints: list[Path | str] | None = None,
        version_flag: str = "-version",
        required: bool = False,
    ) -> ProgramInfo | None:
        """Locate ``name`` and record its path and version.

        A cached entry is used while its executable still exists. Otherwise
        each hint is tried (an executable file, or a directory holding
        ``name``), then PATH.

        Args:
            name: Program name, or a path to it.
            hints: Files or directories to try before PATH.
            version_flag: Flag that makes the program print its version.
                thrift understands both ``-version`` and ``--version``.
            required: Raise instead of returning None when not found.

        Raises:
            LaunchError: ``required`` is set and nothing was found.
        """
        key = f"program:{name}"
        cached = self._cache.get(key)
        if isinstance(cached, dict) and Path(cached.get("path", "")).is_file():
            return ProgramInfo(Path(cached["path"]), cached.get("version"))

        path = self._search(name, hints or [])
        if path is None:
            logger.debug("%s not found (hints: %s)", name, hints)
            if required:
                raise LaunchError(
                    name, FileNotFoundError(f"Required program not found: {name}")
                )
            return None

        info = ProgramInfo(path, _probe_version(path, version_flag))
        self._cache[key] = {"path": str(info.path), "version": info.version}
        logger.info("Found %s: %s (%s)", name, path, info.version or "unknown version")
        return info

    @staticmethod
    def _search(name: str, hints: list[Path | str]) -> Path | None:
        exe_name = name + ".exe" if sys.platform == "win32" else name
        for hint in map(Path, hints):
            if _is_executable(hint):
                return hint
            if _is_executable(hint / exe_name):
                return hint / exe_name
        found = shutil.which(name)
        return Path(found) if found else None

    def __repr__(self) -> str:
        return f"Configure(build_dir={self.build_dir})"
