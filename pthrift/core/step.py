# SPDX-License-Identifier: MIT
"""Consumer build steps.

A consumer step compiles the code thrift generates, e.g. a Java compile
step. The generation task only needs a narrow view of it: an ordered set
of source directories it can edit, and a way to say "run me first".
Anything implementing SourceConsumer can be wired up.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SourceConsumer(Protocol):
    """Protocol for steps that consume generated source directories."""

    @property
    def name(self) -> str:
        """Step name (e.g., 'compileJava')."""
        ...

    @property
    def source_dirs(self) -> list[Path]:
        """Source directories, in order."""
        ...

    def add_source_dir(self, path: Path) -> None:
        """Add a source directory if not already present."""
        ...

    def remove_source_dir(self, path: Path) -> None:
        """Remove a source directory if present."""
        ...

    def depends_on(self, prerequisite: Any) -> None:
        """Declare a prerequisite that must run before this step."""
        ...


class CompileStep:
    """In-memory consumer step.

    Keeps source directories as an ordered, duplicate-free list and
    prerequisites as an identity-unique list.

    Example:
        step = CompileStep("compileJava", language="java")
        project.add_step(step)
    """

    def __init__(
        self,
        name: str,
        *,
        language: str = "java",
        source_dirs: list[Path | str] | None = None,
    ) -> None:
        self._name = name
        self.language = language
        self._source_dirs: list[Path] = []
        self._prerequisites: list[Any] = []
        for d in source_dirs or []:
            self.add_source_dir(Path(d))

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_dirs(self) -> list[Path]:
        return list(self._source_dirs)

    @property
    def prerequisites(self) -> list[Any]:
        return list(self._prerequisites)

    def add_source_dir(self, path: Path) -> None:
        if path not in self._source_dirs:
            self._source_dirs.append(path)

    def remove_source_dir(self, path: Path) -> None:
        if path in self._source_dirs:
            self._source_dirs.remove(path)

    def depends_on(self, prerequisite: Any) -> None:
        if not any(p is prerequisite for p in self._prerequisites):
            self._prerequisites.append(prerequisite)

    def __repr__(self) -> str:
        dirs = ", ".join(str(d) for d in self._source_dirs)
        return f"{self.__class__.__name__}({self.name!r}, source_dirs=[{dirs}])"
