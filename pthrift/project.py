# SPDX-License-Identifier: MIT
"""Project container for pthrift builds.

The Project is the host the generation task lives in. It provides:
- project-relative path resolution
- a registry of build steps, looked up by name
- listeners notified when a step is added later on

Steps may be registered before or after the tasks that feed them, so a
task that needs a step which does not exist yet subscribes with
when_step_added() and finishes its wiring when the step shows up.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pthrift.task import CompileThrift

StepListener = Callable[[Any], None]


class Project:
    """Top-level container for a pthrift build.

    Example:
        project = Project("myservice", root_dir=".", build_dir="build")
        thrift = project.CompileThrift()
        thrift.generator("java", "private-members")
        project.add_step(CompileStep("compileJava"))

    Attributes:
        name: Project name.
        root_dir: Project root directory.
        build_dir: Directory for build outputs.
    """

    __slots__ = (
        "name",
        "root_dir",
        "build_dir",
        "_steps",
        "_listeners",
        "_tasks",
    )

    def __init__(
        self,
        name: str,
        *,
        root_dir: Path | str | None = None,
        build_dir: Path | str = "build",
    ) -> None:
        """Create a project.

        Args:
            name: Project name.
            root_dir: Project root directory (default: current dir).
            build_dir: Build output directory, relative to root_dir
                unless absolute (default: "build").
        """
        self.name = name
        self.root_dir = (Path(root_dir) if root_dir else Path.cwd()).absolute()
        self.build_dir = self.file(build_dir)
        self._steps: dict[str, Any] = {}
        self._listeners: list[StepListener] = []
        self._tasks: dict[str, CompileThrift] = {}

    def file(self, path: Path | str) -> Path:
        """Resolve a path relative to the project root.

        ".." segments are collapsed, so spellings of the same location
        compare equal. Symlinks are left alone.
        """
        path = Path(path)
        if not path.is_absolute():
            path = self.root_dir / path
        return Path(os.path.normpath(path.absolute()))

    def add_step(self, step: Any) -> None:
        """Register a build step and notify listeners.

        Raises:
            ValueError: If a step with the same name already exists.
        """
        if step.name in self._steps:
            raise ValueError(f"Step '{step.name}' already exists")
        self._steps[step.name] = step
        logger.debug("Added step %s", step.name)
        # Listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(step)

    def find_step(self, name: str) -> Any | None:
        return self._steps.get(name)

    def when_step_added(self, listener: StepListener) -> None:
        """Call ``listener(step)`` for every step added from now on."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StepListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def CompileThrift(
        self,
        name: str = "compileThrift",
        **kwargs: Any,
    ) -> CompileThrift:
        """Create and register a thrift generation task.

        Args:
            name: Task name.
            **kwargs: Passed on to CompileThrift.

        Returns:
            The new task.

        Raises:
            ValueError: If a task with the same name already exists.
        """
        from pthrift.task import CompileThrift

        if name in self._tasks:
            raise ValueError(f"Task '{name}' already exists")
        task = CompileThrift(self, name, **kwargs)
        self._tasks[name] = task
        return task

    def task(self, name: str) -> CompileThrift | None:
        return self._tasks.get(name)

    def __repr__(self) -> str:
        return f"Project({self.name!r}, root_dir={self.root_dir})"
