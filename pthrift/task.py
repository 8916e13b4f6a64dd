# SPDX-License-Identifier: MIT
"""The thrift generation task.

CompileThrift runs the thrift compiler over a set of .thrift files and
feeds the generated directory to a consumer step (by default the Java
compile step, "compileJava") as a source directory.

Configuration is changed through the mutator methods. Three of them
(generator(), output_dir(), create_gen_folder()) can move the directory
the consumer should read generated code from. Each of these computes the
effective directory before and after the change and hands both to
_rewire(), which swaps the consumer's source directory and makes the
consumer depend on this task. If the consumer step does not exist yet,
the task subscribes to the project once and wires itself when the step
is added.

Running the task (execute()) either regenerates everything or only the
changed files, see pthrift.core.resolver.

One task instance per output directory: two tasks writing into the same
directory will race, and neither guards against it.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pthrift.core.changes import InputChanges
from pthrift.core.command import build_command
from pthrift.core.config import DEFAULT_EXECUTABLE, TaskConfig
from pthrift.core.errors import ConfigurationError, GenerateError
from pthrift.core.invoker import Executor, invoke, run_process
from pthrift.core.resolver import (
    RebuildMode,
    filter_changes,
    resolve_sources,
    select_mode,
)
from pthrift.core.step import SourceConsumer

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pthrift.project import Project

DEFAULT_SOURCE_DIR = "src/main/thrift"
DEFAULT_OUTPUT_DIR = Path("generated-sources") / "thrift"


class CompileThrift:
    """Generate code from .thrift files with the thrift compiler.

    Example:
        thrift = project.CompileThrift()
        thrift.source_dir("idl")
        thrift.include_dir("idl/shared")
        thrift.generator("java", "private-members", "fullcamel")
        thrift.output_dir("build/gen")
        thrift.execute()

    Attributes:
        project: Owning project.
        name: Task name.
        consumer_step: Name of the step that compiles generated code.
        language: Generator whose output the consumer compiles.
        executor: Runs compiler commands.
        config: Current configuration. Read it freely, but change it
            through the mutators so the consumer stays wired.
    """

    def __init__(
        self,
        project: Project,
        name: str = "compileThrift",
        *,
        consumer_step: str = "compileJava",
        language: str = "java",
        executor: Executor = run_process,
        default_sources: bool = True,
    ) -> None:
        from pthrift import get_var

        self.project = project
        self.name = name
        self.consumer_step = consumer_step
        self.language = language
        self.executor = executor
        self.config = TaskConfig(
            executable=get_var("THRIFT") or DEFAULT_EXECUTABLE,
        )
        self._waiting_for_consumer = False

        if default_sources:
            self.source_dir(DEFAULT_SOURCE_DIR)
        self.output_dir(project.build_dir / DEFAULT_OUTPUT_DIR)

    # -- configuration -------------------------------------------------

    def source_dir(self, source_dir: Path | str) -> None:
        self.source_items(source_dir)

    def source_items(self, *items: Path | str) -> None:
        """Add .thrift files or directories holding them."""
        for item in items:
            path = self._convert_to_file(item)
            if path not in self.config.source_items:
                self.config.source_items.append(path)

    def include_dir(self, include_dir: Path | str) -> None:
        """Add a directory to the compiler's include path."""
        path = self.project.file(include_dir)
        if path not in self.config.include_dirs:
            self.config.include_dirs.append(path)

    def generator(self, gen: str, *options: str) -> None:
        """Register a generator, e.g. generator("java", "beans").

        Registering the same generator again replaces its options.
        """
        old_dir = self.effective_gen_dir
        self.config.generators.put(gen, options)
        self._rewire(old_dir)

    def output_dir(self, output_dir: Path | str) -> None:
        path = self.project.file(output_dir)
        if self.config.layout.base_dir == path:
            return

        old_dir = self.effective_gen_dir
        self.config.layout.base_dir = path
        self._rewire(old_dir)

    def create_gen_folder(self, create_gen_folder: bool) -> None:
        """Choose between gen-<lang> subfolders (-o) and flat output (-out)."""
        if self.config.layout.create_gen_folder == create_gen_folder:
            return

        old_dir = self.effective_gen_dir
        self.config.layout.create_gen_folder = create_gen_folder
        self._rewire(old_dir)

    def thrift_executable(self, thrift_executable: str) -> None:
        self.config.executable = thrift_executable

    def recurse(self, recurse: bool) -> None:
        self.config.recurse = recurse

    def nowarn(self, nowarn: bool) -> None:
        self.config.nowarn = nowarn

    def strict(self, strict: bool) -> None:
        self.config.strict = strict

    def verbose(self, verbose: bool) -> None:
        self.config.verbose = verbose

    def debug(self, debug: bool) -> None:
        self.config.debug = debug

    @property
    def effective_gen_dir(self) -> Path | None:
        """Directory the consumer reads generated code from, if any."""
        return self.config.effective_gen_dir(self.language)

    def _convert_to_file(self, item: Path | str) -> Path:
        # An existing path (relative to the working directory) wins over
        # project-relative resolution
        path = Path(item)
        if path.exists():
            return self.project.file(path.absolute())
        return self.project.file(path)

    # -- consumer wiring -----------------------------------------------

    def _find_consumer(self) -> SourceConsumer | None:
        step = self.project.find_step(self.consumer_step)
        if isinstance(step, SourceConsumer):
            return step
        return None

    def _rewire(self, old_dir: Path | None) -> None:
        """Move the consumer from ``old_dir`` to the current effective dir."""
        new_dir = self.effective_gen_dir
        if new_dir == old_dir:
            return

        consumer = self._find_consumer()
        if consumer is None:
            self._wait_for_consumer()
            return
        self._wire(consumer, old_dir, new_dir)

    def _wire(
        self,
        consumer: SourceConsumer,
        old_dir: Path | None,
        new_dir: Path | None,
    ) -> None:
        if old_dir is not None:
            consumer.remove_source_dir(old_dir)
        if new_dir is not None:
            consumer.add_source_dir(new_dir)
        consumer.depends_on(self)
        logger.debug(
            "%s: %s source dir %s -> %s", self.name, consumer.name, old_dir, new_dir
        )

    def _wait_for_consumer(self) -> None:
        if self._waiting_for_consumer:
            return
        self._waiting_for_consumer = True
        self.project.when_step_added(self._on_step_added)

    def _on_step_added(self, step: Any) -> None:
        if step.name != self.consumer_step or not isinstance(step, SourceConsumer):
            return
        self.project.remove_listener(self._on_step_added)
        self._waiting_for_consumer = False
        # A new step has none of our directories yet
        self._wire(step, None, self.effective_gen_dir)

    # -- execution -----------------------------------------------------

    def execute(self, changes: InputChanges | None = None) -> list[Path]:
        """Run the task.

        Args:
            changes: Input changes since the last successful run. None
                means no history: everything is regenerated.

        Returns:
            The input files that were compiled.

        Raises:
            ConfigurationError: No generator or output dir configured.
            GenerateError: The output directory could not be recreated.
            LaunchError: The compiler could not be started.
            CompilerError: The compiler failed on an input.
        """
        if changes is None:
            changes = InputChanges.full()
        self._check_config()

        if select_mode(changes) is RebuildMode.FULL_REBUILD:
            return self._compile_all()

        output = self._output_base()
        if not output.exists():
            self._make_output_dir(output)

        sources = filter_changes(changes)
        for source in sources:
            logger.info("Item to be generated for: %s", source)
            self._compile(source)
        return sources

    def commands(self) -> list[list[str]]:
        """Command lines a full rebuild would run, without running them."""
        self._check_config()
        return [
            build_command(self.config, source)
            for source in resolve_sources(self.config.source_items)
        ]

    def _check_config(self) -> None:
        if not self.config.generators:
            raise ConfigurationError(
                f"{self.name}: no thrift generator registered; "
                "call generator() before running"
            )
        self._output_base()

    def _output_base(self) -> Path:
        base_dir = self.config.layout.base_dir
        if base_dir is None:
            raise ConfigurationError(f"{self.name}: no output directory configured")
        return base_dir

    def _make_output_dir(self, output: Path) -> None:
        try:
            output.mkdir(parents=True)
        except OSError as e:
            raise GenerateError(output, "create") from e

    def _compile_all(self) -> list[Path]:
        output = self._output_base()
        if output.exists():
            try:
                shutil.rmtree(output)
            except OSError as e:
                raise GenerateError(output, "delete") from e
        self._make_output_dir(output)

        sources = resolve_sources(self.config.source_items)
        logger.info(
            "Items to be generated for: %s", ", ".join(str(s) for s in sources)
        )
        for source in sources:
            self._compile(source)
        return sources

    def _compile(self, source: Path) -> None:
        invoke(build_command(self.config, source), source, self.executor)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, language={self.language!r})"
