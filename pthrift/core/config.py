# SPDX-License-Identifier: MIT
"""Configuration data for a thrift generation task.

TaskConfig is a plain aggregate of everything the compiler invocation
depends on. It holds no behavior beyond small helpers; mutation rules
(and the rewiring they trigger) live on the task.

The one derived value, the effective generated-code directory, is
computed by effective_gen_dir() from the current fields every time it is
read, so it can never go stale across a mutation.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path

# Extension of interface-definition files picked up from directories
THRIFT_SUFFIX = ".thrift"

DEFAULT_EXECUTABLE = "thrift"


@dataclass
class GeneratorSpec:
    """Registered compiler backends.

    Maps generator name to a comma-joined option string. Names and
    options are trimmed on registration. Insertion order is kept so
    command lines are reproducible.
    """

    entries: dict[str, str] = field(default_factory=dict)

    def put(self, name: str, options: list[str] | tuple[str, ...] = ()) -> None:
        """Register a generator, replacing the options of an existing one."""
        self.entries[name.strip()] = ",".join(opt.strip() for opt in options)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def as_args(self) -> list[str]:
        """Return the generator selectors, e.g. ["java", "py:new_style"]."""
        result: list[str] = []
        for name, options in self.entries.items():
            name = name.strip()
            options = options.strip()
            result.append(f"{name}:{options}" if options else name)
        return result


@dataclass
class OutputLayout:
    """Where the compiler writes, and whether it adds gen-<lang> folders."""

    base_dir: Path | None = None
    create_gen_folder: bool = True


@dataclass
class TaskConfig:
    """Everything needed to invoke the thrift compiler.

    Attributes:
        source_items: Files or directories holding .thrift sources.
        include_dirs: Include search path, in order.
        layout: Output directory and folder-naming policy.
        generators: Registered generators.
        executable: Compiler program name or path.
        recurse: Pass -r (generate included files too).
        nowarn: Pass -nowarn.
        strict: Pass -strict.
        verbose: Pass -v.
        debug: Pass -debug.
    """

    source_items: list[Path] = field(default_factory=list)
    include_dirs: list[Path] = field(default_factory=list)
    layout: OutputLayout = field(default_factory=OutputLayout)
    generators: GeneratorSpec = field(default_factory=GeneratorSpec)
    executable: str = DEFAULT_EXECUTABLE
    recurse: bool = False
    nowarn: bool = False
    strict: bool = False
    verbose: bool = False
    debug: bool = False

    def effective_gen_dir(self, language: str) -> Path | None:
        return effective_gen_dir(
            self.layout.base_dir,
            self.layout.create_gen_folder,
            self.generators,
            language,
        )

    def fingerprint(self) -> str:
        """Hash of the settings that shape the generated output.

        Warning and diagnostic flags are left out; changing them does not
        require regenerating anything.
        """
        data = {
            "executable": self.executable,
            "generators": self.generators.entries,
            "base_dir": str(self.layout.base_dir),
            "create_gen_folder": self.layout.create_gen_folder,
            "include_dirs": [str(d) for d in self.include_dirs],
            "recurse": self.recurse,
        }
        encoded = json.dumps(data, sort_keys=True).encode()
        return hashlib.sha256(encoded).hexdigest()


def effective_gen_dir(
    base_dir: Path | None,
    create_gen_folder: bool,
    generators: GeneratorSpec,
    language: str,
) -> Path | None:
    """Compute the directory generated code for ``language`` lands in.

    Args:
        base_dir: Output base directory, if set.
        create_gen_folder: Whether the compiler creates gen-<lang> folders.
        generators: Registered generators.
        language: The consumer's language, e.g. "java".

    Returns:
        ``base_dir/gen-<language>`` with gen folders on, ``base_dir``
        with them off, or None if no generator for ``language`` is
        registered or there is no base directory.

    Examples:
        >>> gens = GeneratorSpec()
        >>> gens.put("java")
        >>> effective_gen_dir(Path("/tmp/out"), True, gens, "java").as_posix()
        '/tmp/out/gen-java'
        >>> effective_gen_dir(Path("/tmp/out"), False, gens, "java").as_posix()
        '/tmp/out'
        >>> effective_gen_dir(Path("/tmp/out"), True, gens, "cpp") is None
        True
    """
    if base_dir is None or language not in generators:
        return None
    if create_gen_folder:
        return base_dir / f"gen-{language}"
    return base_dir
