# SPDX-License-Identifier: MIT
"""Thrift compiler command lines.

build_command() turns a TaskConfig and one input file into the argument
list for the thrift compiler. The order is fixed so that the same
configuration always produces the same command:

    thrift (-o|-out) OUT [--gen GEN]... [-I DIR]... [-r] [-nowarn]
           [-strict] [-v] [-debug] INPUT
"""

from __future__ import annotations

from pathlib import Path

from pthrift.core.config import TaskConfig
from pthrift.core.errors import ConfigurationError

# -o makes thrift create gen-<lang> folders below the output dir;
# -out writes straight into it.
GEN_FOLDER_FLAG = "-o"
FLAT_OUTPUT_FLAG = "-out"
GEN_FLAG = "--gen"
INCLUDE_FLAG = "-I"

# (config attribute, compiler flag), in command line order
BOOLEAN_FLAGS: tuple[tuple[str, str], ...] = (
    ("recurse", "-r"),
    ("nowarn", "-nowarn"),
    ("strict", "-strict"),
    ("verbose", "-v"),
    ("debug", "-debug"),
)


def build_command(config: TaskConfig, source: Path | str) -> list[str]:
    """Build the compiler invocation for a single input file.

    Args:
        config: Task configuration.
        source: The .thrift file to compile.

    Returns:
        Argument list, executable first and input path last.

    Raises:
        ConfigurationError: If no generator is registered or there is
            no output directory.
    """
    if not config.generators:
        raise ConfigurationError(
            "No thrift generator registered; nothing would be generated"
        )
    base_dir = config.layout.base_dir
    if base_dir is None:
        raise ConfigurationError("No thrift output directory configured")

    cmd = [
        config.executable,
        GEN_FOLDER_FLAG if config.layout.create_gen_folder else FLAT_OUTPUT_FLAG,
        str(base_dir.absolute()),
    ]

    for selector in config.generators.as_args():
        cmd.extend([GEN_FLAG, selector])

    for include_dir in config.include_dirs:
        cmd.extend([INCLUDE_FLAG, str(include_dir.absolute())])

    for attr, flag in BOOLEAN_FLAGS:
        if getattr(config, attr):
            cmd.append(flag)

    cmd.append(str(Path(source).absolute()))
    return cmd
