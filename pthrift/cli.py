# SPDX-License-Identifier: MIT
"""Command-line interface for pthrift."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import TYPE_CHECKING

from pthrift.core.changes import InputChanges, SnapshotTracker
from pthrift.core.errors import PthriftError
from pthrift.core.resolver import RebuildMode, select_mode
from pthrift.project import Project

if TYPE_CHECKING:
    from pthrift.task import CompileThrift

# Set up logging
logger = logging.getLogger("pthrift")

STATE_FILE = "pthrift_state.json"


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Split KEY=value build variables from source arguments.

    Anything that is not KEY=value with a non-empty KEY, or that looks
    like an option, is left for the caller in its original order.

    Returns:
        Tuple of (variables, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key and not arg.startswith("-"):
            variables[key] = value
        else:
            remaining.append(arg)

    return variables, remaining


def parse_generator(value: str) -> tuple[str, list[str]]:
    """Split 'name:opt1,opt2' into ('name', ['opt1', 'opt2'])."""
    name, _, options = value.partition(":")
    if not name.strip():
        raise argparse.ArgumentTypeError(f"invalid generator: {value!r}")
    return name, options.split(",") if options else []


def build_task(
    args: argparse.Namespace, sources: list[str]
) -> tuple[Project, CompileThrift]:
    """Create a project and a configured task from parsed arguments."""
    project = Project("pthrift", build_dir=args.build_dir)
    task = project.CompileThrift(default_sources=not sources)
    task.source_items(*sources)

    for name, options in getattr(args, "gen", None) or []:
        task.generator(name, *options)
    for include_dir in getattr(args, "include", None) or []:
        task.include_dir(include_dir)
    if args.output_dir:
        task.output_dir(args.output_dir)
    if getattr(args, "flat", False):
        task.create_gen_folder(False)
    if getattr(args, "thrift", None):
        task.thrift_executable(args.thrift)

    task.recurse(getattr(args, "recurse", False))
    task.nowarn(getattr(args, "nowarn", False))
    task.strict(getattr(args, "strict", False))
    task.verbose(getattr(args, "thrift_verbose", False))
    task.debug(getattr(args, "thrift_debug", False))
    return project, task


def cmd_generate(args: argparse.Namespace) -> int:
    """Run the thrift compiler over changed (or all) inputs.

    This command:
    1. Builds the task from the command line
    2. Asks the snapshot tracker what changed since the last run
    3. Regenerates incrementally or fully
    4. Records the new snapshot if everything succeeded
    """
    setup_logging(args.verbose, args.debug)

    from pthrift import set_vars

    variables, sources = parse_variables(args.extra)
    set_vars(variables)

    project, task = build_task(args, sources)

    try:
        if args.dry_run:
            for cmd in task.commands():
                print(" ".join(cmd))
            return 0

        tracker = SnapshotTracker(project.build_dir / STATE_FILE)
        changes = tracker.changes(
            task.config.source_items, fingerprint=task.config.fingerprint()
        )
        output = task.config.layout.base_dir
        if args.full:
            changes = InputChanges.full()
        elif output is not None and not output.exists():
            logger.info("Output directory %s is missing", output)
            changes = InputChanges.full()

        if select_mode(changes) is RebuildMode.FULL_REBUILD:
            # A full rebuild empties the output first; if it fails part-way
            # the old snapshot no longer describes what is on disk
            tracker.reset()

        compiled = task.execute(changes)
        tracker.commit()
    except (PthriftError, OSError) as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Generated code for %d file(s) in %s",
        len(compiled),
        task.config.layout.base_dir,
    )
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Remove generated code and the change-tracking state."""
    setup_logging(args.verbose, args.debug)

    project, task = build_task(args, [])
    output = task.config.layout.base_dir
    if output is not None and output.exists():
        logger.info("Removing output directory: %s", output)
        try:
            shutil.rmtree(output)
        except OSError as e:
            logger.error("Could not delete %s: %s", output, e)
            return 1
    else:
        logger.info("Output directory does not exist: %s", output)

    SnapshotTracker(project.build_dir / STATE_FILE).reset()
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Show which thrift compiler would be used."""
    setup_logging(args.verbose, args.debug)

    from pthrift import get_var
    from pthrift.configure.config import Configure

    name = args.thrift or get_var("THRIFT") or "thrift"
    config = Configure(build_dir=args.build_dir)
    program = config.find_program(name)
    if program is None:
        logger.error("%s not found in PATH", name)
        logger.info("Install thrift: https://thrift.apache.org/")
        return 1

    print(f"Thrift compiler: {program.path}")
    print(f"Version: {program.version or 'unknown'}")
    config.save()
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "-B", "--build-dir", default="build", help="Build directory (default: build)"
    )
    parser.add_argument("--thrift", metavar="PATH", help="Thrift compiler to run")


def add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output-dir",
        metavar="DIR",
        help="Output directory (default: BUILD_DIR/generated-sources/thrift)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the pthrift CLI."""
    parser = argparse.ArgumentParser(
        prog="pthrift",
        description="Incremental Thrift code generation.",
        epilog="Run 'pthrift <command> --help' for command-specific help.",
    )
    from pthrift import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # pthrift generate
    gen_parser = subparsers.add_parser(
        "generate", help="Generate code from .thrift files"
    )
    add_common_args(gen_parser)
    add_output_args(gen_parser)
    gen_parser.add_argument(
        "-g",
        "--gen",
        action="append",
        type=parse_generator,
        metavar="NAME[:OPTS]",
        help="Generator to run, e.g. java:beans,private-members (repeatable)",
    )
    gen_parser.add_argument(
        "-I",
        "--include",
        action="append",
        metavar="DIR",
        help="Include directory (repeatable, order matters)",
    )
    gen_parser.add_argument(
        "--flat",
        action="store_true",
        help="Write into the output directory instead of gen-<lang> folders",
    )
    gen_parser.add_argument(
        "-r", "--recurse", action="store_true", help="Also generate included files"
    )
    gen_parser.add_argument(
        "--nowarn", action="store_true", help="Suppress compiler warnings"
    )
    gen_parser.add_argument(
        "--strict", action="store_true", help="Strict compiler warnings"
    )
    gen_parser.add_argument(
        "--thrift-verbose", action="store_true", help="Verbose compiler output"
    )
    gen_parser.add_argument(
        "--thrift-debug", action="store_true", help="Compiler debug output"
    )
    gen_parser.add_argument(
        "--full", action="store_true", help="Regenerate everything"
    )
    gen_parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Print compiler commands without running them",
    )
    gen_parser.add_argument(
        "extra",
        nargs="*",
        help="Source files/directories and build variables (KEY=value)",
    )
    gen_parser.set_defaults(func=cmd_generate)

    # pthrift clean
    clean_parser = subparsers.add_parser(
        "clean", help="Remove generated code and tracking state"
    )
    add_common_args(clean_parser)
    add_output_args(clean_parser)
    clean_parser.set_defaults(func=cmd_clean)

    # pthrift info
    info_parser = subparsers.add_parser(
        "info", help="Show the thrift compiler that would be used"
    )
    add_common_args(info_parser)
    info_parser.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
