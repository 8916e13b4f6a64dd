#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Build script for a small Thrift service.

This example demonstrates the task API:
- Registering a Java compile step that consumes generated code
- Pointing the thrift task at an IDL directory and an include path
- Adding a generator after the consumer exists, which wires the
  generated directory into the consumer automatically
- Running a full generation

Set THRIFT (or PTHRIFT_VARS='{"THRIFT": "..."}') to pick a compiler
other than the one on PATH.
"""

import os
from pathlib import Path

from pthrift import CompileStep, Project

# =============================================================================
# Build Script
# =============================================================================

# Directories
build_dir = Path(os.environ.get("PTHRIFT_BUILD_DIR", "build"))
idl_dir = Path(__file__).parent / "idl"

project = Project("greeter", root_dir=Path(__file__).parent, build_dir=build_dir)

# The consumer can be registered before or after the thrift task
compile_java = CompileStep("compileJava", source_dirs=["src/main/java"])
project.add_step(compile_java)

thrift = project.CompileThrift(default_sources=False)
thrift.source_dir(idl_dir)
thrift.include_dir(idl_dir / "shared")
thrift.generator("java", "private-members", "fullcamel")
thrift.strict(True)

print(f"compileJava sources: {', '.join(str(d) for d in compile_java.source_dirs)}")

for source in thrift.execute():
    print(f"Generated {source.name}")
