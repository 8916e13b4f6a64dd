# SPDX-License-Identifier: MIT
"""Tests for pthrift CLI."""

from __future__ import annotations

import argparse
import logging
import shutil
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from pthrift.cli import (
    STATE_FILE,
    main,
    parse_generator,
    parse_variables,
    setup_logging,
)
from pthrift.core.changes import SnapshotTracker

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="uses a shell script as fake compiler"
)


def touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def fake_thrift(tmp_path: Path, exit_code: int = 0) -> Path:
    """Write a stand-in compiler that logs its arguments."""
    script = tmp_path / "bin" / "thrift"
    log = tmp_path / "thrift.log"
    touch(script, f'#!/bin/sh\necho "$@" >> "{log}"\nexit {exit_code}\n')
    script.chmod(0o755)
    return script


def flaky_thrift(tmp_path: Path) -> tuple[Path, Path]:
    """Stand-in compiler that fails on b.thrift while the returned flag exists."""
    script = tmp_path / "bin" / "thrift"
    log = tmp_path / "thrift.log"
    flag = tmp_path / "fail-on-b"
    touch(
        script,
        "#!/bin/sh\n"
        f'echo "$@" >> "{log}"\n'
        "for last; do :; done\n"
        f'if [ -e "{flag}" ]; then\n'
        '  case "$last" in *b.thrift) exit 2;; esac\n'
        "fi\n",
    )
    script.chmod(0o755)
    return script, flag


def thrift_calls(tmp_path: Path) -> list[str]:
    log = tmp_path / "thrift.log"
    if not log.exists():
        return []
    return log.read_text().splitlines()


class TestParseVariables:
    def test_splits_variables_and_args(self) -> None:
        variables, remaining = parse_variables(
            ["THRIFT=/opt/thrift", "idl", "-x", "=bad", "a.thrift"]
        )
        assert variables == {"THRIFT": "/opt/thrift"}
        assert remaining == ["idl", "-x", "=bad", "a.thrift"]


class TestParseGenerator:
    def test_plain(self) -> None:
        assert parse_generator("java") == ("java", [])

    def test_with_options(self) -> None:
        assert parse_generator("java:beans,fullcamel") == ("java", ["beans", "fullcamel"])

    def test_empty_name(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_generator(":beans")


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_normal(self) -> None:
        setup_logging(verbose=False, debug=False)

    def test_setup_logging_verbose(self) -> None:
        setup_logging(verbose=True, debug=False)

    def test_setup_logging_debug(self) -> None:
        setup_logging(verbose=False, debug=True)


class TestGenerate:
    def test_dry_run_prints_commands(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "idl"
        touch(src / "a.thrift")
        out = tmp_path / "out"

        result = main(
            [
                "generate",
                "-B",
                str(tmp_path / "build"),
                "-o",
                str(out),
                "-g",
                "java:beans",
                "-I",
                str(tmp_path / "inc"),
                "--flat",
                "--strict",
                "-n",
                str(src),
            ]
        )

        assert result == 0
        line = capsys.readouterr().out.strip()
        assert line.startswith(f"thrift -out {out} --gen java:beans -I {tmp_path / 'inc'}")
        assert line.endswith("-strict " + str((src / "a.thrift").resolve()))
        assert not out.exists()

    def test_no_generator_fails(self, tmp_path: Path, caplog) -> None:
        touch(tmp_path / "idl" / "a.thrift")

        result = main(
            ["generate", "-B", str(tmp_path / "build"), str(tmp_path / "idl")]
        )

        assert result == 1
        assert "no thrift generator registered" in caplog.text

    @posix_only
    def test_full_then_incremental(self, tmp_path: Path, caplog) -> None:
        caplog.set_level(logging.INFO)
        thrift = fake_thrift(tmp_path)
        src = tmp_path / "idl"
        touch(src / "a.thrift")
        touch(src / "b.thrift")
        build = tmp_path / "build"
        args = ["generate", "-B", str(build), "--thrift", str(thrift), "-g", "java", str(src)]

        assert main(args) == 0
        assert len(thrift_calls(tmp_path)) == 2
        assert (build / STATE_FILE).exists()
        assert (build / "generated-sources" / "thrift").is_dir()

        assert main(args) == 0
        assert len(thrift_calls(tmp_path)) == 2

        touch(src / "c.thrift")
        assert main(args) == 0
        calls = thrift_calls(tmp_path)
        assert len(calls) == 3
        assert calls[-1].endswith("c.thrift")

    @posix_only
    def test_variable_selects_compiler(self, tmp_path: Path) -> None:
        thrift = fake_thrift(tmp_path)
        touch(tmp_path / "idl" / "a.thrift")

        result = main(
            [
                "generate",
                "-B",
                str(tmp_path / "build"),
                "-g",
                "py",
                f"THRIFT={thrift}",
                str(tmp_path / "idl"),
            ]
        )

        assert result == 0
        assert len(thrift_calls(tmp_path)) == 1

    @posix_only
    def test_config_change_forces_full_rebuild(self, tmp_path: Path) -> None:
        thrift = fake_thrift(tmp_path)
        touch(tmp_path / "idl" / "a.thrift")
        base = ["generate", "-B", str(tmp_path / "build"), "--thrift", str(thrift)]

        assert main(base + ["-g", "java", str(tmp_path / "idl")]) == 0
        assert main(base + ["-g", "java", "-g", "py", str(tmp_path / "idl")]) == 0

        calls = thrift_calls(tmp_path)
        assert len(calls) == 2
        assert "--gen py" in calls[-1]

    @posix_only
    def test_compiler_failure_keeps_old_state(self, tmp_path: Path, caplog) -> None:
        thrift = fake_thrift(tmp_path, exit_code=3)
        touch(tmp_path / "idl" / "a.thrift")
        build = tmp_path / "build"

        result = main(
            [
                "generate",
                "-B",
                str(build),
                "--thrift",
                str(thrift),
                "-g",
                "java",
                str(tmp_path / "idl"),
            ]
        )

        assert result == 1
        assert "exit=3" in caplog.text
        assert not (build / STATE_FILE).exists()

    @posix_only
    def test_failed_full_rebuild_is_not_trusted_next_run(
        self, tmp_path: Path
    ) -> None:
        thrift, flag = flaky_thrift(tmp_path)
        src = tmp_path / "idl"
        touch(src / "a.thrift")
        touch(src / "b.thrift")
        build = tmp_path / "build"
        base = ["generate", "-B", str(build), "--thrift", str(thrift), "-g", "java"]

        assert main(base + [str(src)]) == 0
        assert len(thrift_calls(tmp_path)) == 2

        flag.touch()
        assert main(base + ["--full", str(src)]) == 1
        assert len(thrift_calls(tmp_path)) == 4
        assert not (build / STATE_FILE).exists()

        flag.unlink()
        assert main(base + [str(src)]) == 0
        calls = thrift_calls(tmp_path)
        assert len(calls) == 6
        assert calls[-2].endswith("a.thrift")
        assert calls[-1].endswith("b.thrift")
        assert (build / STATE_FILE).exists()

    @posix_only
    def test_missing_output_dir_forces_full_rebuild(
        self, tmp_path: Path, caplog
    ) -> None:
        caplog.set_level(logging.INFO)
        thrift = fake_thrift(tmp_path)
        src = tmp_path / "idl"
        touch(src / "a.thrift")
        touch(src / "b.thrift")
        build = tmp_path / "build"
        output = build / "generated-sources" / "thrift"
        args = ["generate", "-B", str(build), "--thrift", str(thrift), "-g", "java", str(src)]

        assert main(args) == 0
        shutil.rmtree(output)

        assert main(args) == 0
        assert len(thrift_calls(tmp_path)) == 4
        assert output.is_dir()
        assert "is missing" in caplog.text

    @posix_only
    def test_state_write_failure_reported(self, tmp_path: Path, caplog) -> None:
        thrift = fake_thrift(tmp_path)
        touch(tmp_path / "idl" / "a.thrift")
        args = [
            "generate",
            "-B",
            str(tmp_path / "build"),
            "--thrift",
            str(thrift),
            "-g",
            "java",
            str(tmp_path / "idl"),
        ]

        with patch.object(
            SnapshotTracker, "commit", side_effect=PermissionError("read-only")
        ):
            result = main(args)

        assert result == 1
        assert "read-only" in caplog.text

    def test_missing_compiler(self, tmp_path: Path, caplog) -> None:
        touch(tmp_path / "idl" / "a.thrift")

        result = main(
            [
                "generate",
                "-B",
                str(tmp_path / "build"),
                "--thrift",
                str(tmp_path / "no-such-thrift"),
                "-g",
                "java",
                str(tmp_path / "idl"),
            ]
        )

        assert result == 1
        assert "Failed to run" in caplog.text


class TestClean:
    def test_removes_output_and_state(self, tmp_path: Path) -> None:
        build = tmp_path / "build"
        out = build / "generated-sources" / "thrift"
        touch(out / "gen-java" / "A.java")
        touch(build / STATE_FILE, "{}")

        assert main(["clean", "-B", str(build)]) == 0

        assert not out.exists()
        assert not (build / STATE_FILE).exists()

    def test_custom_output_dir(self, tmp_path: Path) -> None:
        out = tmp_path / "gen"
        touch(out / "A.java")

        assert main(["clean", "-B", str(tmp_path / "build"), "-o", str(out)]) == 0
        assert not out.exists()

    def test_nothing_to_clean(self, tmp_path: Path) -> None:
        assert main(["clean", "-B", str(tmp_path / "build")]) == 0


class TestInfo:
    @posix_only
    def test_reports_compiler(self, tmp_path: Path, capsys) -> None:
        script = tmp_path / "bin" / "thrift"
        touch(script, '#!/bin/sh\necho "Thrift version 0.20.0"\n')
        script.chmod(0o755)

        result = main(["info", "-B", str(tmp_path / "build"), "--thrift", str(script)])

        assert result == 0
        out = capsys.readouterr().out
        assert str(script) in out
        assert "Thrift version 0.20.0" in out

    def test_missing_compiler(self, tmp_path: Path) -> None:
        result = main(
            ["info", "-B", str(tmp_path / "build"), "--thrift", "no-such-thrift-xyz"]
        )
        assert result == 1


class TestCLICommands:
    def test_pthrift_help(self) -> None:
        result = subprocess.run(
            [sys.executable, "-m", "pthrift.cli", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "pthrift" in result.stdout
        assert "generate" in result.stdout
        assert "clean" in result.stdout
        assert "info" in result.stdout

    def test_pthrift_version(self) -> None:
        from pthrift import __version__

        result = subprocess.run(
            [sys.executable, "-m", "pthrift.cli", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_no_command(self) -> None:
        assert main([]) == 1
