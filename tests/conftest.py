# SPDX-License-Identifier: MIT
"""Shared fixtures for pthrift tests."""

from __future__ import annotations

import pytest

import pthrift


class RecordingExecutor:
    """Executor that records commands instead of running them.

    Attributes:
        calls: Every command line received, in order.
        exit_codes: Exit code to return per input path (last argument).
        default: Exit code for inputs not in ``exit_codes``.
    """

    def __init__(self, default: int = 0) -> None:
        self.calls: list[list[str]] = []
        self.exit_codes: dict[str, int] = {}
        self.default = default

    def __call__(self, args: list[str]) -> int:
        self.calls.append(list(args))
        return self.exit_codes.get(args[-1], self.default)

    @property
    def sources(self) -> list[str]:
        return [call[-1] for call in self.calls]


@pytest.fixture(autouse=True)
def clean_build_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep THRIFT and CLI variables from leaking between tests."""
    monkeypatch.delenv("THRIFT", raising=False)
    monkeypatch.delenv("PTHRIFT_VARS", raising=False)
    monkeypatch.setattr(pthrift, "_cli_vars", None)


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()
