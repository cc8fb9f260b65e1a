"""Tests for cpush.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

from cpush.core.result import Err, Ok
from cpush.platform.process import ProcessError, run_silent


class TestProcessError:
    def test_str_truncates_long_commands(self) -> None:
        error = ProcessError(command=("flutter", "build", "apk", "--release"), returncode=1)
        assert str(error) == "flutter build apk ... failed (exit 1)"

    def test_str_with_os_message(self) -> None:
        error = ProcessError(command=("flutter",), returncode=-1, message="not found")
        assert str(error) == "flutter: not found"


class TestRunSilent:
    def test_success_returns_none(self, tmp_path: Path) -> None:
        assert run_silent([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure_returns_exit_code(self, tmp_path: Path) -> None:
        result = run_silent([sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker").write_text("x")
        result = run_silent(
            [sys.executable, "-c", "import os, sys; sys.exit(0 if os.path.exists('marker') else 1)"],
            cwd=tmp_path,
        )
        assert result == Ok(None)

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run_silent(["definitely-not-a-real-binary-cpush"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.message
