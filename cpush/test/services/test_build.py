from __future__ import annotations

from pathlib import Path

from cpush.core.result import Err, Ok, Result
from cpush.platform.process import ProcessError
from cpush.services.build import FLUTTER_BUILD_CMD, flutter_build_release
from cpush.services.patch_errors import BuildFailed


def test_runs_flutter_release_build_in_project_root(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        calls.append((cmd, cwd))
        return Ok(None)

    assert flutter_build_release(tmp_path, runner=runner)() == Ok(None)
    assert calls == [(list(FLUTTER_BUILD_CMD), tmp_path)]


def test_non_zero_exit_becomes_build_failed(tmp_path: Path) -> None:
    def runner(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        del cwd
        return Err(ProcessError(command=tuple(cmd), returncode=1))

    result = flutter_build_release(tmp_path, runner=runner)()

    assert result == Err(BuildFailed(message="flutter build apk ... failed (exit 1)"))


def test_spawn_failure_reports_os_message(tmp_path: Path) -> None:
    def runner(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        del cwd
        return Err(ProcessError(command=tuple(cmd), returncode=-1, message="No such file"))

    result = flutter_build_release(tmp_path, runner=runner)()

    assert result == Err(BuildFailed(message="flutter build apk ...: No such file"))
