"""Release build of the Flutter app."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from cpush.core.result import Err, Ok, Result
from cpush.platform.process import ProcessError, run_silent

from .patch_errors import BuildFailed

__all__ = ["BuildInvoker", "FLUTTER_BUILD_CMD", "flutter_build_release"]

BuildInvoker = Callable[[], Result[None, BuildFailed]]

FLUTTER_BUILD_CMD = ("flutter", "build", "apk", "--release")

Runner = Callable[[list[str], Path], Result[None, ProcessError]]


def flutter_build_release(project_root: Path, *, runner: Runner = run_silent) -> BuildInvoker:
    """Return a build invoker bound to ``project_root``."""

    def build() -> Result[None, BuildFailed]:
        result = runner(list(FLUTTER_BUILD_CMD), project_root)
        if isinstance(result, Err):
            return Err(BuildFailed(message=str(result.error)))
        return Ok(None)

    return build
