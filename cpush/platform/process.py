"""Subprocess execution with Result-based error handling.

The native build streams its output straight to the terminal, so only the
exit status is captured.

Usage:
    match run_silent(["flutter", "build", "apk", "--release"], cwd=root):
        case Ok(_):
            ...
        case Err(error):
            print(error)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from cpush.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process, -1 if it never started.
        message: OS error text when the process could not be spawned.
    """

    command: tuple[str, ...]
    returncode: int
    message: str = ""

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.message:
            return f"{cmd_str}: {self.message}"
        return f"{cmd_str} failed (exit {self.returncode})"


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, letting its output stream to the terminal.

    Returns:
        Ok(None) on exit code 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, message=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode))

    return Ok(None)
