from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from cpush.auth.session import Session, load_session
from cpush.core.errors import ErrorCode
from cpush.core.project import Project
from cpush.core.result import Err
from cpush.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    session: Session | None
    console: ConsoleProtocol


def build_context(project_dir: Path | None = None) -> CLIContext:
    console = RichConsole()

    try:
        root = (project_dir or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid project directory: {e}")
        raise typer.Exit(code=int(ErrorCode.USAGE)) from e

    session_result = load_session()
    if isinstance(session_result, Err):
        console.error(session_result.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG))

    return CLIContext(
        project=Project(root=root),
        session=session_result.value,
        console=console,
    )
