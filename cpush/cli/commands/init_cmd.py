"""Init command - link the project to a code push app."""

from __future__ import annotations

from pathlib import Path

import typer

from cpush.cli.commands.patch import _http_client  # pyright: ignore[reportPrivateUsage]
from cpush.cli.context import build_context
from cpush.core.result import Err, Ok
from cpush.output.errors import patch_error_exit_code, print_patch_error
from cpush.services.init import init_project


def init(
    app_id: str = typer.Option(
        ..., "--app-id", prompt="App id", help="Id of the app registered with the service."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing cpush.yaml."),
    project_dir: Path | None = typer.Option(
        None,
        "--project-dir",
        help="Flutter project root (default: current directory).",
        show_default=False,
    ),
) -> None:
    """Write cpush.yaml so patches can be published for this project."""
    ctx = build_context(project_dir)

    if ctx.project.is_initialized() and not force:
        ctx.console.warning(f"{ctx.project.config_path.name} already exists (use --force)")
        return

    result = init_project(
        project=ctx.project,
        session=ctx.session,
        console=ctx.console,
        client_factory=_http_client,
        app_id=app_id,
    )

    match result:
        case Ok(_):
            return
        case Err(error):
            print_patch_error(error, ctx.console)
            raise typer.Exit(code=patch_error_exit_code(error))
