from __future__ import annotations

import typer

from cpush import __version__
from cpush.cli.commands.auth import login, logout
from cpush.cli.commands.init_cmd import init
from cpush.cli.commands.patch import patch


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(init)
app.command()(patch)
app.command()(login)
app.command()(logout)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
