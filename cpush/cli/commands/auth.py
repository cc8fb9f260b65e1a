from __future__ import annotations

import typer

from cpush.auth.session import Session, clear_session, credentials_path, save_session
from cpush.core.errors import ErrorCode
from cpush.core.result import Err
from cpush.output.console import RichConsole


def login(
    api_key: str = typer.Option(
        ...,
        "--api-key",
        prompt="API key",
        hide_input=True,
        envvar="CPUSH_API_KEY",
        help="API key issued by the CodePush console.",
    ),
) -> None:
    """Store an API key for publishing."""
    console = RichConsole()
    key = api_key.strip()
    if not key:
        console.error("API key must not be empty")
        raise typer.Exit(code=int(ErrorCode.USAGE))

    saved = save_session(Session(api_key=key))
    if isinstance(saved, Err):
        console.error(saved.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG))

    console.success(f"logged in (credentials: {credentials_path()})")


def logout() -> None:
    """Forget the stored API key."""
    console = RichConsole()
    result = clear_session()
    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG))

    console.success("logged out")
