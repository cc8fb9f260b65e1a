"""Link a Flutter project to an app registered with the service."""

from __future__ import annotations

from dataclasses import replace

from cpush.api.models import App
from cpush.auth.session import Session
from cpush.core.project import CodePushConfig, Project, resolve_base_url, save_code_push_config
from cpush.core.result import Err, Ok, Result
from cpush.output.console import ConsoleProtocol

from .identity import resolve_app
from .patch import ClientFactory
from .patch_errors import AppNotFound, NoSession, PatchError, ProjectConfigInvalid

__all__ = ["UNKNOWN_APP_HINT", "init_project"]

UNKNOWN_APP_HINT = "Check the app id, or log in with the account that owns the app"


def init_project(
    *,
    project: Project,
    session: Session | None,
    console: ConsoleProtocol,
    client_factory: ClientFactory,
    app_id: str,
) -> Result[App, PatchError]:
    """Check that ``app_id`` exists remotely, then write ``cpush.yaml``.

    An existing ``cpush.yaml`` is overwritten, keeping its ``base_url``.
    """
    if not project.pubspec_path.is_file():
        return Err(
            ProjectConfigInvalid(
                f"No pubspec.yaml in {project.root}; not a Flutter project",
                path=project.pubspec_path,
            )
        )

    if session is None:
        return Err(NoSession())

    base_url: str | None = None
    if project.is_initialized():
        existing = project.code_push_config()
        if isinstance(existing, Ok):
            base_url = existing.value.base_url

    config = CodePushConfig(app_id=app_id.strip(), base_url=base_url)
    client = client_factory(session.api_key, resolve_base_url(config))
    app = resolve_app(client, config.app_id, console)
    if isinstance(app, Err):
        if isinstance(app.error, AppNotFound):
            return Err(replace(app.error, hint=UNKNOWN_APP_HINT))
        return app

    saved = save_code_push_config(project.config_path, config)
    if isinstance(saved, Err):
        return Err(ProjectConfigInvalid(saved.error.message, path=saved.error.path))

    console.success(f"Initialized {app.value.display_name} ({app.value.id})")
    return Ok(app.value)
