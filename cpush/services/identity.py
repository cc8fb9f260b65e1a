"""Match the local project to the app and release known to the service.

Matching is exact: the app by id, the release by its ``MAJOR.MINOR.PATCH``
version string. No range or prefix matching happens here.
"""

from __future__ import annotations

from collections.abc import Callable

from cpush.api.client import CodePushClient
from cpush.api.models import App, Release
from cpush.core.result import Err, Ok, Result
from cpush.output.console import ConsoleProtocol

from .patch_errors import AppNotFound, ReleaseNotFound, RemoteCallFailed
from .remote import remote_call

__all__ = [
    "Prompt",
    "RELEASE_VERSION_QUESTION",
    "find_app",
    "find_release",
    "resolve_app",
    "resolve_release",
    "resolve_release_version",
]

Prompt = Callable[[str, str], str]

RELEASE_VERSION_QUESTION = "Which release is this patch for?"


def find_app(apps: list[App], app_id: str) -> App | None:
    return next((a for a in apps if a.id == app_id), None)


def find_release(releases: list[Release], version: str) -> Release | None:
    return next((r for r in releases if r.version == version), None)


def resolve_app(
    client: CodePushClient, app_id: str, console: ConsoleProtocol
) -> Result[App, AppNotFound | RemoteCallFailed]:
    apps = remote_call(console, "Fetching apps", client.list_apps)
    if isinstance(apps, Err):
        return apps

    app = find_app(apps.value, app_id)
    if app is None:
        return Err(AppNotFound(app_id=app_id))
    return Ok(app)


def resolve_release_version(
    *,
    explicit: str | None,
    declared: str,
    prompt: Prompt | None,
) -> str:
    """Pick the release version to patch.

    An explicit ``--release-version`` wins. Otherwise the user is asked,
    with the version declared in pubspec.yaml as the default answer. Without
    an interactive surface the declared version is used as is.
    """
    if explicit is not None and explicit.strip():
        return explicit.strip()
    if prompt is None:
        return declared
    answer = prompt(RELEASE_VERSION_QUESTION, declared).strip()
    return answer or declared


def resolve_release(
    client: CodePushClient, app: App, version: str, console: ConsoleProtocol
) -> Result[Release, ReleaseNotFound | RemoteCallFailed]:
    releases = remote_call(console, "Fetching releases", lambda: client.list_releases(app.id))
    if isinstance(releases, Err):
        return releases

    release = find_release(releases.value, version)
    if release is None:
        return Err(ReleaseNotFound(version=version))
    return Ok(release)
