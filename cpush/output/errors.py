"""Error presentation utilities.

Centralized error formatting and exit code mapping for the patch workflow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cpush.core.errors import ErrorCode
from cpush.output.console import Style
from cpush.services.patch_errors import (
    AppNotFound,
    ArtifactNotFound,
    BuildFailed,
    NoSession,
    NotInitialized,
    PatchError,
    ProjectConfigInvalid,
    ReleaseNotFound,
    RemoteCallFailed,
)

if TYPE_CHECKING:
    from cpush.output.console import ConsoleProtocol

__all__ = ["patch_error_exit_code", "print_patch_error"]


def print_patch_error(error: PatchError, console: ConsoleProtocol) -> None:
    """Print a workflow error as one error line plus an optional hint."""
    match error:
        case NotInitialized(path=path, hint=hint):
            console.error(f"cpush is not initialized ({path.name} not found)")
            console.print(f"hint: {hint}", Style.DIM)
        case ProjectConfigInvalid(message=message):
            console.error(message)
        case NoSession(hint=hint):
            console.error("You must be logged in to publish.")
            console.print(f"hint: {hint}", Style.DIM)
        case BuildFailed():
            # The build progress line already carries the message.
            console.error("release build failed")
        case ArtifactNotFound(path=path, reason=reason):
            if reason:
                console.error(f'Artifact not readable: "{path}" ({reason})')
            else:
                console.error(f'Artifact not found: "{path}"')
        case AppNotFound(app_id=app_id, hint=hint):
            console.error(f'Could not find app with id: "{app_id}"')
            console.print(f"hint: {hint}", Style.DIM)
        case ReleaseNotFound(version=version, hint=hint):
            console.error(f'Release not found: "{version}"')
            console.print(f"hint: {hint}", Style.DIM)
        case RemoteCallFailed(step=step, message=message):
            console.error(f"{step} failed: {message}")


def patch_error_exit_code(error: PatchError) -> int:
    """Get exit code for a workflow error."""
    match error:
        case NotInitialized() | ProjectConfigInvalid():
            return int(ErrorCode.CONFIG)
        case NoSession():
            return int(ErrorCode.NO_USER)
        case (
            BuildFailed()
            | ArtifactNotFound()
            | AppNotFound()
            | ReleaseNotFound()
            | RemoteCallFailed()
        ):
            return int(ErrorCode.SOFTWARE)
    return int(ErrorCode.SOFTWARE)
