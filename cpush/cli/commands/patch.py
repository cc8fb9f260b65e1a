"""Patch command - publish a patch for an existing release."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

import typer

from cpush.api.client import CodePushClient, HttpCodePushClient, client_timeout
from cpush.cli.context import build_context
from cpush.core.result import Err, Ok
from cpush.output.errors import patch_error_exit_code, print_patch_error
from cpush.services.patch import PatchRequest, PatchService


class TargetPlatform(StrEnum):
    android = "android"


class Arch(StrEnum):
    aarch64 = "aarch64"


class ReleaseChannel(StrEnum):
    stable = "stable"


def _http_client(api_key: str, base_url: str) -> CodePushClient:
    return HttpCodePushClient(api_key=api_key, base_url=base_url, timeout=client_timeout())


def patch(
    release_version: str | None = typer.Option(
        None,
        "--release-version",
        help='The version of the release (e.g. "1.0.0").',
        show_default=False,
    ),
    platform: TargetPlatform = typer.Option(
        TargetPlatform.android, "--platform", help="The platform of the release."
    ),
    arch: Arch = typer.Option(
        Arch.aarch64, "--arch", help="The architecture of the release (64-bit ARM)."
    ),
    channel: ReleaseChannel = typer.Option(
        ReleaseChannel.stable,
        "--channel",
        help="The channel the patch is promoted to (stable is consumed by production apps).",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Publish without prompting (uses the pubspec version)."
    ),
    project_dir: Path | None = typer.Option(
        None,
        "--project-dir",
        help="Flutter project root (default: current directory).",
        show_default=False,
    ),
) -> None:
    """Publish a new patch for a specific release."""
    ctx = build_context(project_dir)

    service = PatchService(
        project=ctx.project,
        session=ctx.session,
        console=ctx.console,
        client_factory=_http_client,
        prompt=lambda question, default: typer.prompt(question, default=default),
        confirm=lambda question: typer.confirm(question, default=False),
    )
    result = service.publish(
        PatchRequest(
            release_version=release_version,
            platform=platform.value,
            arch=arch.value,
            channel=channel.value,
            assume_yes=yes,
        )
    )

    match result:
        case Ok(_):
            return
        case Err(error):
            print_patch_error(error, ctx.console)
            raise typer.Exit(code=patch_error_exit_code(error))
