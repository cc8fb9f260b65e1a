"""Patch publishing workflow.

Sequence, stopping at the first failure:

  preflight -> build -> artifact -> app -> release_version -> release
  -> confirm -> create_patch -> upload -> channel [-> create_channel]
  -> promote

Each remote call is independent; nothing is rolled back. A patch created
before a later step fails stays on the server, unpromoted.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from cpush.api.client import CodePushClient
from cpush.api.models import App, Channel, Patch, Release
from cpush.auth.session import Session
from cpush.core.project import CodePushConfig, Project, resolve_base_url
from cpush.core.result import Err, Ok, Result
from cpush.output.console import ConsoleProtocol, Style

from .artifact import HashFunction, hash_artifact, locate_artifact, sha256_hex
from .build import BuildInvoker, flutter_build_release
from .identity import Prompt, resolve_app, resolve_release, resolve_release_version
from .patch_errors import (
    BuildFailed,
    NoSession,
    NotInitialized,
    PatchError,
    ProjectConfigInvalid,
)
from .remote import remote_call
from .steps import StepHandler, StepOutcome, advance, finish, run_steps

__all__ = [
    "ClientFactory",
    "Confirm",
    "PatchOutcome",
    "PatchRequest",
    "PatchService",
]

Confirm = Callable[[str], bool]
ClientFactory = Callable[[str, str], CodePushClient]

PatchStep = Literal[
    "preflight",
    "build",
    "artifact",
    "app",
    "release_version",
    "release",
    "confirm",
    "create_patch",
    "upload",
    "channel",
    "create_channel",
    "promote",
]

CONFIRM_QUESTION = "Would you like to continue?"


@dataclass(frozen=True, slots=True)
class PatchRequest:
    release_version: str | None = None
    platform: str = "android"
    arch: str = "aarch64"
    channel: str = "stable"
    assume_yes: bool = False


@dataclass(frozen=True, slots=True)
class PatchOutcome:
    """Result of a run that did not fail.

    ``published`` is False when the user declined the confirmation.
    """

    published: bool
    release: Release | None = None
    patch: Patch | None = None
    channel: Channel | None = None


@dataclass(frozen=True, slots=True)
class PatchState:
    """Values threaded from one step to the next."""

    step: PatchStep
    request: PatchRequest
    config: CodePushConfig | None = None
    declared_version: str | None = None
    client: CodePushClient | None = None
    artifact: Path | None = None
    hash: str | None = None
    app: App | None = None
    release_version: str | None = None
    release: Release | None = None
    patch: Patch | None = None
    channel: Channel | None = None


StepResult = Result[StepOutcome[PatchState], PatchError]


class PatchService:
    """Build, register and promote a patch for an existing release."""

    def __init__(
        self,
        *,
        project: Project,
        session: Session | None,
        console: ConsoleProtocol,
        client_factory: ClientFactory,
        prompt: Prompt,
        confirm: Confirm,
        build_release: BuildInvoker | None = None,
        hash_fn: HashFunction = sha256_hex,
    ) -> None:
        self._project = project
        self._session = session
        self._console = console
        self._client_factory = client_factory
        self._prompt = prompt
        self._confirm = confirm
        self._build_release = build_release or flutter_build_release(project.root)
        self._hash_fn = hash_fn

    def publish(self, request: PatchRequest) -> Result[PatchOutcome, PatchError]:
        handlers: Mapping[str, StepHandler[PatchState, PatchError]] = {
            "preflight": self._preflight,
            "build": self._build,
            "artifact": self._artifact,
            "app": self._app,
            "release_version": self._release_version,
            "release": self._release,
            "confirm": self._confirm_publish,
            "create_patch": self._create_patch,
            "upload": self._upload,
            "channel": self._channel,
            "create_channel": self._create_channel,
            "promote": self._promote,
        }
        result = run_steps(
            initial_state=PatchState(step="preflight", request=request),
            get_step=lambda s: s.step,
            handlers=handlers,
        )
        if isinstance(result, Err):
            return result

        final = result.value
        return Ok(
            PatchOutcome(
                published=final.step == "promote",
                release=final.release,
                patch=final.patch,
                channel=final.channel,
            )
        )

    # -------------------------------------------------------------------------
    # Local steps
    # -------------------------------------------------------------------------

    def _preflight(self, state: PatchState) -> StepResult:
        if not self._project.is_initialized():
            return Err(NotInitialized(path=self._project.config_path))

        if self._session is None:
            return Err(NoSession())

        config = self._project.code_push_config()
        if isinstance(config, Err):
            return Err(ProjectConfigInvalid(config.error.message, path=config.error.path))

        declared = self._project.project_version()
        if isinstance(declared, Err):
            return Err(ProjectConfigInvalid(declared.error.message, path=declared.error.path))

        client = self._client_factory(self._session.api_key, resolve_base_url(config.value))
        return Ok(
            advance(
                replace(
                    state,
                    step="build",
                    config=config.value,
                    declared_version=declared.value,
                    client=client,
                )
            )
        )

    def _build(self, state: PatchState) -> StepResult:
        progress = self._console.progress("Building release")
        built = self._build_release()
        if isinstance(built, Err):
            progress.fail(f"Failed to build: {built.error.message}")
            return Err(BuildFailed(message=built.error.message))
        progress.complete()
        return Ok(advance(replace(state, step="artifact")))

    def _artifact(self, state: PatchState) -> StepResult:
        located = locate_artifact(self._project.root, state.request.arch)
        if isinstance(located, Err):
            return located

        digest = hash_artifact(located.value, self._hash_fn)
        if isinstance(digest, Err):
            return digest

        return Ok(advance(replace(state, step="app", artifact=located.value, hash=digest.value)))

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    def _app(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.config is not None
        app = resolve_app(state.client, state.config.app_id, self._console)
        if isinstance(app, Err):
            return app
        return Ok(advance(replace(state, step="release_version", app=app.value)))

    def _release_version(self, state: PatchState) -> StepResult:
        assert state.declared_version is not None
        version = resolve_release_version(
            explicit=state.request.release_version,
            declared=state.declared_version,
            prompt=None if state.request.assume_yes else self._prompt,
        )
        return Ok(advance(replace(state, step="release", release_version=version)))

    def _release(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.app is not None
        assert state.release_version is not None
        release = resolve_release(state.client, state.app, state.release_version, self._console)
        if isinstance(release, Err):
            return release
        return Ok(advance(replace(state, step="confirm", release=release.value)))

    def _confirm_publish(self, state: PatchState) -> StepResult:
        self._print_summary(state)
        if not state.request.assume_yes and not self._confirm(CONFIRM_QUESTION):
            self._console.info("Aborting.")
            return Ok(finish(state))
        return Ok(advance(replace(state, step="create_patch")))

    def _print_summary(self, state: PatchState) -> None:
        assert state.app is not None
        request = state.request
        self._console.header("Ready to publish a new patch!")
        rows = (
            ("App", f"{state.app.display_name} ({state.app.id})"),
            ("Release Version", state.release_version or ""),
            ("Architecture", request.arch),
            ("Platform", request.platform),
            ("Channel", request.channel),
            ("Hash", state.hash or ""),
        )
        for label, value in rows:
            self._console.print(f"  {label}: {value}", Style.VALUE)
        self._console.newline()

    # -------------------------------------------------------------------------
    # Mutating remote steps
    # -------------------------------------------------------------------------

    def _create_patch(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.release is not None
        client, release = state.client, state.release
        patch = remote_call(self._console, "Creating patch", lambda: client.create_patch(release.id))
        if isinstance(patch, Err):
            return patch
        return Ok(advance(replace(state, step="upload", patch=patch.value)))

    def _upload(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.patch is not None
        assert state.artifact is not None and state.hash is not None
        client, patch, artifact, digest = state.client, state.patch, state.artifact, state.hash
        request = state.request
        uploaded = remote_call(
            self._console,
            "Uploading artifact",
            lambda: client.upload_patch_artifact(
                patch.id,
                artifact,
                arch=request.arch,
                platform=request.platform,
                hash=digest,
            ),
        )
        if isinstance(uploaded, Err):
            return uploaded
        return Ok(advance(replace(state, step="channel")))

    def _channel(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.app is not None
        client, app = state.client, state.app
        channels = remote_call(
            self._console, "Fetching channels", lambda: client.list_channels(app.id)
        )
        if isinstance(channels, Err):
            return channels

        existing = next((c for c in channels.value if c.name == state.request.channel), None)
        if existing is None:
            return Ok(advance(replace(state, step="create_channel")))
        return Ok(advance(replace(state, step="promote", channel=existing)))

    def _create_channel(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.app is not None
        client, app, name = state.client, state.app, state.request.channel
        channel = remote_call(
            self._console, "Creating channel", lambda: client.create_channel(app.id, name)
        )
        if isinstance(channel, Err):
            return channel
        return Ok(advance(replace(state, step="promote", channel=channel.value)))

    def _promote(self, state: PatchState) -> StepResult:
        assert state.client is not None and state.patch is not None
        assert state.channel is not None
        client, patch, channel = state.client, state.patch, state.channel
        promoted = remote_call(
            self._console,
            "Publishing patch",
            lambda: client.promote_patch(patch.id, channel.id),
        )
        if isinstance(promoted, Err):
            return promoted

        self._console.success("Published Patch!")
        return Ok(finish(state))
