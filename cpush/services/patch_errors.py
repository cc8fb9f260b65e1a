from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class NotInitialized:
    path: Path
    hint: str = 'Run "cpush init" first'


@dataclass(frozen=True, slots=True)
class ProjectConfigInvalid:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class NoSession:
    hint: str = 'Run "cpush login" to log in and try again'


@dataclass(frozen=True, slots=True)
class BuildFailed:
    message: str


@dataclass(frozen=True, slots=True)
class ArtifactNotFound:
    path: Path
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class AppNotFound:
    app_id: str
    hint: str = 'Did you forget to run "cpush init"?'


@dataclass(frozen=True, slots=True)
class ReleaseNotFound:
    version: str
    hint: str = "Patches can only be published for existing releases. Create the release first"


@dataclass(frozen=True, slots=True)
class RemoteCallFailed:
    step: str
    message: str


PatchError = (
    NotInitialized
    | ProjectConfigInvalid
    | NoSession
    | BuildFailed
    | ArtifactNotFound
    | AppNotFound
    | ReleaseNotFound
    | RemoteCallFailed
)
