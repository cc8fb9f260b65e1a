"""Records returned by the CodePush service.

The server sends camelCase keys; older deployments send snake_case. Both
are accepted. Parsers return None for payloads missing required fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from cpush.core.structured import get_id, get_str

__all__ = ["App", "Channel", "Patch", "Release"]


def _first_id(data: Mapping[str, object], *keys: str) -> str | None:
    for key in keys:
        value = get_id(data, key)
        if value is not None:
            return value
    return None


@dataclass(frozen=True, slots=True)
class App:
    id: str
    display_name: str

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> App | None:
        app_id = _first_id(data, "appId", "app_id", "id")
        if app_id is None:
            return None
        name = get_str(data, "displayName") or get_str(data, "display_name") or app_id
        return cls(id=app_id, display_name=name)


@dataclass(frozen=True, slots=True)
class Release:
    id: str
    app_id: str
    version: str

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> Release | None:
        release_id = _first_id(data, "id")
        app_id = _first_id(data, "appId", "app_id")
        version = get_str(data, "version")
        if release_id is None or app_id is None or version is None:
            return None
        return cls(id=release_id, app_id=app_id, version=version)


@dataclass(frozen=True, slots=True)
class Patch:
    id: str
    release_id: str

    @classmethod
    def from_json(cls, data: Mapping[str, object], *, release_id: str) -> Patch | None:
        patch_id = _first_id(data, "id")
        if patch_id is None:
            return None
        owner = _first_id(data, "releaseId", "release_id") or release_id
        return cls(id=patch_id, release_id=owner)


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    app_id: str
    name: str

    @classmethod
    def from_json(cls, data: Mapping[str, object]) -> Channel | None:
        channel_id = _first_id(data, "id")
        app_id = _first_id(data, "appId", "app_id")
        name = get_str(data, "channel") or get_str(data, "name")
        if channel_id is None or app_id is None or name is None:
            return None
        return cls(id=channel_id, app_id=app_id, name=name)
