"""CodePush service client.

This module provides:
- CodePushClient: Protocol for the remote operations (injectable for tests)
- HttpCodePushClient: Real implementation using urllib
- MockCodePushClient: In-memory implementation for testing

Every call returns a Result; transport and server failures become an
``ApiError`` carrying a human-readable message.
"""

from __future__ import annotations

import http.client
import json
import os
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable
from uuid import uuid4

from cpush import __version__
from cpush.core.result import Err, Ok, Result
from cpush.core.structured import as_obj_list, as_str_dict, get_str

from .models import App, Channel, Patch, Release

T = TypeVar("T")

__all__ = [
    "ApiError",
    "CodePushClient",
    "HttpCodePushClient",
    "MockCodePushClient",
    "TIMEOUT_ENV",
    "client_timeout",
]

TIMEOUT_ENV = "CPUSH_HTTP_TIMEOUT"
_DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ApiError:
    """Remote call failure.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network and decoding errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message}"
        return self.message


@runtime_checkable
class CodePushClient(Protocol):
    """Remote operations consumed by the patch workflow."""

    def list_apps(self) -> Result[list[App], ApiError]: ...

    def list_releases(self, app_id: str) -> Result[list[Release], ApiError]: ...

    def create_patch(self, release_id: str) -> Result[Patch, ApiError]: ...

    def upload_patch_artifact(
        self,
        patch_id: str,
        artifact_path: Path,
        *,
        arch: str,
        platform: str,
        hash: str,
    ) -> Result[None, ApiError]: ...

    def list_channels(self, app_id: str) -> Result[list[Channel], ApiError]: ...

    def create_channel(self, app_id: str, name: str) -> Result[Channel, ApiError]: ...

    def promote_patch(self, patch_id: str, channel_id: str) -> Result[None, ApiError]: ...


def client_timeout() -> float:
    """Request timeout in seconds, overridable through ``CPUSH_HTTP_TIMEOUT``."""
    raw = os.environ.get(TIMEOUT_ENV, "").strip()
    if not raw:
        return _DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return _DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_TIMEOUT_SECONDS


def _parse_list(
    url: str, payload: object, parse: Callable[[dict[str, object]], T | None], what: str
) -> Result[list[T], ApiError]:
    items = as_obj_list(payload)
    if items is None:
        return Err(ApiError(url=url, status=0, message=f"Expected a list of {what}"))
    out: list[T] = []
    for item in items:
        data = as_str_dict(item)
        parsed = parse(data) if data is not None else None
        if parsed is None:
            return Err(ApiError(url=url, status=0, message=f"Malformed {what} entry: {item!r}"))
        out.append(parsed)
    return Ok(out)


def _multipart(fields: dict[str, str], file_field: str, path: Path) -> tuple[bytes, str]:
    boundary = f"cpush-{uuid4().hex}"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    parts.append(
        f'--{boundary}\r\nContent-Disposition: form-data; name="{file_field}"; '
        f'filename="{path.name}"\r\nContent-Type: application/octet-stream\r\n\r\n'.encode()
    )
    parts.append(path.read_bytes())
    parts.append(f"\r\n--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


class HttpCodePushClient:
    """CodePush client over HTTPS using urllib.

    Handles:
    - API key authentication (``x-api-key`` header)
    - JSON request/response bodies
    - Multipart artifact upload
    - Timeout handling
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = f"cpush/{__version__}",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._api_key = api_key
        self._ssl_context = ssl.create_default_context()

    def _url(self, path: str, query: dict[str, str] | None = None) -> str:
        url = f"{self.base_url}{path}"
        if query:
            url += "?" + urllib.parse.urlencode(query)
        return url

    def _request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Result[object, ApiError]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            "x-api-key": self._api_key,
        }
        if content_type is not None:
            headers["Content-Type"] = content_type

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            return Err(ApiError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(ApiError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(ApiError(url=url, status=0, message="Request timed out"))
        except http.client.HTTPException as e:
            return Err(ApiError(url=url, status=0, message=str(e) or type(e).__name__))
        except (ValueError, OSError) as e:
            return Err(ApiError(url=url, status=0, message=str(e)))

        if not raw:
            return Ok(None)
        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(ApiError(url=url, status=0, message=f"JSON parse error: {e}"))

    def _get(self, path: str, query: dict[str, str] | None = None) -> Result[object, ApiError]:
        return self._request("GET", self._url(path, query))

    def _post_json(self, path: str, payload: dict[str, object]) -> Result[object, ApiError]:
        return self._request(
            "POST",
            self._url(path),
            body=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )

    def list_apps(self) -> Result[list[App], ApiError]:
        result = self._get("/api/v1/apps")
        if isinstance(result, Err):
            return result
        return _parse_list(self._url("/api/v1/apps"), result.value, App.from_json, "apps")

    def list_releases(self, app_id: str) -> Result[list[Release], ApiError]:
        query = {"appId": app_id}
        result = self._get("/api/v1/releases", query)
        if isinstance(result, Err):
            return result
        return _parse_list(
            self._url("/api/v1/releases", query), result.value, Release.from_json, "releases"
        )

    def create_patch(self, release_id: str) -> Result[Patch, ApiError]:
        result = self._post_json("/api/v1/patches", {"release_id": release_id})
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        patch = Patch.from_json(data, release_id=release_id) if data is not None else None
        if patch is None:
            return Err(
                ApiError(url=self._url("/api/v1/patches"), status=0, message="Malformed patch")
            )
        return Ok(patch)

    def upload_patch_artifact(
        self,
        patch_id: str,
        artifact_path: Path,
        *,
        arch: str,
        platform: str,
        hash: str,
    ) -> Result[None, ApiError]:
        url = self._url(f"/api/v1/patches/{urllib.parse.quote(patch_id)}/artifacts")
        try:
            size = artifact_path.stat().st_size
            body, content_type = _multipart(
                {"arch": arch, "platform": platform, "hash": hash, "size": str(size)},
                "file",
                artifact_path,
            )
        except OSError as e:
            return Err(ApiError(url=url, status=0, message=f"Could not read artifact: {e}"))

        result = self._request("POST", url, body=body, content_type=content_type)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_channels(self, app_id: str) -> Result[list[Channel], ApiError]:
        query = {"appId": app_id}
        result = self._get("/api/v1/channels", query)
        if isinstance(result, Err):
            return result
        return _parse_list(
            self._url("/api/v1/channels", query), result.value, Channel.from_json, "channels"
        )

    def create_channel(self, app_id: str, name: str) -> Result[Channel, ApiError]:
        result = self._post_json("/api/v1/channels", {"app_id": app_id, "channel": name})
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        channel = Channel.from_json(data) if data is not None else None
        if channel is None:
            return Err(
                ApiError(url=self._url("/api/v1/channels"), status=0, message="Malformed channel")
            )
        return Ok(channel)

    def promote_patch(self, patch_id: str, channel_id: str) -> Result[None, ApiError]:
        result = self._post_json(
            "/api/v1/patches/promote", {"patch_id": patch_id, "channel_id": channel_id}
        )
        if isinstance(result, Err):
            return result
        return Ok(None)


def _error_message(error: urllib.error.HTTPError) -> str:
    """Prefer the server's ``message`` field over the bare reason phrase."""
    try:
        raw = error.read()
    except OSError:
        raw = b""
    if raw:
        try:
            data = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None
        if data is not None:
            message = get_str(data, "message") or get_str(data, "error")
            if message:
                return message
    return str(error.reason)


def _empty_calls() -> list[tuple[str, tuple[object, ...]]]:
    return []


@dataclass
class MockCodePushClient:
    """In-memory CodePush service for testing.

    Seed ``apps``, ``releases`` and ``channels``; put an ``ApiError`` in
    ``failures`` under a method name to make that call fail. Every call is
    appended to ``calls`` as ``(method, args)``.

    Usage:
        client = MockCodePushClient(apps=[App(id="abc123", display_name="Demo")])
        client.failures["promote_patch"] = ApiError(url="", status=500, message="boom")
    """

    apps: list[App] = field(default_factory=list)
    releases: list[Release] = field(default_factory=list)
    channels: list[Channel] = field(default_factory=list)
    failures: dict[str, ApiError] = field(default_factory=dict)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=_empty_calls)
    patches: list[Patch] = field(default_factory=list)
    artifacts: dict[str, dict[str, str]] = field(default_factory=dict)
    promotions: list[tuple[str, str]] = field(default_factory=list)

    def _record(self, method: str, *args: object) -> ApiError | None:
        self.calls.append((method, args))
        return self.failures.get(method)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def list_apps(self) -> Result[list[App], ApiError]:
        if (err := self._record("list_apps")) is not None:
            return Err(err)
        return Ok(list(self.apps))

    def list_releases(self, app_id: str) -> Result[list[Release], ApiError]:
        if (err := self._record("list_releases", app_id)) is not None:
            return Err(err)
        return Ok([r for r in self.releases if r.app_id == app_id])

    def create_patch(self, release_id: str) -> Result[Patch, ApiError]:
        if (err := self._record("create_patch", release_id)) is not None:
            return Err(err)
        patch = Patch(id=f"patch_{len(self.patches) + 1}", release_id=release_id)
        self.patches.append(patch)
        return Ok(patch)

    def upload_patch_artifact(
        self,
        patch_id: str,
        artifact_path: Path,
        *,
        arch: str,
        platform: str,
        hash: str,
    ) -> Result[None, ApiError]:
        err = self._record("upload_patch_artifact", patch_id, artifact_path, arch, platform, hash)
        if err is not None:
            return Err(err)
        self.artifacts[patch_id] = {"arch": arch, "platform": platform, "hash": hash}
        return Ok(None)

    def list_channels(self, app_id: str) -> Result[list[Channel], ApiError]:
        if (err := self._record("list_channels", app_id)) is not None:
            return Err(err)
        return Ok([c for c in self.channels if c.app_id == app_id])

    def create_channel(self, app_id: str, name: str) -> Result[Channel, ApiError]:
        if (err := self._record("create_channel", app_id, name)) is not None:
            return Err(err)
        channel = Channel(id=f"ch_{len(self.channels) + 1}", app_id=app_id, name=name)
        self.channels.append(channel)
        return Ok(channel)

    def promote_patch(self, patch_id: str, channel_id: str) -> Result[None, ApiError]:
        if (err := self._record("promote_patch", patch_id, channel_id)) is not None:
            return Err(err)
        self.promotions.append((patch_id, channel_id))
        return Ok(None)
