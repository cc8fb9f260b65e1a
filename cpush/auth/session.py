"""Persisted login session.

One API key is stored per user, in a small dedicated file:

  <user-config-dir>/credentials.toml

with content like:

  api_key = "cp_live_..."
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cpush.core.result import Err, Ok, Result
from cpush.platform.paths import user_config_dir

__all__ = [
    "Session",
    "SessionError",
    "clear_session",
    "credentials_path",
    "load_session",
    "save_session",
]


@dataclass(frozen=True, slots=True)
class Session:
    """Authenticated user context."""

    api_key: str

    def __repr__(self) -> str:
        return "Session(api_key=***)"


@dataclass(frozen=True, slots=True)
class SessionError:
    message: str
    path: Path | None = None


def credentials_path() -> Path:
    return user_config_dir() / "credentials.toml"


def _parse_toml(path: Path) -> Result[dict[str, Any], SessionError]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Ok({})
    except PermissionError:
        return Err(SessionError(f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(SessionError(f"Error reading {path}: {e}", path=path))

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(SessionError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(SessionError(f"Invalid UTF-8 in credentials: {e}", path=path))

    return Ok(data)


def load_session() -> Result[Session | None, SessionError]:
    """Return the current session, or None when the user never logged in."""
    path = credentials_path()
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    api_key = result.value.get("api_key")
    if api_key is None:
        return Ok(None)
    if not isinstance(api_key, str) or not api_key.strip():
        return Err(SessionError("api_key must be a non-empty string", path=path))
    return Ok(Session(api_key=api_key.strip()))


def _toml_string(value: str) -> str:
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def save_session(session: Session) -> Result[None, SessionError]:
    path = credentials_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(SessionError(f"Could not create {path.parent}: {e}", path=path))

    try:
        content = f"api_key = {_toml_string(session.api_key)}\n"
        path.write_text(content, encoding="utf-8", newline="\n")
        path.chmod(0o600)
    except OSError as e:
        return Err(SessionError(f"Could not write {path}: {e}", path=path))
    return Ok(None)


def clear_session() -> Result[None, SessionError]:
    path = credentials_path()
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        return Err(SessionError(f"Could not remove {path}: {e}", path=path))
    return Ok(None)
