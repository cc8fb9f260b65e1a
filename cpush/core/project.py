"""Flutter project detection and code-push configuration.

A project root is a directory holding ``pubspec.yaml``. It is initialized
for code push once ``cpush.yaml`` exists next to it:

  app_id: 8d3155a8-a048-4820-acca-824d26c29b71
  base_url: https://api.cpush.dev   # optional

The declared release version comes from the ``version`` field of
``pubspec.yaml``. A build suffix (``1.2.3+45``) is dropped.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str

__all__ = [
    "DEFAULT_BASE_URL",
    "HOSTED_URL_ENV",
    "CodePushConfig",
    "Project",
    "ProjectError",
    "load_code_push_config",
    "load_project_version",
    "resolve_base_url",
    "save_code_push_config",
]

DEFAULT_BASE_URL = "https://api.cpush.dev"
HOSTED_URL_ENV = "CPUSH_HOSTED_URL"

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:[-+].*)?$")


@dataclass(frozen=True, slots=True)
class ProjectError:
    """Project files are missing or cannot be parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class CodePushConfig:
    """Parsed ``cpush.yaml``."""

    app_id: str
    base_url: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A Flutter project on disk."""

    root: Path

    @property
    def pubspec_path(self) -> Path:
        return self.root / "pubspec.yaml"

    @property
    def config_path(self) -> Path:
        return self.root / "cpush.yaml"

    @property
    def build_dir(self) -> Path:
        return self.root / "build"

    def is_initialized(self) -> bool:
        """True once ``cpush init`` has written ``cpush.yaml``."""
        return self.config_path.is_file()

    def project_version(self) -> Result[str, ProjectError]:
        return load_project_version(self.pubspec_path)

    def code_push_config(self) -> Result[CodePushConfig, ProjectError]:
        return load_code_push_config(self.config_path)

    def app_id(self) -> Result[str, ProjectError]:
        return self.code_push_config().map(lambda c: c.app_id)


def _load_yaml(path: Path) -> Result[StrDict, ProjectError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ProjectError(f"File not found: {path}", path=path))
    except PermissionError:
        return Err(ProjectError(f"Permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ProjectError(f"Error reading {path}: {e}", path=path))

    try:
        data_obj: object = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return Err(ProjectError(f"Invalid YAML syntax in {path.name}: {e}", path=path))

    if data_obj is None:
        return Ok({})
    data = as_str_dict(data_obj)
    if data is None:
        return Err(ProjectError(f"{path.name} root must be a mapping", path=path))
    return Ok(data)


def load_code_push_config(path: Path) -> Result[CodePushConfig, ProjectError]:
    result = _load_yaml(path)
    if isinstance(result, Err):
        return result

    app_id = get_str(result.value, "app_id")
    if app_id is None:
        return Err(ProjectError(f"{path.name} is missing app_id", path=path))
    return Ok(CodePushConfig(app_id=app_id, base_url=get_str(result.value, "base_url")))


def load_project_version(path: Path) -> Result[str, ProjectError]:
    """Return the ``MAJOR.MINOR.PATCH`` version declared in pubspec.yaml."""
    result = _load_yaml(path)
    if isinstance(result, Err):
        return result

    # YAML reads "1.0" as a float; only strings can carry a full version.
    raw = get_str(result.value, "version")
    if raw is None:
        return Err(ProjectError(f"{path.name} is missing a version", path=path))

    m = _VERSION_RE.match(raw)
    if m is None:
        return Err(ProjectError(f"Invalid version in {path.name}: {raw}", path=path))
    return Ok(f"{m.group(1)}.{m.group(2)}.{m.group(3)}")


def resolve_base_url(config: CodePushConfig | None) -> str:
    """Pick the service endpoint: env override, then cpush.yaml, then default."""
    env_url = os.environ.get(HOSTED_URL_ENV, "").strip()
    if env_url:
        return env_url.rstrip("/")
    if config is not None and config.base_url:
        return config.base_url.rstrip("/")
    return DEFAULT_BASE_URL


def save_code_push_config(path: Path, config: CodePushConfig) -> Result[None, ProjectError]:
    data: dict[str, str] = {"app_id": config.app_id}
    if config.base_url:
        data["base_url"] = config.base_url
    try:
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    except OSError as e:
        return Err(ProjectError(f"Error writing {path}: {e}", path=path))
    return Ok(None)
