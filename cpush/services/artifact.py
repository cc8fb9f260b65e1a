"""Locate and fingerprint the native library produced by a release build."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path

from cpush.core.result import Err, Ok, Result

from .patch_errors import ArtifactNotFound

__all__ = [
    "ARCH_ABI",
    "HashFunction",
    "artifact_path",
    "hash_artifact",
    "locate_artifact",
    "sha256_hex",
]

HashFunction = Callable[[bytes], str]

# Flutter's Android output directory per CPU architecture.
ARCH_ABI: dict[str, str] = {
    "aarch64": "arm64-v8a",
}

_RELEASE_LIBS = ("build", "app", "intermediates", "stripped_native_libs", "release", "out", "lib")
_LIBRARY_NAME = "libapp.so"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def artifact_path(project_root: Path, arch: str) -> Path:
    """Return where ``flutter build apk --release`` writes the app library for ``arch``."""
    abi = ARCH_ABI[arch]
    return project_root.resolve().joinpath(*_RELEASE_LIBS, abi, _LIBRARY_NAME)


def locate_artifact(project_root: Path, arch: str) -> Result[Path, ArtifactNotFound]:
    path = artifact_path(project_root, arch)
    if not path.is_file():
        return Err(ArtifactNotFound(path=path))
    return Ok(path)


def hash_artifact(path: Path, hash_fn: HashFunction = sha256_hex) -> Result[str, ArtifactNotFound]:
    try:
        data = path.read_bytes()
    except OSError as e:
        return Err(ArtifactNotFound(path=path, reason=str(e)))
    return Ok(hash_fn(data))
