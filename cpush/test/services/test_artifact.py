from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from cpush.core.result import Err, Ok
from cpush.services.artifact import artifact_path, hash_artifact, locate_artifact, sha256_hex
from cpush.services.patch_errors import ArtifactNotFound


def test_artifact_path_follows_flutter_release_layout(tmp_path: Path) -> None:
    path = artifact_path(tmp_path, "aarch64")
    assert path == tmp_path.resolve() / (
        "build/app/intermediates/stripped_native_libs/release/out/lib/arm64-v8a/libapp.so"
    )
    assert path.is_absolute()


def test_artifact_path_rejects_unknown_arch(tmp_path: Path) -> None:
    with pytest.raises(KeyError):
        artifact_path(tmp_path, "x86_64")


def test_locate_missing_artifact(tmp_path: Path) -> None:
    result = locate_artifact(tmp_path, "aarch64")
    assert result == Err(ArtifactNotFound(path=artifact_path(tmp_path, "aarch64")))


def test_locate_existing_artifact(tmp_path: Path) -> None:
    path = artifact_path(tmp_path, "aarch64")
    path.parent.mkdir(parents=True)
    path.write_bytes(b"lib")
    assert locate_artifact(tmp_path, "aarch64") == Ok(path)


def test_sha256_hex_is_standard_digest() -> None:
    assert sha256_hex(b"abc") == hashlib.sha256(b"abc").hexdigest()


def test_hash_artifact_uses_injected_function(tmp_path: Path) -> None:
    path = tmp_path / "libapp.so"
    path.write_bytes(b"12345")
    assert hash_artifact(path, lambda data: f"len={len(data)}") == Ok("len=5")


def test_hash_artifact_unreadable(tmp_path: Path) -> None:
    result = hash_artifact(tmp_path / "missing.so")
    assert isinstance(result, Err)
    assert result.error.reason
