from __future__ import annotations

from pathlib import Path

import pytest

from cpush.api.client import ApiError, MockCodePushClient
from cpush.api.models import App, Channel, Release
from cpush.auth.session import Session
from cpush.core.project import Project
from cpush.core.result import Err, Ok, Result
from cpush.output.console import MockConsole
from cpush.services.artifact import artifact_path
from cpush.services.patch import PatchRequest, PatchService
from cpush.services.patch_errors import (
    AppNotFound,
    ArtifactNotFound,
    BuildFailed,
    NoSession,
    NotInitialized,
    ProjectConfigInvalid,
    ReleaseNotFound,
    RemoteCallFailed,
)

MUTATING = ("create_patch", "upload_patch_artifact", "create_channel", "promote_patch")


def _project(tmp_path: Path, *, version: str = "1.0.0+1", app_id: str = "abc123") -> Project:
    (tmp_path / "pubspec.yaml").write_text(f"name: demo\nversion: {version}\n", encoding="utf-8")
    (tmp_path / "cpush.yaml").write_text(f"app_id: {app_id}\n", encoding="utf-8")
    return Project(root=tmp_path)


def _write_artifact(project: Project, data: bytes = b"\x7fELF-libapp") -> Path:
    path = artifact_path(project.root, "aarch64")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def _client(*, with_channel: bool = True) -> MockCodePushClient:
    client = MockCodePushClient(
        apps=[App(id="abc123", display_name="Demo")],
        releases=[
            Release(id="rel_0", app_id="abc123", version="0.9.0"),
            Release(id="rel_1", app_id="abc123", version="1.0.0"),
        ],
    )
    if with_channel:
        client.channels.append(Channel(id="ch_1", app_id="abc123", name="stable"))
    return client


class Harness:
    def __init__(
        self,
        project: Project,
        client: MockCodePushClient,
        *,
        session: Session | None = Session(api_key="key-123"),
        confirm_answer: bool = True,
        prompt_answer: str | None = None,
        build_result: Result[None, BuildFailed] = Ok(None),
    ) -> None:
        self.console = MockConsole()
        self.client = client
        self.factory_calls: list[tuple[str, str]] = []
        self.prompts: list[tuple[str, str]] = []
        self.confirms: list[str] = []
        self.builds = 0
        self.hashed: list[bytes] = []
        self._prompt_answer = prompt_answer
        self._confirm_answer = confirm_answer
        self._build_result = build_result
        self.service = PatchService(
            project=project,
            session=session,
            console=self.console,
            client_factory=self._factory,
            prompt=self._prompt,
            confirm=self._confirm,
            build_release=self._build,
            hash_fn=self._hash,
        )

    def _factory(self, api_key: str, base_url: str) -> MockCodePushClient:
        self.factory_calls.append((api_key, base_url))
        return self.client

    def _prompt(self, question: str, default: str) -> str:
        self.prompts.append((question, default))
        return default if self._prompt_answer is None else self._prompt_answer

    def _confirm(self, question: str) -> bool:
        self.confirms.append(question)
        return self._confirm_answer

    def _build(self) -> Result[None, BuildFailed]:
        self.builds += 1
        return self._build_result

    def _hash(self, data: bytes) -> str:
        self.hashed.append(data)
        return f"hash-{len(data)}"


def test_publishes_to_existing_channel(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CPUSH_HOSTED_URL", raising=False)
    project = _project(tmp_path)
    artifact = _write_artifact(project)
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Ok)
    assert result.value.published is True
    assert result.value.release is not None and result.value.release.id == "rel_1"
    assert h.prompts == [("Which release is this patch for?", "1.0.0")]
    assert h.factory_calls == [("key-123", "https://api.cpush.dev")]
    assert h.client.call_names() == [
        "list_apps",
        "list_releases",
        "create_patch",
        "upload_patch_artifact",
        "list_channels",
        "promote_patch",
    ]
    assert h.client.calls[2] == ("create_patch", ("rel_1",))
    assert h.client.calls[3] == (
        "upload_patch_artifact",
        ("patch_1", artifact, "aarch64", "android", "hash-11"),
    )
    assert h.client.promotions == [("patch_1", "ch_1")]
    assert h.console.has_error() is False
    assert h.console.find("Published Patch!")


def test_creates_missing_channel_once_before_promotion(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(with_channel=False))

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Ok)
    names = h.client.call_names()
    assert names.count("create_channel") == 1
    assert names.index("list_channels") < names.index("create_channel") < names.index("promote_patch")
    assert h.client.calls[names.index("create_channel")] == ("create_channel", ("abc123", "stable"))
    assert result.value.channel is not None
    assert h.client.promotions == [("patch_1", result.value.channel.id)]


def test_summary_lists_publish_details(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client())

    h.service.publish(PatchRequest())

    assert h.console.find("Ready to publish a new patch!")
    assert h.console.find("App: Demo (abc123)")
    assert h.console.find("Release Version: 1.0.0")
    assert h.console.find("Architecture: aarch64")
    assert h.console.find("Platform: android")
    assert h.console.find("Channel: stable")
    assert h.console.find("Hash: hash-11")
    assert h.confirms == ["Would you like to continue?"]


def test_progress_labels_follow_step_order(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(with_channel=False))

    h.service.publish(PatchRequest())

    assert h.console.progress_labels() == [
        "Building release",
        "Fetching apps",
        "Fetching releases",
        "Creating patch",
        "Uploading artifact",
        "Fetching channels",
        "Creating channel",
        "Publishing patch",
    ]
    assert all(p.state == "complete" for p in h.console.progresses)


def test_not_initialized_stops_before_build(tmp_path: Path) -> None:
    (tmp_path / "pubspec.yaml").write_text("version: 1.0.0\n", encoding="utf-8")
    h = Harness(Project(root=tmp_path), _client())

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Err)
    assert isinstance(result.error, NotInitialized)
    assert h.builds == 0
    assert h.factory_calls == []
    assert h.client.calls == []


def test_missing_session_stops_before_remote_calls(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), session=None)

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Err)
    assert isinstance(result.error, NoSession)
    assert h.builds == 0
    assert h.client.calls == []


def test_invalid_pubspec_is_a_config_error(tmp_path: Path) -> None:
    project = _project(tmp_path, version="latest")
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Err)
    assert isinstance(result.error, ProjectConfigInvalid)
    assert h.builds == 0


def test_build_failure_stops_before_remote_calls(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), build_result=Err(BuildFailed(message="flutter failed (exit 1)")))

    result = h.service.publish(PatchRequest())

    assert result == Err(BuildFailed(message="flutter failed (exit 1)"))
    assert h.client.calls == []
    failed = h.console.failed_progress()
    assert failed is not None
    assert failed.label == "Building release"
    assert failed.message == "Failed to build: flutter failed (exit 1)"


def test_missing_artifact_stops_before_remote_calls(tmp_path: Path) -> None:
    project = _project(tmp_path)
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Err)
    assert isinstance(result.error, ArtifactNotFound)
    assert result.error.path == artifact_path(tmp_path, "aarch64")
    assert h.builds == 1
    assert h.client.calls == []


def test_unknown_app_stops_before_release_lookup(tmp_path: Path) -> None:
    project = _project(tmp_path, app_id="gone")
    _write_artifact(project)
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest())

    assert result == Err(AppNotFound(app_id="gone"))
    assert h.client.call_names() == ["list_apps"]


def test_unknown_release_creates_no_patch(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), prompt_answer="2.0.0")

    result = h.service.publish(PatchRequest())

    assert result == Err(ReleaseNotFound(version="2.0.0"))
    assert not any(name in MUTATING for name in h.client.call_names())
    assert h.confirms == []


def test_release_version_flag_skips_prompt(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest(release_version="0.9.0"))

    assert isinstance(result, Ok)
    assert h.prompts == []
    assert h.client.calls[2] == ("create_patch", ("rel_0",))


def test_prompt_answer_selects_release(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), prompt_answer="0.9.0")

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Ok)
    assert result.value.release is not None and result.value.release.version == "0.9.0"


def test_release_match_is_exact(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client())

    result = h.service.publish(PatchRequest(release_version="1.0"))

    assert result == Err(ReleaseNotFound(version="1.0"))


def test_declining_confirmation_is_success_without_mutations(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), confirm_answer=False)

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Ok)
    assert result.value.published is False
    assert result.value.patch is None
    assert not any(name in MUTATING for name in h.client.call_names())
    assert "list_channels" not in h.client.call_names()
    assert h.console.find("info: Aborting.")
    assert h.console.has_error() is False


def test_assume_yes_skips_prompt_and_confirmation(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    h = Harness(project, _client(), confirm_answer=False)

    result = h.service.publish(PatchRequest(assume_yes=True))

    assert isinstance(result, Ok)
    assert result.value.published is True
    assert h.prompts == []
    assert h.confirms == []


@pytest.mark.parametrize(
    ("method", "label"),
    [
        ("list_apps", "Fetching apps"),
        ("list_releases", "Fetching releases"),
        ("create_patch", "Creating patch"),
        ("upload_patch_artifact", "Uploading artifact"),
        ("list_channels", "Fetching channels"),
        ("promote_patch", "Publishing patch"),
    ],
)
def test_remote_failure_stops_the_run(tmp_path: Path, method: str, label: str) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    client = _client()
    client.failures[method] = ApiError(url="https://api.cpush.dev/x", status=500, message="boom")
    h = Harness(project, client)

    result = h.service.publish(PatchRequest())

    assert result == Err(RemoteCallFailed(step=label, message="HTTP 500: boom"))
    assert h.client.call_names()[-1] == method
    failed = h.console.failed_progress()
    assert failed is not None
    assert failed.label == label
    assert failed.message == "HTTP 500: boom"


def test_create_channel_failure_skips_promotion(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    client = _client(with_channel=False)
    client.failures["create_channel"] = ApiError(url="", status=0, message="connection reset")
    h = Harness(project, client)

    result = h.service.publish(PatchRequest())

    assert result == Err(RemoteCallFailed(step="Creating channel", message="connection reset"))
    assert "promote_patch" not in h.client.call_names()


def test_patch_stays_created_when_upload_fails(tmp_path: Path) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    client = _client()
    client.failures["upload_patch_artifact"] = ApiError(url="", status=413, message="too large")
    h = Harness(project, client)

    h.service.publish(PatchRequest())

    assert [p.id for p in h.client.patches] == ["patch_1"]
    assert h.client.promotions == []


def test_hash_is_deterministic_for_identical_bytes(tmp_path: Path) -> None:
    hashes: list[str] = []
    for name in ("a", "b"):
        root = tmp_path / name
        root.mkdir()
        project = _project(root)
        _write_artifact(project, b"same bytes")
        client = _client()
        service = PatchService(
            project=project,
            session=Session(api_key="k"),
            console=MockConsole(),
            client_factory=lambda api_key, base_url, c=client: c,
            prompt=lambda q, d: d,
            confirm=lambda q: True,
            build_release=lambda: Ok(None),
        )
        assert isinstance(service.publish(PatchRequest()), Ok)
        hashes.append(client.artifacts["patch_1"]["hash"])

    assert hashes[0] == hashes[1]
    assert len(hashes[0]) == 64


def test_base_url_comes_from_project_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CPUSH_HOSTED_URL", raising=False)
    project = _project(tmp_path)
    (tmp_path / "cpush.yaml").write_text(
        "app_id: abc123\nbase_url: https://codepush.internal/\n", encoding="utf-8"
    )
    _write_artifact(project)
    h = Harness(project, _client())

    h.service.publish(PatchRequest())

    assert h.factory_calls == [("key-123", "https://codepush.internal")]


@pytest.mark.parametrize("method", ["list_apps", "list_releases"])
def test_lookup_failure_creates_nothing(tmp_path: Path, method: str) -> None:
    project = _project(tmp_path)
    _write_artifact(project)
    client = _client()
    client.failures[method] = ApiError(url="https://api.cpush.dev/x", status=503, message="down")
    h = Harness(project, client)

    result = h.service.publish(PatchRequest())

    assert isinstance(result, Err)
    assert not any(name in MUTATING for name in h.client.call_names())
    assert h.client.patches == []
    assert h.confirms == []
