from __future__ import annotations

from cpush.api.models import App, Channel, Patch, Release


def test_app_from_camel_case() -> None:
    assert App.from_json({"appId": "abc", "displayName": "Demo"}) == App(id="abc", display_name="Demo")


def test_app_display_name_defaults_to_id() -> None:
    assert App.from_json({"app_id": "abc"}) == App(id="abc", display_name="abc")


def test_app_without_id_is_rejected() -> None:
    assert App.from_json({"displayName": "Demo"}) is None


def test_release_accepts_integer_ids() -> None:
    release = Release.from_json({"id": 7, "appId": "abc", "version": "1.0.0"})
    assert release == Release(id="7", app_id="abc", version="1.0.0")


def test_release_requires_version() -> None:
    assert Release.from_json({"id": 7, "appId": "abc"}) is None


def test_patch_keeps_owning_release() -> None:
    assert Patch.from_json({"id": 3}, release_id="7") == Patch(id="3", release_id="7")
    assert Patch.from_json({"id": 3, "releaseId": 8}, release_id="7") == Patch(id="3", release_id="8")


def test_channel_name_field() -> None:
    assert Channel.from_json({"id": 1, "appId": "abc", "channel": "stable"}) == Channel(
        id="1", app_id="abc", name="stable"
    )
    assert Channel.from_json({"id": 1, "app_id": "abc", "name": "beta"}) == Channel(
        id="1", app_id="abc", name="beta"
    )
