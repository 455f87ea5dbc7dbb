import json
from pathlib import Path

import pytest

from golinks.launcher.profiles import (
    list_profiles,
    local_state_path,
    resolve_profile_directory,
)

LOCAL_STATE = {
    "profile": {
        "info_cache": {
            "Default": {"name": "Personal", "gaia_name": "Jane Doe"},
            "Profile 1": {"name": "Work"},
        }
    }
}


@pytest.fixture()
def local_state(tmp_path):
    path = tmp_path / "Local State"
    path.write_text(json.dumps(LOCAL_STATE), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "profile, directory",
    [
        ("Work", "Profile 1"),
        ("Jane Doe", "Default"),
        ("Default", "Default"),
        ("Profile 1", "Profile 1"),
        ("Unknown", "Unknown"),
    ],
)
def test_resolve_profile_directory(local_state, profile, directory):
    assert resolve_profile_directory("com.google.Chrome", profile, local_state=local_state) == directory


def test_malformed_local_state_falls_back(tmp_path):
    path = tmp_path / "Local State"
    path.write_text("{not json", encoding="utf-8")
    assert resolve_profile_directory("com.google.Chrome", "Work", local_state=path) == "Work"


def test_missing_local_state_falls_back(tmp_path):
    assert resolve_profile_directory("com.google.Chrome", "Work", local_state=tmp_path / "nope") == "Work"


def test_list_profiles(local_state):
    assert list_profiles(local_state) == {"Default": "Personal", "Profile 1": "Work"}


def test_local_state_path_darwin(tmp_path):
    assert local_state_path("com.google.Chrome", platform="darwin", home=tmp_path) == (
        tmp_path / "Library" / "Application Support" / "Google" / "Chrome" / "Local State"
    )


def test_local_state_path_linux(tmp_path, monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    assert local_state_path("Brave Browser", platform="linux", home=tmp_path) == (
        tmp_path / ".config" / "BraveSoftware" / "Brave-Browser" / "Local State"
    )


def test_local_state_path_respects_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert local_state_path("com.google.Chrome", platform="linux") == Path(tmp_path / "xdg" / "google-chrome" / "Local State")


def test_unknown_application_has_no_local_state(tmp_path):
    assert local_state_path("Safari", platform="darwin", home=tmp_path) is None
