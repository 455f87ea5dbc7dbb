import copy
import json
from pathlib import Path

import pytest
import yaml

from golinks.core.errors import LaunchError
from golinks.launcher.browser import LaunchResult

SAMPLE_CONFIG = {
    "version": 1,
    "settings": {"defaultBrowser": "default", "showFavicons": True},
    "groups": [
        {
            "name": "work",
            "title": "Work",
            "links": [
                {"title": "GitHub", "url": "https://github.com", "keywords": ["git", "code"]},
                {"title": "A", "url": "https://a.com"},
            ],
        },
        {
            "name": "dev",
            "title": "Dev",
            "icon": "Code",
            "links": [
                {
                    "title": "Gitlab",
                    "url": "https://gitlab.com/team",
                    "application": "com.google.Chrome",
                    "profile": "Work",
                },
            ],
        },
    ],
    "templates": [{"name": "jira", "pattern": "https://jira.example.com/browse/{id}"}],
}


@pytest.fixture()
def sample_data():
    return copy.deepcopy(SAMPLE_CONFIG)


@pytest.fixture()
def write_config(tmp_path):
    def _write(data, name="links.yaml") -> Path:
        path = tmp_path / name
        if path.suffix in {".yaml", ".yml"}:
            path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def config_path(write_config, sample_data):
    return write_config(sample_data)


class FakeLauncher:
    """Records launch calls instead of starting browsers."""

    def __init__(self, fail=False, fail_default=False):
        self.fail = fail
        self.fail_default = fail_default
        self.calls = []

    async def open(self, url, application=None, profile=None):
        self.calls.append((url, application, profile))
        if self.fail:
            raise LaunchError(f"Could not open {url}")
        return LaunchResult(True, "direct-binary" if profile else "open-with-application")

    async def open_default(self, url):
        self.calls.append((url, None, None))
        if self.fail_default:
            raise LaunchError(f"Could not open {url} (system-default: no usable default browser)")
        return LaunchResult(True, "system-default")


@pytest.fixture()
def launcher():
    return FakeLauncher()
