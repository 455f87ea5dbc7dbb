from pathlib import Path

from golinks.core.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("GOLINKS_CONFIG_PATH", raising=False)
    settings = Settings(_env_file=None)
    assert settings.config_file == Path.home() / ".config" / "golinks" / "links.yaml"
    assert (settings.api_host, settings.api_port) == ("127.0.0.1", 5151)
    assert settings.watch_debounce == 0.3


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOLINKS_CONFIG_PATH", "~/links.json")
    monkeypatch.setenv("GOLINKS_WATCH_DEBOUNCE", "1.5")
    settings = Settings(_env_file=None)
    assert settings.config_file == Path.home() / "links.json"
    assert settings.watch_debounce == 1.5
