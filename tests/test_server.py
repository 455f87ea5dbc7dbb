import pytest
from fastapi.testclient import TestClient

from golinks.core import server
from golinks.core.config import get_settings
from golinks.core.controller import LinkController
from golinks.core.server import create_app
from golinks.storage.config_store import ConfigStore


@pytest.fixture()
def client(config_path, launcher):
    controller = LinkController(ConfigStore(config_path), launcher=launcher)
    with TestClient(create_app(controller=controller, watch=False)) as client:
        yield client


def test_ping(client):
    assert client.get("/ping").json() == {"status": "ok"}


def test_list_links(client):
    resp = client.get("/v1/links")
    assert resp.status_code == 200
    assert [item["link"]["title"] for item in resp.json()] == ["GitHub", "A", "Gitlab"]


def test_list_links_filtered(client):
    github, gitlab = client.get("/v1/links", params={"q": "git"}).json()
    assert github["icon"] == {
        "kind": "iconify",
        "source": "https://api.iconify.design/simple-icons/github.svg",
    }
    assert github["action_title"] == "Open in Browser"
    assert gitlab["group_name"] == "dev"
    assert gitlab["accessories"] == ["Chrome", "Work"]
    assert gitlab["action_title"] == "Open in com.google.Chrome (Work)"


def test_create_link(client):
    resp = client.post("/v1/links", json={"title": "Wiki", "url": "https://wiki.example.com", "group_name": "work"})
    assert resp.status_code == 201
    assert resp.json()["title"] == "Link Created"
    assert [item["link"]["url"] for item in client.get("/v1/links", params={"q": "wiki"}).json()] == [
        "https://wiki.example.com"
    ]


def test_create_link_rejects_bad_url(client, config_path):
    before = config_path.read_bytes()
    resp = client.post("/v1/links", json={"title": "Wiki", "url": "wiki", "group_name": "work"})
    assert resp.status_code == 400
    assert resp.json()["title"] == "Invalid URL"
    assert config_path.read_bytes() == before


def test_update_link(client):
    resp = client.put(
        "/v1/links/work",
        json={"title": "A renamed", "url": "https://a.com", "original_url": "https://a.com"},
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Link Updated"
    assert client.get("/v1/links", params={"q": "renamed"}).json()[0]["link"]["url"] == "https://a.com"


def test_update_unknown_group(client):
    resp = client.put(
        "/v1/links/nope",
        json={"title": "X", "url": "https://x.com", "original_url": "https://a.com"},
    )
    assert resp.status_code == 404
    assert resp.json()["title"] == "Group Not Found"


def test_open_link(client, launcher):
    resp = client.post("/v1/open", json={"group_name": "dev", "url": "https://gitlab.com/team"})
    assert resp.json() == {"status": "opened", "strategy": "direct-binary", "toasts": []}
    assert launcher.calls == [("https://gitlab.com/team", "com.google.Chrome", "Work")]


def test_open_link_fallback_returns_toasts(client, launcher):
    launcher.fail = True
    body = client.post("/v1/open", json={"group_name": "dev", "url": "https://gitlab.com/team"}).json()
    assert body["status"] == "fallback"
    assert body["toasts"][0]["style"] == "animated"


def test_open_unknown_link(client):
    resp = client.post("/v1/open", json={"group_name": "dev", "url": "https://nope.com"})
    assert resp.status_code == 404


def test_icon(client):
    assert client.get("/v1/icon", params={"spec": "house.fill"}).json() == {
        "kind": "symbol",
        "source": "sf-symbol:house.fill",
    }
    assert client.get("/v1/icon").json() == {"kind": "default", "source": "Link"}


def test_broken_config(client, config_path):
    config_path.write_text("version: 1\ngroups: []\n", encoding="utf-8")
    resp = client.post("/v1/reload")
    assert resp.json()["status"] == "error"
    assert "at least one group" in resp.json()["error"]

    resp = client.get("/v1/links")
    assert resp.status_code == 422
    assert "at least one group" in resp.json()["detail"]


def test_reload(client, config_path):
    assert client.post("/v1/reload").json() == {"status": "ok", "links": 3, "error": None}


def test_cors_preflight(client):
    resp = client.options(
        "/v1/links",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_open_link_ignores_toasts_from_background_reloads(client, config_path):
    controller = client.app.state.controller
    original = config_path.read_text(encoding="utf-8")
    config_path.write_text("version: 1\ngroups: []\n", encoding="utf-8")
    assert client.portal.call(controller.reload) is None
    config_path.write_text(original, encoding="utf-8")
    assert client.portal.call(controller.reload) is not None

    body = client.post("/v1/open", json={"group_name": "dev", "url": "https://gitlab.com/team"}).json()
    assert body["status"] == "opened"
    assert body["toasts"] == []


@pytest.mark.parametrize("env_level, expected", [(None, "INFO"), ("debug", "DEBUG")])
def test_run_log_level(monkeypatch, env_level, expected):
    if env_level is None:
        monkeypatch.delenv("GOLINKS_LOG_LEVEL", raising=False)
    else:
        monkeypatch.setenv("GOLINKS_LOG_LEVEL", env_level)
    monkeypatch.delenv("GOLINKS_DEBUG", raising=False)
    levels = []
    monkeypatch.setattr(server.logging, "basicConfig", lambda **kwargs: levels.append(kwargs["level"]))
    monkeypatch.setattr("uvicorn.run", lambda *args, **kwargs: None)
    get_settings.cache_clear()
    try:
        server.run()
    finally:
        get_settings.cache_clear()
    assert levels == [expected]
