"""Tests for mobilemaker configuration."""

import json
from pathlib import Path

import pytest

from mobilemaker.config import (
    AppConfig,
    ConfigError,
    ProjectPaths,
    app_id_problem,
    load_app_config,
    sanitize_app_id,
    sync_capacitor_config,
)


def test_load_app_config(project: Path):
    app = load_app_config(project / "app-config.json")
    assert app.app_id == "com.example.app"
    assert app.app_name == "Example"
    assert app.web_url == "https://example.com"
    assert app.background_color == "#112233"
    assert app.plugins == {"@capacitor/camera": True, "@capacitor/haptics": False}


def test_load_app_config_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_app_config(tmp_path / "app-config.json")


def test_load_app_config_invalid_json(tmp_path: Path):
    path = tmp_path / "app-config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="Cannot parse"):
        load_app_config(path)


def test_load_app_config_missing_required_field(tmp_path: Path):
    path = tmp_path / "app-config.json"
    path.write_text(json.dumps({"appId": "com.example.app", "appName": "X"}))
    with pytest.raises(ConfigError, match="webUrl"):
        load_app_config(path)


def test_load_app_config_blank_field(tmp_path: Path):
    path = tmp_path / "app-config.json"
    path.write_text(json.dumps({"appId": "  ", "appName": "X", "webUrl": "https://x"}))
    with pytest.raises(ConfigError, match="appId"):
        load_app_config(path)


def test_load_app_config_top_level_must_be_object(tmp_path: Path):
    path = tmp_path / "app-config.json"
    path.write_text("[]")
    with pytest.raises(ConfigError, match="object"):
        load_app_config(path)


def test_load_app_config_yaml(tmp_path: Path):
    path = tmp_path / "app-config.yaml"
    path.write_text(
        "appId: com.example.yaml\n"
        "appName: Yaml App\n"
        "webUrl: https://yaml.example\n"
        "permissions:\n"
        "  android.permission.CAMERA: true\n"
    )
    app = load_app_config(path)
    assert app.app_id == "com.example.yaml"
    assert app.enabled_permissions() == ["android.permission.CAMERA"]
    assert app.plugins is None


def test_optional_sections_default_to_none():
    app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": "https://u"})
    assert app.background_color is None
    assert app.plugins is None
    assert app.permissions is None
    assert app.enabled_plugins() == []
    assert app.enabled_permissions() == []


def test_enabled_permissions_keep_config_order(app_config_data: dict):
    app = AppConfig.model_validate(app_config_data)
    assert app.enabled_permissions() == [
        "android.permission.CAMERA",
        "android.permission.INTERNET",
    ]


def test_to_dict_uses_camel_case(app_config_data: dict):
    data = AppConfig.model_validate(app_config_data).to_dict()
    assert data["appId"] == "com.example.app"
    assert data["webUrl"] == "https://example.com"
    assert "app_id" not in data


def test_project_paths_from_root(tmp_path: Path):
    paths = ProjectPaths.from_root(tmp_path)
    root = tmp_path.resolve()
    assert paths.app_config == root / "app-config.json"
    assert paths.cap_config == root / "capacitor.config.json"
    assert paths.manifest == root / "android" / "app" / "src" / "main" / "AndroidManifest.xml"
    assert paths.local_props == root / "android" / "local.properties"


def test_project_paths_custom_config(tmp_path: Path):
    paths = ProjectPaths.from_root(tmp_path, "configs/prod.json")
    assert paths.app_config == tmp_path.resolve() / "configs" / "prod.json"


def test_sync_capacitor_config_overwrites_mirrored_fields(project: Path):
    app = load_app_config(project / "app-config.json")
    assert sync_capacitor_config(app, project / "capacitor.config.json") is True

    data = json.loads((project / "capacitor.config.json").read_text())
    assert data["appId"] == "com.example.app"
    assert data["appName"] == "Example"
    assert data["server"]["url"] == "https://example.com"
    assert data["server"]["cleartext"] is True
    assert data["backgroundColor"] == "#112233"
    # untouched keys survive
    assert data["webDir"] == "dist"
    assert data["server"]["androidScheme"] == "https"


def test_sync_capacitor_config_keeps_background_when_not_configured(tmp_path: Path):
    cap = tmp_path / "capacitor.config.json"
    cap.write_text(json.dumps({"backgroundColor": "#000000"}))
    app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": "https://u"})
    sync_capacitor_config(app, cap)
    data = json.loads(cap.read_text())
    assert data["backgroundColor"] == "#000000"
    assert data["server"] == {"url": "https://u", "cleartext": True}


def test_sync_capacitor_config_tracks_latest_url(project: Path):
    cap = project / "capacitor.config.json"
    for url in ("https://one.example", "https://two.example"):
        app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": url})
        sync_capacitor_config(app, cap)
    assert json.loads(cap.read_text())["server"]["url"] == "https://two.example"


def test_sync_capacitor_config_missing_file(tmp_path: Path):
    app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": "https://u"})
    cap = tmp_path / "capacitor.config.json"
    assert sync_capacitor_config(app, cap) is False
    assert not cap.exists()


def test_sync_capacitor_config_invalid_json(tmp_path: Path):
    cap = tmp_path / "capacitor.config.json"
    cap.write_text("{")
    app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": "https://u"})
    with pytest.raises(ConfigError):
        sync_capacitor_config(app, cap)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("com.example.app", "com.example.app"),
        ("com.my-company.app", "com.my_company.app"),
        ("com.example.1app", "com.example._1app"),
        ("com..example", "com.example"),
        ("---", "com.mobilemaker.app"),
    ],
)
def test_sanitize_app_id(raw: str, expected: str):
    assert sanitize_app_id(raw) == expected


def test_app_id_problem():
    assert app_id_problem("com.example.app") is None
    assert "two segments" in app_id_problem("example")
    assert "com.my_company.app" in app_id_problem("com.my-company.app")


def test_sync_capacitor_config_server_must_be_object(tmp_path: Path):
    cap = tmp_path / "capacitor.config.json"
    cap.write_text(json.dumps({"appId": "a.b", "server": "https://old.example"}))
    app = AppConfig.model_validate({"appId": "a.b", "appName": "n", "webUrl": "https://u"})
    with pytest.raises(ConfigError, match="server must be an object"):
        sync_capacitor_config(app, cap)
    assert json.loads(cap.read_text())["server"] == "https://old.example"
