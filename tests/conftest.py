from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_SRC = (_PROJECT_ROOT / "src").resolve()
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))


MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android">
    <application android:label="@string/app_name" />
    <uses-permission android:name="android.permission.INTERNET" />
</manifest>
"""


@pytest.fixture
def app_config_data() -> dict:
    return {
        "appId": "com.example.app",
        "appName": "Example",
        "webUrl": "https://example.com",
        "backgroundColor": "#112233",
        "plugins": {"@capacitor/camera": True, "@capacitor/haptics": False},
        "permissions": {
            "android.permission.CAMERA": True,
            "android.permission.INTERNET": True,
            "android.permission.RECORD_AUDIO": False,
        },
    }


@pytest.fixture
def project(tmp_path: Path, app_config_data: dict) -> Path:
    """A minimal Capacitor project: app-config, capacitor config, package.json."""
    (tmp_path / "app-config.json").write_text(json.dumps(app_config_data))
    (tmp_path / "capacitor.config.json").write_text(json.dumps({
        "appId": "com.old.app",
        "appName": "Old",
        "webDir": "dist",
        "server": {"androidScheme": "https", "url": "http://old.example"},
    }))
    (tmp_path / "package.json").write_text(json.dumps({
        "name": "example",
        "dependencies": {"@capacitor/core": "^6.0.0", "@capacitor/haptics": "^6.0.0"},
        "devDependencies": {"@capacitor/cli": "^6.0.0"},
    }))
    return tmp_path


@pytest.fixture
def make_manifest(project: Path):
    """Write an AndroidManifest.xml where `npx cap add android` would put it."""

    def _make(content: str = MANIFEST) -> Path:
        manifest = project / "android" / "app" / "src" / "main" / "AndroidManifest.xml"
        manifest.parent.mkdir(parents=True, exist_ok=True)
        manifest.write_text(content)
        return manifest

    return _make
