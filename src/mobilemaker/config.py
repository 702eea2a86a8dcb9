"""Configuration models for mobilemaker projects."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_logger = logging.getLogger("mobilemaker.config")

DEFAULT_APP_CONFIG = "app-config.json"
CAPACITOR_CONFIG = "capacitor.config.json"


class ConfigError(Exception):
    """Raised when the app configuration is missing or invalid."""


class AppConfig(BaseModel):
    """The user-owned app configuration (``app-config.json``)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    app_id: str = Field(alias="appId")
    app_name: str = Field(alias="appName")
    web_url: str = Field(alias="webUrl")
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    plugins: Optional[dict[str, bool]] = None
    permissions: Optional[dict[str, bool]] = None

    @field_validator("app_id", "app_name", "web_url")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("background_color")
    @classmethod
    def _empty_color_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def enabled_plugins(self) -> list[str]:
        return [name for name, on in (self.plugins or {}).items() if on]

    def enabled_permissions(self) -> list[str]:
        return [name for name, on in (self.permissions or {}).items() if on]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class ProjectPaths:
    """Every file and directory the build touches, relative to a project root."""

    root: Path
    app_config: Path
    cap_config: Path
    package_json: Path
    android: Path
    manifest: Path
    local_props: Path

    @classmethod
    def from_root(cls, root: str | Path, app_config: Optional[str | Path] = None) -> "ProjectPaths":
        root = Path(root).resolve()
        android = root / "android"
        cfg = Path(app_config) if app_config else Path(DEFAULT_APP_CONFIG)
        if not cfg.is_absolute():
            cfg = root / cfg
        return cls(
            root=root,
            app_config=cfg,
            cap_config=root / CAPACITOR_CONFIG,
            package_json=root / "package.json",
            android=android,
            manifest=android / "app" / "src" / "main" / "AndroidManifest.xml",
            local_props=android / "local.properties",
        )


def read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def load_app_config(path: str | Path) -> AppConfig:
    """Load the app configuration from a JSON (or YAML) file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"App config not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain an object at the top level")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid {path.name}: {problems}") from e


def apply_app_config(cap: dict[str, Any], app: AppConfig) -> dict[str, Any]:
    """Return *cap* with the fields mirrored from *app* overwritten."""
    out = dict(cap)
    out["appId"] = app.app_id
    out["appName"] = app.app_name
    server = out.get("server") or {}
    if not isinstance(server, dict):
        raise ConfigError("server must be an object in capacitor.config.json")
    server = dict(server)
    server["url"] = app.web_url
    server["cleartext"] = True
    out["server"] = server
    if app.background_color:
        out["backgroundColor"] = app.background_color
    return out


def sync_capacitor_config(app: AppConfig, path: Path) -> bool:
    """Mirror the app config into ``capacitor.config.json``.

    Returns False (after logging a warning) when the file does not exist;
    it is never created here since ``npx cap init`` owns it.
    """
    if not path.exists():
        _logger.warning("%s not found, skipping sync", path)
        return False

    try:
        current = read_json(path)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Cannot parse {path.name}: {e}") from e
    if not isinstance(current, dict):
        raise ConfigError(f"{path.name} must contain an object at the top level")

    write_json(path, apply_app_config(current, app))
    _logger.info("Updated %s (appId=%s, server.url=%s)", path.name, app.app_id, app.web_url)
    return True


def sanitize_app_id(raw: str) -> str:
    """Sanitize a string into a valid Java package identifier.

    Java package segments must match ``[a-zA-Z_][a-zA-Z0-9_]*`` and the
    full ID uses dots as separators (e.g. ``com.example.myapp``).
    """
    sanitized = re.sub(r"[^a-zA-Z0-9_.]", "_", raw or "")
    sanitized = re.sub(r"_+", "_", sanitized)
    cleaned: list[str] = []
    for part in sanitized.split("."):
        part = part.strip("_")
        if not part:
            continue
        if part[0].isdigit():
            part = f"_{part}"
        cleaned.append(part)
    return ".".join(cleaned) if cleaned else "com.mobilemaker.app"


def app_id_problem(app_id: str) -> Optional[str]:
    """Describe why *app_id* is not a usable Android package id, or None."""
    if "." not in app_id:
        return f"appId '{app_id}' should have at least two segments (e.g. com.example.app)"
    suggestion = sanitize_app_id(app_id)
    if suggestion != app_id:
        return f"appId '{app_id}' is not a valid Java package id (try '{suggestion}')"
    return None
