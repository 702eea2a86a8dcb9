"""Android SDK discovery and ``local.properties`` generation."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

_logger = logging.getLogger("mobilemaker.sdk")

SDK_ENV_VARS = ("ANDROID_HOME", "ANDROID_SDK_ROOT")


def default_sdk_path(env: Mapping[str, str], system: str) -> Optional[Path]:
    """Where Android Studio installs the SDK by default on *system*."""
    if system == "win32":
        local = env.get("LOCALAPPDATA")
        return Path(local) / "Android" / "Sdk" if local else None
    home = env.get("HOME")
    if not home:
        return None
    if system == "darwin":
        return Path(home) / "Library" / "Android" / "sdk"
    if system.startswith("linux"):
        return Path(home) / "Android" / "Sdk"
    return None


def resolve_sdk_path(
    env: Optional[Mapping[str, str]] = None,
    system: Optional[str] = None,
) -> Optional[Path]:
    src = os.environ if env is None else env
    for var in SDK_ENV_VARS:
        value = (src.get(var) or "").strip()
        if value:
            return Path(value)

    _logger.info("ANDROID_HOME not set, trying default SDK location")
    return default_sdk_path(src, system or sys.platform)


def local_properties_text(sdk_path: Path | str) -> str:
    escaped = str(sdk_path).replace("\\", "\\\\")
    return f"sdk.dir={escaped}\n"


def write_local_properties(path: Path, sdk_path: Optional[Path]) -> bool:
    """Write ``sdk.dir`` into *path* when *sdk_path* is an existing directory."""
    if sdk_path is None or not sdk_path.is_dir():
        _logger.error("Android SDK not found (%s). Please set ANDROID_HOME.", sdk_path or "no candidate")
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(local_properties_text(sdk_path), encoding="utf-8")
    _logger.info("local.properties -> %s", sdk_path)
    return True
