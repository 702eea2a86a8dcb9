"""Permission injection for the generated AndroidManifest.xml.

The manifest is regenerated by ``npx cap add android`` on every build, so
patching is a plain text insertion in front of the closing root tag rather
than an XML round-trip that would reformat the file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

_logger = logging.getLogger("mobilemaker.manifest")

CLOSING_TAG = "</manifest>"
INJECT_COMMENT = "<!-- Auto-injected permissions -->"
INDENT = "    "


class ManifestError(Exception):
    """Raised when the manifest has no closing root tag."""


def permission_tag(name: str) -> str:
    return f'<uses-permission android:name="{name}" />'


def pending_permissions(content: str, permissions: Optional[Mapping[str, bool]]) -> list[str]:
    """Tags for enabled permissions that are not yet in *content* verbatim."""
    tags: list[str] = []
    for name, enabled in (permissions or {}).items():
        if not enabled:
            continue
        tag = permission_tag(name)
        if tag in content or tag in tags:
            continue
        tags.append(tag)
    return tags


def inject_permissions(
    content: str, permissions: Optional[Mapping[str, bool]]
) -> tuple[str, list[str]]:
    """Insert missing permission tags before the last ``</manifest>``.

    Returns the new content and the list of tags that were added.
    """
    idx = content.rfind(CLOSING_TAG)
    if idx == -1:
        raise ManifestError(f"No {CLOSING_TAG} closing tag found")

    tags = pending_permissions(content, permissions)
    if not tags:
        return content, []

    block = f"\n{INDENT}{INJECT_COMMENT}\n{INDENT}" + f"\n{INDENT}".join(tags) + "\n"
    return content[:idx] + block + content[idx:], tags


def inject_permissions_file(
    path: Path,
    permissions: Optional[Mapping[str, bool]],
    *,
    strict: bool = False,
) -> list[str]:
    """Patch the manifest at *path* in place.

    A missing or malformed manifest is logged and skipped, unless *strict*
    is set, in which case a malformed one raises :class:`ManifestError`.
    The file is only rewritten when at least one tag was added.
    """
    if not path.exists():
        _logger.warning("Manifest not found: %s", path)
        return []

    content = path.read_text(encoding="utf-8")
    try:
        new_content, added = inject_permissions(content, permissions)
    except ManifestError as e:
        if strict:
            raise
        _logger.warning("Invalid manifest format in %s: %s", path, e)
        return []

    if added:
        path.write_text(new_content, encoding="utf-8")
        _logger.info("Added %d permission(s) to %s", len(added), path.name)
    return added
