"""Reconcile Capacitor plugins in package.json with the app config."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Mapping

from .config import read_json

NpmAction = Literal["install", "uninstall"]


@dataclass
class PluginPlan:
    """Packages to add and remove so package.json matches the config."""

    install: list[str] = field(default_factory=list)
    uninstall: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.install and not self.uninstall

    def commands(self) -> list[str]:
        cmds = [npm_command("install", p) for p in self.install]
        cmds += [npm_command("uninstall", p) for p in self.uninstall]
        return cmds


def installed_packages(package_json: Path) -> set[str]:
    """Names listed under ``dependencies`` or ``devDependencies``."""
    pkg = read_json(package_json)
    names: set[str] = set()
    for section in ("dependencies", "devDependencies"):
        names.update((pkg.get(section) or {}).keys())
    return names


def plan_plugins(plugins: Mapping[str, bool], installed: set[str]) -> PluginPlan:
    plan = PluginPlan()
    for name, enabled in plugins.items():
        present = name in installed
        if enabled and not present:
            plan.install.append(name)
        elif not enabled and present:
            plan.uninstall.append(name)
    return plan


def npm_command(action: NpmAction, package: str) -> str:
    return f"npm {action} {shlex.quote(package)}"
