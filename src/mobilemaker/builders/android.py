"""Builder that regenerates the Capacitor Android shell from app-config.json."""

from __future__ import annotations

import logging
import os
import shutil
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import (
    AppConfig,
    ProjectPaths,
    app_id_problem,
    apply_app_config,
    load_app_config,
    read_json,
    sync_capacitor_config,
)
from ..manifest import ManifestError, inject_permissions_file, permission_tag
from ..plugins import PluginPlan, installed_packages, npm_command, plan_plugins
from ..sdk import resolve_sdk_path, write_local_properties
from .base import Builder, BuildResult, LogFn

_logger = logging.getLogger("mobilemaker.builders.android")

DEFAULT_WEB_BUILD_CMD = "npm run build"
DEFAULT_TIMEOUT = 1800


@dataclass
class BuildOptions:
    """Knobs for a single :meth:`AndroidBuilder.build` run."""

    web_build_cmd: str = DEFAULT_WEB_BUILD_CMD
    skip_web_build: bool = False
    dry_run: bool = False
    timeout: int = DEFAULT_TIMEOUT
    env: dict[str, str] = field(default_factory=dict)


def _sdk_env(opts: BuildOptions) -> Optional[dict[str, str]]:
    if not opts.env:
        return None
    return {**os.environ, **opts.env}


class AndroidBuilder(Builder):
    """Runs the full Android pipeline, one step after another.

    Steps: sync config, reconcile plugins, build web assets, remove and
    regenerate ``android/``, write ``local.properties``, inject
    permissions, ``npx cap sync``.  Any failing command aborts the run with
    :class:`~mobilemaker.builders.base.BuildError`.
    """

    @property
    def platform_name(self) -> str:
        return "android"

    def build(
        self,
        paths: ProjectPaths,
        options: Optional[BuildOptions] = None,
        *,
        on_log: LogFn = None,
    ) -> BuildResult:
        opts = options or BuildOptions()
        t0 = time.monotonic()
        logs: list[str] = []
        steps: list[str] = []

        def _log(msg: str) -> None:
            logs.append(msg)
            self._log(on_log, msg)

        if opts.dry_run:
            return self._dry_run(paths, opts, _log, t0, logs)

        steps.append("config")
        app = self.update_config(paths, on_log=_log)

        if app.plugins is not None:
            steps.append("plugins")
            self.manage_plugins(paths, app, opts, on_log=_log)

        if not opts.skip_web_build:
            steps.append("web")
            self.build_web(paths, opts, on_log=_log)

        steps.append("remove")
        self.remove_platform(paths, on_log=_log)

        steps.append("add")
        self.add_platform(paths, opts, on_log=_log)

        steps.append("local-properties")
        sdk_ok = self.create_local_properties(paths, env=_sdk_env(opts), on_log=_log)

        steps.append("permissions")
        added = self.inject_permissions(paths, app, on_log=_log)

        steps.append("sync")
        self.final_sync(paths, opts, on_log=_log)

        elapsed = time.monotonic() - t0
        message = f'Build successful. Run "npx cap run {self.platform_name}" to launch.'
        _log(message)
        return BuildResult(
            success=True,
            platform=self.platform_name,
            steps=steps,
            message=message,
            logs=logs,
            elapsed_seconds=elapsed,
            extra={"app_id": app.app_id, "permissions_added": added, "sdk_configured": sdk_ok},
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def update_config(self, paths: ProjectPaths, *, on_log: LogFn = None) -> AppConfig:
        self._log(on_log, "Step 0: Updating project configuration...")
        app = load_app_config(paths.app_config)
        self._log(on_log, f"  App Name: {app.app_name}")
        self._log(on_log, f"  App ID: {app.app_id}")

        problem = app_id_problem(app.app_id)
        if problem:
            _logger.warning(problem)
            self._log(on_log, f"  Warning: {problem}")

        if sync_capacitor_config(app, paths.cap_config):
            self._log(on_log, f"  {paths.cap_config.name} updated.")
        else:
            self._log(on_log, f"  Warning: {paths.cap_config.name} not found.")
        return app

    def plan_plugins(self, paths: ProjectPaths, app: AppConfig) -> PluginPlan:
        if app.plugins is None:
            return PluginPlan()
        return plan_plugins(app.plugins, installed_packages(paths.package_json))

    def manage_plugins(
        self,
        paths: ProjectPaths,
        app: AppConfig,
        opts: BuildOptions,
        *,
        on_log: LogFn = None,
    ) -> PluginPlan:
        self._log(on_log, "Step 0.5: Managing plugins...")
        plan = self.plan_plugins(paths, app)
        for name in plan.install:
            self._log(on_log, f"  + Installing {name}...")
            self._run_checked(npm_command("install", name), cwd=paths.root, env=opts.env, on_log=on_log, timeout=opts.timeout)
        for name in plan.uninstall:
            self._log(on_log, f"  - Uninstalling {name}...")
            self._run_checked(npm_command("uninstall", name), cwd=paths.root, env=opts.env, on_log=on_log, timeout=opts.timeout)
        if plan.empty:
            self._log(on_log, "  Plugins already up to date.")
        return plan

    def build_web(self, paths: ProjectPaths, opts: BuildOptions, *, on_log: LogFn = None) -> None:
        self._log(on_log, f"Step 1: Building web assets ({opts.web_build_cmd})...")
        self._run_checked(opts.web_build_cmd, cwd=paths.root, env=opts.env, on_log=on_log, timeout=opts.timeout)

    def remove_platform(self, paths: ProjectPaths, *, on_log: LogFn = None) -> bool:
        if not paths.android.exists():
            return False
        self._log(on_log, f"Step 2: Removing existing {paths.android.name} directory...")
        shutil.rmtree(paths.android)
        return True

    def add_platform(self, paths: ProjectPaths, opts: BuildOptions, *, on_log: LogFn = None) -> None:
        self._log(on_log, f"Step 3: Generating fresh {self.platform_name} project...")
        self._run_checked(
            f"npx cap add {self.platform_name}",
            cwd=paths.root,
            env=opts.env,
            on_log=on_log,
            timeout=opts.timeout,
        )

    def create_local_properties(
        self,
        paths: ProjectPaths,
        *,
        env: Optional[dict[str, str]] = None,
        on_log: LogFn = None,
    ) -> bool:
        self._log(on_log, "Step 4: Generating local.properties...")
        sdk_path = resolve_sdk_path(env)
        if write_local_properties(paths.local_props, sdk_path):
            self._log(on_log, f"  local.properties -> {sdk_path}")
            return True
        self._log(on_log, "  Android SDK not found. Please set ANDROID_HOME.")
        return False

    def inject_permissions(self, paths: ProjectPaths, app: AppConfig, *, on_log: LogFn = None) -> list[str]:
        self._log(on_log, "Step 5: Injecting permissions...")
        if not paths.manifest.exists():
            self._log(on_log, f"  Warning: manifest not found: {paths.manifest}")
            return []
        try:
            added = inject_permissions_file(paths.manifest, app.permissions, strict=True)
        except ManifestError as e:
            _logger.warning("Invalid manifest format in %s: %s", paths.manifest, e)
            self._log(on_log, f"  Warning: invalid manifest format ({e}).")
            return []
        if added:
            self._log(on_log, f"  Added {len(added)} permission(s).")
        else:
            self._log(on_log, "  No new permissions needed.")
        return added

    def final_sync(self, paths: ProjectPaths, opts: BuildOptions, *, on_log: LogFn = None) -> None:
        self._log(on_log, "Step 6: Final sync...")
        self._run_checked("npx cap sync", cwd=paths.root, env=opts.env, on_log=on_log, timeout=opts.timeout)

    # ------------------------------------------------------------------
    # Dry run
    # ------------------------------------------------------------------

    def _dry_run(
        self,
        paths: ProjectPaths,
        opts: BuildOptions,
        _log: Callable[[str], None],
        t0: float,
        logs: list[str],
    ) -> BuildResult:
        app = load_app_config(paths.app_config)
        _log(f"Dry run: {app.app_name} ({app.app_id})")

        commands: list[str] = []
        if paths.cap_config.exists():
            current = read_json(paths.cap_config)
            updated = apply_app_config(current, app)
            changed = sorted(k for k in updated if updated.get(k) != current.get(k))
            _log(f"  would update {paths.cap_config.name}: {', '.join(changed) or 'no changes'}")
        else:
            _log(f"  {paths.cap_config.name} not found, would skip config sync")

        if app.plugins is not None:
            commands.extend(self.plan_plugins(paths, app).commands())
        if not opts.skip_web_build:
            commands.append(opts.web_build_cmd)
        if paths.android.exists():
            _log(f"  would remove {paths.android}")
        commands.append(f"npx cap add {self.platform_name}")
        commands.append("npx cap sync")

        _log("Would run:")
        for i, cmd in enumerate(commands, 1):
            _log(f"  {i}. {cmd}")

        sdk_path = resolve_sdk_path(_sdk_env(opts))
        _log(f"  sdk.dir -> {sdk_path if sdk_path and sdk_path.is_dir() else 'not found'}")

        tags = [permission_tag(p) for p in app.enabled_permissions()]
        _log(f"  would inject {len(tags)} permission(s)")
        for tag in tags:
            _log(f"    {tag}")

        return BuildResult(
            success=True,
            platform=self.platform_name,
            steps=[],
            message="Dry run complete",
            logs=logs,
            elapsed_seconds=time.monotonic() - t0,
            extra={"commands": commands, "permissions": tags},
        )
