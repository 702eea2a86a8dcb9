"""Base builder interface and shell helpers."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

_logger = logging.getLogger("mobilemaker.builders")

LogFn = Optional[Callable[[str], None]]


class BuildError(Exception):
    """Raised when a build step fails."""

    def __init__(self, message: str, *, cmd: str = "", returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.output = output


@dataclass
class BuildResult:
    """Result of a build run."""

    success: bool
    platform: str
    steps: list[str] = field(default_factory=list)
    message: str = ""
    logs: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)


class Builder(ABC):
    """Abstract base for native platform builders."""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Return the bridge platform identifier (e.g. android)."""

    # ------------------------------------------------------------------
    # Helpers shared by all builders
    # ------------------------------------------------------------------

    @staticmethod
    def _log(on_log: LogFn, msg: str) -> None:
        if on_log:
            try:
                on_log(msg)
            except Exception:
                _logger.debug("on_log callback failed for: %s", msg, exc_info=True)

    @staticmethod
    def _run_shell(
        cmd: str,
        *,
        cwd: Path,
        env: Optional[dict[str, str]] = None,
        on_log: LogFn = None,
        timeout: int = 1800,
    ) -> tuple[int, str, str]:
        """Run a shell command, stream stdout to *on_log*, return (rc, stdout, stderr)."""
        run_env = os.environ.copy()
        if env:
            run_env.update(env)

        _logger.debug("Running shell: %s (cwd=%s, timeout=%ds)", cmd, cwd, timeout)
        t0 = time.monotonic()

        proc = subprocess.Popen(
            cmd,
            shell=True,
            cwd=str(cwd),
            env=run_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            start_new_session=os.name == "posix",
        )

        stdout_lines: list[str] = []

        def _pump() -> None:
            if proc.stdout:
                for line in proc.stdout:
                    s = line.rstrip("\n")
                    stdout_lines.append(s)
                    Builder._log(on_log, s)

        # stdout is drained on a thread so the deadline holds for silent commands
        reader = threading.Thread(target=_pump, name="mobilemaker-shell-output", daemon=True)
        reader.start()

        try:
            rc = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            elapsed = time.monotonic() - t0
            _logger.error("Command timed out after %.1fs (limit=%ds), killing pid=%d: %s", elapsed, timeout, proc.pid, cmd)
            Builder._kill_tree(proc)
            reader.join(timeout=5)
            return -9, "\n".join(stdout_lines), f"Timed out after {elapsed:.0f}s"

        reader.join()

        elapsed = time.monotonic() - t0
        if rc != 0:
            tail = "\n".join(stdout_lines[-15:]) if stdout_lines else "(no output)"
            _logger.warning("Command failed (exit=%d) in %.1fs: %s\nOutput tail:\n%s", rc, elapsed, cmd, tail)
        else:
            _logger.info("Command succeeded in %.1fs: %s", elapsed, cmd)

        return rc, "\n".join(stdout_lines), ""

    @staticmethod
    def _kill_tree(proc: subprocess.Popen) -> None:
        """Kill *proc* and, on POSIX, every process in its session."""
        if os.name == "posix":
            try:
                os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
            except (ProcessLookupError, OSError):
                proc.kill()
        else:
            proc.kill()
        proc.wait(timeout=10)

    def _run_checked(
        self,
        cmd: str,
        *,
        cwd: Path,
        env: Optional[dict[str, str]] = None,
        on_log: LogFn = None,
        timeout: int = 1800,
    ) -> str:
        """Like :meth:`_run_shell` but raise :class:`BuildError` on failure."""
        rc, stdout, stderr = self._run_shell(cmd, cwd=cwd, env=env, on_log=on_log, timeout=timeout)
        if rc != 0:
            reason = stderr or f"exit code {rc}"
            raise BuildError(f"Command failed ({reason}): {cmd}", cmd=cmd, returncode=rc, output=stdout)
        return stdout
