"""Subprocess runner shared by the kubectl and helm adapters."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Sequence

from core.errors import CommandError

logger = logging.getLogger(__name__)

# Matches the shell convention for "command not found".
NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self) -> "CommandResult":
        if not self.ok:
            raise CommandError(self.command, self.returncode, self.stderr or self.stdout)
        return self


def build_env(kubeconfig: str | None = None) -> dict[str, str]:
    env = dict(os.environ)
    if kubeconfig:
        env["KUBECONFIG"] = kubeconfig
    return env


def run_command(
    command: Sequence[str],
    *,
    input_text: str | None = None,
    timeout_seconds: float | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command capturing text output; never raises on non-zero exit."""

    cmd = list(command)
    logger.debug("running %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            input=input_text,
            capture_output=True,
            text=True,
            env=env,
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        return CommandResult(cmd, NOT_FOUND_EXIT_CODE, "", str(exc))
    except subprocess.TimeoutExpired:
        return CommandResult(cmd, 1, "", f"timed out after {timeout_seconds}s")

    logger.debug("%s exited %d", cmd[0], proc.returncode)
    return CommandResult(cmd, proc.returncode, proc.stdout or "", proc.stderr or "")


def run_attached(command: Sequence[str], *, env: dict[str, str] | None = None) -> int:
    """Run a command with stdout/stderr inherited from the terminal."""

    cmd = list(command)
    logger.debug("running %s (attached)", " ".join(cmd))
    try:
        return subprocess.run(cmd, env=env).returncode
    except FileNotFoundError as exc:
        raise CommandError(cmd, NOT_FOUND_EXIT_CODE, str(exc)) from exc
