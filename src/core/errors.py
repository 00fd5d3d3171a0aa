"""Fatal error hierarchy.

Anything derived from `DeploymentError` stops the run with a non-zero exit.
Soft failures are reported through pipeline hooks and never raised.
"""

from __future__ import annotations

from typing import Sequence


class DeploymentError(Exception):
    """Base class for failures that halt the run."""


class PrerequisiteError(DeploymentError):
    """A required executable, credential file or cluster is unavailable."""


class ConfigurationError(DeploymentError):
    """The values document is absent or incomplete."""

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        self.missing = list(missing)
        if self.missing:
            message = f"{message}: {', '.join(self.missing)}"
        super().__init__(message)


class CommandError(DeploymentError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"`{' '.join(self.command)}` failed: {detail}")


class ReadinessTimeoutError(DeploymentError):
    """A bounded readiness wait exceeded its timeout."""

    def __init__(self, target: str, timeout_seconds: int) -> None:
        self.target = target
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{target} was not ready within {timeout_seconds}s")
