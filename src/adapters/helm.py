"""Adaptador `helm` (implementa `PackageClient`)."""

from __future__ import annotations

from pathlib import Path

from adapters.process import CommandResult, build_env, run_command
from core.config import AppSettings
from core.interfaces.cluster import PackageClient


class HelmClient(PackageClient):
    """Gestiona la release del gateway con `helm upgrade --install`."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._env = build_env(self._settings.kubeconfig)

    def _run(self, args: list[str], *, timeout_seconds: float | None = 120) -> CommandResult:
        cmd = [self._settings.helm_bin, *args]
        if self._settings.kubeconfig:
            cmd.extend(["--kubeconfig", self._settings.kubeconfig])
        if self._settings.kube_context:
            cmd.extend(["--kube-context", self._settings.kube_context])
        return run_command(cmd, timeout_seconds=timeout_seconds, env=self._env)

    def version(self) -> str:
        return self._run(["version", "--short"], timeout_seconds=30).raise_for_status().stdout.strip()

    def upgrade_install(
        self,
        release: str,
        chart: Path,
        namespace: str,
        values_file: Path,
        timeout: str,
    ) -> None:
        args = [
            "upgrade",
            "--install",
            release,
            str(chart),
            "--namespace",
            namespace,
            "--values",
            str(values_file),
            "--wait",
            f"--timeout={timeout}",
        ]
        # helm enforces --timeout itself.
        self._run(args, timeout_seconds=None).raise_for_status()

    def status(self, release: str, namespace: str) -> str:
        return self._run(["status", release, "-n", namespace]).raise_for_status().stdout

    def uninstall(self, release: str, namespace: str) -> bool:
        result = self._run(["uninstall", release, "-n", namespace], timeout_seconds=300)
        if result.ok:
            return True
        if "not found" in (result.stderr + result.stdout).lower():
            return False
        result.raise_for_status()
        return False
