"""Adaptador `kubectl` (implementa `ClusterClient`).

Responsabilidad:
- Traducir cada operación del pipeline a una invocación de `kubectl`.
- Convertir salidas no-cero en la jerarquía de `core.errors`.
"""

from __future__ import annotations

from pathlib import Path

from adapters.process import CommandResult, build_env, run_attached, run_command
from core.config import AppSettings
from core.errors import ReadinessTimeoutError
from core.interfaces.cluster import ClusterClient

# Slack added on top of `kubectl wait --timeout` for the process itself.
_WAIT_GRACE_SECONDS = 30


class KubectlClient(ClusterClient):
    """Cliente de clúster basado en el binario `kubectl`."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._env = build_env(self._settings.kubeconfig)

    def _base(self) -> list[str]:
        cmd = [self._settings.kubectl_bin]
        if self._settings.kubeconfig:
            cmd.extend(["--kubeconfig", self._settings.kubeconfig])
        if self._settings.kube_context:
            cmd.extend(["--context", self._settings.kube_context])
        return cmd

    def _run(
        self,
        args: list[str],
        *,
        input_text: str | None = None,
        timeout_seconds: float | None = 120,
    ) -> CommandResult:
        return run_command(
            [*self._base(), *args],
            input_text=input_text,
            timeout_seconds=timeout_seconds,
            env=self._env,
        )

    def cluster_reachable(self) -> bool:
        return self._run(["cluster-info"], timeout_seconds=30).ok

    def apply_file(self, path: Path) -> None:
        self._run(["apply", "-f", str(path)]).raise_for_status()

    def apply_manifest(self, manifest: str) -> None:
        self._run(["apply", "-f", "-"], input_text=manifest).raise_for_status()

    def render_namespace(self, name: str) -> str:
        result = self._run(["create", "namespace", name, "--dry-run=client", "-o", "yaml"])
        return result.raise_for_status().stdout

    def _secret_args(self, name: str, namespace: str, key: str, path: Path) -> list[str]:
        return [
            "create",
            "secret",
            "generic",
            name,
            f"--from-file={key}={path}",
            "-n",
            namespace,
        ]

    def render_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> str:
        args = [*self._secret_args(name, namespace, key, path), "--dry-run=client", "-o", "yaml"]
        return self._run(args).raise_for_status().stdout

    def create_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> None:
        self._run(self._secret_args(name, namespace, key, path)).raise_for_status()

    def delete(self, kind: str, name: str, namespace: str | None = None) -> bool:
        args = ["delete", kind, name]
        if namespace:
            args.extend(["-n", namespace])
        args.append("--ignore-not-found=true")
        # Namespace deletion cascades and can take a while.
        result = self._run(args, timeout_seconds=600).raise_for_status()
        # With --ignore-not-found kubectl prints nothing when the object is absent.
        return bool(result.stdout.strip())

    def wait_for(
        self,
        condition: str,
        target: str,
        namespace: str,
        timeout_seconds: int,
        selector: str | None = None,
    ) -> None:
        args = ["wait", f"--for=condition={condition}", target]
        if selector:
            args.extend(["-l", selector])
        args.extend(["-n", namespace, f"--timeout={timeout_seconds}s"])

        result = self._run(args, timeout_seconds=timeout_seconds + _WAIT_GRACE_SECONDS)
        if result.ok:
            return

        label = f"{target} ({selector})" if selector else target
        if "timed out" in (result.stderr + result.stdout).lower():
            raise ReadinessTimeoutError(label, timeout_seconds)
        result.raise_for_status()

    def get_jsonpath(self, kind: str, name: str, namespace: str, jsonpath: str) -> str:
        args = ["get", kind, name, "-n", namespace, "-o", f"jsonpath={jsonpath}"]
        return self._run(args, timeout_seconds=30).raise_for_status().stdout

    def get_table(self, kind: str, namespace: str) -> str:
        return self._run(["get", kind, "-n", namespace], timeout_seconds=30).raise_for_status().stdout

    def stream_logs(self, selector: str, namespace: str, tail: int, follow: bool) -> int:
        args = [*self._base(), "logs", "-l", selector, "-n", namespace, f"--tail={tail}"]
        if follow:
            args.append("-f")
        return run_attached(args, env=self._env)
