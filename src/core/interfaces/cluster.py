"""Contratos de los clientes del plano de control.

Protocol estructural: el adaptador real (`adapters.kubectl`) y los fakes de
test son intercambiables; los fakes no necesitan heredar.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClusterClient(Protocol):
    """Apply/get/delete/wait sobre recursos con nombre del clúster."""

    def cluster_reachable(self) -> bool:
        """True si el API server responde."""

        ...

    def apply_file(self, path: Path) -> None:
        ...

    def apply_manifest(self, manifest: str) -> None:
        """Aplica un manifiesto renderizado (texto YAML)."""

        ...

    def render_namespace(self, name: str) -> str:
        ...

    def render_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> str:
        ...

    def create_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> None:
        ...

    def delete(self, kind: str, name: str, namespace: str | None = None) -> bool:
        """Borra el recurso; False si no existía (éxito idempotente)."""

        ...

    def wait_for(
        self,
        condition: str,
        target: str,
        namespace: str,
        timeout_seconds: int,
        selector: str | None = None,
    ) -> None:
        """Bloquea hasta la condición; `ReadinessTimeoutError` al agotar el timeout."""

        ...

    def get_jsonpath(self, kind: str, name: str, namespace: str, jsonpath: str) -> str:
        ...

    def get_table(self, kind: str, namespace: str) -> str:
        ...

    def stream_logs(self, selector: str, namespace: str, tail: int, follow: bool) -> int:
        ...


@runtime_checkable
class PackageClient(Protocol):
    """Gestor de releases (Helm)."""

    def version(self) -> str:
        ...

    def upgrade_install(
        self,
        release: str,
        chart: Path,
        namespace: str,
        values_file: Path,
        timeout: str,
    ) -> None:
        ...

    def status(self, release: str, namespace: str) -> str:
        ...

    def uninstall(self, release: str, namespace: str) -> bool:
        """Desinstala la release; False si no existía."""

        ...
