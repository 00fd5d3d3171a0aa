"""Shared fixtures: recording fakes for the cluster and Helm clients."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.models import HealthCheckResult
from core.errors import CommandError, ReadinessTimeoutError


class FakeCluster:
    """In-memory `ClusterClient` that records every call as a tuple."""

    def __init__(
        self,
        *,
        reachable: bool = True,
        ready: set[str] | None = None,
        address_after: int | None = 1,
        address: str = "34.1.2.3",
        port: str = "80",
    ) -> None:
        self.reachable = reachable
        # Targets that become ready; anything else times out.
        self.ready = ready if ready is not None else {"pod", "deployment/litellm-proxy"}
        self.address_after = address_after
        self.address = address
        self.port = port
        self.calls: list[tuple] = []
        self.secrets: dict[tuple[str, str], str] = {}
        self.namespaces: set[str] = set()
        self.fail_secret_create = False
        self.address_queries = 0

    def cluster_reachable(self) -> bool:
        self.calls.append(("cluster-info",))
        return self.reachable

    def apply_file(self, path: Path) -> None:
        self.calls.append(("apply", Path(path).name))

    def apply_manifest(self, manifest: str) -> None:
        self.calls.append(("apply-manifest", manifest))
        if manifest.startswith("secret:"):
            _, namespace, name = manifest.split(":")
            self.secrets[(namespace, name)] = "applied"
        if manifest.startswith("namespace:"):
            self.namespaces.add(manifest.split(":", 1)[1])

    def render_namespace(self, name: str) -> str:
        return f"namespace:{name}"

    def render_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> str:
        self.calls.append(("render-secret", name, namespace, key))
        return f"secret:{namespace}:{name}"

    def create_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> None:
        self.calls.append(("create-secret", name, namespace, key, Path(path).name))
        if self.fail_secret_create:
            raise CommandError(["kubectl", "create", "secret"], 1, "forbidden")
        if (namespace, name) in self.secrets:
            raise CommandError(["kubectl", "create", "secret"], 1, "AlreadyExists")
        self.secrets[(namespace, name)] = Path(path).read_text(encoding="utf-8")

    def delete(self, kind: str, name: str, namespace: str | None = None) -> bool:
        self.calls.append(("delete", kind, name, namespace))
        if kind == "secret":
            return self.secrets.pop((namespace or "", name), None) is not None
        if kind == "namespace":
            if name in self.namespaces:
                self.namespaces.discard(name)
                return True
            return False
        return False

    def wait_for(
        self,
        condition: str,
        target: str,
        namespace: str,
        timeout_seconds: int,
        selector: str | None = None,
    ) -> None:
        self.calls.append(("wait", condition, target, selector))
        if target not in self.ready:
            raise ReadinessTimeoutError(target, timeout_seconds)

    def get_jsonpath(self, kind: str, name: str, namespace: str, jsonpath: str) -> str:
        if "ingress[0].ip" in jsonpath:
            self.address_queries += 1
            self.calls.append(("get-address", name))
            if self.address_after is not None and self.address_queries >= self.address_after:
                return self.address
            return ""
        if "hostname" in jsonpath:
            return ""
        if "ports[0].port" in jsonpath:
            return self.port
        return ""

    def get_table(self, kind: str, namespace: str) -> str:
        self.calls.append(("get", kind, namespace))
        return f"NAME  STATUS\n{kind}-0  Running\n"

    def stream_logs(self, selector: str, namespace: str, tail: int, follow: bool) -> int:
        self.calls.append(("logs", selector, namespace, tail, follow))
        return 0

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeHelm:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.installed: set[str] = set()

    def version(self) -> str:
        return "v3.14.4"

    def upgrade_install(self, release, chart, namespace, values_file, timeout) -> None:
        self.calls.append(("upgrade-install", release, namespace, Path(values_file).name, timeout))
        self.installed.add(release)

    def status(self, release: str, namespace: str) -> str:
        self.calls.append(("status", release, namespace))
        return f"NAME: {release}\nSTATUS: deployed\n"

    def uninstall(self, release: str, namespace: str) -> bool:
        self.calls.append(("uninstall", release, namespace))
        if release in self.installed:
            self.installed.discard(release)
            return True
        return False


class RecordingProbe:
    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.urls: list[str] = []

    def __call__(self, url: str) -> HealthCheckResult:
        self.urls.append(url)
        if self.ok:
            return HealthCheckResult(url=url, ok=True, status_code=200)
        return HealthCheckResult(url=url, ok=False, error="connection refused")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real env vars and user .env files out of every test."""

    for key in list(os.environ):
        if key.startswith("LLMGW_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def credential_file(tmp_path) -> Path:
    path = tmp_path / "VertexAiKey.json"
    path.write_text('{"type": "service_account", "project_id": "demo"}', encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, credential_file) -> AppSettings:
    return AppSettings(
        credential_file=credential_file,
        manifests_dir=tmp_path,
        address_poll_attempts=3,
        address_poll_interval_seconds=0,
    )


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def helm() -> FakeHelm:
    return FakeHelm()


@pytest.fixture
def probe() -> RecordingProbe:
    return RecordingProbe()


def all_tools(_name: str) -> str:
    return "/usr/local/bin/tool"
