"""Deployment orchestration.

This module sequences the control-plane clients so that dependent resources
exist and are ready before their dependents are created. The CLI delegates
every step to these helpers and only wires the hooks to the console, which
keeps printing out of the core logic and lets tests drive the pipeline with
fake clients.

Error tiers:
- fatal: any `DeploymentError` raised here propagates to the caller.
- soft: reported through `PipelineHooks.warning` and the report warnings.
- idempotent-success: deleting something already absent is not an error.
"""

from __future__ import annotations

import base64
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from core.config import AppSettings
from core.domain.models import DeploymentReport, EndpointInfo, HealthCheckResult, PollPolicy
from core.domain.modes import DeployMode, SecretRotation
from core.errors import CommandError, PrerequisiteError
from core.interfaces.cluster import ClusterClient, PackageClient
from core.interfaces.health import HealthProbe
from core.services.polling import poll_until
from core.services.values import prepare_values_file

logger = logging.getLogger(__name__)

_INGRESS_IP = "{.status.loadBalancer.ingress[0].ip}"
_INGRESS_HOSTNAME = "{.status.loadBalancer.ingress[0].hostname}"
_FIRST_PORT = "{.spec.ports[0].port}"


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    info: Callable[[str], None] | None = None
    success: Callable[[str], None] | None = None
    warning: Callable[[str], None] | None = None
    attempt: Callable[[int, int], None] | None = None

    def emit_info(self, message: str) -> None:
        logger.debug(message)
        if self.info:
            self.info(message)

    def emit_success(self, message: str) -> None:
        logger.debug(message)
        if self.success:
            self.success(message)

    def emit_warning(self, message: str) -> None:
        logger.debug(message)
        if self.warning:
            self.warning(message)


@dataclass
class PipelineResult:
    """Output of a full deploy run."""

    report: DeploymentReport
    health: HealthCheckResult | None = None
    warnings: list[str] = field(default_factory=list)


def required_tools(settings: AppSettings) -> tuple[str, ...]:
    if settings.mode is DeployMode.HELM:
        return (settings.helm_bin, settings.kubectl_bin)
    return (settings.kubectl_bin, settings.gcloud_bin)


def check_prerequisites(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    helm: PackageClient | None = None,
    which: Callable[[str], str | None] = shutil.which,
    hooks: PipelineHooks | None = None,
) -> None:
    """Fail fast unless tools, credential file and cluster are all available.

    In helm mode a given `helm` client is also asked for its version, so a
    present but broken binary stops the run here.
    """

    hooks = hooks or PipelineHooks()
    hooks.emit_info("Checking prerequisites...")

    missing = [tool for tool in required_tools(settings) if which(tool) is None]
    if missing:
        raise PrerequisiteError(
            f"Required executable(s) not found in PATH: {', '.join(missing)}"
        )

    if settings.mode is DeployMode.HELM and helm is not None:
        try:
            version = helm.version()
        except CommandError as exc:
            raise PrerequisiteError(f"Helm is installed but not usable: {exc}") from exc
        hooks.emit_success(f"Helm is installed: {version}")

    if settings.mode is DeployMode.MANIFESTS and not settings.credential_file.is_file():
        raise PrerequisiteError(f"{settings.credential_file} file not found.")

    if not cluster.cluster_reachable():
        raise PrerequisiteError(
            "Cannot connect to Kubernetes cluster. Please check your kubectl configuration."
        )

    hooks.emit_success("All prerequisites met!")


def rotate_secret(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    hooks: PipelineHooks | None = None,
) -> None:
    """Replace the credentials secret from the local key file."""

    hooks = hooks or PipelineHooks()
    hooks.emit_info(
        f"Creating {settings.secret_name} secret ({settings.secret_rotation.label()})..."
    )

    if settings.secret_rotation is SecretRotation.APPLY:
        manifest = cluster.render_secret_from_file(
            settings.secret_name,
            settings.namespace,
            settings.secret_key,
            settings.credential_file,
        )
        cluster.apply_manifest(manifest)
    else:
        existed = cluster.delete("secret", settings.secret_name, settings.namespace)
        if not existed:
            logger.debug("secret %s was absent; nothing to delete", settings.secret_name)
        cluster.create_secret_from_file(
            settings.secret_name,
            settings.namespace,
            settings.secret_key,
            settings.credential_file,
        )

    hooks.emit_success(f"{settings.secret_name} secret created!")


def apply_resources(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    hooks: PipelineHooks | None = None,
) -> None:
    """Apply namespace, secret, database, configuration, workload and service.

    The database readiness wait sits between the database and configuration
    steps; a timeout there stops the run before configuration is applied.
    """

    hooks = hooks or PipelineHooks()
    hooks.emit_info("Starting LiteLLM Gateway deployment...")

    hooks.emit_info("Creating namespace...")
    cluster.apply_file(settings.manifest_path(settings.namespace_manifest))

    rotate_secret(settings=settings, cluster=cluster, hooks=hooks)

    hooks.emit_info("Deploying PostgreSQL database...")
    cluster.apply_file(settings.manifest_path(settings.database_manifest))

    hooks.emit_info("Waiting for PostgreSQL to be ready...")
    cluster.wait_for(
        "ready",
        "pod",
        settings.namespace,
        settings.database_ready_timeout_seconds,
        selector=settings.database_selector,
    )

    hooks.emit_info("Creating LiteLLM configuration...")
    cluster.apply_file(settings.manifest_path(settings.config_manifest))

    hooks.emit_info("Deploying LiteLLM Gateway...")
    cluster.apply_file(settings.manifest_path(settings.workload_manifest))

    hooks.emit_info("Creating LiteLLM service...")
    cluster.apply_file(settings.manifest_path(settings.service_manifest))

    hooks.emit_success("All components deployed!")


def wait_for_workload(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    hooks: PipelineHooks | None = None,
) -> None:
    hooks = hooks or PipelineHooks()
    hooks.emit_info("Waiting for LiteLLM deployment to be ready...")
    cluster.wait_for(
        "available",
        f"deployment/{settings.workload_name}",
        settings.namespace,
        settings.workload_ready_timeout_seconds,
    )


def ensure_namespace(*, settings: AppSettings, cluster: ClusterClient) -> None:
    """Create the namespace if missing (render client-side, then apply)."""

    cluster.apply_manifest(cluster.render_namespace(settings.namespace))


def install_release(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    helm: PackageClient,
    hooks: PipelineHooks | None = None,
) -> None:
    hooks = hooks or PipelineHooks()
    hooks.emit_info("Deploying LiteLLM Gateway with Helm...")
    ensure_namespace(settings=settings, cluster=cluster)
    helm.upgrade_install(
        settings.release_name,
        settings.chart_path,
        settings.namespace,
        settings.values_file,
        settings.helm_timeout,
    )
    hooks.emit_success("Deployment completed!")


def _query(cluster: ClusterClient, settings: AppSettings, jsonpath: str) -> str:
    try:
        return cluster.get_jsonpath(
            "service",
            settings.effective_service_name(),
            settings.namespace,
            jsonpath,
        ).strip()
    except CommandError as exc:
        logger.debug("service query failed: %s", exc)
        return ""


def lookup_external_address(*, settings: AppSettings, cluster: ClusterClient) -> EndpointInfo:
    """Single read of the load-balancer address; query errors read as pending."""

    address = _query(cluster, settings, _INGRESS_IP) or _query(cluster, settings, _INGRESS_HOSTNAME)
    if not address:
        return EndpointInfo()

    port_raw = _query(cluster, settings, _FIRST_PORT)
    port = int(port_raw) if port_raw.isdigit() else None
    return EndpointInfo(address=address, port=port)


def poll_external_address(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    policy: PollPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    hooks: PipelineHooks | None = None,
) -> EndpointInfo:
    """Wait for an external address; exhaustion is a soft failure."""

    hooks = hooks or PipelineHooks()
    policy = policy or settings.address_poll_policy
    hooks.emit_info("Waiting for service to get external IP...")

    def probe() -> EndpointInfo | None:
        endpoint = lookup_external_address(settings=settings, cluster=cluster)
        return None if endpoint.pending else endpoint

    result = poll_until(
        policy,
        probe,
        sleep=sleep,
        on_attempt=hooks.attempt,
    )
    if result.value is None or result.value.pending:
        hooks.emit_warning(
            f"External IP not assigned after {result.attempts} attempt(s); endpoint is pending."
        )
        return EndpointInfo()

    hooks.emit_success(f"External address assigned: {result.value.address}")
    return result.value


def collect_status(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    helm: PackageClient | None = None,
    endpoint: EndpointInfo | None = None,
) -> DeploymentReport:
    """Read-only aggregation of resource state and the assigned address."""

    release_status = None
    if settings.mode is DeployMode.HELM and helm is not None:
        release_status = helm.status(settings.release_name, settings.namespace)

    pods = cluster.get_table("pods", settings.namespace)
    services = cluster.get_table("services", settings.namespace)
    if endpoint is None or endpoint.pending:
        endpoint = lookup_external_address(settings=settings, cluster=cluster)

    warnings: list[str] = []
    if endpoint.pending:
        warnings.append(
            "External IP shows 'Pending'; wait a few more minutes for the load balancer."
        )

    return DeploymentReport(
        namespace=settings.namespace,
        mode=settings.mode,
        endpoint=endpoint,
        pods=pods,
        services=services,
        release_status=release_status,
        warnings=warnings,
    )


def run_health_check(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    probe: HealthProbe,
    endpoint: EndpointInfo | None = None,
    hooks: PipelineHooks | None = None,
) -> HealthCheckResult | None:
    """Issue one health request; never fatal. None when no address exists."""

    hooks = hooks or PipelineHooks()
    hooks.emit_info("Testing deployment...")

    if endpoint is None or endpoint.pending:
        endpoint = lookup_external_address(settings=settings, cluster=cluster)
    url = endpoint.url(settings.health_path)
    if url is None:
        hooks.emit_warning("External IP not yet assigned. Skipping connectivity test.")
        return None

    result = probe(url)
    if result.ok:
        hooks.emit_success("Health check passed!")
    else:
        hooks.emit_warning("Health check failed. The service might still be starting up.")
    return result


def teardown(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    helm: PackageClient | None = None,
    hooks: PipelineHooks | None = None,
) -> None:
    """Remove everything; already-absent resources count as success."""

    hooks = hooks or PipelineHooks()
    hooks.emit_info("Cleaning up LiteLLM deployment...")

    if settings.mode is DeployMode.HELM and helm is not None:
        if not helm.uninstall(settings.release_name, settings.namespace):
            logger.debug("release %s was not installed", settings.release_name)

    if not cluster.delete("namespace", settings.namespace):
        logger.debug("namespace %s was already absent", settings.namespace)

    hooks.emit_success("Cleanup completed!")


def encode_credentials(path: Path) -> str:
    """Base64 of the key file on a single line (values-file friendly)."""

    return base64.b64encode(path.read_bytes()).decode("ascii")


def deploy(
    *,
    settings: AppSettings,
    cluster: ClusterClient,
    probe: HealthProbe,
    helm: PackageClient | None = None,
    which: Callable[[str], str | None] = shutil.which,
    sleep: Callable[[float], None] = time.sleep,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    """Full run: gate, apply, wait, poll, report, health check."""

    hooks = hooks or PipelineHooks()
    warnings: list[str] = []

    def warn(message: str) -> None:
        warnings.append(message)
        if hooks.warning:
            hooks.warning(message)

    collecting = PipelineHooks(
        info=hooks.info,
        success=hooks.success,
        warning=warn,
        attempt=hooks.attempt,
    )

    check_prerequisites(settings=settings, cluster=cluster, helm=helm, which=which, hooks=collecting)

    if settings.mode is DeployMode.HELM:
        if helm is None:
            raise PrerequisiteError("Helm mode requires a package client.")
        prepare_values_file(settings, warning=collecting.emit_warning)
        install_release(settings=settings, cluster=cluster, helm=helm, hooks=collecting)
    else:
        apply_resources(settings=settings, cluster=cluster, hooks=collecting)
        wait_for_workload(settings=settings, cluster=cluster, hooks=collecting)

    endpoint = poll_external_address(
        settings=settings,
        cluster=cluster,
        sleep=sleep,
        hooks=collecting,
    )
    report = collect_status(settings=settings, cluster=cluster, helm=helm, endpoint=endpoint)
    health = run_health_check(
        settings=settings,
        cluster=cluster,
        probe=probe,
        endpoint=report.endpoint,
        hooks=collecting,
    )

    report.warnings = [*warnings, *report.warnings]
    return PipelineResult(report=report, health=health, warnings=warnings)
