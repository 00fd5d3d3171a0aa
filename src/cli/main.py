"""CLI principal (Typer).

Subcomandos: deploy (por defecto), status, test, logs, cleanup, encode-key
y el grupo `doctor`. Toda la secuencia vive en
`core.services.deployment_pipeline`; aquí solo se construyen los clientes,
se conectan los hooks a la consola y se traducen errores fatales a exit 1.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.helm import HelmClient
from adapters.http_client import HttpHealthProbe
from adapters.json_exporter import export_report_json
from adapters.kubectl import KubectlClient
from cli import doctor
from cli.ui_components import (
    build_health_text,
    print_attempt,
    print_banner,
    print_error,
    print_report,
    print_status,
    print_success,
    print_warning,
)
from core.config import AppSettings
from core.domain.modes import DeployMode
from core.errors import DeploymentError
from core.interfaces.cluster import ClusterClient, PackageClient
from core.interfaces.health import HealthProbe
from core.services import deployment_pipeline as pipeline

app = typer.Typer(
    name="llm-gateway-deploy",
    help="Deploy the LiteLLM gateway to Kubernetes.",
    invoke_without_command=True,
    no_args_is_help=False,
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def build_cluster_client(settings: AppSettings) -> ClusterClient:
    return KubectlClient(settings)


def build_package_client(settings: AppSettings) -> PackageClient:
    return HelmClient(settings)


def build_health_probe(settings: AppSettings) -> HealthProbe:
    return HttpHealthProbe(settings)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def _console_hooks() -> pipeline.PipelineHooks:
    return pipeline.PipelineHooks(
        info=lambda m: print_status(_console, m),
        success=lambda m: print_success(_console, m),
        warning=lambda m: print_warning(_console, m),
        attempt=lambda a, t: print_attempt(_console, a, t),
    )


def _abort(exc: Exception) -> NoReturn:
    print_error(_console, str(exc))
    raise typer.Exit(code=1)


def _settings(ctx: typer.Context) -> AppSettings:
    obj = ctx.obj or {}
    try:
        settings = AppSettings()
    except ValidationError as exc:
        _abort(exc)
    mode = obj.get("mode")
    if mode is not None:
        settings = settings.model_copy(update={"mode": mode})
    return settings


def _package_client(settings: AppSettings) -> PackageClient | None:
    if settings.mode is DeployMode.HELM:
        return build_package_client(settings)
    return None


@app.callback()
def main(
    ctx: typer.Context,
    mode: Annotated[
        Optional[DeployMode],
        typer.Option("--mode", "-m", help="manifests (kubectl) or helm. Overrides LLMGW_MODE."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging to stderr.")] = False,
) -> None:
    """Deploy the LiteLLM gateway (runs `deploy` when no command is given)."""

    configure_logging(verbose)
    ctx.obj = {"mode": mode}
    if ctx.invoked_subcommand is None:
        deploy(ctx)


@app.command()
def deploy(ctx: typer.Context) -> None:
    """Check prerequisites, apply resources, wait for readiness and report."""

    settings = _settings(ctx)
    print_banner(_console)
    cluster = build_cluster_client(settings)
    try:
        result = pipeline.deploy(
            settings=settings,
            cluster=cluster,
            helm=_package_client(settings),
            probe=build_health_probe(settings),
            which=shutil.which,
            hooks=_console_hooks(),
        )
    except DeploymentError as exc:
        _abort(exc)

    print_report(_console, result.report)
    if result.health is not None:
        _console.print(build_health_text(result.health))
    print_success(_console, "LiteLLM Gateway deployment finished.")


@app.command()
def status(
    ctx: typer.Context,
    json_out: Annotated[
        Optional[Path],
        typer.Option("--json", help="Also write the report as JSON to this path."),
    ] = None,
) -> None:
    """Show pods, services, release status and the external address."""

    settings = _settings(ctx)
    try:
        report = pipeline.collect_status(
            settings=settings,
            cluster=build_cluster_client(settings),
            helm=_package_client(settings),
        )
    except DeploymentError as exc:
        _abort(exc)

    print_report(_console, report)
    if json_out is not None:
        path = export_report_json(report=report, output_path=json_out)
        print_success(_console, f"Report written to {path}")


@app.command()
def test(ctx: typer.Context) -> None:
    """Issue one health-check request against the external address."""

    settings = _settings(ctx)
    result = pipeline.run_health_check(
        settings=settings,
        cluster=build_cluster_client(settings),
        probe=build_health_probe(settings),
        hooks=_console_hooks(),
    )
    if result is not None:
        _console.print(build_health_text(result))


@app.command()
def logs(
    ctx: typer.Context,
    tail: Annotated[Optional[int], typer.Option("--tail", min=1, help="Lines of history.")] = None,
    follow: Annotated[bool, typer.Option("--follow/--no-follow", help="Stream new lines.")] = True,
) -> None:
    """Show logs from the gateway pods."""

    settings = _settings(ctx)
    print_status(_console, "Getting logs from LiteLLM Gateway...")
    try:
        code = build_cluster_client(settings).stream_logs(
            settings.log_selector,
            settings.namespace,
            tail or settings.log_tail,
            follow,
        )
    except DeploymentError as exc:
        _abort(exc)
    if code:
        raise typer.Exit(code=code)


@app.command()
def cleanup(ctx: typer.Context) -> None:
    """Remove the release (helm mode) and the namespace."""

    settings = _settings(ctx)
    try:
        pipeline.teardown(
            settings=settings,
            cluster=build_cluster_client(settings),
            helm=_package_client(settings),
            hooks=_console_hooks(),
        )
    except DeploymentError as exc:
        _abort(exc)


@app.command(name="encode-key")
def encode_key(ctx: typer.Context) -> None:
    """Print the base64 credential snippet for the values file."""

    settings = _settings(ctx)
    path = settings.credential_file
    if not path.is_file():
        print_warning(_console, f"{path} not found. Please ensure you have the service account key file.")
        return

    print_status(_console, f"Encoding {path}...")
    encoded = pipeline.encode_credentials(path)
    print_success(_console, f"Service account key encoded. Add this to your {settings.values_file}:")
    _console.print("vertexAI:", markup=False, highlight=False)
    _console.print(f'  serviceAccountKey: "{encoded}"', markup=False, highlight=False, soft_wrap=True)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
