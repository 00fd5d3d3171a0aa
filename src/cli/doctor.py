"""Doctor command for environment diagnostics."""

from __future__ import annotations

import shutil

import typer
from rich.console import Console
from rich.table import Table

from adapters.helm import HelmClient
from adapters.kubectl import KubectlClient
from adapters.values_file import load_values
from core.config import AppSettings, write_user_env_vars
from core.domain.modes import DeployMode, SecretRotation
from core.errors import DeploymentError
from core.services.values import missing_required_values

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_values(settings: AppSettings) -> tuple[str, str]:
    path = settings.values_file
    if not path.exists():
        return "MISSING", f"{path} (created from template on helm deploy)"
    try:
        missing = missing_required_values(load_values(path))
    except DeploymentError as exc:
        return "FAIL", str(exc)
    if missing:
        return "INCOMPLETE", ", ".join(missing)
    return "OK", str(path)


def _check_helm(settings: AppSettings) -> tuple[str, str]:
    try:
        return "OK", HelmClient(settings).version()
    except DeploymentError as exc:
        return "FAIL", str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="LiteLLM Gateway Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Mode", "OK", settings.mode.label())
    table.add_row("Namespace", "OK", settings.namespace)
    table.add_row("Secret rotation", "OK", settings.secret_rotation.label())

    # Executables
    for tool in (settings.kubectl_bin, settings.helm_bin, settings.gcloud_bin):
        location = shutil.which(tool)
        table.add_row(f"{tool} executable", "OK" if location else "MISSING", location or "not in PATH")

    if shutil.which(settings.helm_bin):
        status, detail = _check_helm(settings)
        table.add_row("helm version", status, detail)

    # Files
    if settings.credential_file.is_file():
        table.add_row("Credential file", "OK", str(settings.credential_file))
    elif settings.mode is DeployMode.MANIFESTS:
        table.add_row("Credential file", "MISSING", f"{settings.credential_file} is required in manifests mode")
    else:
        table.add_row("Credential file", "OPTIONAL", "only needed for encode-key")

    status, detail = _check_values(settings)
    table.add_row("Values file", status, detail)

    # Cluster
    reachable = bool(shutil.which(settings.kubectl_bin)) and KubectlClient(settings).cluster_reachable()
    table.add_row("Cluster access", "OK" if reachable else "FAIL", settings.kube_context or "current context")

    _console.print(table)

    if not reachable:
        _console.print(
            "\n[yellow]Note:[/yellow] `kubectl cluster-info` must succeed from this shell before deploying."
        )


@app.command()
def configure() -> None:
    """Interactive setup (stores config in the user config .env)."""

    current = AppSettings()

    mode = typer.prompt("Deploy mode (manifests/helm)", default=current.mode.value).strip().lower()
    if mode not in {m.value for m in DeployMode}:
        raise typer.BadParameter("mode must be 'manifests' or 'helm'")

    namespace = typer.prompt("Namespace", default=current.namespace).strip()
    credential_file = typer.prompt("Credential file", default=str(current.credential_file)).strip()
    rotation = typer.prompt(
        "Secret rotation (delete-create/apply)",
        default=current.secret_rotation.value,
    ).strip().lower()
    if rotation not in {r.value for r in SecretRotation}:
        raise typer.BadParameter("rotation must be 'delete-create' or 'apply'")
    context = typer.prompt("Kube context (blank for current)", default=current.kube_context or "").strip()

    if not namespace:
        raise typer.BadParameter("namespace is required")

    values = {
        "LLMGW_MODE": mode,
        "LLMGW_NAMESPACE": namespace,
        "LLMGW_CREDENTIAL_FILE": credential_file,
        "LLMGW_SECRET_ROTATION": rotation,
    }
    if context:
        values["LLMGW_KUBE_CONTEXT"] = context

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved deployment config to:[/green] {env_path}")
