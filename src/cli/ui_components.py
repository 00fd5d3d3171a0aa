"""Componentes de UI para CLI (Rich).

- Evita mezclar lógica de comandos con detalles visuales.
- Reutiliza mensajes, tablas y paneles en todos los comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import DeploymentReport, HealthCheckResult


def print_banner(console: Console) -> None:
    title = Text("LiteLLM Gateway Deployment", style="bold cyan")
    subtitle = Text("Kubernetes • PostgreSQL • Vertex AI", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_status(console: Console, message: str) -> None:
    console.print(f"[blue][INFO][/blue] {escape(message)}")


def print_success(console: Console, message: str) -> None:
    console.print(f"[green][SUCCESS][/green] {escape(message)}")


def print_warning(console: Console, message: str) -> None:
    console.print(f"[yellow][WARNING][/yellow] {escape(message)}")


def print_error(console: Console, message: str) -> None:
    console.print(f"[red][ERROR][/red] {escape(message)}")


def print_attempt(console: Console, attempt: int, total: int) -> None:
    console.print(f"Waiting for external IP... (attempt {attempt}/{total})", style="dim")


def build_endpoint_table(report: DeploymentReport) -> Table:
    """Tabla de URLs del gateway (o 'Pending')."""

    table = Table(title="LiteLLM Gateway")
    table.add_column("Endpoint", style="cyan", no_wrap=True)
    table.add_column("URL", style="magenta")

    urls = report.endpoint.gateway_urls()
    if not urls:
        table.add_row("External IP", "Pending")
        return table

    for label, url in urls.items():
        table.add_row(label, url)
    return table


def build_report_panel(title: str, body: str) -> Panel:
    text = Text(body.rstrip() or "(no resources)")
    return Panel(text, title=Text(title, style="bold"), border_style="blue")


def print_report(console: Console, report: DeploymentReport) -> None:
    print_status(console, f"Deployment information ({report.mode.label()}, namespace {report.namespace}):")
    console.print(build_endpoint_table(report))
    if report.release_status:
        console.print(build_report_panel("Helm release", report.release_status))
    console.print(build_report_panel("Pods", report.pods))
    console.print(build_report_panel("Services", report.services))
    for message in report.warnings:
        print_warning(console, message)


def build_health_text(result: HealthCheckResult) -> Text:
    body = Text()
    body.append("OK" if result.ok else "FAIL", style="green" if result.ok else "red")
    body.append(f"  {result.url}")
    if result.status_code is not None:
        body.append(f"  HTTP {result.status_code}", style="dim")
    if result.error and result.status_code is None:
        body.append(f"  {result.error}", style="dim")
    return body
