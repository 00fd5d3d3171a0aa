"""Estado del despliegue como JSON, para pipelines de CI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import DeploymentReport, HealthCheckResult


def build_status_payload(
    report: DeploymentReport,
    health: HealthCheckResult | None = None,
) -> dict[str, Any]:
    """Reporte serializado más las URLs derivadas y el chequeo de salud (si hubo).

    `ready` es True solo con dirección asignada y, si se comprobó, salud OK.
    """

    payload = report.model_dump(mode="json")
    payload["urls"] = report.endpoint.gateway_urls()
    payload["health"] = health.model_dump(mode="json") if health is not None else None
    payload["ready"] = not report.endpoint.pending and (health is None or health.ok)
    return payload


def export_report_json(
    *,
    report: DeploymentReport,
    output_path: Path,
    health: HealthCheckResult | None = None,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(build_status_payload(report, health), ensure_ascii=False, indent=2, sort_keys=True)
    output_path.write_text(text + "\n", encoding="utf-8")
    return output_path
