"""Modelos del dominio (Pydantic v2).

Nota:
- Estos modelos describen *qué* observa la herramienta del clúster, no *cómo*
  se consulta (eso vive en los adaptadores).
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from core.domain.modes import DeployMode

GATEWAY_PATHS: tuple[tuple[str, str], ...] = (
    ("Chat completions", "/v1/chat/completions"),
    ("Admin UI", "/ui"),
    ("API docs", "/docs"),
    ("Health", "/health"),
)


class PollPolicy(BaseModel):
    """Política de sondeo a intervalo fijo (sin backoff exponencial)."""

    max_attempts: int = Field(
        default=30,
        ge=1,
        description="Número máximo de intentos antes de rendirse.",
    )
    interval_seconds: float = Field(
        default=10.0,
        ge=0,
        description="Espera fija entre intentos (segundos).",
    )


class EndpointInfo(BaseModel):
    """Dirección externa asignada por el load balancer (si existe)."""

    address: str | None = Field(
        default=None,
        description="IP o hostname del ingress del Service.",
    )
    port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Primer puerto expuesto por el Service.",
    )

    @property
    def pending(self) -> bool:
        return not self.address

    @property
    def base_url(self) -> str | None:
        if self.pending:
            return None
        if self.port and self.port != 80:
            return f"http://{self.address}:{self.port}"
        return f"http://{self.address}"

    def url(self, path: str) -> str | None:
        base = self.base_url
        if base is None:
            return None
        return base + "/" + path.lstrip("/")

    def gateway_urls(self) -> dict[str, str]:
        """URLs públicas del gateway (vacío mientras la dirección está pendiente)."""

        if self.pending:
            return {}
        urls = {"Gateway": self.base_url or ""}
        for label, path in GATEWAY_PATHS:
            urls[label] = self.url(path) or ""
        return urls


class HealthCheckResult(BaseModel):
    """Resultado de una única petición al endpoint de salud."""

    url: str = Field(..., min_length=1)
    ok: bool = Field(default=False)
    status_code: int | None = Field(default=None)
    error: str | None = Field(default=None)


class DeploymentReport(BaseModel):
    """Estado agregado del despliegue, listo para imprimir o exportar."""

    namespace: str = Field(..., min_length=1)
    mode: DeployMode = Field(default=DeployMode.MANIFESTS)
    endpoint: EndpointInfo = Field(default_factory=EndpointInfo)
    pods: str = Field(
        default="",
        description="Salida tabular de `kubectl get pods`.",
    )
    services: str = Field(
        default="",
        description="Salida tabular de `kubectl get services`.",
    )
    release_status: str | None = Field(
        default=None,
        description="Salida de `helm status` (solo modo helm).",
    )
    warnings: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
