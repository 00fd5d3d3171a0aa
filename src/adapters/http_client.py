"""Wrapper de httpx.

- Estandariza timeout y headers del chequeo de salud.
- Facilita testeo: se puede inyectar un `httpx.Client` con `MockTransport`.
"""

from __future__ import annotations

import logging

import httpx

from core.config import AppSettings
from core.domain.models import HealthCheckResult

logger = logging.getLogger(__name__)


def build_client(settings: AppSettings | None = None) -> httpx.Client:
    """Crea un `httpx.Client` con defaults del proyecto."""

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
    )


def check_health(
    url: str,
    *,
    settings: AppSettings | None = None,
    client: httpx.Client | None = None,
) -> HealthCheckResult:
    """GET `url`; 2xx es OK. Nunca lanza por red ni por status."""

    owned = client is None
    client = client or build_client(settings)
    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        logger.debug("health check %s failed: %s", url, exc)
        return HealthCheckResult(url=url, ok=False, error=str(exc) or exc.__class__.__name__)
    finally:
        if owned:
            client.close()

    return HealthCheckResult(
        url=url,
        ok=response.is_success,
        status_code=response.status_code,
        error=None if response.is_success else f"HTTP {response.status_code}",
    )


class HttpHealthProbe:
    """`HealthProbe` ligado a una configuración."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def __call__(self, url: str) -> HealthCheckResult:
        return check_health(url, settings=self._settings)
