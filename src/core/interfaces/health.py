"""Contrato del chequeo de salud HTTP."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import HealthCheckResult


@runtime_checkable
class HealthProbe(Protocol):
    """Una única petición GET; nunca lanza por fallos de red o de estado."""

    def __call__(self, url: str) -> HealthCheckResult:
        ...
