"""Deployment mode and secret-rotation choices.

Both enums live in the domain layer so that configuration, services and the
CLI share one source of truth without importing adapters.
"""

from __future__ import annotations

from enum import Enum


class DeployMode(str, Enum):
    """How the gateway resources reach the cluster."""

    MANIFESTS = "manifests"
    HELM = "helm"

    @classmethod
    def default(cls) -> "DeployMode":
        return cls.MANIFESTS

    def label(self) -> str:
        return "Helm chart" if self is DeployMode.HELM else "kubectl manifests"


class SecretRotation(str, Enum):
    """Strategy used to replace the credentials secret.

    DELETE_CREATE leaves a window where the secret is absent if creation
    fails; APPLY renders the secret client-side and applies it in one call.
    """

    DELETE_CREATE = "delete-create"
    APPLY = "apply"

    @classmethod
    def default(cls) -> "SecretRotation":
        return cls.DELETE_CREATE

    def label(self) -> str:
        return "atomic apply" if self is SecretRotation.APPLY else "delete then create"
