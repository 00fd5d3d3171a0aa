"""Configuración del Core.

- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Los adaptadores (kubectl/helm/HTTP) leen la misma instancia de settings.
- El `.env` del usuario se resuelve en cada carga, no al importar el módulo.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from core.domain.modes import DeployMode, SecretRotation
from core.domain.models import PollPolicy

APP_NAME = "llm-gateway-deploy"
PROJECT_ENV_FILE = ".env"
_USER_ENV_HEADER = f"# {APP_NAME} user config (.env)"


def get_user_config_dir() -> Path:
    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA") or Path.home())
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return root / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def read_user_env_vars() -> dict[str, str]:
    """Variables ya guardadas por `doctor configure` (vacío si no hay archivo)."""

    env_path = get_user_env_file()
    if not env_path.is_file():
        return {}
    return {key: value for key, value in dotenv_values(env_path).items() if value is not None}


def write_user_env_vars(values: Mapping[str, str | None]) -> Path:
    """Fusiona `values` en el .env del usuario; claves ordenadas, None se ignora."""

    merged = read_user_env_vars()
    merged.update({key: value for key, value in values.items() if value is not None})

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    env_path.write_text(f"{_USER_ENV_HEADER}\n{body}", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del despliegue.

    Orden de precedencia: argumentos, variables de entorno, `.env` del
    proyecto y por último el `.env` global del usuario.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLMGW_",
        extra="ignore",
        case_sensitive=False,
        env_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Later files win, so the project .env overrides the user one.
        env_files = (get_user_env_file(), Path(PROJECT_ENV_FILE))
        return (
            init_settings,
            env_settings,
            DotEnvSettingsSource(settings_cls, env_file=env_files),
            file_secret_settings,
        )

    mode: DeployMode = Field(
        default_factory=DeployMode.default,
        description="Estrategia de despliegue: manifests (kubectl) o helm.",
    )
    namespace: str = Field(default="litellm", min_length=1)
    release_name: str = Field(default="litellm", min_length=1)
    chart_path: Path = Field(default=Path("helm-chart"))
    values_file: Path = Field(
        default=Path("values-custom.yaml"),
        description="Documento de valores editado por el operador.",
    )
    values_example: Path = Field(
        default=Path("helm-chart") / "values-example.yaml",
        description="Plantilla copiada cuando el documento de valores no existe.",
    )

    credential_file: Path = Field(
        default=Path("VertexAiKey.json"),
        description="Clave de service account de Vertex AI.",
    )
    secret_name: str = Field(default="vertex-ai-credentials", min_length=1)
    secret_key: str = Field(default="vertex-key.json", min_length=1)
    secret_rotation: SecretRotation = Field(
        default_factory=SecretRotation.default,
        description="delete-create (no atómico) o apply (atómico).",
    )

    manifests_dir: Path = Field(default=Path("."))
    namespace_manifest: str = Field(default="namespace.yaml", min_length=1)
    database_manifest: str = Field(default="postgre.yaml", min_length=1)
    config_manifest: str = Field(default="litellm-config.yaml", min_length=1)
    workload_manifest: str = Field(default="litellm-deployment.yaml", min_length=1)
    service_manifest: str = Field(default="service.yaml", min_length=1)

    database_selector: str = Field(default="app=postgres", min_length=1)
    database_ready_timeout_seconds: int = Field(default=300, gt=0)
    workload_name: str = Field(default="litellm-proxy", min_length=1)
    workload_ready_timeout_seconds: int = Field(default=600, gt=0)
    service_name: str | None = Field(
        default=None,
        description="Nombre del Service expuesto; por defecto depende del modo.",
    )
    helm_timeout: str = Field(default="10m", min_length=1)

    address_poll_attempts: int = Field(default=30, ge=1, le=1000)
    address_poll_interval_seconds: float = Field(default=10.0, ge=0)

    health_path: str = Field(default="/health", min_length=1)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = Field(default=f"{APP_NAME}/0.1", min_length=1)

    log_selector: str = Field(default="app.kubernetes.io/name=litellm-gateway", min_length=1)
    log_tail: int = Field(default=50, ge=1)

    kubectl_bin: str = Field(default="kubectl", min_length=1)
    helm_bin: str = Field(default="helm", min_length=1)
    gcloud_bin: str = Field(default="gcloud", min_length=1)
    kubeconfig: str | None = Field(default=None)
    kube_context: str | None = Field(default=None)

    @property
    def address_poll_policy(self) -> PollPolicy:
        return PollPolicy(
            max_attempts=self.address_poll_attempts,
            interval_seconds=self.address_poll_interval_seconds,
        )

    def effective_service_name(self) -> str:
        if self.service_name:
            return self.service_name
        if self.mode is DeployMode.HELM:
            return f"{self.release_name}-litellm-gateway"
        return "litellm-service"

    def manifest_path(self, filename: str) -> Path:
        return self.manifests_dir / filename
