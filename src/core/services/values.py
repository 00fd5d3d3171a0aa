"""Validation of the operator values document (Helm mode).

An absent values document is copied from a template, and the run then fails
fast listing every required field that is still empty.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Callable, Mapping

from adapters.values_file import load_values
from core.config import AppSettings
from core.errors import ConfigurationError
from core.resources_loader import get_default_asset_path

REQUIRED_VALUES: tuple[str, ...] = (
    "vertexAI.projectId",
    "vertexAI.serviceAccountKey",
    "litellm.env.LITELLM_MASTER_KEY",
    "litellm.env.UI_PASSWORD",
    "postgresql.auth.password",
)


def _lookup(document: Mapping[str, Any], dotted: str) -> Any:
    node: Any = document
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def missing_required_values(
    document: Mapping[str, Any],
    required: tuple[str, ...] = REQUIRED_VALUES,
) -> list[str]:
    """Return the dotted keys that are absent, null or blank."""

    missing: list[str] = []
    for key in required:
        value = _lookup(document, key)
        if value is None:
            missing.append(key)
        elif isinstance(value, str) and not value.strip():
            missing.append(key)
    return missing


def prepare_values_file(
    settings: AppSettings,
    *,
    warning: Callable[[str], None] | None = None,
) -> Path:
    """Ensure the values document exists and is fully populated.

    Reglas:
    - Si falta, se copia desde la plantilla configurada o la incluida en el
      proyecto (error si no hay ninguna).
    - Después se valida siempre; cualquier campo vacío es fatal.
    """

    values_path = settings.values_file
    if not values_path.exists():
        example: Path | None = settings.values_example
        if not example.exists():
            example = get_default_asset_path(settings.values_example.name)
        if example is None:
            raise ConfigurationError(
                f"{settings.values_example} not found. Please create {values_path} manually"
            )
        values_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(example, values_path)
        if warning:
            warning(f"Created {values_path} from {example}; fill in the required fields before deploying.")

    missing = missing_required_values(load_values(values_path))
    if missing:
        raise ConfigurationError(f"{values_path} is missing required values", missing=missing)
    return values_path
