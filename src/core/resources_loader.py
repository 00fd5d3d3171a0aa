"""Localización de recursos de despliegue (plantillas).

El repo incluye una plantilla de valores en `deploy/`; el operador puede
tener la suya junto al chart o en su directorio de configuración.
"""

from __future__ import annotations

from pathlib import Path

from core.config import get_user_config_dir


def _project_root() -> Path:
    # core/resources_loader.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


def get_default_asset_path(filename: str) -> Path | None:
    """Busca una plantilla por nombre en ubicaciones comunes.

    Orden:
    1) ./helm-chart/<filename> (cwd)
    2) <user_config_dir>/<filename>
    3) <project_root>/deploy/<filename>
    """

    candidates = [
        Path.cwd() / "helm-chart" / filename,
        get_user_config_dir() / filename,
        _project_root() / "deploy" / filename,
    ]
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None
