"""Carga del documento de valores (YAML)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from core.errors import ConfigurationError


def load_values(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path} is not valid YAML ({exc})") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data
