"""Values-document validation replaces the interactive edit pause."""

from __future__ import annotations

from pathlib import Path

import pytest

from adapters.values_file import load_values
from core.errors import ConfigurationError
from core.services.values import REQUIRED_VALUES, missing_required_values, prepare_values_file

PROJECT_TEMPLATE = Path(__file__).resolve().parents[1] / "deploy" / "values-example.yaml"


def test_missing_required_values_reports_absent_null_and_blank():
    document = {
        "vertexAI": {"projectId": "demo", "serviceAccountKey": None},
        "litellm": {"env": {"LITELLM_MASTER_KEY": "   "}},
    }

    assert missing_required_values(document) == [
        "vertexAI.serviceAccountKey",
        "litellm.env.LITELLM_MASTER_KEY",
        "litellm.env.UI_PASSWORD",
        "postgresql.auth.password",
    ]


def test_complete_document_has_nothing_missing():
    document = {
        "vertexAI": {"projectId": "p", "serviceAccountKey": "k"},
        "litellm": {"env": {"LITELLM_MASTER_KEY": "sk", "UI_PASSWORD": "pw"}},
        "postgresql": {"auth": {"password": "pg"}},
    }
    assert missing_required_values(document) == []


def test_first_run_copies_template_then_fails_listing_fields(settings, tmp_path):
    template = tmp_path / "helm-chart" / "values-example.yaml"
    template.parent.mkdir()
    template.write_text(PROJECT_TEMPLATE.read_text(encoding="utf-8"), encoding="utf-8")
    settings = settings.model_copy(
        update={"values_file": tmp_path / "values-custom.yaml", "values_example": template}
    )
    warnings: list[str] = []

    with pytest.raises(ConfigurationError) as excinfo:
        prepare_values_file(settings, warning=warnings.append)

    assert (tmp_path / "values-custom.yaml").exists()
    assert excinfo.value.missing == list(REQUIRED_VALUES)
    assert warnings and "values-custom.yaml" in warnings[0]


def test_missing_template_is_fatal(settings, tmp_path):
    settings = settings.model_copy(
        update={
            "values_file": tmp_path / "values-custom.yaml",
            "values_example": tmp_path / "no-such-template.yaml",
        }
    )

    with pytest.raises(ConfigurationError, match="no-such-template.yaml"):
        prepare_values_file(settings)


def test_load_values_rejects_non_mapping(tmp_path):
    path = tmp_path / "values.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_values(path)


def test_load_values_empty_file_is_empty_mapping(tmp_path):
    path = tmp_path / "values.yaml"
    path.write_text("", encoding="utf-8")

    assert load_values(path) == {}
