"""Prerequisite gate: each missing condition rejects the run on its own."""

from __future__ import annotations

import pytest

from conftest import FakeCluster, FakeHelm, all_tools
from core.domain.modes import DeployMode
from core.errors import CommandError, PrerequisiteError
from core.services.deployment_pipeline import PipelineHooks, check_prerequisites, required_tools


def _which_without(missing: str):
    def which(name: str) -> str | None:
        return None if name == missing else f"/usr/bin/{name}"

    return which


def test_accepts_when_everything_is_available(settings, cluster):
    check_prerequisites(settings=settings, cluster=cluster, which=all_tools)
    assert cluster.names() == ["cluster-info"]


@pytest.mark.parametrize("missing", ["kubectl", "gcloud"])
def test_rejects_missing_tool(settings, cluster, missing):
    with pytest.raises(PrerequisiteError, match=missing):
        check_prerequisites(settings=settings, cluster=cluster, which=_which_without(missing))
    # No cluster call happens once a tool is missing.
    assert cluster.calls == []


def test_rejects_missing_credential_file(settings, cluster, tmp_path):
    settings = settings.model_copy(update={"credential_file": tmp_path / "absent.json"})
    with pytest.raises(PrerequisiteError, match="absent.json"):
        check_prerequisites(settings=settings, cluster=cluster, which=all_tools)


def test_rejects_unreachable_cluster(settings):
    cluster = FakeCluster(reachable=False)
    with pytest.raises(PrerequisiteError, match="Cannot connect"):
        check_prerequisites(settings=settings, cluster=cluster, which=all_tools)


def test_helm_mode_requires_helm_but_not_credentials(settings, cluster, tmp_path):
    settings = settings.model_copy(
        update={"mode": DeployMode.HELM, "credential_file": tmp_path / "absent.json"}
    )
    assert required_tools(settings) == ("helm", "kubectl")

    check_prerequisites(settings=settings, cluster=cluster, which=all_tools)

    with pytest.raises(PrerequisiteError, match="helm"):
        check_prerequisites(settings=settings, cluster=cluster, which=_which_without("helm"))


def test_helm_mode_reports_helm_version(settings, cluster, helm):
    settings = settings.model_copy(update={"mode": DeployMode.HELM})
    successes: list[str] = []

    check_prerequisites(
        settings=settings,
        cluster=cluster,
        helm=helm,
        which=all_tools,
        hooks=PipelineHooks(success=successes.append),
    )

    assert successes == ["Helm is installed: v3.14.4", "All prerequisites met!"]


class BrokenHelm(FakeHelm):
    def version(self) -> str:
        raise CommandError(["helm", "version", "--short"], 1, "exec format error")


def test_helm_mode_rejects_unusable_helm_before_cluster_check(settings, cluster):
    settings = settings.model_copy(update={"mode": DeployMode.HELM})

    with pytest.raises(PrerequisiteError, match="exec format error"):
        check_prerequisites(settings=settings, cluster=cluster, helm=BrokenHelm(), which=all_tools)

    assert cluster.calls == []
