"""Bounded fixed-interval polling."""

from __future__ import annotations

from conftest import FakeCluster
from core.domain.models import PollPolicy
from core.services.deployment_pipeline import PipelineHooks, collect_status, poll_external_address
from core.services.polling import poll_until


def test_stops_after_exactly_max_attempts():
    calls: list[int] = []
    sleeps: list[float] = []

    result = poll_until(
        PollPolicy(max_attempts=5, interval_seconds=2.5),
        lambda: calls.append(1),
        sleep=sleeps.append,
    )

    assert result.value is None
    assert result.exhausted
    assert result.attempts == 5
    assert len(calls) == 5
    # Fixed interval between attempts, none after the last one.
    assert sleeps == [2.5] * 4


def test_returns_first_truthy_value():
    values = iter(["", "", "10.0.0.1", "never-read"])

    result = poll_until(PollPolicy(max_attempts=10, interval_seconds=0), lambda: next(values), sleep=lambda _: None)

    assert result.value == "10.0.0.1"
    assert result.attempts == 3


def test_on_attempt_reports_progress():
    seen: list[tuple[int, int]] = []

    poll_until(
        PollPolicy(max_attempts=3, interval_seconds=0),
        lambda: None,
        sleep=lambda _: None,
        on_attempt=lambda attempt, total: seen.append((attempt, total)),
    )

    assert seen == [(1, 3), (2, 3), (3, 3)]


def test_address_poll_exhaustion_is_pending_and_run_continues(settings):
    cluster = FakeCluster(address_after=None)
    warnings: list[str] = []
    sleeps: list[float] = []
    policy = PollPolicy(max_attempts=4, interval_seconds=7)

    endpoint = poll_external_address(
        settings=settings,
        cluster=cluster,
        policy=policy,
        sleep=sleeps.append,
        hooks=PipelineHooks(warning=warnings.append),
    )

    assert endpoint.pending
    assert cluster.address_queries == 4
    assert sleeps == [7, 7, 7]
    assert warnings and "pending" in warnings[0]

    report = collect_status(settings=settings, cluster=cluster, endpoint=endpoint)
    assert report.endpoint.pending
    assert report.endpoint.base_url is None


def test_address_poll_uses_settings_policy_by_default(settings):
    cluster = FakeCluster(address_after=2, port="4000")

    endpoint = poll_external_address(settings=settings, cluster=cluster, sleep=lambda _: None)

    assert endpoint.address == "34.1.2.3"
    assert endpoint.base_url == "http://34.1.2.3:4000"
    assert cluster.address_queries == 2
