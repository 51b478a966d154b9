from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

VALIDATION_RUNS_TOTAL = Counter(
    "branchcomics_validation_runs_total",
    "Draft graph validations partitioned by policy and outcome.",
    ["policy", "result"],
    registry=registry,
)

REVISION_TRANSITIONS_TOTAL = Counter(
    "branchcomics_revision_transitions_total",
    "Revision lifecycle transitions by action and outcome.",
    ["action", "status"],
    registry=registry,
)

PUBLISH_DURATION = Histogram(
    "branchcomics_publish_duration_seconds",
    "Duration (seconds) of the publish transaction.",
    registry=registry,
)

PUBLISHED_PAGES_TOTAL = Counter(
    "branchcomics_published_pages_total",
    "Number of page records written by publication.",
    registry=registry,
)

NOTIFICATION_FAILURES_TOTAL = Counter(
    "branchcomics_notification_failures_total",
    "Notification writes that failed and were dropped.",
    ["kind"],
    registry=registry,
)


def record_validation(policy: str, passed: bool) -> None:
    VALIDATION_RUNS_TOTAL.labels(policy=policy, result="pass" if passed else "fail").inc()


def record_transition(action: str, succeeded: bool) -> None:
    REVISION_TRANSITIONS_TOTAL.labels(action=action, status="success" if succeeded else "error").inc()


@contextmanager
def track_publish():
    with PUBLISH_DURATION.time():
        yield


def record_published_pages(count: int) -> None:
    PUBLISHED_PAGES_TOTAL.inc(count)


def record_notification_failure(kind: str) -> None:
    NOTIFICATION_FAILURES_TOTAL.labels(kind=kind).inc()


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
