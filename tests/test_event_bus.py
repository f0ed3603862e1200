from __future__ import annotations

import logging

import pytest

from leadhub.core.events import InProcessEventBus, InternalEvent
from leadhub.middleware.correlation_id import resolve_correlation_id


def test_failing_handler_does_not_stop_delivery(caplog: pytest.LogCaptureFixture) -> None:
    bus = InProcessEventBus()
    received: list[InternalEvent] = []

    def broken(event: InternalEvent) -> None:
        raise RuntimeError("subscriber down")

    bus.subscribe("submission.created", broken)
    bus.subscribe("submission.created", received.append)

    with caplog.at_level(logging.ERROR, logger="leadhub.events"):
        delivered = bus.publish("submission.created", {"submission_id": "s-1"})

    assert delivered == 1
    assert received[0].payload == {"submission_id": "s-1"}
    assert any(record.getMessage() == "event.handler_failed" for record in caplog.records)


def test_subscribe_is_idempotent_and_unsubscribe_removes() -> None:
    bus = InProcessEventBus()
    received: list[InternalEvent] = []

    bus.subscribe_many(["submission.updated", "submission.deleted"], received.append)
    bus.subscribe("submission.updated", received.append)
    bus.publish("submission.updated", {})
    assert len(received) == 1

    bus.unsubscribe("submission.updated", received.append)
    assert bus.publish("submission.updated", {}) == 0
    assert bus.publish("submission.deleted", {}) == 1


@pytest.mark.parametrize(
    ("raw", "kept"),
    [
        ("abc-123", True),
        ("req:42.retry_1", True),
        ("has space", False),
        ("x" * 129, False),
        ("line\nbreak", False),
        (None, False),
    ],
)
def test_correlation_id_acceptance(raw: str | None, kept: bool) -> None:
    resolved = resolve_correlation_id(raw)

    assert (resolved == raw) is kept
