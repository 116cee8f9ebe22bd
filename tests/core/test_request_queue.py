"""Tests for command issuance and the request queue."""

from unittest.mock import AsyncMock, Mock

import pytest

from commandq.core.request_queue import AsyncRequestQueue
from commandq.core.sinks import FunctionSink, NamedTargetSink
from commandq.ports.render import NullRenderTarget
from commandq.ports.transport import UnavailableTransport

__all__ = []


def make_queue(now: float = 0.0, render: Mock | None = None) -> tuple[AsyncRequestQueue, Mock]:
    """Create queue over a mock opener and a frozen clock."""
    opener = Mock()
    opener.open.side_effect = lambda url, payload=None: Mock(
        name=f"transport:{url}", aclose=AsyncMock()
    )
    return AsyncRequestQueue(opener, render=render, clock=lambda: now), opener


def handler(_: object) -> None:
    """No-op completion handler."""


def test_issue_appends_one_record() -> None:
    """issue() should grow the queue by exactly one record."""
    queue, opener = make_queue(now=1234.0)

    queue.issue("statusD.xml", handler, repeat=True, payload="0?11")

    assert len(queue) == 1
    record = queue.records[0]
    assert record.url == "statusD.xml"
    assert record.repeat is True
    assert record.created_at_ms == 1234.0
    assert record.sink == FunctionSink(handler=handler)
    opener.open.assert_called_once_with("statusD.xml", "0?11")


def test_issue_keeps_insertion_order_without_dedup() -> None:
    """The same url issued twice gives two independent records, in order."""
    queue, _ = make_queue()

    queue.issue("a.xml", handler)
    queue.issue("b.xml", handler)
    queue.issue("a.xml", handler)

    assert [r.url for r in queue.records] == ["a.xml", "b.xml", "a.xml"]
    assert queue.records[0] is not queue.records[2]
    assert queue.records[0].transport is not queue.records[2].transport


def test_issue_with_target_identifier_builds_named_sink() -> None:
    """A string sink becomes a named-target sink on the queue's render target."""
    render = Mock()
    queue, _ = make_queue(render=render)

    queue.issue("rstatus.xml", "RT")

    assert queue.records[0].sink == NamedTargetSink(identifier="RT", render=render)


def test_issue_without_render_target_uses_null_target() -> None:
    """Named and fire-and-forget sinks fall back to a render target that only logs."""
    queue, _ = make_queue()

    queue.issue("rstatus.xml", "RT")
    queue.issue("0?1101=I=0")

    assert len(queue) == 2
    for record, identifier in zip(queue.records, ["RT", None]):
        assert record.sink.identifier == identifier
        assert isinstance(record.sink.render, NullRenderTarget)


def test_issue_swallows_send_errors() -> None:
    """A send that cannot start leaves an unavailable transport on the record."""
    opener = Mock()
    opener.open.side_effect = RuntimeError("no running event loop")
    queue = AsyncRequestQueue(opener)

    queue.issue("statusD.xml", handler)

    assert len(queue) == 1
    assert isinstance(queue.records[0].transport, UnavailableTransport)


def test_reissue_drops_payload_and_keeps_sink() -> None:
    """reissue() opens the same url without payload and shares the sink."""
    queue, opener = make_queue()
    queue.issue("statusD.xml", handler, repeat=True, payload="0?11")
    original = queue.handoff()[0]

    queue.reissue(original)

    fresh = queue.records[0]
    assert fresh.sink is original.sink
    assert fresh.repeat is True
    assert opener.open.call_args_list[-1].args == ("statusD.xml", None)


def test_handoff_leaves_empty_tail() -> None:
    """handoff() returns every record and starts a fresh tail."""
    queue, _ = make_queue()
    queue.issue("a.xml", handler)
    queue.issue("b.xml", handler)

    this_tick = queue.handoff()
    queue.issue("c.xml", handler)

    assert [r.url for r in this_tick] == ["a.xml", "b.xml"]
    assert [r.url for r in queue.records] == ["c.xml"]


@pytest.mark.asyncio
async def test_drain_closes_every_transport() -> None:
    """drain() closes each transport once and empties the queue."""
    queue, _ = make_queue()
    queue.issue("a.xml", handler)
    queue.issue("b.xml", handler)
    records = queue.records
    transports = [r.transport for r in records]

    assert await queue.drain() == 2

    assert len(queue) == 0
    for record, transport in zip(records, transports):
        transport.aclose.assert_awaited_once_with()
        assert record.transport is None


@pytest.mark.asyncio
async def test_drain_keeps_going_when_a_transport_fails_to_close() -> None:
    """One failing close does not leave the other transports open."""
    queue, _ = make_queue()
    queue.issue("a.xml", handler)
    queue.issue("b.xml", handler)
    failing, other = [r.transport for r in queue.records]
    failing.aclose.side_effect = RuntimeError("already closed")

    assert await queue.drain() == 2

    other.aclose.assert_awaited_once_with()


def test_release_is_idempotent() -> None:
    """Releasing a record twice aborts its transport only once."""
    queue, _ = make_queue()
    queue.issue("a.xml", handler)
    record = queue.records[0]
    transport = record.transport

    record.release()
    record.release()

    transport.abort.assert_called_once_with()
    assert record.transport is None
