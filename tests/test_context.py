from __future__ import annotations

import threading
import time

import httpx
import pytest

from httpc import Context, ContextCancelledError, ContextKey, DeadlineExceededError, TransportError


def test_background_has_no_deadline() -> None:
    ctx = Context.background()
    assert ctx.deadline is None
    assert ctx.remaining() is None
    ctx.check()


def test_with_timeout_never_extends_parent_deadline() -> None:
    parent = Context.background().with_timeout(1.0)
    child = parent.with_timeout(30.0)
    assert child.deadline == parent.deadline

    shorter = parent.with_timeout(0.1)
    assert shorter.deadline < parent.deadline


def test_expired_deadline_raises() -> None:
    ctx = Context.background().with_deadline(time.monotonic() - 1)
    assert ctx.remaining() == 0.0
    with pytest.raises(DeadlineExceededError):
        ctx.check()


def test_cancel_propagates_to_children_only() -> None:
    parent = Context.background()
    child = parent.with_value("k", "v")
    grandchild = child.with_timeout(10)

    child.cancel()

    assert not parent.cancelled
    assert child.cancelled
    assert grandchild.cancelled
    with pytest.raises(ContextCancelledError):
        grandchild.check()


def test_context_manager_cancels_on_exit() -> None:
    parent = Context.background()
    with parent.with_timeout(5) as derived:
        assert not derived.cancelled
    assert derived.cancelled
    assert not parent.cancelled


def test_value_lookup_walks_parent_chain() -> None:
    ctx = Context.background().with_value(ContextKey.REQUEST_ID, "req-1").with_value("other", 2)
    assert ctx.value(ContextKey.REQUEST_ID) == "req-1"
    assert ctx.value("other") == 2
    assert ctx.value("missing", "fallback") == "fallback"


def test_nearest_value_wins() -> None:
    ctx = Context.background().with_value("k", 1).with_value("k", 2)
    assert ctx.value("k") == 2


def test_deadline_exceeded_is_a_transport_timeout() -> None:
    ctx = Context.background().with_deadline(time.monotonic() - 1)
    with pytest.raises(TransportError) as exc:
        ctx.check()
    assert isinstance(exc.value, httpx.TimeoutException)
    assert not isinstance(ContextCancelledError("context canceled"), TransportError)


def test_on_cancel_runs_when_an_ancestor_is_cancelled() -> None:
    parent = Context.background()
    child = parent.with_timeout(10)
    calls: list[str] = []

    child.on_cancel(lambda: calls.append("child"))
    parent.cancel()
    parent.cancel()

    assert calls == ["child"]


def test_on_cancel_runs_in_the_cancelling_thread() -> None:
    ctx = Context.background()
    seen: list[str] = []
    ctx.on_cancel(lambda: seen.append(threading.current_thread().name))

    worker = threading.Thread(target=ctx.cancel, name="canceller")
    worker.start()
    worker.join()

    assert seen == ["canceller"]


def test_on_cancel_unregister_and_already_cancelled() -> None:
    ctx = Context.background()
    calls: list[int] = []
    unregister = ctx.on_cancel(lambda: calls.append(1))
    unregister()
    ctx.cancel()
    assert calls == []

    ctx.with_value("k", "v").on_cancel(lambda: calls.append(2))
    assert calls == [2]
