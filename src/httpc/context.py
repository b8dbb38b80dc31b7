"""Cancellation and deadline token threaded through every dispatch."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable

from .exceptions import ContextCancelledError, DeadlineExceededError


class Context:
    """Immutable chain of deadline, values and cancellation state.

    A derived context inherits its parent's deadline and values and is
    cancelled whenever its parent is. Deriving never extends a deadline.
    Used as a context manager, a context cancels itself on exit.
    """

    __slots__ = ("_parent", "_deadline", "_key", "_value", "_cancelled", "_lock", "_callbacks")

    def __init__(
        self,
        *,
        parent: Context | None = None,
        deadline: float | None = None,
        key: Hashable | None = None,
        value: Any = None,
    ) -> None:
        self._parent = parent
        parent_deadline = parent.deadline if parent is not None else None
        if deadline is None:
            self._deadline = parent_deadline
        elif parent_deadline is None:
            self._deadline = deadline
        else:
            self._deadline = min(deadline, parent_deadline)
        self._key = key
        self._value = value
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def background(cls) -> Context:
        return cls()

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Context(deadline={self._deadline!r}, cancelled={self.cancelled})"

    @property
    def deadline(self) -> float | None:
        """Deadline on the ``time.monotonic`` clock, or ``None``."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        ctx: Context | None = self
        while ctx is not None:
            if ctx._cancelled.is_set():
                return True
            ctx = ctx._parent
        return False

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def with_deadline(self, deadline: float) -> Context:
        return Context(parent=self, deadline=deadline)

    def with_timeout(self, seconds: float) -> Context:
        return Context(parent=self, deadline=time.monotonic() + seconds)

    def with_value(self, key: Hashable, value: Any) -> Context:
        return Context(parent=self, key=key, value=value)

    def value(self, key: Hashable, default: Any = None) -> Any:
        ctx: Context | None = self
        while ctx is not None:
            if ctx._key is not None and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            fn()

    def on_cancel(self, fn: Callable[[], None]) -> Callable[[], None]:
        """Call ``fn`` once this context or one of its ancestors is cancelled.

        ``fn`` runs in the thread that calls ``cancel``, or right away when the
        context is already cancelled. It may run more than once if several
        ancestors are cancelled. Returns a function that unregisters ``fn``.
        """
        nodes: list[Context] = []
        ctx: Context | None = self
        while ctx is not None:
            with ctx._lock:
                if ctx._cancelled.is_set():
                    break
                ctx._callbacks.append(fn)
            nodes.append(ctx)
            ctx = ctx._parent

        def unregister() -> None:
            for node in nodes:
                with node._lock:
                    if fn in node._callbacks:
                        node._callbacks.remove(fn)

        if ctx is not None:
            unregister()
            fn()
        return unregister

    def remaining(self) -> float | None:
        """Seconds left before the deadline, never negative."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise ContextCancelledError("context canceled")
        if self.expired:
            raise DeadlineExceededError("context deadline exceeded")
