"""An epoll-based event loop and an eventfd-backed wake-up event."""

from __future__ import annotations

import logging
import os
import select
from collections import deque
from dataclasses import dataclass
from typing import Callable

Callback = Callable[[int], None]

MAX_EVENTS_PER_ITERATION = 16

_log = logging.getLogger(__name__)


class EventLoopError(OSError):
    """Raised when the event loop cannot register, remove or wait on an event."""


@dataclass(eq=False)
class EventContext:
    """A registered file descriptor and the callback its events go to."""

    fd: int
    callback: Callback


class EpollEventLoop:
    """Dispatches readiness events of registered descriptors to callbacks."""

    def __init__(self) -> None:
        self._epoll = select.epoll()
        self._contexts: dict[int, EventContext] = {}
        self._pending: deque[tuple[EventContext, int]] = deque()

    def register_event(self, fd: int, events: int, callback: Callback) -> EventContext:
        """Watch ``fd`` for ``events``; return the handle used to deregister."""
        ctx = EventContext(fd, callback)
        try:
            self._epoll.register(fd, events)
        except (OSError, ValueError) as exc:
            raise EventLoopError(f"cannot register fd {fd}: {exc}") from exc
        self._contexts[fd] = ctx
        return ctx

    def deregister_event(self, evt: EventContext | None) -> None:
        """Stop watching the descriptor behind ``evt``."""
        if evt is None or self._contexts.get(evt.fd) is not evt:
            raise EventLoopError("event is not registered")
        try:
            self._epoll.unregister(evt.fd)
        except (OSError, ValueError) as exc:
            raise EventLoopError(f"cannot deregister fd {evt.fd}: {exc}") from exc
        self.drop_event(evt)
        del self._contexts[evt.fd]

    def run_until_empty(self) -> None:
        """Dispatch events until no descriptor is registered any more."""
        while self._contexts:
            try:
                ready = self._epoll.poll(-1, MAX_EVENTS_PER_ITERATION)
            except (OSError, ValueError) as exc:
                raise EventLoopError(f"waiting for events failed: {exc}") from exc
            self._pending.extend(
                (self._contexts[fd], mask) for fd, mask in ready if fd in self._contexts
            )
            while self._pending:
                ctx, mask = self._pending.popleft()
                ctx.callback(mask)

    def drop_event(self, evt: EventContext) -> None:
        """Discard events of ``evt`` that were reported but not yet dispatched."""
        self._pending = deque((c, m) for c, m in self._pending if c is not evt)

    def close(self) -> None:
        """Release the epoll descriptor."""
        self._epoll.close()

    def __enter__(self) -> EpollEventLoop:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class EpollEvent:
    """A user-triggered event that runs its callback from the event loop."""

    def __init__(self, event_loop: EpollEventLoop, callback: Callback) -> None:
        self._event_loop = event_loop
        self._callback = callback
        try:
            self._fd = os.eventfd(0)
        except OSError as exc:
            raise EventLoopError(f"cannot create eventfd: {exc}") from exc
        try:
            self._evt: EventContext | None = event_loop.register_event(
                self._fd, select.EPOLLIN, self._on_trigger
            )
        except EventLoopError:
            os.close(self._fd)
            self._fd = -1
            raise

    def set(self) -> None:
        """Signal the event so that its callback runs on the loop."""
        try:
            os.eventfd_write(self._fd, 1)
        except OSError as exc:
            raise EventLoopError(f"cannot signal event: {exc}") from exc

    def close(self) -> None:
        """Deregister the event and release its descriptor."""
        if self._evt is not None:
            try:
                self._event_loop.deregister_event(self._evt)
            except EventLoopError:
                _log.warning("failed to deregister event")
            self._evt = None
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1

    def _on_trigger(self, mask: int) -> None:
        try:
            os.eventfd_read(self._fd)
        except OSError:
            _log.error("failed to read eventfd")
            return
        self._callback(mask)