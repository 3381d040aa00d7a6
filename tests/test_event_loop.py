import os
import select

import pytest

from socketcan.event_loop import (
    EpollEvent,
    EpollEventLoop,
    EventContext,
    EventLoopError,
)


@pytest.fixture
def loop():
    with EpollEventLoop() as lp:
        yield lp


@pytest.fixture
def pipes():
    created = []

    def make():
        r, w = os.pipe()
        created.append((r, w))
        return r, w

    yield make
    for r, w in created:
        os.close(r)
        os.close(w)


def test_register_and_deregister(loop, pipes):
    r, w = pipes()
    evt = loop.register_event(r, select.EPOLLIN, lambda mask: None)
    assert isinstance(evt, EventContext)
    assert evt.fd == r
    os.write(w, b"x")
    loop.deregister_event(evt)
    with pytest.raises(EventLoopError):
        loop.deregister_event(evt)


def test_deregister_none_raises(loop):
    with pytest.raises(EventLoopError):
        loop.deregister_event(None)


def test_register_same_fd_twice_raises(loop, pipes):
    r, _ = pipes()
    loop.register_event(r, select.EPOLLIN, lambda mask: None)
    with pytest.raises(EventLoopError):
        loop.register_event(r, select.EPOLLIN, lambda mask: None)


def test_register_bad_fd_raises(loop):
    with pytest.raises(EventLoopError):
        loop.register_event(-1, select.EPOLLIN, lambda mask: None)


def test_run_until_empty_dispatches_and_stops(loop, pipes):
    r, w = pipes()
    masks = []
    holder = {}

    def callback(mask):
        masks.append(mask)
        os.read(r, 1)
        loop.deregister_event(holder["evt"])

    evt = loop.register_event(r, select.EPOLLIN, callback)
    holder["evt"] = evt
    assert evt.fd == r
    os.write(w, b"x")
    loop.run_until_empty()
    assert len(masks) == 1
    assert masks[0] & select.EPOLLIN
    with pytest.raises(EventLoopError):
        loop.deregister_event(evt)


def test_run_until_empty_returns_without_events(loop):
    loop.run_until_empty()
    with pytest.raises(EventLoopError):
        loop.deregister_event(EventContext(0, lambda mask: None))


def test_deregistered_event_is_not_dispatched(loop, pipes):
    (r1, w1), (r2, w2) = pipes(), pipes()
    calls = []
    evts = []

    def callback(mask):
        calls.append(mask)
        for evt in evts:
            loop.deregister_event(evt)

    first = loop.register_event(r1, select.EPOLLIN, callback)
    second = loop.register_event(r2, select.EPOLLIN, callback)
    evts.extend([first, second])
    assert (first.fd, second.fd) == (r1, r2)
    os.write(w1, b"x")
    os.write(w2, b"x")
    loop.run_until_empty()
    assert len(calls) == 1
    with pytest.raises(EventLoopError):
        loop.deregister_event(first)
    with pytest.raises(EventLoopError):
        loop.deregister_event(second)


def test_many_events_registered_then_removed(loop, pipes):
    triggered = []
    evts = []
    writers = []
    for i in range(100):
        r, w = pipes()
        evts.append(
            loop.register_event(r, select.EPOLLIN, lambda mask, i=i: triggered.append(i))
        )
        writers.append(w)
    assert len(evts) == 100
    for w in writers[:10]:
        os.write(w, b"x")
    for evt in evts:
        loop.deregister_event(evt)
    loop.run_until_empty()
    assert triggered == []


def test_closed_loop_rejects_registration(pipes):
    lp = EpollEventLoop()
    lp.close()
    r, _ = pipes()
    with pytest.raises(EventLoopError):
        lp.register_event(r, select.EPOLLIN, lambda mask: None)


def test_epoll_event_on_closed_loop_raises():
    lp = EpollEventLoop()
    lp.close()
    with pytest.raises(EventLoopError):
        EpollEvent(lp, lambda mask: None)