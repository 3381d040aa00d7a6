"""A raw SocketCAN interface driven by an epoll event loop."""

from __future__ import annotations

import logging
import select
import socket
from typing import Callable

from .event_loop import EpollEventLoop, EventContext, EventLoopError
from .frame import CAN_FRAME_SIZE, CanFrame

FrameProcessor = Callable[[CanFrame], None]

_log = logging.getLogger(__name__)


class CanInterfaceError(OSError):
    """Raised when a CAN interface cannot be opened or written to."""


class SocketCanInterface:
    """A raw CAN socket bound to one interface; received frames go to a callback."""

    def __init__(self) -> None:
        self.interface = ""
        self._sock: socket.socket | None = None
        self._event_loop: EpollEventLoop | None = None
        self._evt: EventContext | None = None
        self._frame_processor: FrameProcessor | None = None
        self._broken = False

    def open(
        self,
        interface: str,
        event_loop: EpollEventLoop,
        frame_processor: FrameProcessor,
    ) -> None:
        """Bind a raw CAN socket to ``interface`` and watch it on ``event_loop``."""
        self.interface = interface
        self._event_loop = event_loop
        self._frame_processor = frame_processor
        self._broken = False

        family = getattr(socket, "AF_CAN", None)
        proto = getattr(socket, "CAN_RAW", None)
        if family is None or proto is None:
            raise CanInterfaceError("SocketCAN is not supported on this platform")
        try:
            sock = socket.socket(family, socket.SOCK_RAW, proto)
        except OSError as exc:
            raise CanInterfaceError(f"failed to create socket: {exc}") from exc

        try:
            sock.setblocking(False)
            sock.bind((interface,))
        except OSError as exc:
            sock.close()
            raise CanInterfaceError(
                f"failed to bind socket to {interface!r}: {exc}"
            ) from exc

        try:
            sock.recv(0)
        except BlockingIOError:
            pass
        except OSError as exc:
            sock.close()
            raise CanInterfaceError(f"socket on {interface!r} is unusable: {exc}") from exc

        try:
            self._evt = event_loop.register_event(
                sock.fileno(), select.EPOLLIN, self._on_socket_event
            )
        except EventLoopError as exc:
            sock.close()
            raise CanInterfaceError(
                "failed to register socket with event loop"
            ) from exc
        self._sock = sock

    def close(self) -> None:
        """Stop watching the socket and close it. Safe to call more than once."""
        if not self._broken and self._evt is not None and self._event_loop is not None:
            try:
                self._event_loop.deregister_event(self._evt)
            except EventLoopError:
                _log.warning("failed to deregister CAN socket")
        self._evt = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._broken = True

    def send_can_frame(self, frame: CanFrame) -> None:
        """Write one frame to the bus."""
        if self._sock is None:
            raise CanInterfaceError("interface is not open")
        try:
            self._sock.send(frame.to_bytes())
        except OSError as exc:
            raise CanInterfaceError(f"failed to send CAN frame: {exc}") from exc

    def read_nonblocking(self) -> bool:
        """Read one message if available; return whether anything was read."""
        if self._sock is None:
            return False
        try:
            raw = self._sock.recv(CAN_FRAME_SIZE)
        except BlockingIOError:
            return False
        except OSError as exc:
            _log.error("socket read failed: %s", exc)
            return False
        if len(raw) < CAN_FRAME_SIZE:
            _log.error("invalid message length %d", len(raw))
            return True
        if self._frame_processor is not None:
            self._frame_processor(CanFrame.from_bytes(raw))
        return True

    def _on_socket_event(self, mask: int) -> None:
        if mask & select.EPOLLIN:
            while self.read_nonblocking() and not self._broken:
                pass
        if mask & select.EPOLLERR:
            _log.error("interface disappeared")
            self.close()
            return
        if mask & ~(select.EPOLLIN | select.EPOLLERR):
            _log.error("unexpected event %d", mask)
            self.close()

    def __enter__(self) -> SocketCanInterface:
        return self

    def __exit__(self, *args) -> None:
        self.close()