"""Classic CAN frames, a raw SocketCAN interface and an epoll event loop for Linux."""

__version__ = "0.1.0"
__all__ = ["frame", "event_loop", "interface"]