# socketcan

This is a small Linux library for raw CAN sockets. Frames are received
through an epoll-based event loop and passed to a callback that you supply.

It runs on Linux only. It needs `select.epoll`, `os.eventfd` and
`socket.AF_CAN`, and none of them exist on other platforms. It uses nothing
beyond the standard library.

## Installation

From a checkout of the project:

```
pip install .
```

## Frames

`socketcan.frame.CanFrame` is an immutable dataclass. It holds one classic CAN
frame with these fields:

- `can_id`: the identifier, including its flag bits
- `data`: up to 8 bytes
- `dlc`: optional, and defaults to the length of `data`

When `dlc` is larger than `data`, the data is padded with zero bytes up to
`dlc`. Values out of range raise `ValueError`.

```python
from socketcan.frame import CanFrame, CAN_EFF_FLAG

frame = CanFrame(can_id=0x123, data=bytes([0xDE, 0xAD, 0xBE, 0xEF]))
raw = frame.to_bytes()                # 16 bytes, kernel struct can_frame layout
assert CanFrame.from_bytes(raw) == frame

ext = CanFrame(can_id=0x12345678 | CAN_EFF_FLAG, data=b"\xaa\xbb\xcc\xdd")
assert ext.is_extended and ext.arbitration_id == 0x12345678
```

The following properties decode the identifier and the data:

| Property | Meaning |
| --- | --- |
| `is_extended` | The extended-frame flag is set |
| `is_rtr` | The remote-request flag is set |
| `is_error` | The error-frame flag is set |
| `arbitration_id` | The ID masked to 29 bits for extended frames, 11 bits for standard frames |
| `payload` | The data bytes, or empty for remote requests |

`from_bytes` raises `ValueError` for a buffer shorter than a frame.

The module also exports the flag and mask constants: `CAN_EFF_FLAG`,
`CAN_RTR_FLAG`, `CAN_ERR_FLAG`, `CAN_SFF_MASK`, `CAN_EFF_MASK`,
`CAN_ERR_MASK`, `CAN_MAX_DLEN` and `CAN_FRAME_SIZE`.

## Event loop

`socketcan.event_loop.EpollEventLoop` watches file descriptors. Each time a
descriptor becomes ready, the loop calls its callback with the epoll event
mask.

- `register_event(fd, events, callback)` returns an `EventContext` handle.
- `deregister_event(handle)` removes the descriptor. Any events for it that
  were reported but not yet dispatched are dropped.
- `run_until_empty()` keeps dispatching until no descriptor is registered.
- `close()` releases the epoll descriptor. The loop also works as a context
  manager.

`EpollEvent` wraps an eventfd. Calling `set()` wakes the loop, which then runs
the event's callback. `close()` deregisters the event and closes its
descriptor.

```python
from socketcan.event_loop import EpollEventLoop, EpollEvent

with EpollEventLoop() as loop:
    def on_wake(mask):
        wake.close()          # removes the last event, so the loop ends

    wake = EpollEvent(loop, on_wake)
    wake.set()
    loop.run_until_empty()
```

Any failure to register, deregister, wait or signal raises `EventLoopError`,
a subclass of `OSError`.

## CAN interface

`socketcan.interface.SocketCanInterface` works with a named interface such as
`vcan0`. `open(interface, event_loop, frame_processor)` does three things:

1. It binds a non-blocking raw CAN socket to the interface.
2. It registers that socket with the loop.
3. It arranges for each frame that arrives to be passed, as a `CanFrame`, to
   your frame processor.

```python
from socketcan.event_loop import EpollEventLoop
from socketcan.frame import CanFrame
from socketcan.interface import SocketCanInterface

loop = EpollEventLoop()
can = SocketCanInterface()
can.open("vcan0", loop, lambda frame: print(hex(frame.arbitration_id), frame.payload))
can.send_can_frame(CanFrame(can_id=0x123, data=b"\x01\x02\x03\x04"))
loop.run_until_empty()        # blocks while the socket stays registered
```

The other methods are:

- `send_can_frame(frame)` writes one frame.
- `read_nonblocking()` reads at most one message. It returns whether anything
  was read, so you can also poll without the loop.
- `close()` deregisters the socket and closes it. It is safe to call more than
  once, and the interface also works as a context manager.

Some failures raise `CanInterfaceError`, a subclass of `OSError`:

- `open` fails, for example on an unknown interface name.
- `send_can_frame` is called on an interface that is not open.
- A write fails.

Other problems are reported through the `logging` module rather than raised.
These include read errors, short messages and unexpected epoll events. If the
socket reports an error (`EPOLLERR`) or an unexpected event, the interface
closes itself and leaves the loop.

## What it does not do

- The package is a library only. It installs no command-line tools for
  monitoring, sending or logging frames.
- Only classic CAN frames of up to 8 data bytes are supported. CAN FD frames
  are not.
- It sets no receive filters on the socket.

## Tests

```
pip install ".[test]"
pytest
```