"""Classic CAN frames in the kernel's ``struct can_frame`` layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

CAN_EFF_FLAG = 0x80000000
CAN_RTR_FLAG = 0x40000000
CAN_ERR_FLAG = 0x20000000

CAN_SFF_MASK = 0x000007FF
CAN_EFF_MASK = 0x1FFFFFFF
CAN_ERR_MASK = 0x1FFFFFFF

CAN_MAX_DLEN = 8

# u32 can_id, u8 can_dlc, three padding/reserved bytes, 8 data bytes.
_FRAME_STRUCT = struct.Struct("=IB3x8s")
CAN_FRAME_SIZE = _FRAME_STRUCT.size


@dataclass(frozen=True)
class CanFrame:
    """A classic CAN frame: identifier with flag bits, length code and data."""

    can_id: int
    data: bytes = b""
    dlc: int | None = field(default=None)

    def __post_init__(self) -> None:
        if not 0 <= self.can_id <= 0xFFFFFFFF:
            raise ValueError(f"can_id out of range: {self.can_id:#x}")
        data = bytes(self.data)
        if len(data) > CAN_MAX_DLEN:
            raise ValueError(f"at most {CAN_MAX_DLEN} data bytes, got {len(data)}")
        dlc = len(data) if self.dlc is None else self.dlc
        if not 0 <= dlc <= CAN_MAX_DLEN:
            raise ValueError(f"dlc must be within 0..{CAN_MAX_DLEN}, got {dlc}")
        if len(data) > dlc:
            raise ValueError(f"{len(data)} data bytes do not fit a dlc of {dlc}")
        object.__setattr__(self, "data", data.ljust(dlc, b"\x00"))
        object.__setattr__(self, "dlc", dlc)

    def to_bytes(self) -> bytes:
        """Encode the frame as the kernel's 16-byte ``struct can_frame``."""
        return _FRAME_STRUCT.pack(self.can_id, self.dlc, self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> CanFrame:
        """Decode a frame from a ``struct can_frame`` buffer."""
        if len(data) < CAN_FRAME_SIZE:
            raise ValueError(
                f"invalid message length {len(data)}, need {CAN_FRAME_SIZE}"
            )
        can_id, dlc, raw = _FRAME_STRUCT.unpack_from(data)
        dlc = min(dlc, CAN_MAX_DLEN)
        return cls(can_id=can_id, data=raw[:dlc], dlc=dlc)

    @property
    def is_extended(self) -> bool:
        """True for a 29-bit (extended) identifier."""
        return bool(self.can_id & CAN_EFF_FLAG)

    @property
    def is_rtr(self) -> bool:
        """True for a remote transmission request."""
        return bool(self.can_id & CAN_RTR_FLAG)

    @property
    def is_error(self) -> bool:
        """True for an error frame."""
        return bool(self.can_id & CAN_ERR_FLAG)

    @property
    def arbitration_id(self) -> int:
        """The identifier with the flag bits masked off."""
        mask = CAN_EFF_MASK if self.is_extended else CAN_SFF_MASK
        return self.can_id & mask

    @property
    def payload(self) -> bytes:
        """The data bytes carried by the frame; empty for remote requests."""
        return b"" if self.is_rtr else self.data