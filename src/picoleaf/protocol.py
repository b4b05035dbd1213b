"""UDP external control protocol.

Once the device's active effect is switched to ``extControl`` (v2), it accepts
per-panel colors as a single UDP datagram on port 60222:

    offset  size  field
    0       2     panel count (big-endian)
    then, for each panel, 8 bytes:
    +0      2     panel id
    +2      1     red
    +3      1     green
    +4      1     blue
    +5      1     white
    +6      2     transition time (tenths of a second)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from .exceptions import ProtocolLimitError

EXTERNAL_CONTROL_PORT = 60222

HEADER_FORMAT = ">H"
PANEL_FORMAT = ">HBBBBH"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 2
PANEL_FRAME_SIZE = struct.calcsize(PANEL_FORMAT)  # 8

MAX_PANELS = 0xFFFF
MAX_UINT8 = 0xFF
MAX_UINT16 = 0xFFFF


@dataclass(frozen=True)
class PanelColor:
    """One panel's color in an external control frame."""

    panel_id: int
    red: int
    green: int
    blue: int
    white: int = 0
    transition_time: int = 0

    def pack(self) -> bytes:
        return struct.pack(
            PANEL_FORMAT,
            self.panel_id,
            self.red,
            self.green,
            self.blue,
            self.white,
            self.transition_time,
        )


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ProtocolLimitError(
            f"{name} must be between 0-{maximum}, got {value}",
        )


def encode_custom_colors(frames: Sequence[PanelColor]) -> bytes:
    """
    Encode panel colors as one external control datagram.

    Args:
        frames: Panel colors, in the order they should be applied

    Returns:
        The datagram, ``2 + 8 * len(frames)`` bytes long

    Raises:
        ProtocolLimitError: If there are more than 65535 frames or a field does
            not fit its integer width
    """
    num_panels = len(frames)
    if num_panels > MAX_PANELS:
        raise ProtocolLimitError(
            f"Expected between 0-{MAX_PANELS} panels, got {num_panels}",
        )

    buf = bytearray(HEADER_SIZE + PANEL_FRAME_SIZE * num_panels)
    struct.pack_into(HEADER_FORMAT, buf, 0, num_panels)
    for i, frame in enumerate(frames):
        _check_range("panel id", frame.panel_id, MAX_UINT16)
        _check_range("red", frame.red, MAX_UINT8)
        _check_range("green", frame.green, MAX_UINT8)
        _check_range("blue", frame.blue, MAX_UINT8)
        _check_range("white", frame.white, MAX_UINT8)
        _check_range("transition time", frame.transition_time, MAX_UINT16)
        offset = HEADER_SIZE + PANEL_FRAME_SIZE * i
        buf[offset:offset + PANEL_FRAME_SIZE] = frame.pack()
    return bytes(buf)
