"""Battery temperature summary frame sent on the CAN bus."""

from __future__ import annotations

import sys
import time
from enum import Enum, IntEnum
from typing import Protocol, TextIO

from evsense.parameter import Parameter

ACC_ID = 0x340
SEG1_ID = 0x341
SEG2_ID = 0x342
SEG3_ID = 0x343
SEG4_ID = 0x344

BITRATE = 500_000
FRAME_LENGTH = 8
INITIAL_RAW = 0xAA

TEMP_PARAMETER = Parameter(offset=-25, resolution=0.5, min_physical=-25, max_physical=100)


class TempKind(Enum):
    """Which temperature field of the frame is meant."""

    AVR_TEMP = 0
    MAX_TEMP = 1
    MIN_TEMP = 2


class SendStatus(IntEnum):
    """Outcome of handing a frame to the CAN controller."""

    OK = 0
    GET_TXBF_TIMEOUT = 6
    SEND_MSG_TIMEOUT = 7
    FAIL = 0xFF


class CanBus(Protocol):
    """The CAN controller the frame is sent through."""

    def begin(self, bitrate: int) -> bool: ...

    def send(self, can_id: int, data: bytes) -> int: ...


def format_buffer(buf: bytes) -> str:
    """Return one line per byte showing its bits, most significant first."""
    return "\n".join(f"buf{i} = {byte:08b}" for i, byte in enumerate(buf))


class CanTemp:
    """Holds average, maximum and minimum temperatures as one CAN frame."""

    def __init__(self, can_id: int, bus: CanBus) -> None:
        self.can_id = can_id
        self.bus = bus
        self.parameter = TEMP_PARAMETER
        self.output: TextIO = sys.stdout
        self._fields = {kind: INITIAL_RAW for kind in TempKind}

    def _print(self, text: str = "") -> None:
        print(text, file=self.output)

    def init(self, retry_delay: float = 0.1) -> None:
        """Start the bus, retrying until the controller accepts the bitrate."""
        while not self.bus.begin(BITRATE):
            self._print("CAN init fail, retry...")
            time.sleep(retry_delay)
        self._print("CAN init OK!")

    def set_temp(self, kind: TempKind, value: float) -> bool:
        """Store a temperature; return False if it was out of range and clamped.

        A value outside the representable range is replaced by the maximum
        physical value, whichever side it fell off.
        """
        para = self.parameter
        in_range = para.min_physical <= value <= para.max_physical
        physical = value if in_range else para.max_physical
        self._fields[kind] = para.to_normal(physical) & 0xFF
        return in_range

    def get_temp(self, kind: TempKind) -> float:
        """Return the stored temperature of one field."""
        return self.parameter.to_physical(self._fields[kind])

    def payload(self) -> bytes:
        """Return the eight data bytes of the frame."""
        head = bytes(self._fields[kind] for kind in TempKind)
        return head + bytes(FRAME_LENGTH - len(head))

    def send(self, verbose: bool = False) -> SendStatus:
        """Send the frame and return the controller's status."""
        buf = self.payload()
        result = self.bus.send(self.can_id, buf)
        try:
            status = SendStatus(result)
        except ValueError:
            status = SendStatus.FAIL

        if verbose:
            if status is SendStatus.OK:
                self._print("send message")
                self._print("----------Massage----------")
                self._print(format_buffer(buf))
                self._print("---------------------------")
            elif status is SendStatus.GET_TXBF_TIMEOUT:
                self._print("get TXBF time out")
            elif status is SendStatus.SEND_MSG_TIMEOUT:
                self._print("send MSG time out")
            else:
                self._print("send MSG fail")
            self._print()
        return status