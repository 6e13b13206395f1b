"""Master node that polls the monitoring nodes and reports on the CAN bus."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from typing import Protocol

from evsense.can_temp import CanTemp, TempKind
from evsense.thermistor_array import (
    ADDRESSES,
    MAX_ALLOWABLE_TEMP,
    MIN_ALLOWABLE_TEMP,
    PAYLOAD_LENGTH,
    ThermistorArray,
)

DANGER_OUTPUT_PIN = 3
CALIBRATION_INTERVAL_MS = 5000
TIMER_PERIOD_MS = 100
_CLOCK_MODULUS = 2**32
_ERROR_HISTORY = 3


class I2CBus(Protocol):
    """The bus the monitoring nodes are read through."""

    def request_from(self, address: int, size: int) -> bytes: ...


class MasterController:
    """Cycles through the nodes, judges temperatures and sends the summary.

    ``tick`` is the periodic timer handler and ``step`` the main loop body.
    """

    def __init__(self, i2c: I2CBus, can: CanTemp, clock: Callable[[], int]) -> None:
        self.i2c = i2c
        self.can = can
        self.clock = clock
        self.thermistors = ThermistorArray(len(ADDRESSES))
        self.count = 0
        self.count_flag = False
        self.danger = False
        self.last_calibration = 0
        self._data = bytearray(PAYLOAD_LENGTH)
        self._errors: deque[bool] = deque([False] * _ERROR_HISTORY, maxlen=_ERROR_HISTORY)
        self.can.init()

    @property
    def danger_output(self) -> bool:
        """Level of the danger output line: high while no danger is present."""
        return not self.danger

    def tick(self) -> None:
        """Advance to the next node once the current one has been handled."""
        if self.count_flag:
            self.count = self.count + 1 if self.count < self.thermistors.ecu_count else 0
            self.count_flag = False

    def _poll(self) -> None:
        if self.count < self.thermistors.ecu_count:
            received = self.i2c.request_from(ADDRESSES[self.count], PAYLOAD_LENGTH)
            received = bytes(received[:PAYLOAD_LENGTH])
            self._data[: len(received)] = received
            self.thermistors.set_data(self.count, bytes(self._data))
        else:
            self.can.send(verbose=True)
        self.count_flag = True

    def _summarise(self) -> bool:
        thm, can = self.thermistors, self.can
        total = 0.0
        error = False
        for i in range(thm.ecu_count):
            total += thm.average_temp(i)
            highest, lowest = thm.max_temp(i), thm.min_temp(i)
            can.set_temp(TempKind.MAX_TEMP, max(highest, can.get_temp(TempKind.MAX_TEMP)))
            can.set_temp(TempKind.MIN_TEMP, min(lowest, can.get_temp(TempKind.MIN_TEMP)))
            if highest >= MAX_ALLOWABLE_TEMP or lowest <= MIN_ALLOWABLE_TEMP:
                error = True
                break
        can.set_temp(TempKind.AVR_TEMP, total / thm.ecu_count)
        return error

    def step(self) -> bool:
        """Run one pass of the main loop and return the danger flag."""
        if not self.count_flag:
            self._poll()

        self._errors.append(self._summarise())
        self.danger = all(self._errors)

        now = self.clock()
        if (now - self.last_calibration) % _CLOCK_MODULUS > CALIBRATION_INTERVAL_MS:
            self.last_calibration = now
        if now < self.last_calibration:
            self.last_calibration = now
        return self.danger