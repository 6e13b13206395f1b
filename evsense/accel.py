"""Accelerator pedal position from two redundant sensors with plausibility checks."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

MINIMUM_SENSOR_VOLTAGE = 0.3
MAXIMUM_SENSOR_VOLTAGE = 1.3
THRESHOLD_DEVIATION = 20
MAXIMUM_TORQUE = 2.0

ADC_MAX = 1023
ADC_VOLTS_PER_COUNT = 0.0049
SENSOR_COUNT = 2
_CHATTER_DEPTH = 3


def _volts(raw: int) -> float:
    return raw * ADC_VOLTS_PER_COUNT


class Accel:
    """Pedal state derived from two sensors whose characteristics mirror each other.

    Torque is only produced once both sensors agree; a persistent disagreement
    disables the output until the pedal is released and the sensors agree again.
    """

    def __init__(self) -> None:
        self._val = [0, 0]
        self._avr = 0
        self._deviation = [0, 0]
        self.dev_error = True
        self._last_dev_error = False
        self._dev_error_now = False
        self._chatter: deque[bool] = deque([True] * _CHATTER_DEPTH, maxlen=_CHATTER_DEPTH)
        self.torque_output = False
        self.torque = 0.0

    @staticmethod
    def _check_index(index: int) -> None:
        if index not in (0, 1):
            raise IndexError(f"sensor index {index} out of range")

    def value(self, index: int) -> int:
        """Return the stored reading of one sensor."""
        self._check_index(index)
        return self._val[index]

    def deviation(self, index: int) -> int:
        """Return how far one sensor's reading is from the mean of both."""
        self._check_index(index)
        return self._deviation[index]

    def set_values(self, values: Sequence[int]) -> None:
        """Store two readings as they are; readings outside 0..1023 become 0."""
        if len(values) != SENSOR_COUNT:
            raise ValueError(f"expected {SENSOR_COUNT} readings, got {len(values)}")
        self._update([v if 0 <= v <= ADC_MAX else 0 for v in values])

    def set_sensor_values(self, val1: int, val2: int) -> None:
        """Store readings from the rising sensor and the falling sensor.

        The falling sensor's reading is mirrored so both run the same way;
        anything that ends up outside 0..1023 becomes 0.
        """
        mirrored = [val1, ADC_MAX - val2]
        self._update([v if 0 <= v <= ADC_MAX else 0 for v in mirrored])

    def _update(self, values: list[int]) -> None:
        self._val = values
        self._avr = (values[0] + values[1]) // 2
        self._deviation = [abs(v - self._avr) for v in values]
        self._update_torque_output()
        self.torque = self._calc_torque()

    def _update_torque_output(self) -> None:
        self._last_dev_error = self._dev_error_now
        self._dev_error_now = all(self._chatter)
        self._chatter.appendleft(
            all(d > THRESHOLD_DEVIATION for d in self._deviation)
        )
        if not self._last_dev_error and self._dev_error_now:
            self.dev_error = True

        if self.torque_output:
            if self.dev_error:
                self.torque_output = False
            return

        if self.dev_error:
            released = all(_volts(v) < MINIMUM_SENSOR_VOLTAGE for v in self._val)
            if released and not self._last_dev_error and not self._dev_error_now:
                self.dev_error = False
            return

        self.torque_output = True

    def _calc_torque(self) -> float:
        if not self.torque_output:
            return 0.0
        v = _volts(min(self._val))
        if v < MINIMUM_SENSOR_VOLTAGE or v > MAXIMUM_SENSOR_VOLTAGE:
            return 0.0
        span = MAXIMUM_SENSOR_VOLTAGE - MINIMUM_SENSOR_VOLTAGE
        return MAXIMUM_TORQUE * ((v - MINIMUM_SENSOR_VOLTAGE) / span)


def format_report(accel: Accel, raw1: int, raw2: int) -> str:
    """Return the periodic status report for two raw readings and the pedal state."""
    lines = [
        f"SENSOR1 : {raw1}, {accel.value(0)}, {_volts(accel.value(0)):.2f}",
        f"SENSOR2 : {raw2}, {accel.value(1)}, {_volts(accel.value(1)):.2f}",
        f"TORQUE : {accel.torque:.2f}",
        "",
    ]
    return "\n".join(lines) + "\n"