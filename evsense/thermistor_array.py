"""Thermistor readings from several monitoring nodes and their wire format."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

ECU_COUNT = 4
ADDRESSES = (0b0000001, 0b0000010, 0b0000100, 0b0001000)
THM_COUNT = 6

R0 = 10000.0
T0 = 25.0
B_CONSTANT = 3423.0
SERIES_RESISTANCE = 10000.0

MAX_ALLOWABLE_TEMP = 60.0
MIN_ALLOWABLE_TEMP = 10.0

ADC_MAX = 1023
ADC_VOLTS_PER_COUNT = 0.0049
SUPPLY_VOLTAGE = 5.0
_OPEN_THRESHOLD = 1000

PAYLOAD_LENGTH = 8
_FIELD_BITS = 10
_FIELD_MASK = (1 << _FIELD_BITS) - 1

INPUT_PINS = ("A0", "A1", "A2", "A3", "A6", "A7")

ABSOLUTE_ZERO = -273.0
_MIN_SEARCH_START = 125.0


def calc_r(val: int) -> float:
    """Return the thermistor resistance for a raw ADC reading.

    Readings above 1000 are treated as zero volts.
    """
    vd = 0.0 if val > _OPEN_THRESHOLD else val * ADC_VOLTS_PER_COUNT
    return (SERIES_RESISTANCE * vd) / (SUPPLY_VOLTAGE - vd)


def calc_temp(resistance: float) -> float:
    """Return the temperature in degrees Celsius for a thermistor resistance."""
    if resistance == 0:
        return ABSOLUTE_ZERO
    if resistance < 0:
        return math.nan
    log_ratio = math.log(resistance / R0)
    return 1.0 / ((log_ratio / B_CONSTANT) + (1.0 / (T0 + 273.0))) - 273.0


def pack_readings(values: Sequence[int]) -> bytes:
    """Pack up to six 10-bit readings into the eight-byte node payload."""
    if len(values) > THM_COUNT:
        raise ValueError(f"at most {THM_COUNT} readings fit a payload")
    word = 0
    for i, value in enumerate(values):
        if not 0 <= value <= ADC_MAX:
            raise ValueError(f"reading {value} outside 0..{ADC_MAX}")
        word |= value << (i * _FIELD_BITS)
    return word.to_bytes(PAYLOAD_LENGTH, "little")


def unpack_readings(data: bytes) -> tuple[int, ...]:
    """Return the six 10-bit readings held in a payload of at most eight bytes."""
    if len(data) > PAYLOAD_LENGTH:
        raise ValueError(f"payload longer than {PAYLOAD_LENGTH} bytes")
    word = int.from_bytes(bytes(data).ljust(PAYLOAD_LENGTH, b"\0"), "little")
    return tuple((word >> (i * _FIELD_BITS)) & _FIELD_MASK for i in range(THM_COUNT))


class ThermistorArray:
    """Readings, resistances and temperatures for every node's thermistors."""

    def __init__(self, ecu_count: int = ECU_COUNT, thm_count: int = THM_COUNT) -> None:
        if ecu_count < 1:
            raise ValueError("at least one node is needed")
        if not 1 <= thm_count <= THM_COUNT:
            raise ValueError(f"thermistor count {thm_count} outside 1..{THM_COUNT}")
        self.ecu_count = ecu_count
        self.thm_count = thm_count
        self._raw = [bytearray(PAYLOAD_LENGTH) for _ in range(ecu_count)]
        self._val = [[0] * thm_count for _ in range(ecu_count)]
        self._r = [[0.0] * thm_count for _ in range(ecu_count)]
        self._temp = [[0.0] * thm_count for _ in range(ecu_count)]

    def _check(self, ecu_index: int, thm_index: int | None = None) -> None:
        if not 0 <= ecu_index < self.ecu_count:
            raise IndexError(f"node index {ecu_index} out of range")
        if thm_index is not None and not 0 <= thm_index < self.thm_count:
            raise IndexError(f"thermistor index {thm_index} out of range")

    def set_data(self, ecu_index: int, data: bytes) -> None:
        """Store a node payload and recompute that node's temperatures.

        Bytes beyond the length of ``data`` keep their previous content.
        """
        if len(data) > PAYLOAD_LENGTH:
            raise ValueError(f"payload longer than {PAYLOAD_LENGTH} bytes")
        self._check(ecu_index)
        raw = self._raw[ecu_index]
        raw[: len(data)] = data
        for thm_index, value in enumerate(unpack_readings(raw)[: self.thm_count]):
            self.set_val(value, ecu_index, thm_index)
        for thm_index, value in enumerate(self._val[ecu_index]):
            r = calc_r(value)
            self._r[ecu_index][thm_index] = r
            self._temp[ecu_index][thm_index] = calc_temp(r)

    def set_val(self, val: int, ecu_index: int, thm_index: int) -> None:
        """Store one raw reading without recomputing its temperature."""
        self._check(ecu_index, thm_index)
        if not 0 <= val <= ADC_MAX:
            raise ValueError(f"reading {val} outside 0..{ADC_MAX}")
        self._val[ecu_index][thm_index] = val

    def val(self, ecu_index: int, thm_index: int) -> int:
        self._check(ecu_index, thm_index)
        return self._val[ecu_index][thm_index]

    def resistance(self, ecu_index: int, thm_index: int) -> float:
        self._check(ecu_index, thm_index)
        return self._r[ecu_index][thm_index]

    def temperature(self, ecu_index: int, thm_index: int) -> float:
        self._check(ecu_index, thm_index)
        return self._temp[ecu_index][thm_index]

    def average_temp(self, ecu_index: int) -> float:
        """Return the mean temperature of one node."""
        self._check(ecu_index)
        temps = self._temp[ecu_index]
        return sum(temps) / len(temps)

    def max_temp(self, ecu_index: int) -> float:
        """Return the highest temperature of one node, at least -273."""
        self._check(ecu_index)
        return max(self._temp[ecu_index], default=ABSOLUTE_ZERO)

    def min_temp(self, ecu_index: int) -> float:
        """Return the lowest temperature of one node, at most 125."""
        self._check(ecu_index)
        return min([_MIN_SEARCH_START, *self._temp[ecu_index]])


class SlaveNode:
    """A monitoring node that samples its thermistors and serves the payload."""

    def __init__(self, read_pin: Callable[[str], int]) -> None:
        self._read_pin = read_pin
        self.readings = [0] * THM_COUNT

    def read(self) -> list[int]:
        """Sample every input pin, keeping the low ten bits of each reading."""
        self.readings = [self._read_pin(pin) & _FIELD_MASK for pin in INPUT_PINS]
        return list(self.readings)

    def payload(self) -> bytes:
        """Return the eight bytes sent when the master asks for data."""
        return pack_readings(self.readings)