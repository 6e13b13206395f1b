"""Thermistor-based temperature monitoring with a hysteresis state machine."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from enum import Enum

SERIES_RESISTANCE = 10000.0
"""Resistor in series with the thermistor (ohms)."""

R0 = 10000.0
"""Thermistor resistance at the reference temperature (ohms)."""

T0 = 25.0
"""Reference temperature (degrees Celsius)."""

B_CONSTANT = 3380.0
"""Thermistor B constant (kelvin)."""

ADC_VOLTS_PER_COUNT = 0.0049
SUPPLY_VOLTAGE = 5.0
ADC_MAX = 1023

ALLOWABLE_TEMP_MAX = 30.0
ALLOWABLE_TEMP_MIN = 0.0

DEFAULT_MAX_TEMP = 60.0
DEFAULT_MIN_TEMP = 0.0

CALIBRATION_INTERVAL_MS = 5000
_CLOCK_MODULUS = 2**32

ABSOLUTE_ZERO = -273.0
_MIN_SEARCH_START = 273.0


class State(Enum):
    """Temperature monitoring state."""

    INIT = "init"
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


def calc_r(val: int) -> float:
    """Return the thermistor resistance for a raw 10-bit ADC reading."""
    vd = val * ADC_VOLTS_PER_COUNT
    return (SERIES_RESISTANCE * vd) / (SUPPLY_VOLTAGE - vd)


def calc_temp(resistance: float) -> float:
    """Return the temperature in degrees Celsius for a thermistor resistance."""
    if resistance == 0:
        return ABSOLUTE_ZERO
    if resistance < 0:
        return math.nan
    log_ratio = math.log(resistance / R0)
    return 1.0 / ((log_ratio / B_CONSTANT) + (1.0 / (T0 + 273.0))) - 273.0


def max_temp(temps: Sequence[float]) -> float:
    """Return the highest temperature, or -273 when nothing is above it."""
    return max((t for t in temps if t > ABSOLUTE_ZERO), default=ABSOLUTE_ZERO)


def min_temp(temps: Sequence[float]) -> float:
    """Return the lowest temperature, or 273 when nothing is below it."""
    return min((t for t in temps if t < _MIN_SEARCH_START), default=_MIN_SEARCH_START)


def average_temp(temps: Sequence[float]) -> float:
    """Return the mean temperature."""
    if not temps:
        raise ValueError("average of no temperatures")
    return sum(temps) / len(temps)


class Thermistor:
    """One thermistor channel: raw reading, resistance and temperature."""

    def __init__(self) -> None:
        self.val = 0
        self.r = 0.0
        self.temp = 0.0

    def set_val(self, val: int) -> None:
        """Store a raw ADC reading and derive resistance and temperature."""
        if not 0 <= val <= ADC_MAX:
            raise ValueError(f"ADC reading {val} outside 0..{ADC_MAX}")
        self.val = val
        self.r = calc_r(val)
        self.temp = calc_temp(self.r)

    def __repr__(self) -> str:
        return f"Thermistor(val={self.val}, r={self.r!r}, temp={self.temp!r})"


class TempMonitor:
    """Monitors a set of thermistors and judges them against allowed limits."""

    def __init__(
        self,
        count: int,
        max_temp: float = DEFAULT_MAX_TEMP,
        min_temp: float = DEFAULT_MIN_TEMP,
        judge: bool = True,
    ) -> None:
        if not 1 <= count <= 255:
            raise ValueError(f"thermistor count {count} outside 1..255")
        self.thermistors = [Thermistor() for _ in range(count)]
        self.allowable_max = float(max_temp)
        self.allowable_min = float(min_temp)
        self.judge_enabled = bool(judge)
        self.hysteresis = 0.0
        self.warning = False
        self.danger = False
        self.past_state = State.INIT
        self._state = State.INIT
        self._next_state = State.INIT
        self._last_cal_time = 0
        self._reader: Callable[[], object] | None = None
        self._index_max = 0
        self._index_min = 0

    @property
    def state(self) -> State:
        return self._state

    @state.setter
    def state(self, value: State) -> None:
        self._state = value
        self._next_state = value

    def _check_index(self, index: int) -> Thermistor:
        if not 0 <= index < len(self.thermistors):
            raise IndexError(f"thermistor index {index} out of range")
        return self.thermistors[index]

    def set_value(self, index: int, val: int) -> None:
        """Store a raw ADC reading for one thermistor."""
        self._check_index(index).set_val(val)

    def set_reader(self, reader: Callable[[], object]) -> None:
        """Register a callable that refreshes all readings on every run."""
        self._reader = reader

    def run(self, now: int) -> bool:
        """Run one monitoring cycle at time ``now`` (ms); return the danger flag."""
        if self._reader is not None:
            self._reader()

        highest = self.max_temp()
        lowest = self.min_temp()
        avg = self.average_temp()

        if (now - self._last_cal_time) % _CLOCK_MODULUS > CALIBRATION_INTERVAL_MS:
            self.hysteresis = avg / 10
            self._last_cal_time = now

        if now < self._last_cal_time:
            self._last_cal_time = now

        if self.judge_enabled:
            self.judge(highest, lowest)

        return self.danger

    def judge(self, max_temp: float, min_temp: float) -> State:
        """Advance the state machine and update warning and danger flags."""
        lo, hi, hys = self.allowable_min, self.allowable_max, self.hysteresis
        if min_temp <= lo + hys or max_temp >= hi - hys:
            if self._state is State.SAFE:
                self._next_state = State.WARNING
            elif self._state is State.WARNING:
                if min_temp <= lo or max_temp >= hi:
                    self._next_state = State.DANGER
                elif min_temp > lo + hys and max_temp < hi - hys:
                    self._next_state = State.SAFE
            elif self._state is State.DANGER:
                if min_temp > lo and max_temp < hi:
                    self._next_state = State.WARNING

        self.past_state = self._state
        self._state = self._next_state

        self.warning = self.past_state is State.WARNING and self._state is State.WARNING
        if not self.danger:
            self.danger = self.past_state is State.DANGER and self._state is State.DANGER
        return self._state

    def resistance(self, index: int) -> float:
        """Return the resistance of one thermistor."""
        return self._check_index(index).r

    def temperature(self, index: int) -> float:
        """Return the temperature of one thermistor."""
        return self._check_index(index).temp

    def max_temp(self) -> float:
        """Return the highest temperature and remember which thermistor has it."""
        highest = ABSOLUTE_ZERO
        self._index_max = 0
        for i, thm in enumerate(self.thermistors):
            if thm.temp > highest:
                highest = thm.temp
                self._index_max = i
        return highest

    def min_temp(self) -> float:
        """Return the lowest temperature and remember which thermistor has it."""
        lowest = _MIN_SEARCH_START
        self._index_min = 0
        for i, thm in enumerate(self.thermistors):
            if thm.temp < lowest:
                lowest = thm.temp
                self._index_min = i
        return lowest

    def average_temp(self) -> float:
        """Return the mean temperature of all thermistors."""
        return average_temp([thm.temp for thm in self.thermistors])

    def max_val(self) -> int:
        """Return the raw reading of the hottest thermistor found by max_temp."""
        return self.thermistors[self._index_max].val

    def min_val(self) -> int:
        """Return the raw reading of the coldest thermistor found by min_temp."""
        return self.thermistors[self._index_min].val

    def average_val(self) -> int:
        """Return the integer mean of the raw readings."""
        return sum(thm.val for thm in self.thermistors) // len(self.thermistors)