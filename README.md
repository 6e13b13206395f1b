# evsense

Monitoring logic for an electric vehicle's accumulator temperatures and
accelerator pedal sensors. Every bus, pin and clock is an object or callable
you pass in, so the logic runs and can be tested without hardware.

## Modules

### `evsense.temp_monitor`

- `calc_r(val)` turns a raw 10-bit ADC reading into a thermistor resistance
  (10 kΩ series resistor, 5 V supply, 4.9 mV per count); `calc_temp(resistance)`
  turns a resistance into degrees Celsius with the B-constant equation
  (R0 = 10 kΩ at 25 °C, B = 3380 K).
- `max_temp`, `min_temp` and `average_temp` work on a sequence of temperatures.
- `Thermistor` holds one channel's `val`, `r` and `temp`; `set_val` raises
  `ValueError` for readings outside 0..1023.
- `TempMonitor(count, max_temp=60.0, min_temp=0.0, judge=True)` holds `count`
  thermistors. `set_value(index, val)` stores a reading, `set_reader(reader)`
  registers a callable run at the start of every cycle, and `run(now)` runs one
  cycle at time `now` in milliseconds and returns the danger flag. Every five
  seconds the hysteresis is recalibrated to a tenth of the average
  temperature. When judging is enabled, `judge(max_temp, min_temp)` advances
  the `State` machine (`INIT`, `SAFE`, `WARNING`, `DANGER`) and sets `warning`
  (two `WARNING` cycles in a row) and `danger` (two `DANGER` cycles in a row;
  once set it stays set). The machine leaves `INIT` only when `state` is set
  by you. `resistance`, `temperature`, `max_temp`, `min_temp`,
  `average_temp`, `max_val`, `min_val` and `average_val` report on the
  thermistors; out-of-range indices raise `IndexError`.

### `evsense.parameter`

`Parameter(offset, resolution, min_physical, max_physical)` is a frozen
dataclass for linear scaling: `to_physical(normal)` returns
`normal * resolution + offset`, and `to_normal(physical)` inverts it,
truncating toward zero and raising `ValueError` if the result does not fit in
16 bits.

### `evsense.can_temp`

`CanTemp(can_id, bus)` keeps the average, maximum and minimum temperatures
(`TempKind.AVR_TEMP`, `MAX_TEMP`, `MIN_TEMP`) as one 8-byte frame, each field
scaled by 0.5 °C with an offset of −25 °C. The `bus` object needs
`begin(bitrate) -> bool` and `send(can_id, data) -> int`.

- `init(retry_delay=0.1)` calls `bus.begin(500000)` until it succeeds.
- `set_temp(kind, value)` stores a value and returns `False` if it was outside
  −25..100 °C, in which case 100 °C is stored instead.
- `get_temp(kind)` and `payload()` read the frame back.
- `send(verbose=False)` sends the frame and returns a `SendStatus`; with
  `verbose` it prints the outcome and, on success, the bits of each byte as
  produced by `format_buffer(buf)`.

The identifiers `ACC_ID` (0x340) and `SEG1_ID` to `SEG4_ID` are provided.

### `evsense.thermistor_array`

- `pack_readings(values)` packs up to six 10-bit readings into the 8-byte
  little-endian node payload; `unpack_readings(data)` reads six back.
- `ThermistorArray(ecu_count=4, thm_count=6)` holds readings for several
  nodes. `set_data(ecu_index, data)` stores a payload and recomputes that
  node's resistances and temperatures (B = 3423 K; readings above 1000 are
  treated as 0 V). `val`, `resistance`, `temperature`, `average_temp`,
  `max_temp` and `min_temp` report per node.
- `SlaveNode(read_pin)` samples pins `A0`, `A1`, `A2`, `A3`, `A6`, `A7` through
  `read_pin(name)` in `read()` and returns the packed result from `payload()`.

### `evsense.master`

`MasterController(i2c, can, clock)` polls the nodes at addresses 1, 2, 4 and 8
through `i2c.request_from(address, size)`, using a `CanTemp` for the summary
frame and `clock()` for the time in milliseconds; it calls `can.init()` when
created. `tick()` is the periodic handler that moves on to the next node (and,
after the last node, to the frame send); `step()` runs one pass of the main
loop: it polls or sends, updates the maximum, minimum and average
temperatures in the frame, and returns `danger`, which is set when a node was
at or above 60 °C or at or below 10 °C on three passes in a row.
`danger_output` is the level of the danger line, high while there is no
danger.

### `evsense.accel`

`Accel` checks two accelerator sensors whose characteristics mirror each other.
`set_sensor_values(val1, val2)` takes the rising and the falling sensor
readings (the second is mirrored as `1023 - val2`); `set_values(values)` takes
two readings as they are. A reading outside 0..1023 becomes 0. When both
sensors deviate from their mean by more than 20 counts for three updates in a
row, `dev_error` is set and `torque_output` is switched off; it is cleared
again only once both sensors read below 0.3 V and agree. `torque` runs from 0
to 2.0 between 0.3 V and 1.3 V of the lower sensor. `value(index)` and
`deviation(index)` report per sensor, and `format_report(accel, raw1, raw2)`
returns a readable status text.

## What it does not do

The package contains no drivers: it does not open I2C, CAN or serial ports,
read analog pins, or run timers. You supply objects for the buses and pins and
call `run`, `tick` and `step` yourself. It has no command-line program.

## Installing

```
pip install .
```

Run the tests with:

```
pip install .[test]
pytest
```

## Example

```python
from evsense.temp_monitor import State, TempMonitor, calc_r, calc_temp

print(round(calc_temp(calc_r(512)), 2))   # a mid-scale ADC reading

monitor = TempMonitor(4, 60.0, 0.0, True)
monitor.state = State.SAFE
for index, raw in enumerate([500, 510, 520, 530]):
    monitor.set_value(index, raw)
danger = monitor.run(10_000)
print(monitor.max_temp(), monitor.min_temp(), monitor.state, danger)
```

```python
from evsense.accel import Accel, format_report

pedal = Accel()
pedal.set_sensor_values(100, 923)
print(format_report(pedal, 100, 923))
```