import pytest

from evsense.accel import (
    MAXIMUM_TORQUE,
    THRESHOLD_DEVIATION,
    Accel,
    format_report,
)


def _armed() -> Accel:
    """Release the pedal with agreeing sensors until torque output is enabled."""
    accel = Accel()
    for _ in range(4):
        accel.set_sensor_values(10, 1013)
    return accel


def test_fresh_accel_has_error_and_no_output():
    accel = Accel()
    assert accel.dev_error is True
    assert accel.torque_output is False
    assert accel.torque == 0.0


def test_falling_sensor_is_mirrored():
    accel = Accel()
    accel.set_sensor_values(100, 923)
    assert accel.value(0) == 100
    assert accel.value(1) == 100
    assert accel.deviation(0) == 0
    assert accel.deviation(1) == 0


def test_out_of_range_readings_become_zero():
    accel = Accel()
    accel.set_sensor_values(2000, 2000)
    assert accel.value(0) == 0
    assert accel.value(1) == 0
    accel.set_values([5000, 300])
    assert accel.value(0) == 0
    assert accel.value(1) == 300


def test_set_values_keeps_in_range_readings():
    accel = Accel()
    accel.set_values([100, 300])
    assert accel.value(0) == 100
    assert accel.value(1) == 300
    assert accel.deviation(0) == 100
    assert accel.deviation(1) == 100


def test_set_values_requires_two_readings():
    with pytest.raises(ValueError):
        Accel().set_values([1, 2, 3])


@pytest.mark.parametrize("index", [2, -1])
def test_bad_index_raises(index):
    accel = Accel()
    with pytest.raises(IndexError):
        accel.value(index)
    with pytest.raises(IndexError):
        accel.deviation(index)


def test_error_not_cleared_while_pedal_pressed():
    accel = Accel()
    for _ in range(6):
        accel.set_sensor_values(100, 923)
    assert accel.dev_error is True
    assert accel.torque_output is False


def test_release_sequence_enables_output():
    accel = Accel()
    accel.set_sensor_values(10, 1013)
    accel.set_sensor_values(10, 1013)
    assert accel.dev_error is True
    accel.set_sensor_values(10, 1013)
    assert accel.dev_error is False
    assert accel.torque_output is False
    accel.set_sensor_values(10, 1013)
    assert accel.torque_output is True
    assert accel.torque == 0.0


def test_torque_in_working_range():
    accel = _armed()
    accel.set_sensor_values(200, 823)
    assert accel.torque == pytest.approx(1.36, abs=1e-5)


def test_torque_zero_above_maximum_voltage():
    accel = _armed()
    accel.set_sensor_values(400, 623)
    assert accel.torque_output is True
    assert accel.torque == 0.0


def test_torque_increases_with_pedal_and_stays_below_maximum():
    accel = _armed()
    torques = []
    for raw in range(70, 266, 15):
        accel.set_sensor_values(raw, 1023 - raw)
        torques.append(accel.torque)
    assert all(a < b for a, b in zip(torques, torques[1:]))
    assert all(0.0 < t < MAXIMUM_TORQUE for t in torques)


def test_persistent_deviation_disables_output():
    accel = _armed()
    for _ in range(3):
        accel.set_values([100, 300])
        assert accel.deviation(0) > THRESHOLD_DEVIATION
        assert accel.torque_output is True
        assert accel.dev_error is False
    accel.set_values([100, 300])
    assert accel.dev_error is True
    assert accel.torque_output is False
    assert accel.torque == 0.0


def test_short_deviation_is_ignored():
    accel = _armed()
    accel.set_values([100, 300])
    accel.set_values([100, 300])
    accel.set_values([200, 200])
    accel.set_values([200, 200])
    assert accel.dev_error is False
    assert accel.torque_output is True


def test_format_report():
    accel = Accel()
    accel.set_sensor_values(100, 923)
    report = format_report(accel, 100, 923)
    assert report == (
        "SENSOR1 : 100, 100, 0.49\n"
        "SENSOR2 : 923, 100, 0.49\n"
        "TORQUE : 0.00\n"
        "\n"
    )