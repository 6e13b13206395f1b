import dataclasses

import pytest

from evsense.parameter import Parameter


@pytest.fixture
def temp_param():
    return Parameter(-25, 0.5, -25, 100)


def test_zero_normal_is_offset(temp_param):
    assert temp_param.to_physical(0) == -25


def test_offset_maps_to_zero(temp_param):
    assert temp_param.to_normal(-25) == 0


def test_default_raw_value(temp_param):
    assert temp_param.to_physical(0xAA) == 60.0


@pytest.mark.parametrize("physical", [-25.0, -10.5, 0.0, 37.5, 100.0])
def test_round_trip(temp_param, physical):
    assert temp_param.to_physical(temp_param.to_normal(physical)) == physical


@pytest.mark.parametrize("physical", [-20.0, 0.0, 42.5])
def test_truncation(temp_param, physical):
    assert temp_param.to_normal(physical + 0.4) == temp_param.to_normal(physical)


def test_below_offset_rejected(temp_param):
    with pytest.raises(ValueError):
        temp_param.to_normal(-30)


def test_frozen(temp_param):
    with pytest.raises(dataclasses.FrozenInstanceError):
        temp_param.offset = 0
    assert temp_param.max_physical == 100