import io

import pytest

from evsense.can_temp import (
    ACC_ID,
    CanTemp,
    SendStatus,
    TempKind,
    format_buffer,
)


class FakeBus:
    def __init__(self, begin_results=(True,), send_result=0):
        self._begin = list(begin_results)
        self.send_result = send_result
        self.sent = []
        self.bitrates = []

    def begin(self, bitrate):
        self.bitrates.append(bitrate)
        return self._begin.pop(0) if self._begin else True

    def send(self, can_id, data):
        self.sent.append((can_id, data))
        return self.send_result


def make(bus=None):
    can = CanTemp(ACC_ID, bus or FakeBus())
    can.output = io.StringIO()
    return can


def test_initial_payload_uses_fill_pattern():
    assert make().payload() == bytes([0xAA, 0xAA, 0xAA, 0, 0, 0, 0, 0])


def test_init_retries_until_bus_starts():
    bus = FakeBus(begin_results=(False, False, True))
    can = make(bus)
    can.init(retry_delay=0)
    lines = can.output.getvalue().splitlines()
    assert lines == ["CAN init fail, retry...", "CAN init fail, retry...", "CAN init OK!"]
    assert len(bus.bitrates) == 3


@pytest.mark.parametrize("kind", list(TempKind))
@pytest.mark.parametrize("value", [-25.0, 0.0, 25.3, 99.9, 100.0])
def test_set_get_round_trip_within_resolution(kind, value):
    can = make()
    assert can.set_temp(kind, value) is True
    got = can.get_temp(kind)
    assert value - 0.5 < got <= value


@pytest.mark.parametrize("value", [-40.0, 150.0, float("nan")])
def test_out_of_range_clamps_to_maximum(value):
    can = make()
    assert can.set_temp(TempKind.MIN_TEMP, value) is False
    assert can.get_temp(TempKind.MIN_TEMP) == can.parameter.max_physical


def test_fields_are_independent_and_ordered():
    can = make()
    can.set_temp(TempKind.AVR_TEMP, -25.0)
    can.set_temp(TempKind.MAX_TEMP, 100.0)
    payload = can.payload()
    assert payload[0] == 0
    assert payload[1] == can.parameter.to_normal(100.0)
    assert payload[2] == 0xAA
    assert len(payload) == 8


def test_send_ok_prints_frame():
    bus = FakeBus(send_result=0)
    can = make(bus)
    status = can.send(verbose=True)
    assert status is SendStatus.OK
    assert bus.sent == [(ACC_ID, can.payload())]
    text = can.output.getvalue()
    assert "send message" in text
    assert format_buffer(can.payload()) in text


@pytest.mark.parametrize(
    "result, status, message",
    [
        (6, SendStatus.GET_TXBF_TIMEOUT, "get TXBF time out"),
        (7, SendStatus.SEND_MSG_TIMEOUT, "send MSG time out"),
        (2, SendStatus.FAIL, "send MSG fail"),
    ],
)
def test_send_failures(result, status, message):
    can = make(FakeBus(send_result=result))
    assert can.send(verbose=True) is status
    assert message in can.output.getvalue()


def test_send_quiet_prints_nothing():
    can = make()
    can.send()
    assert can.output.getvalue() == ""


def test_format_buffer_bits():
    assert format_buffer(b"\x05\xff") == "buf0 = 00000101\nbuf1 = 11111111"