from __future__ import annotations

import pytest

from shtmon.core.errors import DriverError
from shtmon.core.models import PowerMode
from shtmon.sensors import shtc3
from shtmon.sensors.shtc3 import (
    CMD_MEASURE_LOW_POWER,
    CMD_MEASURE_NORMAL,
    CMD_READ_ID,
    CMD_SLEEP,
    CMD_WAKEUP,
    SHTC3,
    convert_humidity,
    convert_temperature,
    crc8,
    open_shtc3,
    parse_bus,
)


class FakeMsg:
    def __init__(self, kind: str, addr: int, data: list[int]) -> None:
        self.kind = kind
        self.addr = addr
        self.data = data

    @classmethod
    def write(cls, addr, buf):
        return cls("write", addr, list(buf))

    @classmethod
    def read(cls, addr, length):
        return cls("read", addr, [0] * length)

    def __iter__(self):
        return iter(self.data)


class FakeBus:
    """Answers reads with canned bytes and records written command words."""

    def __init__(
        self,
        responses=None,
        fail_with: Exception | None = None,
        fail_reads_with: Exception | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.fail_with = fail_with
        self.fail_reads_with = fail_reads_with
        self.commands: list[int] = []
        self.closed = False

    def i2c_rdwr(self, *msgs):
        if self.fail_with is not None:
            raise self.fail_with
        for msg in msgs:
            if msg.kind == "write":
                self.commands.append((msg.data[0] << 8) | msg.data[1])
            elif self.fail_reads_with is not None:
                raise self.fail_reads_with
            else:
                msg.data[:] = self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


def _word(raw: int) -> list[int]:
    hi, lo = (raw >> 8) & 0xFF, raw & 0xFF
    return [hi, lo, crc8([hi, lo])]


@pytest.fixture(autouse=True)
def _fast_driver(monkeypatch):
    monkeypatch.setattr(shtc3, "i2c_msg", FakeMsg)
    monkeypatch.setattr(shtc3.time, "sleep", lambda _s: None)


def test_crc8_matches_datasheet_example() -> None:
    assert crc8([0xBE, 0xEF]) == 0x92


def test_fixed_point_conversions() -> None:
    assert convert_temperature(0) == -45000
    assert convert_temperature(0x6666) == 24998
    assert convert_humidity(0x8000) == 50000
    assert convert_humidity(0) == 0


def test_measure_normal_mode_sequence_and_values() -> None:
    bus = FakeBus(responses=[_word(0x6666) + _word(0x8000)])
    sensor = SHTC3(bus)

    m = sensor.measure(PowerMode.NORMAL)

    assert bus.commands == [CMD_WAKEUP, CMD_MEASURE_NORMAL, CMD_SLEEP]
    assert m.temperature == 24998
    assert m.humidity == 50000


def test_measure_low_power_uses_its_command() -> None:
    bus = FakeBus(responses=[_word(0x6666) + _word(0x8000)])
    SHTC3(bus).measure(PowerMode.LOW_POWER)
    assert CMD_MEASURE_LOW_POWER in bus.commands


def test_crc_mismatch_is_a_driver_error() -> None:
    payload = _word(0x6666) + _word(0x8000)
    payload[5] ^= 0xFF
    sensor = SHTC3(FakeBus(responses=[payload]))
    with pytest.raises(DriverError) as excinfo:
        sensor.measure(PowerMode.NORMAL)
    assert excinfo.value.mode is PowerMode.NORMAL


def test_bus_io_error_is_a_driver_error() -> None:
    sensor = SHTC3(FakeBus(fail_with=OSError(121, "Remote I/O error")))
    with pytest.raises(DriverError):
        sensor.measure(PowerMode.LOW_POWER)


def test_close_only_closes_owned_bus_once() -> None:
    bus = FakeBus()
    SHTC3(bus).close()
    assert not bus.closed

    owned = SHTC3(bus, owns_bus=True)
    owned.close()
    owned.close()
    assert bus.closed


def test_parse_bus() -> None:
    assert parse_bus(1) == 1
    assert parse_bus("17") == 17
    assert parse_bus("/dev/i2c-17") == "/dev/i2c-17"


def test_failed_read_still_puts_sensor_to_sleep() -> None:
    bus = FakeBus(fail_reads_with=OSError(121, "Remote I/O error"))
    with pytest.raises(DriverError):
        SHTC3(bus).measure(PowerMode.NORMAL)
    assert bus.commands == [CMD_WAKEUP, CMD_MEASURE_NORMAL, CMD_SLEEP]


def test_device_id_reads_the_id_register() -> None:
    bus = FakeBus(responses=[_word(0x0887)])
    assert SHTC3(bus).device_id() == 0x0887
    assert bus.commands == [CMD_WAKEUP, CMD_READ_ID, CMD_SLEEP]


def test_open_shtc3_checks_chip_id(monkeypatch) -> None:
    bus = FakeBus(responses=[_word(0x0887)])
    monkeypatch.setattr(shtc3, "SMBus", lambda bus_id: bus)

    sensor = open_shtc3("/dev/i2c-1", 0x70)

    assert sensor.address == 0x70
    assert not bus.closed
    sensor.close()
    assert bus.closed


def test_open_shtc3_rejects_other_chip_and_releases_bus(monkeypatch) -> None:
    bus = FakeBus(responses=[_word(0x1234)])
    monkeypatch.setattr(shtc3, "SMBus", lambda bus_id: bus)

    with pytest.raises(DriverError, match="not an SHTC3"):
        open_shtc3("1")
    assert bus.closed
