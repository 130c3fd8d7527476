"""
Minimal SHTC3 temperature/humidity driver using smbus2.

Each :meth:`SHTC3.measure` call wakes the sensor, triggers a
temperature-first measurement in the requested power mode, waits for the
conversion, reads both words and puts the sensor back to sleep.

Scaling (datasheet section 5.11)
--------------------------------
T  [m°C] = -45000 + 175000 * raw / 2^16
RH [m%]  = 100000 * raw / 2^16

Both are computed with integer arithmetic so the pipeline never sees floats.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Union

from smbus2 import SMBus, i2c_msg

from ..core.errors import DriverError
from ..core.models import Measurement, PowerMode

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = 0x70

# ---------------------------
# SHTC3 command words
# ---------------------------
CMD_WAKEUP = 0x3517
CMD_SLEEP = 0xB098
CMD_READ_ID = 0xEFC8
CMD_MEASURE_NORMAL = 0x7866    # T first, clock stretching disabled
CMD_MEASURE_LOW_POWER = 0x609C  # T first, clock stretching disabled

# Maximum conversion / wakeup times in seconds
MEASURE_TIME_S = {
    PowerMode.NORMAL: 0.0121,
    PowerMode.LOW_POWER: 0.0008,
}
WAKEUP_TIME_S = 0.00024

# ID register: bits 11 and 5:0 are fixed for the SHTC3
ID_MASK = 0x083F
ID_PATTERN = 0x0807

MEASURE_COMMANDS = {
    PowerMode.NORMAL: CMD_MEASURE_NORMAL,
    PowerMode.LOW_POWER: CMD_MEASURE_LOW_POWER,
}

CRC_POLYNOMIAL = 0x31
CRC_INIT = 0xFF


def crc8(data: Sequence[int]) -> int:
    """Sensirion CRC-8 over ``data`` (polynomial 0x31, init 0xFF)."""
    crc = CRC_INIT
    for byte in data:
        crc ^= byte & 0xFF
        for _ in range(8):
            if crc & 0x80:
                crc = ((crc << 1) ^ CRC_POLYNOMIAL) & 0xFF
            else:
                crc = (crc << 1) & 0xFF
    return crc


def _check_word(buf: Sequence[int], offset: int) -> int:
    word = buf[offset : offset + 2]
    if crc8(word) != buf[offset + 2]:
        raise DriverError(
            f"CRC mismatch at byte {offset}: got 0x{buf[offset + 2]:02X}, expected 0x{crc8(word):02X}"
        )
    return (word[0] << 8) | word[1]


def convert_temperature(raw: int) -> int:
    """Raw 16-bit temperature word -> millidegrees Celsius."""
    return ((21875 * raw) >> 13) - 45000


def convert_humidity(raw: int) -> int:
    """Raw 16-bit humidity word -> millipercent relative humidity."""
    return (12500 * raw) >> 13


class SHTC3:
    """SHTC3 driver on an already-open :class:`smbus2.SMBus`."""

    def __init__(self, bus: SMBus, address: int = DEFAULT_ADDRESS, *, owns_bus: bool = False) -> None:
        self.bus = bus
        self.address = address
        self._owns_bus = owns_bus
        self._closed = False

    def _write_command(self, command: int) -> None:
        msg = i2c_msg.write(self.address, [(command >> 8) & 0xFF, command & 0xFF])
        self.bus.i2c_rdwr(msg)

    def _read(self, length: int) -> list[int]:
        msg = i2c_msg.read(self.address, length)
        self.bus.i2c_rdwr(msg)
        return list(msg)

    def wakeup(self) -> None:
        self._write_command(CMD_WAKEUP)
        time.sleep(WAKEUP_TIME_S)

    def sleep(self) -> None:
        self._write_command(CMD_SLEEP)

    @contextmanager
    def _awake(self) -> Iterator[None]:
        """Keep the sensor awake for the body, then put it back to sleep."""
        self.wakeup()
        try:
            yield
        finally:
            try:
                self.sleep()
            except OSError as exc:
                logger.warning("SHTC3 at 0x%02X did not go back to sleep: %s", self.address, exc)

    def device_id(self) -> int:
        """Return the 16-bit ID register (bits 11 and 5:0 identify the SHTC3)."""
        try:
            with self._awake():
                self._write_command(CMD_READ_ID)
                buf = self._read(3)
        except OSError as exc:
            raise DriverError(f"SHTC3 read ID failed: {exc}") from exc
        return _check_word(buf, 0)

    def measure(self, mode: PowerMode) -> Measurement:
        """Take one blocking measurement in ``mode``."""
        try:
            with self._awake():
                self._write_command(MEASURE_COMMANDS[mode])
                time.sleep(MEASURE_TIME_S[mode])
                buf = self._read(6)
        except OSError as exc:
            raise DriverError(f"SHTC3 I/O error ({mode.value}): {exc}", mode) from exc

        try:
            raw_t = _check_word(buf, 0)
            raw_rh = _check_word(buf, 3)
        except DriverError as exc:
            raise DriverError(f"SHTC3 {mode.value}: {exc}", mode) from exc
        return Measurement(
            temperature=convert_temperature(raw_t),
            humidity=convert_humidity(raw_rh),
        )

    def close(self) -> None:
        """Close the bus if this driver opened it; safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._owns_bus:
            self.bus.close()


def is_shtc3_id(ident: int) -> bool:
    return ident & ID_MASK == ID_PATTERN


def parse_bus(device: Union[str, int]) -> Union[str, int]:
    """Accept ``1``, ``"1"`` or ``"/dev/i2c-1"``; SMBus takes either an int or a path."""
    if isinstance(device, int):
        return device
    text = str(device).strip()
    if text.isdigit():
        return int(text)
    return text


def open_shtc3(device: Union[str, int], address: Optional[int] = None) -> SHTC3:
    """Open ``device``, check the chip ID and return a driver that owns the bus."""
    bus_id = parse_bus(device)
    try:
        bus = SMBus(bus_id)
    except OSError as exc:
        raise DriverError(f"Could not open I2C bus {device!r}: {exc}") from exc
    sensor = SHTC3(bus, DEFAULT_ADDRESS if address is None else address, owns_bus=True)
    try:
        ident = sensor.device_id()
        if not is_shtc3_id(ident):
            raise DriverError(
                f"Device at 0x{sensor.address:02X} on {device} is not an SHTC3 (ID 0x{ident:04X})"
            )
    except DriverError:
        sensor.close()
        raise
    logger.info("Opened SHTC3 on %s at 0x%02X (ID 0x%04X)", device, sensor.address, ident)
    return sensor


__all__ = [
    "DEFAULT_ADDRESS",
    "SHTC3",
    "convert_humidity",
    "convert_temperature",
    "crc8",
    "is_shtc3_id",
    "open_shtc3",
    "parse_bus",
]
