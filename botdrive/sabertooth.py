"""Sabertooth and SyRen motor drivers in Packet Serial mode."""

from __future__ import annotations

import time
from typing import Callable, Protocol

AUTOBAUD_BYTE = 0xAA

_BAUD_CODES = {2400: 1, 9600: 2, 19200: 3, 38400: 4, 115200: 5}


class _Writable(Protocol):
    def write(self, data: bytes) -> object: ...


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _flush(port: _Writable) -> None:
    flush = getattr(port, "flush", None)
    if flush is not None:
        flush()


def autobaud(
    port: _Writable,
    dont_wait: bool = False,
    sleep: Callable[[float], object] = time.sleep,
) -> None:
    """Send the autobaud byte, waiting around it unless ``dont_wait`` is set."""
    if not dont_wait:
        sleep(1.5)
    port.write(bytes([AUTOBAUD_BYTE]))
    _flush(port)
    if not dont_wait:
        sleep(0.5)


class Sabertooth:
    """Sends Packet Serial commands to one addressed Sabertooth or SyRen driver."""

    def __init__(
        self,
        address: int,
        port: _Writable,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        if not 0 <= address <= 255:
            raise ValueError(f"address must be a byte, not {address}")
        self._address = address
        self._port = port
        self._sleep = sleep

    @property
    def address(self) -> int:
        """The driver address."""
        return self._address

    @property
    def port(self) -> _Writable:
        """The serial port in use."""
        return self._port

    def autobaud(self, dont_wait: bool = False) -> None:
        """Send the autobaud byte on this driver's port."""
        autobaud(self._port, dont_wait, self._sleep)

    def command(self, command: int, value: int) -> None:
        """Send a raw packet: address, command, value and 7-bit checksum."""
        checksum = (self._address + command + value) & 0x7F
        self._port.write(bytes([self._address, command, value, checksum]))

    def _throttle_command(self, command: int, power: int) -> None:
        power = _clamp(power, -126, 126)
        self.command(command, abs(power))

    def motor(self, power: int, motor: int = 1) -> None:
        """Set the power (-127..127) of motor 1 or 2; other motor numbers are ignored."""
        if motor not in (1, 2):
            return
        command = (4 if motor == 2 else 0) + (1 if power < 0 else 0)
        self._throttle_command(command, power)

    def drive(self, power: int) -> None:
        """Set the mixed-mode driving power."""
        self._throttle_command(9 if power < 0 else 8, power)

    def turn(self, power: int) -> None:
        """Set the mixed-mode turning power."""
        self._throttle_command(11 if power < 0 else 10, power)

    def stop(self) -> None:
        """Stop both motors."""
        self.motor(0, 1)
        self.motor(0, 2)

    def set_min_voltage(self, value: int) -> None:
        """Set the minimum voltage, in driver-specific units (at most 120)."""
        self.command(2, min(value, 120))

    def set_max_voltage(self, value: int) -> None:
        """Set the maximum voltage, in driver-specific units (at most 127)."""
        self.command(3, min(value, 127))

    def set_baud_rate(self, baud_rate: int) -> None:
        """Set the baud rate; unknown rates fall back to 9600."""
        _flush(self._port)
        self.command(15, _BAUD_CODES.get(baud_rate, _BAUD_CODES[9600]))
        _flush(self._port)
        # The driver restarts after a baud change and needs time before it listens again.
        self._sleep(0.5)

    def set_deadband(self, value: int) -> None:
        """Set the deadband (at most 127; 0 restores the default)."""
        self.command(17, min(value, 127))

    def set_ramping(self, value: int) -> None:
        """Set the ramping value (0..80)."""
        self.command(16, _clamp(value, 0, 80))

    def set_timeout(self, milliseconds: int) -> None:
        """Set the serial timeout, rounded up to a whole 100 ms (0..12700)."""
        self.command(14, (_clamp(milliseconds, 0, 12700) + 99) // 100)