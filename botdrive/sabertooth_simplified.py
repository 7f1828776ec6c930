"""Sabertooth motor driver in Simplified Serial mode."""

from __future__ import annotations

from typing import Protocol


class _Writable(Protocol):
    def write(self, data: bytes) -> object: ...


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class SabertoothSimplified:
    """Controls a Sabertooth driver with single-byte Simplified Serial commands."""

    def __init__(self, port: _Writable) -> None:
        self._port = port
        self._mixed = False
        self._mixed_drive = 0
        self._mixed_turn = 0
        self._mixed_drive_set = False
        self._mixed_turn_set = False

    def motor(self, power: int, motor: int = 1) -> None:
        """Set the power (-127..127) of motor 1 or 2."""
        if motor not in (1, 2):
            raise ValueError(f"motor must be 1 or 2, not {motor}")
        self._mixed_mode(False)
        self._raw(motor, power)

    def drive(self, power: int) -> None:
        """Set the mixed-mode driving power (-127..127)."""
        self._mixed_mode(True)
        self._mixed_drive = _clamp(power, -127, 127)
        self._mixed_drive_set = True
        self._mixed_update()

    def turn(self, power: int) -> None:
        """Set the mixed-mode turning power (-127..127)."""
        self._mixed_mode(True)
        self._mixed_turn = _clamp(power, -127, 127)
        self._mixed_turn_set = True
        self._mixed_update()

    def stop(self) -> None:
        """Stop both motors."""
        self._port.write(b"\x00")
        self._mixed_drive_set = False
        self._mixed_turn_set = False

    def _mixed_mode(self, enable: bool) -> None:
        if self._mixed == enable:
            return
        self.stop()
        self._mixed = enable

    def _mixed_update(self) -> None:
        if not (self._mixed_drive_set and self._mixed_turn_set):
            return
        self._raw(1, self._mixed_drive - self._mixed_turn)
        self._raw(2, self._mixed_drive + self._mixed_turn)

    def _raw(self, motor: int, power: int) -> None:
        power = _clamp(power, -127, 127)
        magnitude = abs(power) >> 1
        base_reverse, base_forward = (63, 64) if motor == 1 else (191, 192)
        command = base_reverse - magnitude if power < 0 else base_forward + magnitude
        self._port.write(bytes([_clamp(command, 1, 254)]))