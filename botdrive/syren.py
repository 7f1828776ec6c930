"""SyRen motor driver in Simplified Serial mode."""

from __future__ import annotations

from typing import Protocol


class _Writable(Protocol):
    def write(self, data: bytes) -> object: ...


class SyRenSimplified:
    """Controls a single-motor SyRen driver with Simplified Serial bytes."""

    def __init__(self, port: _Writable) -> None:
        self._port = port

    def motor(self, power: int, motor: int = 1) -> None:
        """Set the motor power (-126..126); motors other than 1 are ignored."""
        if motor != 1:
            return
        power = max(-126, min(126, power))
        command = (127 if power < 0 else 128) + power
        self._port.write(bytes([command]))

    def stop(self) -> None:
        """Stop the motor."""
        self.motor(0)