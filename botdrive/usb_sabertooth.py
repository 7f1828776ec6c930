"""USB Sabertooth motor driver in Packet Serial mode."""

from __future__ import annotations

from typing import Callable

from botdrive.usb_protocol import (
    DEFAULT_GET_RETRY_INTERVAL,
    DEFAULT_GET_TIMEOUT,
    MAX_VALUE,
    Command,
    GetType,
    ReplyCode,
    SabertoothSerial,
    SetType,
    Timeout,
    send_command,
)

FREEWHEEL_ON = 2048
_SHUTDOWN_ON = 2048


class GetTimeoutError(TimeoutError):
    """Raised when the driver does not answer a get request in time."""


def _code(value: int | str) -> int:
    """Turn a channel letter such as 'M' or a number into its byte value."""
    if isinstance(value, str):
        if len(value) != 1:
            raise ValueError(f"expected a single character, not {value!r}")
        value = ord(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"not a byte: {value}")
    return value


class USBSabertooth:
    """Controls one USB Sabertooth driver on a shared :class:`SabertoothSerial`.

    Channel types and numbers may be given as integers or as single
    characters, such as ``'M'`` or ``'3'`` for Plain Text Serial addresses.
    """

    def __init__(
        self,
        serial: SabertoothSerial,
        address: int,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if not 0 <= address <= 0xFF:
            raise ValueError(f"address must be a byte, not {address}")
        self._serial = serial
        self._address = address
        self._clock = clock
        self._crc = True
        self.get_retry_interval = DEFAULT_GET_RETRY_INTERVAL
        self.get_timeout = DEFAULT_GET_TIMEOUT

    @property
    def address(self) -> int:
        """The driver address."""
        return self._address

    @property
    def using_crc(self) -> bool:
        """Whether commands are sent CRC-protected (the default)."""
        return self._crc

    def use_crc(self) -> None:
        """Send future commands CRC-protected (larger packets, strong error detection)."""
        self._crc = True

    def use_checksum(self) -> None:
        """Send future commands checksum-protected (smaller packets)."""
        self._crc = False

    def _timeout(self, ms: int) -> Timeout:
        if self._clock is None:
            return Timeout(ms)
        return Timeout(ms, self._clock)

    def command(self, command: int, value: int | bytes) -> None:
        """Send a packet serial command with a one-byte or multibyte value."""
        data = bytes([value]) if isinstance(value, int) else bytes(value)
        send_command(self._serial.port, self._address, command, self._crc, data)

    def motor(self, value: int, number: int | str = 1) -> None:
        """Set a motor output (M1, M2, ...) to a value between -2047 and 2047."""
        self.set("M", number, value)

    def power(self, value: int, number: int | str = 1) -> None:
        """Set a controllable power output (P1, P2, ...)."""
        self.set("P", number, value)

    def drive(self, value: int) -> None:
        """Set the mixed-mode drive channel (MD)."""
        self.motor(value, "D")

    def turn(self, value: int) -> None:
        """Set the mixed-mode turn channel (MT)."""
        self.motor(value, "T")

    def freewheel(self, value: int = FREEWHEEL_ON, number: int | str = 1) -> None:
        """Let a motor output freewheel (positive value) or stop freewheeling."""
        self.set("Q", number, int(value))

    def shut_down(self, kind: int | str, number: int | str, value: bool = True) -> None:
        """Set or clear the shutdown of an output of type 'M' or 'P'."""
        self.set(kind, number, _SHUTDOWN_ON if value else 0, SetType.SHUTDOWN)

    def set(
        self,
        kind: int | str,
        number: int | str,
        value: int,
        set_type: SetType | int = SetType.VALUE,
    ) -> None:
        """Set a channel value, clamped to -16383..16383."""
        flags = int(set_type)
        value = max(-MAX_VALUE, min(MAX_VALUE, int(value)))
        if value < 0:
            value = -value
            flags |= 1
        data = bytes(
            [flags, value & 0x7F, (value >> 7) & 0x7F, _code(kind), _code(number)]
        )
        self.command(Command.SET, data)

    def set_ramping(self, value: int, number: int | str = "*") -> None:
        """Set the ramping of one motor output, or all of them by default."""
        self.set("R", number, value)

    def set_timeout(self, milliseconds: int) -> None:
        """Set the serial timeout; zero uses the stored setting, -1 disables it."""
        self.set("M", "*", milliseconds, SetType.TIMEOUT)

    def keep_alive(self) -> None:
        """Reset the serial timeout without changing any output."""
        self.set("M", "*", 0, SetType.KEEPALIVE)

    def get(
        self,
        kind: int | str,
        number: int | str,
        get_type: GetType | int = GetType.VALUE,
        unscaled: bool = False,
    ) -> int:
        """Read a value from the driver, resending the request until it answers.

        Raises :class:`GetTimeoutError` if the get timeout elapses first.
        """
        kind_code = _code(kind)
        number_code = _code(number)
        flags = int(get_type)
        if unscaled:
            flags |= 2

        timeout = self._timeout(self.get_timeout)
        retry = self._timeout(self.get_retry_interval)
        retry.expire()
        receiver = self._serial.receiver

        while True:
            if timeout.expired():
                raise GetTimeoutError(
                    f"no reply from driver {self._address} within {self.get_timeout} ms"
                )
            if retry.expired():
                retry.reset()
                self.command(Command.GET, bytes([flags, kind_code, number_code]))

            if not self._serial.try_receive_packet():
                continue
            if receiver.address != self._address:
                continue
            if receiver.command != ReplyCode.GET:
                continue
            if receiver.using_crc != self._crc:
                continue

            data = receiver.data
            if flags == (data[2] & ~1) and kind_code == data[6] and number_code == data[7]:
                value = data[4] | (data[5] << 7)
                return -value if data[2] & 1 else value

    def get_battery(self, number: int | str, unscaled: bool = False) -> int:
        """Read the battery voltage seen by a motor output."""
        return self.get("M", number, GetType.BATTERY, unscaled)

    def get_current(self, number: int | str, unscaled: bool = False) -> int:
        """Read the current of a motor output."""
        return self.get("M", number, GetType.CURRENT, unscaled)

    def get_temperature(self, number: int | str, unscaled: bool = False) -> int:
        """Read the temperature of a motor output."""
        return self.get("M", number, GetType.TEMPERATURE, unscaled)