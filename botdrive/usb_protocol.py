"""Packet Serial framing for USB Sabertooth drivers: checksums, CRCs, command encoding,
reply reception and millisecond timeouts."""

from __future__ import annotations

import time
from enum import IntEnum
from typing import Callable, Iterable, Protocol

COMMAND_MAX_BUFFER_LENGTH = 10
COMMAND_MAX_DATA_LENGTH = 5
DEFAULT_GET_RETRY_INTERVAL = 100
INFINITE_TIMEOUT = -1
DEFAULT_GET_TIMEOUT = INFINITE_TIMEOUT
GET_TIMED_OUT = -32768
MAX_VALUE = 16383

_CRC_ADDRESS_BITS = 0x70
_CRC_ADDRESS_MARK = 0xF0


class Command(IntEnum):
    """Packet Serial command numbers."""

    SET = 40
    GET = 41


class ReplyCode(IntEnum):
    """Reply codes sent back by the driver."""

    GET = 73


class GetType(IntEnum):
    """What a get request reads."""

    VALUE = 0x00
    BATTERY = 0x10
    CURRENT = 0x20
    TEMPERATURE = 0x40


class SetType(IntEnum):
    """What a set request changes."""

    VALUE = 0x00
    KEEPALIVE = 0x10
    SHUTDOWN = 0x20
    TIMEOUT = 0x40


class _Writable(Protocol):
    def write(self, data: bytes) -> object: ...


class _Readable(Protocol):
    def read(self, size: int = ...) -> bytes: ...


def checksum(data: Iterable[int]) -> int:
    """Seven-bit additive checksum of ``data``."""
    return sum(data) & 0x7F


def crc7(data: Iterable[int]) -> int:
    """Seven-bit CRC (reflected polynomial 0x76) of ``data``."""
    crc = 0x7F
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x76 if crc & 1 else crc >> 1
    return crc ^ 0x7F


def crc14(data: Iterable[int]) -> int:
    """Fourteen-bit CRC (reflected polynomial 0x22F0) of ``data``."""
    crc = 0x3FFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x22F0 if crc & 1 else crc >> 1
    return crc ^ 0x3FFF


def _split14(value: int) -> bytes:
    return bytes([value & 0x7F, (value >> 7) & 0x7F])


def encode_command(address: int, command: int, use_crc: bool, data: bytes) -> bytes:
    """Frame a command packet for ``address`` carrying one to five data bytes."""
    if not 0 <= address <= 0xFF:
        raise ValueError(f"address must be a byte, not {address}")
    data = bytes(data)
    if not 1 <= len(data) <= COMMAND_MAX_DATA_LENGTH:
        raise ValueError(
            f"command data must hold 1 to {COMMAND_MAX_DATA_LENGTH} bytes, not {len(data)}"
        )
    if use_crc:
        address |= _CRC_ADDRESS_MARK
    header = bytes([address, int(command) & 0xFF, data[0]])
    packet = bytearray(header)
    packet.append(crc7(header) if use_crc else checksum(header))

    extra = data[1:]
    if extra:
        packet += extra
        if use_crc:
            packet += _split14(crc14(extra))
        else:
            packet.append(checksum(extra))
    return bytes(packet)


def send_command(
    port: _Writable, address: int, command: int, use_crc: bool, data: bytes
) -> None:
    """Encode a command and write it to ``port`` in one call."""
    port.write(encode_command(address, command, use_crc, data))


class ReplyReceiver:
    """Assembles reply packets byte by byte and validates their check values."""

    def __init__(self) -> None:
        self._data = bytearray()
        self._ready = False
        self._using_crc = False

    @property
    def address(self) -> int:
        """Address byte of the packet (CRC marker bits removed once ready)."""
        return self._data[0] if self._data else 0

    @property
    def command(self) -> int:
        """Reply code of the packet."""
        return self._data[1] if len(self._data) > 1 else 0

    @property
    def data(self) -> bytes:
        """The raw packet received so far."""
        return bytes(self._data)

    @property
    def using_crc(self) -> bool:
        """Whether the completed packet was CRC-protected."""
        return self._using_crc

    @property
    def ready(self) -> bool:
        """Whether a complete, valid packet has been received."""
        return self._ready

    def read(self, byte: int) -> None:
        """Feed one received byte."""
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"not a byte: {byte}")
        if byte >= 128 or self._ready:
            self.reset()
        if len(self._data) < COMMAND_MAX_BUFFER_LENGTH:
            self._data.append(byte)

        buf = self._data
        if len(buf) < 9 or buf[0] < 128:
            return
        crc = (buf[0] & _CRC_ADDRESS_BITS) == _CRC_ADDRESS_BITS
        if buf[1] != ReplyCode.GET:
            return
        length = 10 if crc else 9
        if len(buf) != length:
            return

        if crc:
            if crc7(buf[:3]) != buf[3]:
                return
            if _split14(crc14(buf[4 : length - 2])) != bytes(buf[length - 2 : length]):
                return
            buf[0] &= ~_CRC_ADDRESS_BITS & 0xFF
            self._ready = True
            self._using_crc = True
        else:
            if checksum(buf[:3]) != buf[3]:
                return
            if checksum(buf[4 : length - 1]) != buf[length - 1]:
                return
            self._ready = True
            self._using_crc = False

    def reset(self) -> None:
        """Discard any partial or completed packet."""
        self._data.clear()
        self._ready = False
        self._using_crc = False


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Timeout:
    """A millisecond timeout; a negative duration never expires."""

    def __init__(
        self, timeout_ms: int, clock: Callable[[], float] = _monotonic_ms
    ) -> None:
        self._timeout_ms = timeout_ms
        self._clock = clock
        self._start = clock()

    @property
    def timeout_ms(self) -> int:
        """The duration in milliseconds."""
        return self._timeout_ms

    def can_expire(self) -> bool:
        """Whether this timeout can ever expire."""
        return self._timeout_ms >= 0

    def expired(self) -> bool:
        """Whether the duration has elapsed since the last reset."""
        return self.can_expire() and self._clock() - self._start >= self._timeout_ms

    def expire(self) -> None:
        """Make the timeout expire now."""
        if not self.can_expire():
            return
        self._start = self._clock() - self._timeout_ms

    def reset(self) -> None:
        """Restart the timeout from now."""
        self._start = self._clock()


class SabertoothSerial:
    """A serial port shared by one or more USB Sabertooth drivers."""

    def __init__(self, port: _Readable) -> None:
        self._port = port
        self._receiver = ReplyReceiver()

    @property
    def port(self) -> _Readable:
        """The serial port in use."""
        return self._port

    @property
    def receiver(self) -> ReplyReceiver:
        """The receiver holding the latest packet."""
        return self._receiver

    def try_receive_packet(self) -> bool:
        """Read available bytes until a packet is complete; False if input runs dry."""
        while True:
            chunk = self._port.read(1)
            if not chunk:
                return False
            self._receiver.read(chunk[0])
            if self._receiver.ready:
                return True