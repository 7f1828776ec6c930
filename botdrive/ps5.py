"""PS5 controller host: output reports, connection handling and a high-level controller."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from botdrive.ps5_parser import PacketParser, Ps5Event, Ps5State

SEND_BUFFER_SIZE = 77
HID_BUFFER_SIZE = 50

HID_SET_REPORT = 0x50
HID_TYPE_OUTPUT = 0x02
HID_TYPE_FEATURE = 0x03

REPORT_ID_ENABLE = 0xF4
REPORT_ID_CONTROL = 0x11

_ENABLE_PAYLOAD = bytes([0x43, 0x02])
_CONTROL_PREAMBLE = bytes([0x80, 0x00, 0xFF])

_INDEX_SMALL_RUMBLE = 5
_INDEX_LARGE_RUMBLE = 6
_INDEX_RED = 7
_INDEX_GREEN = 8
_INDEX_BLUE = 9
_INDEX_FLASH_ON = 10
_INDEX_FLASH_OFF = 11

ENABLE_LED = (32, 32, 200)
RECONNECT_INTERVAL_MS = 5000
_CONNECT_SETTLE_S = 0.25

_MAC_PATTERN = re.compile(r"\s*" + ":".join([r"([0-9A-Fa-f]{1,2})"] * 6))


class Transport(Protocol):
    """The link to the controller."""

    def start(self) -> None: ...

    def send(self, report: bytes) -> object: ...

    def connect(self, address: bytes) -> object: ...

    def reconnect(self) -> object: ...


@dataclass
class Ps5Command:
    """Feedback settings: rumble motors, light bar colour and flash timing."""

    small_rumble: int = 0
    large_rumble: int = 0
    r: int = 0
    g: int = 0
    b: int = 0
    flash_on: int = 0
    flash_off: int = 0


def _byte(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be a byte, not {value}")
    return value


def build_enable_report() -> bytes:
    """The feature report that makes the controller stream its input reports."""
    return bytes([HID_SET_REPORT | HID_TYPE_FEATURE, REPORT_ID_ENABLE]) + _ENABLE_PAYLOAD


def build_control_report(command: Ps5Command) -> bytes:
    """The output report that applies ``command`` to the controller."""
    data = bytearray(SEND_BUFFER_SIZE)
    data[: len(_CONTROL_PREAMBLE)] = _CONTROL_PREAMBLE
    data[_INDEX_SMALL_RUMBLE] = _byte("small_rumble", command.small_rumble)
    data[_INDEX_LARGE_RUMBLE] = _byte("large_rumble", command.large_rumble)
    data[_INDEX_RED] = _byte("r", command.r)
    data[_INDEX_GREEN] = _byte("g", command.g)
    data[_INDEX_BLUE] = _byte("b", command.b)
    data[_INDEX_FLASH_ON] = _byte("flash_on", command.flash_on)
    data[_INDEX_FLASH_OFF] = _byte("flash_off", command.flash_off)
    return bytes([HID_SET_REPORT | HID_TYPE_OUTPUT, REPORT_ID_CONTROL]) + bytes(data)


def parse_mac(text: str) -> bytes:
    """Parse a colon-separated Bluetooth address such as ``"02:00:00:00:00:01"``."""
    match = _MAC_PATTERN.match(text)
    if match is None:
        raise ValueError(f"could not convert {text!r} to a MAC address")
    return bytes(int(part, 16) for part in match.groups())


class Ps5Host:
    """Tracks the controller session and dispatches connection and input events.

    Feed received input reports to :attr:`parser`; the first report after a
    connection counts as the handshake and raises the connection callback,
    later ones raise the event callback.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._active = False
        self._connection_cb: Optional[Callable[[bool], object]] = None
        self._event_cb: Optional[Callable[[Ps5State, Ps5Event], object]] = None
        self.parser = PacketParser(self.packet_event)

    @property
    def transport(self) -> Transport:
        """The link to the controller."""
        return self._transport

    @property
    def connected(self) -> bool:
        """Whether a controller has completed the handshake."""
        return self._active

    def enable(self) -> None:
        """Ask the controller to start streaming and set the default light bar."""
        self._transport.send(build_enable_report())
        self.set_led(*ENABLE_LED)

    def send_command(self, command: Ps5Command) -> None:
        """Send feedback settings to the controller."""
        self._transport.send(build_control_report(command))

    def set_led(self, r: int, g: int, b: int) -> None:
        """Set the light bar colour, clearing rumble and flashing."""
        self.send_command(Ps5Command(r=r, g=g, b=b))

    def set_connection_callback(self, callback: Optional[Callable[[bool], object]]) -> None:
        """Register the function told when a controller completes the handshake."""
        self._connection_cb = callback

    def set_event_callback(
        self, callback: Optional[Callable[[Ps5State, Ps5Event], object]]
    ) -> None:
        """Register the function given each input report after the handshake."""
        self._event_cb = callback

    def connect_event(self, connected: bool) -> None:
        """Handle the link coming up (enable streaming) or going down."""
        if connected:
            self.enable()
        else:
            self._active = False

    def packet_event(self, state: Ps5State, event: Ps5Event) -> None:
        """Handle a decoded input report."""
        if self._active:
            if self._event_cb is not None:
                self._event_cb(state, event)
            return
        self._active = True
        if self._connection_cb is not None:
            self._connection_cb(True)


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Ps5Controller:
    """High-level controller: latest state, pending feedback and user callbacks."""

    def __init__(self, host: Ps5Host, clock: Callable[[], float] = _monotonic_ms) -> None:
        self._host = host
        self._clock = clock
        self._try_reconnect_at = 0.0
        self.data = Ps5State()
        self.event = Ps5Event()
        self.output = Ps5Command()
        self._on_event: Optional[Callable[[], object]] = None
        self._on_connect: Optional[Callable[[], object]] = None
        self._on_disconnect: Optional[Callable[[], object]] = None

    @property
    def latest_packet(self) -> bytes:
        """The raw bytes of the most recent input report."""
        return self.data.latest_packet

    def begin(self, mac: Optional[str] = None) -> None:
        """Start listening; with ``mac``, also connect to that controller first."""
        if mac is not None:
            address = parse_mac(mac)
            self._host.transport.connect(address)
        self._host.set_event_callback(self._event_callback)
        self._host.set_connection_callback(self._connection_callback)
        self._host.transport.start()

    def end(self) -> None:
        """Stop receiving events: detach this controller's callbacks from the host."""
        self._host.set_event_callback(None)
        self._host.set_connection_callback(None)

    def is_connected(self) -> bool:
        """Whether a controller is connected; retries the link every few seconds if not."""
        connected = self._host.connected
        if not connected and self._clock() - self._try_reconnect_at > RECONNECT_INTERVAL_MS:
            self._try_reconnect_at = self._clock()
            self._host.transport.reconnect()
        return connected

    def set_led(self, r: int, g: int, b: int) -> None:
        """Set the pending light bar colour."""
        self.output.r, self.output.g, self.output.b = r, g, b

    def set_rumble(self, small: int, large: int) -> None:
        """Set the pending rumble strengths."""
        self.output.small_rumble = small
        self.output.large_rumble = large

    def set_flash_rate(self, on_time: int, off_time: int) -> None:
        """Set the pending flash timing in milliseconds (stored in 10 ms units)."""
        self.output.flash_on = on_time // 10
        self.output.flash_off = off_time // 10

    def send_to_controller(self) -> None:
        """Send the pending feedback settings."""
        self._host.send_command(self.output)

    def attach(self, callback: Optional[Callable[[], object]]) -> None:
        """Call ``callback`` after every input report."""
        self._on_event = callback

    def attach_on_connect(self, callback: Optional[Callable[[], object]]) -> None:
        """Call ``callback`` when a controller connects."""
        self._on_connect = callback

    def attach_on_disconnect(self, callback: Optional[Callable[[], object]]) -> None:
        """Call ``callback`` when a controller disconnects."""
        self._on_disconnect = callback

    def _event_callback(self, state: Ps5State, event: Ps5Event) -> None:
        self.data = state
        self.event = event
        if self._on_event is not None:
            self._on_event()

    def _connection_callback(self, connected: bool) -> None:
        if connected:
            # Give the channel time to settle before the user starts sending.
            time.sleep(_CONNECT_SETTLE_S)
            if self._on_connect is not None:
                self._on_connect()
        elif self._on_disconnect is not None:
            self._on_disconnect()