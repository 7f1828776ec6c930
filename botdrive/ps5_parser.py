"""Decoding of PS5 controller input reports into state snapshots and edge events."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Callable, Optional, Sequence

_INDEX_STICK_LX = 11
_INDEX_STICK_LY = 12
_INDEX_STICK_RX = 13
_INDEX_STICK_RY = 14
_INDEX_BUTTON_STANDARD = 15
_INDEX_BUTTON_EXTRA = 16
_INDEX_BUTTON_PS = 17
_INDEX_ANALOG_L2 = 18
_INDEX_ANALOG_R2 = 19
_INDEX_STATUS = 42

MIN_PACKET_LENGTH = _INDEX_STATUS + 1

_STICK_OFFSET = 128

_MASK_DIRECTION = 0x0F
_DIRECTIONS = {
    "up": 0,
    "upright": 1,
    "right": 2,
    "downright": 3,
    "down": 4,
    "downleft": 5,
    "left": 6,
    "upleft": 7,
}
_FRONT_BITS = {"square": 0x10, "cross": 0x20, "circle": 0x40, "triangle": 0x80}
_EXTRA_BITS = {
    "l1": 0x01,
    "r1": 0x02,
    "l2": 0x04,
    "r2": 0x08,
    "share": 0x10,
    "options": 0x20,
    "l3": 0x40,
    "r3": 0x80,
}
_PS_BITS = {"ps": 0x01, "touchpad": 0x02}

_STATUS_BATTERY = 0x0F
_STATUS_CHARGING = 0x10
_STATUS_AUDIO = 0x20
_STATUS_MIC = 0x40


@dataclass(frozen=True)
class AnalogStick:
    """Stick positions, each centred on zero."""

    lx: int = 0
    ly: int = 0
    rx: int = 0
    ry: int = 0


@dataclass(frozen=True)
class AnalogButtons:
    """Analog trigger positions, 0..255."""

    l2: int = 0
    r2: int = 0


@dataclass(frozen=True)
class Analog:
    """All analog inputs."""

    stick: AnalogStick = field(default_factory=AnalogStick)
    button: AnalogButtons = field(default_factory=AnalogButtons)


@dataclass(frozen=True)
class Buttons:
    """Digital button states."""

    right: bool = False
    down: bool = False
    up: bool = False
    left: bool = False

    square: bool = False
    cross: bool = False
    circle: bool = False
    triangle: bool = False

    upright: bool = False
    downright: bool = False
    upleft: bool = False
    downleft: bool = False

    l1: bool = False
    r1: bool = False
    l2: bool = False
    r2: bool = False

    share: bool = False
    options: bool = False
    l3: bool = False
    r3: bool = False

    ps: bool = False
    touchpad: bool = False

    def pressed(self) -> list[str]:
        """Names of the buttons that are set."""
        return [f.name for f in fields(self) if getattr(self, f.name)]


@dataclass(frozen=True)
class Status:
    """Battery level and status flags."""

    battery: int = 0
    charging: bool = False
    audio: bool = False
    mic: bool = False


@dataclass(frozen=True)
class Ps5State:
    """A decoded input report."""

    analog: Analog = field(default_factory=Analog)
    button: Buttons = field(default_factory=Buttons)
    status: Status = field(default_factory=Status)
    latest_packet: bytes = b""


@dataclass(frozen=True)
class Ps5Event:
    """Changes between two reports: pressed and released buttons, moved sticks."""

    button_down: Buttons = field(default_factory=Buttons)
    button_up: Buttons = field(default_factory=Buttons)
    analog_move: Analog = field(default_factory=Analog)


def _check(packet: Sequence[int]) -> None:
    if len(packet) < MIN_PACKET_LENGTH:
        raise ValueError(
            f"packet must hold at least {MIN_PACKET_LENGTH} bytes, not {len(packet)}"
        )


def parse_buttons(packet: Sequence[int]) -> Buttons:
    """Decode the digital buttons of a report."""
    _check(packet)
    front = packet[_INDEX_BUTTON_STANDARD]
    extra = packet[_INDEX_BUTTON_EXTRA]
    ps = packet[_INDEX_BUTTON_PS]
    direction = front & _MASK_DIRECTION

    values: dict[str, bool] = {
        name: direction == code for name, code in _DIRECTIONS.items()
    }
    values.update({name: bool(front & bit) for name, bit in _FRONT_BITS.items()})
    values.update({name: bool(extra & bit) for name, bit in _EXTRA_BITS.items()})
    values.update({name: bool(ps & bit) for name, bit in _PS_BITS.items()})
    return Buttons(**values)


def parse_analog_stick(packet: Sequence[int]) -> AnalogStick:
    """Decode the stick positions; the Y axes point up."""
    _check(packet)
    return AnalogStick(
        lx=packet[_INDEX_STICK_LX] - _STICK_OFFSET,
        ly=_STICK_OFFSET - 1 - packet[_INDEX_STICK_LY],
        rx=packet[_INDEX_STICK_RX] - _STICK_OFFSET,
        ry=_STICK_OFFSET - 1 - packet[_INDEX_STICK_RY],
    )


def parse_analog_buttons(packet: Sequence[int]) -> AnalogButtons:
    """Decode the analog trigger positions."""
    _check(packet)
    return AnalogButtons(l2=packet[_INDEX_ANALOG_L2], r2=packet[_INDEX_ANALOG_R2])


def parse_status(packet: Sequence[int]) -> Status:
    """Decode the battery level and status flags."""
    _check(packet)
    status = packet[_INDEX_STATUS]
    return Status(
        battery=status & _STATUS_BATTERY,
        charging=bool(status & _STATUS_CHARGING),
        audio=bool(status & _STATUS_AUDIO),
        mic=bool(status & _STATUS_MIC),
    )


def parse_event(prev: Ps5State, cur: Ps5State) -> Ps5Event:
    """Compare two states: buttons pressed, buttons released and sticks off centre."""
    names = [f.name for f in fields(Buttons)]
    down = {n: not getattr(prev.button, n) and getattr(cur.button, n) for n in names}
    up = {n: getattr(prev.button, n) and not getattr(cur.button, n) for n in names}
    stick = cur.analog.stick
    move = AnalogStick(
        lx=int(stick.lx != 0),
        ly=int(stick.ly != 0),
        rx=int(stick.rx != 0),
        ry=int(stick.ry != 0),
    )
    return Ps5Event(
        button_down=Buttons(**down),
        button_up=Buttons(**up),
        analog_move=Analog(stick=move),
    )


class PacketParser:
    """Keeps the latest controller state and reports each new packet with its event."""

    def __init__(
        self, on_packet: Optional[Callable[[Ps5State, Ps5Event], object]] = None
    ) -> None:
        self._on_packet = on_packet
        self._state = Ps5State()

    @property
    def state(self) -> Ps5State:
        """The most recently decoded state."""
        return self._state

    def parse(self, packet: Sequence[int]) -> tuple[Ps5State, Ps5Event]:
        """Decode ``packet``, update the state and notify the callback."""
        data = bytes(packet)
        _check(data)
        prev = self._state
        cur = Ps5State(
            analog=Analog(
                stick=parse_analog_stick(data), button=parse_analog_buttons(data)
            ),
            button=parse_buttons(data),
            status=parse_status(data),
            latest_packet=data,
        )
        event = parse_event(prev, cur)
        self._state = cur
        if self._on_packet is not None:
            self._on_packet(cur, event)
        return cur, event