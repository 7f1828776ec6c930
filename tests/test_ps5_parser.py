import pytest

from botdrive.ps5_parser import (
    Buttons,
    PacketParser,
    Ps5State,
    parse_analog_buttons,
    parse_analog_stick,
    parse_buttons,
    parse_event,
    parse_status,
)

NEUTRAL_DIRECTION = 0x08


def make_packet(**overrides):
    packet = bytearray(64)
    packet[11:15] = bytes([128, 127, 128, 127])
    packet[15] = NEUTRAL_DIRECTION
    for index, value in overrides.items():
        packet[int(index[1:])] = value
    return bytes(packet)


def test_centred_sticks_are_zero():
    stick = parse_analog_stick(make_packet())
    assert (stick.lx, stick.ly, stick.rx, stick.ry) == (0, 0, 0, 0)


def test_stick_extremes():
    stick = parse_analog_stick(make_packet(i11=0, i12=0, i13=255, i14=255))
    assert stick.lx == -128
    assert stick.ly == 127
    assert stick.rx == 127
    assert stick.ry == -128


@pytest.mark.parametrize("raw", range(256))
def test_stick_range_and_axis_inversion(raw):
    stick = parse_analog_stick(make_packet(i11=raw, i12=raw, i13=raw, i14=raw))
    assert -128 <= stick.lx <= 127
    assert stick.lx == stick.rx
    assert stick.ly == stick.ry
    assert stick.lx + stick.ly == -1


def test_analog_triggers():
    buttons = parse_analog_buttons(make_packet(i18=17, i19=250))
    assert (buttons.l2, buttons.r2) == (17, 250)


@pytest.mark.parametrize(
    "code,name",
    [
        (0, "up"),
        (1, "upright"),
        (2, "right"),
        (3, "downright"),
        (4, "down"),
        (5, "downleft"),
        (6, "left"),
        (7, "upleft"),
    ],
)
def test_direction_codes(code, name):
    buttons = parse_buttons(make_packet(i15=code))
    assert buttons.pressed() == [name]


def test_neutral_direction_presses_nothing():
    assert parse_buttons(make_packet()).pressed() == []


@pytest.mark.parametrize(
    "index,bit,name",
    [
        (15, 0x10, "square"),
        (15, 0x20, "cross"),
        (15, 0x40, "circle"),
        (15, 0x80, "triangle"),
        (16, 0x01, "l1"),
        (16, 0x02, "r1"),
        (16, 0x04, "l2"),
        (16, 0x08, "r2"),
        (16, 0x10, "share"),
        (16, 0x20, "options"),
        (16, 0x40, "l3"),
        (16, 0x80, "r3"),
        (17, 0x01, "ps"),
        (17, 0x02, "touchpad"),
    ],
)
def test_button_bits(index, bit, name):
    packet = bytearray(make_packet())
    packet[index] |= bit
    assert parse_buttons(packet).pressed() == [name]


def test_status_fields():
    status = parse_status(make_packet(i42=0x10 | 0x40 | 0x07))
    assert status.battery == 0x07
    assert status.charging is True
    assert status.audio is False
    assert status.mic is True


def test_short_packet_raises():
    with pytest.raises(ValueError):
        parse_buttons(bytes(42))
    with pytest.raises(ValueError):
        PacketParser().parse(bytes(10))


def test_event_edges():
    prev = Ps5State(button=Buttons(cross=True, l1=True))
    cur = Ps5State(button=Buttons(l1=True, circle=True))
    event = parse_event(prev, cur)
    assert event.button_down.pressed() == ["circle"]
    assert event.button_up.pressed() == ["cross"]


def test_parser_tracks_state_and_calls_back():
    seen = []
    parser = PacketParser(lambda state, event: seen.append((state, event)))

    first = make_packet(i15=NEUTRAL_DIRECTION | 0x20, i11=200)
    state, event = parser.parse(first)
    assert state.button.cross is True
    assert event.button_down.cross is True
    assert event.analog_move.stick.lx == 1
    assert event.analog_move.stick.ly == 0
    assert state.latest_packet == first
    assert parser.state == state

    second = make_packet()
    state2, event2 = parser.parse(second)
    assert state2.button.cross is False
    assert event2.button_up.cross is True
    assert event2.button_down.pressed() == []
    assert [s for s, _ in seen] == [state, state2]
    assert [e for _, e in seen] == [event, event2]