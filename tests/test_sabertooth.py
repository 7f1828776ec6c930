import pytest

from botdrive.sabertooth import AUTOBAUD_BYTE, Sabertooth, autobaud


class RecordingPort:
    def __init__(self):
        self.data = bytearray()
        self.flushes = 0

    def write(self, data):
        self.data.extend(data)
        return len(data)

    def flush(self):
        self.flushes += 1

    def packets(self):
        return [bytes(self.data[i:i + 4]) for i in range(0, len(self.data), 4)]


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def make(address=128):
    port = RecordingPort()
    sleep = SleepRecorder()
    return Sabertooth(address, port, sleep), port, sleep


def only_packet(port):
    packets = port.packets()
    assert len(packets) == 1
    packet = packets[0]
    assert packet[3] == (packet[0] + packet[1] + packet[2]) & 0x7F
    return packet


def test_autobaud_no_wait():
    port = RecordingPort()
    sleep = SleepRecorder()
    autobaud(port, True, sleep)
    assert bytes(port.data) == bytes([AUTOBAUD_BYTE])
    assert sleep.calls == []
    assert port.flushes == 1


def test_autobaud_waits_around_byte():
    saber, port, sleep = make()
    saber.autobaud()
    assert bytes(port.data) == b"\xaa"
    assert sleep.calls == [1.5, 0.5]


def test_command_packet_layout():
    saber, port, _ = make(130)
    saber.command(7, 99)
    packet = only_packet(port)
    assert packet[:3] == bytes([130, 7, 99])
    assert saber.address == 130
    assert saber.port is port


def test_invalid_address_rejected():
    with pytest.raises(ValueError):
        Sabertooth(300, RecordingPort())


def test_motor_power_is_clamped():
    saber, port, _ = make()
    saber.motor(500)
    high = only_packet(port)
    port.data.clear()
    saber.motor(126)
    assert only_packet(port) == high
    assert high[2] == 126


def test_motor_direction_and_number_select_command():
    saber, port, _ = make()
    saber.motor(40, 1)
    saber.motor(-40, 1)
    saber.motor(40, 2)
    saber.motor(-40, 2)
    commands = [p[1] for p in port.packets()]
    assert commands[1] == commands[0] + 1
    assert commands[2] == commands[0] + 4
    assert commands[3] == commands[2] + 1
    assert all(p[2] == 40 for p in port.packets())


def test_invalid_motor_number_sends_nothing():
    saber, port, _ = make()
    saber.motor(50, 3)
    saber.motor(50, 0)
    assert port.data == bytearray()


def test_drive_and_turn_commands_differ_by_sign():
    saber, port, _ = make()
    saber.drive(30)
    saber.drive(-30)
    saber.turn(30)
    saber.turn(-30)
    packets = port.packets()
    assert packets[1][1] == packets[0][1] + 1
    assert packets[3][1] == packets[2][1] + 1
    assert packets[0][1] != packets[2][1]
    assert {p[2] for p in packets} == {30}


def test_stop_sets_both_motors_to_zero():
    saber, port, _ = make()
    saber.stop()
    expected = RecordingPort()
    other = Sabertooth(128, expected)
    other.motor(0, 1)
    other.motor(0, 2)
    assert port.data == expected.data
    assert [p[2] for p in port.packets()] == [0, 0]


def test_min_voltage_capped():
    saber, port, _ = make()
    saber.set_min_voltage(200)
    assert only_packet(port)[2] == 120


def test_max_voltage_and_deadband_capped():
    saber, port, _ = make()
    saber.set_max_voltage(250)
    saber.set_deadband(250)
    assert [p[2] for p in port.packets()] == [127, 127]


def test_ramping_clamped():
    saber, port, _ = make()
    saber.set_ramping(200)
    saber.set_ramping(80)
    a, b = port.packets()
    assert a == b
    assert a[2] == 80


def test_timeout_rounds_up_and_clamps():
    def value_for(ms):
        saber, port, _ = make()
        saber.set_timeout(ms)
        return only_packet(port)[2]

    assert value_for(1) == value_for(100)
    assert value_for(101) == value_for(200)
    assert value_for(-5) == value_for(0) == 0
    assert value_for(99999) == value_for(12700)


def test_baud_rate_codes_are_distinct_and_default_to_9600():
    values = {}
    for rate in (2400, 9600, 19200, 38400, 115200, 4800):
        saber, port, sleep = make()
        saber.set_baud_rate(rate)
        values[rate] = only_packet(port)[2]
        assert sleep.calls == [0.5]
        assert port.flushes == 2
    assert len({values[r] for r in (2400, 9600, 19200, 38400, 115200)}) == 5
    assert values[4800] == values[9600]