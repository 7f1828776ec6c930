import io

import pytest

from botdrive.sensor import (
    Color,
    Sensor,
    SensorEvent,
    SensorInfo,
    SensorType,
    Vector,
)


class FakeSensor(Sensor):
    def __init__(self, info):
        self.info = info

    def get_event(self):
        return SensorEvent(sensor_id=self.info.sensor_id, type=self.info.type, data=(1.0, 2.0, 3.0, 0.0))

    def get_sensor(self):
        return self.info


def make(type_=SensorType.LIGHT):
    return FakeSensor(
        SensorInfo(name="test", version=1, sensor_id=42, type=type_,
                   max_value=100.0, min_value=1.5, resolution=0.25)
    )


def test_accelerometer_label():
    assert SensorType.ACCELEROMETER.label() == "Acceleration (m/s2)"


@pytest.mark.parametrize(
    "value, label",
    [
        (2, "Magnetic (uT)"),
        (6, "Pressure (hPa)"),
        (13, "Ambient Temp (C)"),
        (17, "Color (RGBA)"),
        (29, "Gas Resistance (ohms)"),
        (31, "Altitude (m)"),
    ],
)
def test_type_labels_by_value(value, label):
    assert SensorType(value).label() == label


def test_details_contains_fields():
    text = make().sensor_details()
    lines = text.splitlines()
    assert "Sensor:       test" in lines
    assert "Type:         Light (lux)" in lines
    assert "Unique ID:    42" in lines
    assert "Min Value:    1.50" in lines


def test_details_unknown_type_has_empty_label():
    lines = make(type_=7).sensor_details().splitlines()
    assert "Type:         " in lines


def test_details_framed_by_rules():
    lines = make().sensor_details().splitlines()
    assert lines[0] == lines[8]
    assert set(lines[0]) == {"-"}


def test_print_matches_details():
    sensor = make()
    out = io.StringIO()
    sensor.print_sensor_details(out)
    assert out.getvalue() == sensor.sensor_details()


def test_sensor_is_abstract():
    with pytest.raises(TypeError):
        Sensor()


def test_vector_orientation_aliases():
    v = Vector(1.0, 2.0, 3.0)
    assert (v.roll, v.pitch, v.heading) == v.v
    v.heading = 9.0
    assert v.z == 9.0


def test_event_views_share_data():
    event = make().get_event()
    assert event.acceleration.v == (1.0, 2.0, 3.0)
    assert event.gyro == event.magnetic
    assert event.temperature == event.data[0]
    assert event.color == Color(1.0, 2.0, 3.0)