"""Unified sensor interface: sensor types, event and detail records, and a base class."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TextIO

GRAVITY_EARTH = 9.80665
GRAVITY_MOON = 1.6
GRAVITY_SUN = 275.0
GRAVITY_STANDARD = GRAVITY_EARTH
MAGFIELD_EARTH_MAX = 60.0
MAGFIELD_EARTH_MIN = 30.0
PRESSURE_SEALEVEL_HPA = 1013.25
DPS_TO_RADS = 0.017453293
RADS_TO_DPS = 57.29577793
GAUSS_TO_MICROTESLA = 100

_RULE = "-" * 36


class SensorType(IntEnum):
    """Kinds of quantity a sensor can report."""

    ACCELEROMETER = 1
    MAGNETIC_FIELD = 2
    ORIENTATION = 3
    GYROSCOPE = 4
    LIGHT = 5
    PRESSURE = 6
    PROXIMITY = 8
    GRAVITY = 9
    LINEAR_ACCELERATION = 10
    ROTATION_VECTOR = 11
    RELATIVE_HUMIDITY = 12
    AMBIENT_TEMPERATURE = 13
    OBJECT_TEMPERATURE = 14
    VOLTAGE = 15
    CURRENT = 16
    COLOR = 17
    TVOC = 18
    VOC_INDEX = 19
    NOX_INDEX = 20
    CO2 = 21
    ECO2 = 22
    PM10_STD = 23
    PM25_STD = 24
    PM100_STD = 25
    PM10_ENV = 26
    PM25_ENV = 27
    PM100_ENV = 28
    GAS_RESISTANCE = 29
    UNITLESS_PERCENT = 30
    ALTITUDE = 31

    def label(self) -> str:
        """Human-readable description of the quantity and its unit."""
        return _LABELS[self]


_LABELS = {
    SensorType.ACCELEROMETER: "Acceleration (m/s2)",
    SensorType.MAGNETIC_FIELD: "Magnetic (uT)",
    SensorType.ORIENTATION: "Orientation (degrees)",
    SensorType.GYROSCOPE: "Gyroscopic (rad/s)",
    SensorType.LIGHT: "Light (lux)",
    SensorType.PRESSURE: "Pressure (hPa)",
    SensorType.PROXIMITY: "Distance (cm)",
    SensorType.GRAVITY: "Gravity (m/s2)",
    SensorType.LINEAR_ACCELERATION: "Linear Acceleration (m/s2)",
    SensorType.ROTATION_VECTOR: "Rotation vector",
    SensorType.RELATIVE_HUMIDITY: "Relative Humidity (%)",
    SensorType.AMBIENT_TEMPERATURE: "Ambient Temp (C)",
    SensorType.OBJECT_TEMPERATURE: "Object Temp (C)",
    SensorType.VOLTAGE: "Voltage (V)",
    SensorType.CURRENT: "Current (mA)",
    SensorType.COLOR: "Color (RGBA)",
    SensorType.TVOC: "Total Volatile Organic Compounds (ppb)",
    SensorType.VOC_INDEX: "Volatile Organic Compounds (Index)",
    SensorType.NOX_INDEX: "Nitrogen Oxides (Index)",
    SensorType.CO2: "Carbon Dioxide (ppm)",
    SensorType.ECO2: "Equivalent/estimated CO2 (ppm)",
    SensorType.PM10_STD: "Standard Particulate Matter 1.0 (ppm)",
    SensorType.PM25_STD: "Standard Particulate Matter 2.5 (ppm)",
    SensorType.PM100_STD: "Standard Particulate Matter 10.0 (ppm)",
    SensorType.PM10_ENV: "Environmental Particulate Matter 1.0 (ppm)",
    SensorType.PM25_ENV: "Environmental Particulate Matter 2.5 (ppm)",
    SensorType.PM100_ENV: "Environmental Particulate Matter 10.0 (ppm)",
    SensorType.GAS_RESISTANCE: "Gas Resistance (ohms)",
    SensorType.UNITLESS_PERCENT: "Unitless Percent (%)",
    SensorType.ALTITUDE: "Altitude (m)",
}


def _type_label(value: int) -> str:
    try:
        return SensorType(value).label()
    except ValueError:
        return ""


@dataclass
class Vector:
    """Three-component vector; roll/pitch/heading name the same components."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    status: int = 0

    @property
    def roll(self) -> float:
        return self.x

    @roll.setter
    def roll(self, value: float) -> None:
        self.x = value

    @property
    def pitch(self) -> float:
        return self.y

    @pitch.setter
    def pitch(self, value: float) -> None:
        self.y = value

    @property
    def heading(self) -> float:
        return self.z

    @heading.setter
    def heading(self, value: float) -> None:
        self.z = value

    @property
    def v(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass
class Color:
    """RGB colour reading with an optional packed RGBA value."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    rgba: int = 0

    @property
    def c(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


def _scalar() -> property:
    return property(lambda self: self.data[0], doc="First data element.")


def _vector() -> property:
    return property(lambda self: Vector(*self.data[:3]), doc="First three data elements.")


@dataclass
class SensorEvent:
    """A single reading; the named accessors view the same raw data."""

    version: int = 0
    sensor_id: int = 0
    type: int = 0
    timestamp: int = 0
    data: tuple[float, ...] = field(default=(0.0, 0.0, 0.0, 0.0))

    acceleration = _vector()
    magnetic = _vector()
    orientation = _vector()
    gyro = _vector()

    temperature = _scalar()
    distance = _scalar()
    light = _scalar()
    pressure = _scalar()
    relative_humidity = _scalar()
    current = _scalar()
    voltage = _scalar()
    tvoc = _scalar()
    voc_index = _scalar()
    nox_index = _scalar()
    co2 = _scalar()
    eco2 = _scalar()
    pm10_std = _scalar()
    pm25_std = _scalar()
    pm100_std = _scalar()
    pm10_env = _scalar()
    pm25_env = _scalar()
    pm100_env = _scalar()
    gas_resistance = _scalar()
    unitless_percent = _scalar()
    altitude = _scalar()

    @property
    def color(self) -> Color:
        return Color(*self.data[:3])


@dataclass
class SensorInfo:
    """Static description of a sensor."""

    name: str = ""
    version: int = 0
    sensor_id: int = 0
    type: int = 0
    max_value: float = 0.0
    min_value: float = 0.0
    resolution: float = 0.0
    min_delay: int = 0


class Sensor(ABC):
    """Common interface for sensors that report unified events."""

    def enable_auto_range(self, enabled: bool) -> None:
        """Ask the sensor to change range automatically; ignored by default."""

    @abstractmethod
    def get_event(self) -> SensorEvent:
        """Return the latest reading."""

    @abstractmethod
    def get_sensor(self) -> SensorInfo:
        """Return the sensor's description."""

    def sensor_details(self) -> str:
        """Describe the sensor as a block of text."""
        info = self.get_sensor()
        lines = [
            _RULE,
            f"Sensor:       {info.name}",
            f"Type:         {_type_label(info.type)}",
            f"Driver Ver:   {info.version}",
            f"Unique ID:    {info.sensor_id}",
            f"Min Value:    {info.min_value:.2f}",
            f"Max Value:    {info.max_value:.2f}",
            f"Resolution:   {info.resolution:.2f}",
            _RULE,
            "",
        ]
        return "\n".join(lines) + "\n"

    def print_sensor_details(self, file: TextIO | None = None) -> None:
        """Write the sensor description to ``file`` (standard output by default)."""
        (file or sys.stdout).write(self.sensor_details())