# botdrive

Building blocks for small robots, in plain Python with no third-party
dependencies:

- **Motor drivers**: Packet Serial for Sabertooth and SyRen drivers
  (`botdrive.sabertooth`), Simplified Serial for Sabertooth
  (`botdrive.sabertooth_simplified`) and SyRen (`botdrive.syren`), and the
  CRC- or checksum-protected protocol of USB Sabertooth drivers
  (`botdrive.usb_protocol`, `botdrive.usb_sabertooth`).
- **PID control**: a PID controller with output clamping, proportional on
  error or on measurement, and bumpless manual-to-automatic transfer
  (`botdrive.pid`).
- **Sensors**: sensor types, event and detail records and an abstract
  `Sensor` base class (`botdrive.sensor`).
- **PS5 controller**: decoding of input reports into buttons, sticks and
  status with press/release events (`botdrive.ps5_parser`), building of
  output reports for the light bar and rumble, and a session object and
  high-level controller (`botdrive.ps5`).

A port is any object with a `write(bytes)` method; the USB Sabertooth link
also needs `read(1)` that returns `b""` when no byte is waiting. An open
`serial.Serial` with a zero read timeout fits both.

## Install

```
pip install botdrive
```

## Examples

Packet Serial:

```python
from botdrive.sabertooth import Sabertooth

driver = Sabertooth(128, port)
driver.autobaud()          # sleeps 1.5 s before and 0.5 s after the autobaud byte
driver.drive(60)
driver.turn(-20)
driver.motor(-40, 2)
driver.set_timeout(250)    # rounded up to 300 ms
driver.stop()
```

Simplified Serial:

```python
from botdrive.sabertooth_simplified import SabertoothSimplified
from botdrive.syren import SyRenSimplified

SabertoothSimplified(port).motor(100, 1)
SyRenSimplified(port).motor(-50)
```

USB Sabertooth, reading back the battery voltage. The get timeout is
infinite by default; give it a value in milliseconds so that `get` raises
`GetTimeoutError` instead of waiting for ever:

```python
from botdrive.usb_protocol import SabertoothSerial
from botdrive.usb_sabertooth import USBSabertooth, GetTimeoutError

link = SabertoothSerial(port)
driver = USBSabertooth(link, 128)
driver.get_timeout = 500
driver.motor(1024, 1)
try:
    battery = driver.get_battery(1)
except GetTimeoutError:
    battery = None
```

The framing is usable on its own:

```python
from botdrive.usb_protocol import Command, encode_command, crc7, crc14, checksum

packet = encode_command(128, Command.SET, True, bytes([0, 0, 8, ord("M"), ord("1")]))
```

A PID loop. `compute()` only acts in automatic mode and once per sample
time (100 ms by default):

```python
from botdrive.pid import PID, Mode, Direction

pid = PID(2.0, 5.0, 1.0, direction=Direction.DIRECT)
pid.set_output_limits(0, 255)
pid.set_mode(Mode.AUTOMATIC)
pid.input, pid.setpoint = read_temperature(), 70.0
if pid.compute():
    heater.write(pid.output)
```

A sensor:

```python
from botdrive.sensor import Sensor, SensorEvent, SensorInfo, SensorType

class Thermometer(Sensor):
    def get_event(self):
        return SensorEvent(type=SensorType.AMBIENT_TEMPERATURE, data=(21.5, 0.0, 0.0, 0.0))

    def get_sensor(self):
        return SensorInfo(name="therm", type=SensorType.AMBIENT_TEMPERATURE)

Thermometer().print_sensor_details()
print(Thermometer().get_event().temperature)
```

Decoding PS5 input reports:

```python
from botdrive.ps5_parser import PacketParser

parser = PacketParser(lambda state, event: print(state.button.cross, event.button_down.pressed()))
parser.parse(report_bytes)   # at least 43 bytes
```

A controller session, given a transport object with `start()`,
`send(report)`, `connect(address)` and `reconnect()`:

```python
from botdrive.ps5 import Ps5Host, Ps5Controller

host = Ps5Host(transport)
controller = Ps5Controller(host)
controller.attach_on_connect(lambda: print("connected"))
controller.begin("02:00:00:00:00:01")

host.connect_event(True)          # link is up: streaming is enabled
host.parser.parse(report_bytes)   # first report completes the handshake

controller.set_led(255, 0, 0)
controller.set_rumble(0, 128)
controller.send_to_controller()
```

## What it does not do

- It opens no serial ports; you pass in an already open port object.
- It has no Bluetooth stack. `Ps5Host` and `Ps5Controller` only build and
  interpret reports and track the session; the transport that carries them
  to and from the controller is yours to supply.
- There is no command-line tool.

## Tests

```
pip install botdrive[test]
pytest
```