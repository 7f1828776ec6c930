"""Discrete PID controller with anti-windup and bumpless manual-to-automatic transfer."""

from __future__ import annotations

import time
from enum import IntEnum
from typing import Callable


class Mode(IntEnum):
    """Whether the controller computes its output."""

    MANUAL = 0
    AUTOMATIC = 1


class Direction(IntEnum):
    """How the process responds to the controller output."""

    DIRECT = 0
    REVERSE = 1


class ProportionalOn(IntEnum):
    """What the proportional term acts on."""

    MEASUREMENT = 0
    ERROR = 1


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _clamp(value: float, low: float, high: float) -> float:
    if value > high:
        return high
    if value < low:
        return low
    return value


class PID:
    """PID controller working on its ``input``, ``output`` and ``setpoint`` attributes.

    Set ``input`` and ``setpoint``, call :meth:`compute` regularly and read
    ``output``. Invalid settings (negative gains, an empty output range, a
    non-positive sample time) are ignored, leaving the previous ones in place.
    """

    def __init__(
        self,
        kp: float,
        ki: float,
        kd: float,
        proportional_on: ProportionalOn | int = ProportionalOn.ERROR,
        direction: Direction | int = Direction.DIRECT,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.input = 0.0
        self.output = 0.0
        self.setpoint = 0.0

        self._clock = clock
        self._in_auto = False
        self._output_sum = 0.0
        self._last_input = 0.0

        self._disp_kp = 0.0
        self._disp_ki = 0.0
        self._disp_kd = 0.0
        self._kp = 0.0
        self._ki = 0.0
        self._kd = 0.0
        self._p_on = ProportionalOn(proportional_on)
        self._p_on_e = self._p_on == ProportionalOn.ERROR

        self._out_min = 0.0
        self._out_max = 255.0
        self.set_output_limits(0, 255)

        self._sample_time = 100
        self._direction = Direction(direction)
        self.set_controller_direction(direction)
        self.set_tunings(kp, ki, kd, proportional_on)

        self._last_time = self._clock() - self._sample_time

    @property
    def kp(self) -> float:
        """Proportional gain as entered."""
        return self._disp_kp

    @property
    def ki(self) -> float:
        """Integral gain as entered."""
        return self._disp_ki

    @property
    def kd(self) -> float:
        """Derivative gain as entered."""
        return self._disp_kd

    @property
    def mode(self) -> Mode:
        """Current mode."""
        return Mode.AUTOMATIC if self._in_auto else Mode.MANUAL

    @property
    def direction(self) -> Direction:
        """Current controller direction."""
        return self._direction

    @property
    def sample_time(self) -> int:
        """Period between computations, in milliseconds."""
        return self._sample_time

    @property
    def output_limits(self) -> tuple[float, float]:
        """The (minimum, maximum) output range."""
        return (self._out_min, self._out_max)

    def compute(self) -> bool:
        """Compute a new output if in automatic mode and a sample period has passed."""
        if not self._in_auto:
            return False
        now = self._clock()
        if now - self._last_time < self._sample_time:
            return False

        value = self.input
        error = self.setpoint - value
        d_input = value - self._last_input
        self._output_sum += self._ki * error

        if not self._p_on_e:
            self._output_sum -= self._kp * d_input
        self._output_sum = _clamp(self._output_sum, self._out_min, self._out_max)

        output = self._kp * error if self._p_on_e else 0.0
        output += self._output_sum - self._kd * d_input
        self.output = _clamp(output, self._out_min, self._out_max)

        self._last_input = value
        self._last_time = now
        return True

    def set_tunings(
        self,
        kp: float,
        ki: float,
        kd: float,
        proportional_on: ProportionalOn | int | None = None,
    ) -> None:
        """Change the gains, and optionally what the proportional term acts on."""
        if kp < 0 or ki < 0 or kd < 0:
            return
        if proportional_on is None:
            proportional_on = self._p_on
        self._p_on = ProportionalOn(proportional_on)
        self._p_on_e = self._p_on == ProportionalOn.ERROR

        self._disp_kp, self._disp_ki, self._disp_kd = kp, ki, kd

        sample_time_s = self._sample_time / 1000
        self._kp = kp
        self._ki = ki * sample_time_s
        self._kd = kd / sample_time_s

        if self._direction == Direction.REVERSE:
            self._kp, self._ki, self._kd = -self._kp, -self._ki, -self._kd

    def set_sample_time(self, sample_time_ms: int) -> None:
        """Set the computation period in milliseconds."""
        if sample_time_ms <= 0:
            return
        ratio = sample_time_ms / self._sample_time
        self._ki *= ratio
        self._kd /= ratio
        self._sample_time = int(sample_time_ms)

    def set_output_limits(self, minimum: float, maximum: float) -> None:
        """Clamp the output (and the integral term) to [minimum, maximum]."""
        if minimum >= maximum:
            return
        self._out_min = minimum
        self._out_max = maximum
        if self._in_auto:
            self.output = _clamp(self.output, minimum, maximum)
            self._output_sum = _clamp(self._output_sum, minimum, maximum)

    def set_mode(self, mode: Mode | int) -> None:
        """Switch between manual and automatic; entering automatic is bumpless."""
        new_auto = mode == Mode.AUTOMATIC
        if new_auto and not self._in_auto:
            self._initialize()
        self._in_auto = new_auto

    def set_controller_direction(self, direction: Direction | int) -> None:
        """Set whether the process is direct or reverse acting."""
        direction = Direction(direction)
        if self._in_auto and direction != self._direction:
            self._kp, self._ki, self._kd = -self._kp, -self._ki, -self._kd
        self._direction = direction

    def _initialize(self) -> None:
        self._output_sum = _clamp(self.output, self._out_min, self._out_max)
        self._last_input = self.input