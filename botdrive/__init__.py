"""Motor driver protocols, PID control, sensor types and PS5 controller reports for small robots."""

__version__ = "0.1.0"