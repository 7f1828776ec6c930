[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "botdrive"
version = "0.1.0"
description = "Motor driver protocols, a PID controller, unified sensor types and PS5 controller reports for small robots"
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "sabertooth", "syren", "pid", "motor-driver", "ps5", "sensor"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["botdrive"]

[tool.pytest.ini_options]
addopts = "-ra"
