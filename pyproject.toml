[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evsense"
version = "0.1.0"
description = "Thermistor temperature monitoring, CAN temperature frames and accelerator pedal plausibility logic for an EV accumulator management system"
requires-python = ">=3.10"
dependencies = []
keywords = ["thermistor", "battery", "ams", "can", "i2c", "accelerator", "monitoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["evsense"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
