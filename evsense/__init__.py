"""Thermistor temperature monitoring, CAN temperature frames and accelerator pedal logic."""

__version__ = "0.1.0"