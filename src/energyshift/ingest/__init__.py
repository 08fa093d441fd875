"""Utility modules for loading meter readings."""

from .readings import EnergyParseError, EnergyReadings, parse_readings, read_energy_csv
from .resample import resample

__all__ = [
    "EnergyParseError",
    "EnergyReadings",
    "parse_readings",
    "read_energy_csv",
    "resample",
]
