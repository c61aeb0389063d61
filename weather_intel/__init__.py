"""weather_intel – weather intelligence and operations-risk engine."""

__version__ = "0.1.0"
