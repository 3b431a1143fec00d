"""Customer analytics export sync."""

__version__ = "0.1.0"
