"""clipkeep: bounded, time-aware clipboard history."""

__version__ = "0.1.0"
