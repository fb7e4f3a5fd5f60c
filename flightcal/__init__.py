"""Flight Calendar: habit-tracking calendar backend."""

__version__ = "1.0.0"
