"""Multi-game wagering simulator."""

__version__ = "1.0.0"
