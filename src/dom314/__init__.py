"""dom314 - a personal podcast tracker for the terminal."""

__version__ = "0.3.0"
