"""shtmon: live SHTC3 temperature/humidity monitor."""

__version__ = "0.1.0"
