"""Local data-access layer for rental branches, rooms, utilities and payments."""

__version__ = "0.1.0"
