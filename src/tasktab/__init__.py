"""Task lists with archive, restore and themed backgrounds."""

__version__ = "0.1.0"
