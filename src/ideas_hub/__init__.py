"""Ideas Hub: trade idea engagement API."""

__version__ = "0.1.0"
