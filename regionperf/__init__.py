"""Region performance dashboard backend."""

__version__ = "0.4.0"
