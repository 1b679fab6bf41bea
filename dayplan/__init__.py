"""dayplan - daily task selection for the Ivy-6 planning ritual."""

__version__ = "0.1.0"
