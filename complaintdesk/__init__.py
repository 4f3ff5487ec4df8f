"""University complaint desk backend library."""

__version__ = "0.1.0"
