"""routeguard: route-based access rights resolution."""

__version__ = "1.0.0"
