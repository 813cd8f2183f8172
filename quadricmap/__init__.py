"""Object-level mapping with ellipsoids: geometry, initialization, association and error terms."""

__version__ = "0.1.0"