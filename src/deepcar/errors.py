"""
Exception types raised by the simulation.
"""


class DeepCarError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(DeepCarError):
    """Malformed setup: bad network topology, empty population, missing track data."""


class DimensionMismatch(DeepCarError, ValueError):
    """A vector did not have the length its consumer expects."""


class LengthMismatch(DimensionMismatch):
    """A gene vector does not match the parameter count of its network."""
