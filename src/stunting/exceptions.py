"""Exceptions raised by the stunting engine."""


class InvalidMeasurement(ValueError):
    """Raised when a measurement cannot produce a meaningful Z-score."""
