"""Exceptions raised by the escape-time rendering core."""


class InvalidConfiguration(ValueError):
    """Raised when view, color or mode settings cannot describe a frame."""
