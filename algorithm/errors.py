"""Errors raised by the ranking code."""


class InvalidInput(ValueError):
    """Negative view count, unparseable timestamp, or unknown sort order."""
