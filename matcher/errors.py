"""
Error types raised by the volunteer matcher.
"""


class InvalidInterval(ValueError):
    """A time slot was built with a missing bound or with start not before end."""


class InvalidArgument(ValueError):
    """The matching engine was handed a missing collection of slots."""
