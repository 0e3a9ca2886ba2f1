"""
Errors raised by contextchain itself.

Anything raised by a middleware constructor or a handler is not wrapped:
it reaches the caller unchanged.
"""


class ChainError(Exception):
    """Base class for errors raised by contextchain."""


class ConfigurationError(ChainError, ValueError):
    """A chain was materialized with an unusable configuration (e.g. no terminal handler)."""

    def __init__(self, message: str = "Terminal handler can't be None"):
        super().__init__(message)
        self.message = message
