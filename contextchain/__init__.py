"""
contextchain - compose middleware constructors around context-aware ASGI handlers.
"""

import logging

from .chain import Chain, new
from .adapter import ContextAdapter
from .handler import ContextHandler, ContextHandlerFunc, Constructor
from .request import Request
from .response import ResponseWriter
from .status import HTTPStatus
from .exceptions import ChainError, ConfigurationError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Chain",
    "new",
    "ContextAdapter",
    "ContextHandler",
    "ContextHandlerFunc",
    "Constructor",
    "Request",
    "ResponseWriter",
    "HTTPStatus",
    "ChainError",
    "ConfigurationError",
]
