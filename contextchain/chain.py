"""
Chain implementation for contextchain.

A Chain is an immutable, ordered list of middleware constructors. Calling
one of the ``then_*`` methods builds the execution pipeline around a terminal
handler and binds it to a context value.
"""

from typing import Any, Iterator, Optional, Tuple

from .adapter import ContextAdapter
from .exceptions import ConfigurationError
from .handler import Constructor, ContextHandler, ContextHandlerFunc, HandlerFunc


class Chain:
    """
    An immutable list of middleware constructors.

    Once created, a chain always holds the same constructors in the same order.
    ``append`` and ``extend`` return new chains and never touch the receiver,
    so a chain can be shared and reused freely.

    Example:
        std = Chain(rate_limit, csrf)
        index = std.then_func_with_context(ctx, index_handler)
        auth = std.then_func_with_context(ctx, auth_handler)
    """

    __slots__ = ("_constructors",)

    def __init__(self, *constructors: Constructor):
        """
        Memorize the given constructors. They are only called on materialization.

        Args:
            *constructors: Middleware constructors, in request flow order
        """
        self._constructors: Tuple[Constructor, ...] = tuple(constructors)

    @property
    def constructors(self) -> Tuple[Constructor, ...]:
        """The constructors in declaration order."""
        return self._constructors

    def then_with_context(self, ctx: Any, handler: Optional[ContextHandler]) -> ContextAdapter:
        """
        Chain the middleware around ``handler`` and bind the result to ``ctx``.

        ``Chain(m1, m2, m3).then_with_context(ctx, h)`` is equivalent to
        ``ContextAdapter(ctx, m1(m2(m3(h))))``: a request goes to m1, then m2,
        then m3 and finally h (assuming every middleware calls the next one).

        Constructors are called on every call, so reusing a chain creates
        several instances of the same middleware.

        Args:
            ctx: Context value passed to the outermost handler on every request
            handler: The terminal handler

        Returns:
            A ContextAdapter wrapping the fully composed handler

        Raises:
            ConfigurationError: If handler is None
        """
        if handler is None:
            raise ConfigurationError(
                "then_with_context: terminal handler can't be None"
            )

        final = handler
        for constructor in reversed(self._constructors):
            final = constructor(final)

        return ContextAdapter(ctx, final)

    def then_func_with_context(self, ctx: Any, func: Optional[HandlerFunc]) -> ContextAdapter:
        """
        Same as ``then_with_context`` but takes a plain coroutine function.

        ``c.then_func_with_context(ctx, fn)`` is equivalent to
        ``c.then_with_context(ctx, ContextHandlerFunc(fn))``.

        Raises:
            ConfigurationError: If func is None
        """
        if func is None:
            raise ConfigurationError(
                "then_func_with_context: terminal function can't be None"
            )
        return self.then_with_context(ctx, ContextHandlerFunc(func))

    def append(self, *constructors: Constructor) -> "Chain":
        """
        Return a new chain with ``constructors`` added as the last ones in the request flow.

            std = Chain(m1, m2)
            ext = std.append(m3, m4)
            # requests in std go m1 -> m2
            # requests in ext go m1 -> m2 -> m3 -> m4
        """
        return Chain(*self._constructors, *constructors)

    def extend(self, chain: "Chain") -> "Chain":
        """
        Return a new chain with the constructors of ``chain`` added after this one's.

            std = Chain(m1, m2)
            ext = Chain(m3, m4)
            both = std.extend(ext)
            # requests in both go m1 -> m2 -> m3 -> m4

        Raises:
            TypeError: If chain is not a Chain
        """
        if not isinstance(chain, Chain):
            raise TypeError(f"extend expects a Chain, got {type(chain).__name__}")
        return self.append(*chain.constructors)

    def __add__(self, other: "Chain") -> "Chain":
        if not isinstance(other, Chain):
            return NotImplemented
        return self.extend(other)

    def __len__(self) -> int:
        return len(self._constructors)

    def __iter__(self) -> Iterator[Constructor]:
        return iter(self._constructors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Chain):
            return NotImplemented
        return self._constructors == other._constructors

    def __repr__(self) -> str:
        names = ", ".join(
            getattr(c, "__qualname__", repr(c)) for c in self._constructors
        )
        return f"<Chain [{names}]>"


def new(*constructors: Constructor) -> Chain:
    """Create a new chain from the given middleware constructors."""
    return Chain(*constructors)
