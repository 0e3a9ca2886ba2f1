"""
Handler abstraction for contextchain.

A handler processes one request given a context value, a response writer and
the request itself. Middleware constructors wrap one handler into another.
"""

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from .request import Request
    from .response import ResponseWriter


@runtime_checkable
class ContextHandler(Protocol):
    """Protocol for handlers that receive a request-scoped context value."""

    async def serve_http_context(
        self, ctx: Any, writer: "ResponseWriter", request: "Request"
    ) -> None:
        """
        Process a request.

        Args:
            ctx: The context value bound at materialization time
            writer: Response sink to write status, headers and body to
            request: The incoming HTTP request
        """
        ...


HandlerFunc = Callable[[Any, "ResponseWriter", "Request"], Awaitable[None]]


class ContextHandlerFunc:
    """
    Adapts a plain coroutine function into a :class:`ContextHandler`.

    Example:
        async def index(ctx, writer, request):
            writer.write_text("hello")

        handler = ContextHandlerFunc(index)
    """

    __slots__ = ("func",)

    def __init__(self, func: HandlerFunc):
        if not callable(func):
            raise TypeError(
                f"ContextHandlerFunc expects a callable, got {type(func).__name__}"
            )
        self.func = func

    async def serve_http_context(
        self, ctx: Any, writer: "ResponseWriter", request: "Request"
    ) -> None:
        await self.func(ctx, writer, request)

    async def __call__(
        self, ctx: Any, writer: "ResponseWriter", request: "Request"
    ) -> None:
        await self.serve_http_context(ctx, writer, request)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"<ContextHandlerFunc {name}>"


# A constructor for a piece of middleware: wraps the inner handler and returns the outer one.
Constructor = Callable[[ContextHandler], ContextHandler]
