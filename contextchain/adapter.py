"""
Context adapter for contextchain.

Binds a context value to a composed handler so it can be served by a caller
that knows nothing about contexts, such as an ASGI server.
"""

from typing import Any, Awaitable, Callable, Dict

from .handler import ContextHandler
from .request import Request
from .response import ResponseWriter

# ASGI type aliases
ASGIScope = Dict[str, Any]
ASGIReceive = Callable[[], Awaitable[Dict[str, Any]]]
ASGISend = Callable[[Dict[str, Any]], Awaitable[None]]


class ContextAdapter:
    """Holds one context value and one composed handler, both fixed at creation."""

    __slots__ = ("_ctx", "_handler")

    def __init__(self, ctx: Any, handler: ContextHandler):
        self._ctx = ctx
        self._handler = handler

    @property
    def ctx(self) -> Any:
        return self._ctx

    @property
    def handler(self) -> ContextHandler:
        return self._handler

    async def serve_http(self, writer: ResponseWriter, request: Request) -> None:
        """Invoke the held handler with the held context, ``writer`` and ``request``."""
        await self._handler.serve_http_context(self._ctx, writer, request)

    async def __call__(self, scope: ASGIScope, receive: ASGIReceive, send: ASGISend) -> None:
        """
        ASGI application entrypoint.

        Args:
            scope: Connection scope information
            receive: Callable to receive messages from the client
            send: Callable to send messages to the client
        """
        if scope["type"] == "http":
            await self._handle_http(scope, receive, send)
        elif scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
        else:
            # For non-HTTP protocols, just close the connection
            await send({"type": "websocket.close", "code": 1000})

    async def _handle_http(self, scope: ASGIScope, receive: ASGIReceive, send: ASGISend) -> None:
        request = await Request.from_asgi(scope, receive)
        writer = ResponseWriter()
        await self.serve_http(writer, request)
        await writer.send_to(send)

    @staticmethod
    async def _handle_lifespan(receive: ASGIReceive, send: ASGISend) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    def __repr__(self) -> str:
        return f"<ContextAdapter ctx={self._ctx!r} handler={self._handler!r}>"
