"""
Read-only view of an ASGI HTTP request, as handed to every layer of a chain.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import parse_qsl

Receive = Callable[[], Awaitable[Dict[str, Any]]]


class Request:
    """An ASGI scope plus its fully received body."""

    def __init__(self, scope: Dict[str, Any], receive: Receive):
        self.scope = scope
        self._receive = receive
        self._body: Optional[bytes] = None
        self.headers: Dict[str, str] = {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }

    @classmethod
    async def from_asgi(cls, scope: Dict[str, Any], receive: Receive) -> "Request":
        request = cls(scope, receive)
        await request.load_body()
        return request

    async def load_body(self) -> None:
        """Drain ``http.request`` messages until the last one or a disconnect."""
        if self._body is not None:
            return
        chunks: List[bytes] = []
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        self._body = b"".join(chunks)

    @property
    def method(self) -> str:
        return self.scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self.scope.get("path", "/")

    @property
    def query_params(self) -> Dict[str, str]:
        """Query parameters; the first value of a repeated key wins."""
        params: Dict[str, str] = {}
        raw = self.scope.get("query_string", b"").decode("latin-1")
        for key, value in parse_qsl(raw, keep_blank_values=True):
            params.setdefault(key, value)
        return params

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def body(self) -> bytes:
        if self._body is None:
            raise RuntimeError("Request body has not been loaded, await load_body() first")
        return self._body

    def text(self) -> str:
        return self.body().decode("utf-8")

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            ValueError: If the body is empty or not valid JSON
            RuntimeError: If the body has not been loaded yet
        """
        body = self.body()
        if not body:
            raise ValueError("Request body is empty")
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in request body: {e}") from e

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"
