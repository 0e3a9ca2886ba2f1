"""
Testing helpers for contextchain.

Build requests and record ASGI output without running a server:

    request = await build_request("POST", "/items", body=b'{"a": 1}')
    recorder = ASGIRecorder()
    await adapter(make_scope("GET", "/"), make_receive(), recorder)
    assert recorder.status_code == 200
"""

import json as json_module
from typing import Any, Dict, List, Optional

from .request import Request


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    query_string: str = "",
    scheme: str = "http",
) -> Dict[str, Any]:
    """Build a minimal ASGI HTTP scope."""
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": scheme,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": [
            (name.lower().encode("utf-8"), value.encode("utf-8"))
            for name, value in (headers or {}).items()
        ],
        "server": ("testserver", 80),
    }


def make_receive(body: bytes = b"", chunk_size: Optional[int] = None):
    """
    Build an ASGI receive callable that yields ``body``.

    With ``chunk_size`` the body is split over several ``http.request`` messages.
    Once the body is exhausted the callable reports ``http.disconnect``.
    """
    if chunk_size:
        chunks = [body[i:i + chunk_size] for i in range(0, len(body), chunk_size)] or [b""]
    else:
        chunks = [body]
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> Dict[str, Any]:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


async def build_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    query_string: str = "",
    body: bytes = b"",
) -> Request:
    """Create a Request with its body already loaded."""
    return await Request.from_asgi(
        make_scope(method, path, headers, query_string), make_receive(body)
    )


class ASGIRecorder:
    """ASGI ``send`` callable that records every message it is given."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    async def __call__(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    def _first(self, message_type: str) -> Dict[str, Any]:
        for message in self.messages:
            if message["type"] == message_type:
                return message
        raise AssertionError(f"No '{message_type}' message was sent")

    @property
    def status_code(self) -> int:
        return self._first("http.response.start")["status"]

    @property
    def headers(self) -> Dict[str, str]:
        return {
            name.decode("utf-8"): value.decode("utf-8")
            for name, value in self._first("http.response.start")["headers"]
        }

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )

    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        try:
            return json_module.loads(self.text())
        except json_module.JSONDecodeError as e:
            raise ValueError(f"Response is not valid JSON: {e}")
