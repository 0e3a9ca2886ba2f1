"""
Response writer for contextchain.

Handlers don't return responses: they write status, headers and body to the
ResponseWriter they are given, which is flushed to the ASGI server once the
outermost handler returns.
"""

import json
import logging
from typing import Dict, Any, List, Union

from pydantic import BaseModel

from .status import HTTPStatus

logger = logging.getLogger(__name__)


class ResponseWriter:
    """
    Buffered HTTP response sink.

    Supports:
    - Explicit status via write_header (first call wins)
    - Headers, with method chaining
    - Incremental body writes from any layer of the chain
    - Conversion to ASGI response messages
    """

    def __init__(self):
        self.status_code: int = int(HTTPStatus.HTTP_200_OK)
        self.headers: Dict[str, str] = {}
        self._chunks: List[bytes] = []
        self._wrote_header = False

    @property
    def written(self) -> bool:
        """True once the status has been committed by write_header or a body write."""
        return self._wrote_header

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def write_header(self, status_code: Union[int, HTTPStatus]) -> None:
        """
        Commit the response status code.

        Only the first call has an effect; later calls are ignored.
        """
        if self._wrote_header:
            logger.warning(
                "Superfluous write_header(%d) call, status already set to %d",
                int(status_code),
                self.status_code,
            )
            return
        self.status_code = int(status_code)
        self._wrote_header = True

    def set_header(self, name: str, value: str) -> "ResponseWriter":
        """
        Set a response header (supports method chaining).

        Args:
            name: Header name
            value: Header value

        Returns:
            self for method chaining
        """
        self.headers[name.lower()] = value
        return self

    def write(self, data: Union[str, bytes]) -> int:
        """
        Append data to the response body.

        The first write commits the status code and, if no content type was set,
        detects one from the data.

        Returns:
            Number of bytes written
        """
        if isinstance(data, str):
            chunk = data.encode("utf-8")
        elif isinstance(data, (bytes, bytearray)):
            chunk = bytes(data)
        else:
            raise TypeError(f"write expects str or bytes, got {type(data).__name__}")

        if "content-type" not in self.headers:
            self.headers["content-type"] = self._detect_content_type(data)
        if not self._wrote_header:
            self.write_header(self.status_code)

        self._chunks.append(chunk)
        return len(chunk)

    def write_text(self, content: str) -> int:
        """Write a plain text body."""
        self.headers.setdefault("content-type", "text/plain; charset=utf-8")
        return self.write(content)

    def write_json(self, content: Union[dict, list, BaseModel]) -> int:
        """Write a JSON body. Pydantic models are serialized with their own encoder."""
        self.headers.setdefault("content-type", "application/json; charset=utf-8")
        if isinstance(content, BaseModel):
            return self.write(content.model_dump_json())
        return self.write(json.dumps(content, ensure_ascii=False))

    def to_asgi_response(self) -> Dict[str, Any]:
        """
        Convert to ASGI response format.

        Returns:
            Dictionary with 'status', 'headers', and 'body' keys
        """
        asgi_headers = [
            [name.lower().encode("utf-8"), str(value).encode("utf-8")]
            for name, value in self.headers.items()
        ]
        return {"status": self.status_code, "headers": asgi_headers, "body": self.body}

    async def send_to(self, send) -> None:
        """Send the buffered response through an ASGI ``send`` callable."""
        asgi_response = self.to_asgi_response()
        await send(
            {
                "type": "http.response.start",
                "status": asgi_response["status"],
                "headers": asgi_response["headers"],
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": asgi_response["body"],
                "more_body": False,
            }
        )

    @staticmethod
    def _detect_content_type(data: Union[str, bytes]) -> str:
        if not isinstance(data, str):
            return "application/octet-stream"
        if data.strip().startswith(("<!DOCTYPE", "<html", "<HTML")):
            return "text/html; charset=utf-8"
        return "text/plain; charset=utf-8"

    def __repr__(self) -> str:
        return f"<ResponseWriter {self.status_code}>"
