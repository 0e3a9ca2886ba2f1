"""
Tests for ContextAdapter and its ASGI protocol compliance.

This test suite uses direct ASGI interface calls to validate low-level
protocol compliance without running a server.
"""

import asyncio

import pytest

from contextchain import Chain, ContextAdapter, ContextHandlerFunc, ResponseWriter
from contextchain.testing import ASGIRecorder, build_request, make_receive, make_scope


class TestContextAdapter:
    """Test dispatch through the adapter."""

    @pytest.mark.asyncio
    async def test_serve_http_delegates_with_bound_context(self):
        """Test that serve_http passes the held context, writer and request."""
        calls = []

        class Handler:
            async def serve_http_context(self, ctx, writer, request):
                calls.append((ctx, writer, request))

        ctx = {"request_id": "abc"}
        handler = Handler()
        adapter = ContextAdapter(ctx, handler)
        writer = ResponseWriter()
        request = await build_request()

        result = await adapter.serve_http(writer, request)

        assert result is None
        assert calls == [(ctx, writer, request)]
        assert adapter.ctx is ctx
        assert adapter.handler is handler

    @pytest.mark.asyncio
    async def test_adapter_can_be_served_concurrently(self):
        """Test that several in-flight requests share the same adapter."""

        async def handler(ctx, writer, request):
            await asyncio.sleep(0)
            writer.write_text(request.path)

        adapter = Chain().then_func_with_context(None, handler)

        async def one(path):
            writer = ResponseWriter()
            await adapter.serve_http(writer, await build_request(path=path))
            return writer.body

        bodies = await asyncio.gather(*(one(f"/{i}") for i in range(5)))
        assert bodies == [f"/{i}".encode() for i in range(5)]

    def test_adapter_attributes_are_read_only(self):
        """Test the context and handler can't be replaced after creation."""
        adapter = ContextAdapter("ctx", ContextHandlerFunc(lambda ctx, w, r: None))
        with pytest.raises(AttributeError):
            adapter.ctx = "other"


class TestContextAdapterASGI:
    """Test the adapter as an ASGI application."""

    @pytest.mark.asyncio
    async def test_http_request(self):
        """Test an HTTP request flows through the chain and is sent back."""

        def powered_by(inner):
            async def serve(ctx, writer, request):
                writer.set_header("X-Powered-By", ctx["name"])
                await inner.serve_http_context(ctx, writer, request)

            return ContextHandlerFunc(serve)

        async def echo(ctx, writer, request):
            writer.write_header(201)
            writer.write_json({"path": request.path, "body": request.json()})

        adapter = Chain(powered_by).then_func_with_context({"name": "contextchain"}, echo)

        recorder = ASGIRecorder()
        await adapter(
            make_scope("POST", "/items", headers={"content-type": "application/json"}),
            make_receive(b'{"name": "widget"}', chunk_size=4),
            recorder,
        )

        assert [m["type"] for m in recorder.messages] == [
            "http.response.start",
            "http.response.body",
        ]
        assert recorder.status_code == 201
        assert recorder.headers["x-powered-by"] == "contextchain"
        assert recorder.headers["content-type"] == "application/json; charset=utf-8"
        assert recorder.json() == {"path": "/items", "body": {"name": "widget"}}
        assert recorder.messages[1]["more_body"] is False

    @pytest.mark.asyncio
    async def test_http_handler_exception_propagates(self):
        """Test that nothing is sent and the error surfaces when a handler fails."""

        async def failing(ctx, writer, request):
            raise KeyError("missing")

        adapter = Chain().then_func_with_context(None, failing)
        recorder = ASGIRecorder()

        with pytest.raises(KeyError):
            await adapter(make_scope(), make_receive(), recorder)
        assert recorder.messages == []

    @pytest.mark.asyncio
    async def test_lifespan(self):
        """Test startup and shutdown are acknowledged."""
        adapter = Chain().then_func_with_context(None, lambda ctx, w, r: None)
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]

        async def receive():
            return incoming.pop(0)

        recorder = ASGIRecorder()
        await adapter({"type": "lifespan"}, receive, recorder)

        assert recorder.messages == [
            {"type": "lifespan.startup.complete"},
            {"type": "lifespan.shutdown.complete"},
        ]

    @pytest.mark.asyncio
    async def test_unsupported_protocol(self):
        """Test handling of unsupported ASGI protocol types."""
        adapter = Chain().then_func_with_context(None, lambda ctx, w, r: None)

        async def receive():
            return {"type": "websocket.connect"}

        recorder = ASGIRecorder()
        await adapter({"type": "websocket"}, receive, recorder)

        assert recorder.messages == [{"type": "websocket.close", "code": 1000}]
