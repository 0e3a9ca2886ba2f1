"""
contextchain Complete Example

This example demonstrates the core features of contextchain:
- Declaring a reusable chain of middleware constructors
- Deriving chains with append / extend
- Binding a context value shared by every layer
- Short-circuiting middleware and a middleware with its own failure pipeline

To run this application:
    uvicorn complete_example:app --reload --host 0.0.0.0 --port 8000
"""

import logging
import time
import traceback
import uuid

from contextchain import Chain, ContextHandlerFunc, HTTPStatus

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("complete_example")

ctx = {"service": "complete-example", "started_at": time.time()}

# ============================================================================
# 1. MIDDLEWARE CONSTRUCTORS
# ============================================================================


def recoverer(inner):
    """Turn unhandled exceptions into a 500 response."""

    async def serve(ctx, writer, request):
        try:
            await inner.serve_http_context(ctx, writer, request)
        except Exception:
            logger.error(traceback.format_exc())
            writer.write_header(HTTPStatus.HTTP_500_INTERNAL_SERVER_ERROR)
            writer.write_json({"error": "Internal Server Error"})

    return ContextHandlerFunc(serve)


def request_id(inner):
    async def serve(ctx, writer, request):
        rid = request.get_header("x-request-id") or uuid.uuid4().hex
        writer.set_header("X-Request-ID", rid)
        await inner.serve_http_context({**ctx, "request_id": rid}, writer, request)

    return ContextHandlerFunc(serve)


def access_log(inner):
    async def serve(ctx, writer, request):
        start = time.perf_counter()
        await inner.serve_http_context(ctx, writer, request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.path} -> {writer.status_code} "
            f"({elapsed:.1f} ms, request_id={ctx.get('request_id')})"
        )

    return ContextHandlerFunc(serve)


class TokenAuth:
    """Reject requests that don't carry the expected bearer token."""

    def __init__(self, inner, token: str = "secret"):
        self.inner = inner
        self.token = token

    async def serve_http_context(self, ctx, writer, request):
        if request.get_header("authorization") != f"Bearer {self.token}":
            writer.write_header(HTTPStatus.HTTP_401_UNAUTHORIZED)
            writer.write_json({"error": "Unauthorized"})
            return
        await self.inner.serve_http_context(ctx, writer, request)


# ============================================================================
# 2. CHAINS
# ============================================================================

# Every request goes recoverer -> request_id -> access_log
std_chain = Chain(recoverer, request_id, access_log)

# Protected requests additionally go through TokenAuth
auth_chain = std_chain.append(TokenAuth)

# ============================================================================
# 3. HANDLERS AND ROUTING
# ============================================================================


async def home(ctx, writer, request):
    writer.write_text(f"Hello from {ctx['service']}! Try /admin with 'Authorization: Bearer secret'.")


async def admin(ctx, writer, request):
    writer.write_json({"admin": True, "uptime": round(time.time() - ctx["started_at"], 1)})


async def boom(ctx, writer, request):
    raise RuntimeError("something broke")


async def not_found(ctx, writer, request):
    writer.write_header(HTTPStatus.HTTP_404_NOT_FOUND)
    writer.write_json({"error": f"Not found: {request.path}"})


routes = {
    "/": std_chain.then_func_with_context(ctx, home),
    "/admin": auth_chain.then_func_with_context(ctx, admin),
    "/boom": std_chain.then_func_with_context(ctx, boom),
}
fallback = std_chain.then_func_with_context(ctx, not_found)


async def app(scope, receive, send):
    """Dispatch to one adapter per path. Adapters are ASGI applications themselves."""
    if scope["type"] == "http":
        adapter = routes.get(scope["path"], fallback)
    else:
        adapter = fallback
    await adapter(scope, receive, send)


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting contextchain complete example on http://localhost:8000")
    uvicorn.run(app, host="127.0.0.1", port=8000)
