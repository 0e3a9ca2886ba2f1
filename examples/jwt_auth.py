"""
JWT authentication as a contextchain middleware.

The constructor factory validates a bearer token with PyJWT and hands the
authenticated user to the next layers through a derived context.

    uvicorn jwt_auth:app --port 8000
"""

import logging
from typing import List, Optional

import jwt as pyjwt
from jwt import ExpiredSignatureError, PyJWTError

from contextchain import Chain, ContextHandlerFunc, HTTPStatus

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("jwt_example")

SECRET_KEY = "your_very_secret_key_here"


class User:
    """Represents an authenticated user."""

    def __init__(self, user_id: str, roles: Optional[List[str]] = None):
        self.user_id = user_id
        self.roles = roles or []

    def __repr__(self) -> str:
        return f"<AuthUser id={self.user_id} roles={self.roles}>"


def jwt_auth(secret_key: str, algorithms: Optional[List[str]] = None, role: Optional[str] = None):
    """
    Build a constructor that rejects requests without a valid token (401)
    or, when ``role`` is given, without that role (403).
    """
    algorithms = algorithms or ["HS256"]

    def constructor(inner):
        async def serve(ctx, writer, request):
            auth_header = request.get_header("authorization", "")
            token = auth_header[len("Bearer "):] if auth_header.startswith("Bearer ") else None
            if not token:
                writer.set_header("WWW-Authenticate", "Bearer")
                writer.write_header(HTTPStatus.HTTP_401_UNAUTHORIZED)
                writer.write_json({"error": "Authentication required"})
                return

            try:
                payload = pyjwt.decode(token, key=secret_key, algorithms=algorithms)
            except ExpiredSignatureError:
                logger.info("JWT validation failed: token has expired")
                writer.write_header(HTTPStatus.HTTP_401_UNAUTHORIZED)
                writer.write_json({"error": "Token expired"})
                return
            except PyJWTError as e:
                logger.info(f"JWT validation failed: {e.__class__.__name__} - {e}")
                writer.write_header(HTTPStatus.HTTP_401_UNAUTHORIZED)
                writer.write_json({"error": "Invalid token"})
                return

            user = User(payload.get("sub", "unknown"), payload.get("roles", []))
            if role is not None and role not in user.roles:
                writer.write_header(HTTPStatus.HTTP_403_FORBIDDEN)
                writer.write_json({"error": f"Access denied. Requires role: '{role}'"})
                return

            await inner.serve_http_context({**ctx, "user": user}, writer, request)

        return ContextHandlerFunc(serve)

    return constructor


async def profile(ctx, writer, request):
    writer.write_text(f"Welcome, {ctx['user'].user_id}! You are authenticated.")


async def admin_panel(ctx, writer, request):
    writer.write_text("Welcome to the Admin Panel.")


authenticated = Chain(jwt_auth(SECRET_KEY))
admins_only = Chain(jwt_auth(SECRET_KEY, role="admin"))

routes = {
    "/user/profile": authenticated.then_func_with_context({}, profile),
    "/admin/panel": admins_only.then_func_with_context({}, admin_panel),
}


async def app(scope, receive, send):
    adapter = routes.get(scope.get("path"), routes["/user/profile"])
    await adapter(scope, receive, send)


if __name__ == "__main__":
    import uvicorn

    token = pyjwt.encode({"sub": "alice", "roles": ["admin"]}, SECRET_KEY, algorithm="HS256")
    logger.info(f"Try: curl -H 'Authorization: Bearer {token}' http://localhost:8000/admin/panel")
    uvicorn.run(app, host="127.0.0.1", port=8000)
