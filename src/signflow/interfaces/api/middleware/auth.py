"""Auth middleware - extracts user from bearer token or allows anonymous."""

from dataclasses import dataclass

import falcon.asgi


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None


class AuthMiddleware:
    """Middleware that validates the bearer token and sets req.context.user.

    Without a Keycloak provider (development) every request runs as the
    user named by ``X-User-Id``, or ``anonymous``.
    """

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Extract user from Authorization header."""
        if self._keycloak is None:
            req.context.user = RequestUser(
                user_id=req.get_header("X-User-Id") or "anonymous",
                email=req.get_header("X-User-Email"),
            )
            return
        auth = req.get_header("Authorization")
        req.context.user = None
        if auth and auth.startswith("Bearer "):
            user = self._keycloak.decode_token(auth[7:])
            if user:
                req.context.user = RequestUser(
                    user_id=user.user_id,
                    email=user.email,
                    username=user.username,
                )
