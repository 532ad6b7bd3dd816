"""Origin allow-listing with CORS and Private Network Access headers.

Browsers send a preflight OPTIONS request before cross-origin calls, and
recent Chrome versions also require ``Access-Control-Allow-Private-Network``
when a public page talks to a server on the local network. Every preflight
is answered here directly; every other response is decorated on its way out.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tokensa.config import Settings

logger = logging.getLogger(__name__)

ALLOW_METHODS = "POST, GET, OPTIONS"


class OriginPolicy:
    """Decides which browser origins may call the server."""

    def __init__(
        self,
        canonical_origin: str,
        base_domain: str,
        allowed_origins: list[str],
        default_allow_headers: str = "content-type, x-tokensa",
    ):
        self.canonical_origin = canonical_origin
        self.base_domain = base_domain.lower()
        self.allowed_origins = set(allowed_origins)
        self.default_allow_headers = default_allow_headers

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginPolicy":
        return cls(
            canonical_origin=settings.canonical_origin,
            base_domain=settings.base_domain,
            allowed_origins=settings.allowed_origins,
            default_allow_headers=settings.default_allow_headers,
        )

    def is_allowed_origin(self, origin: Optional[str]) -> bool:
        """Requests without an Origin (curl, extensions) are allowed."""
        if not origin:
            return True
        if origin in self.allowed_origins:
            return True
        try:
            hostname = urlsplit(origin).hostname
        except ValueError:
            return False
        if not hostname:
            return False
        return hostname == self.base_domain or hostname.endswith(f".{self.base_domain}")

    def resolve_allow_origin(self, origin: Optional[str]) -> str:
        """Origin to echo back: the caller's when allowed, else the canonical one."""
        if origin and self.is_allowed_origin(origin):
            return origin
        return self.canonical_origin

    def preflight_headers(
        self, origin: Optional[str], requested_headers: Optional[str] = None
    ) -> dict[str, str]:
        return {
            "Access-Control-Allow-Private-Network": "true",
            "Access-Control-Allow-Origin": self.resolve_allow_origin(origin),
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": requested_headers or self.default_allow_headers,
        }

    def response_headers(self, origin: Optional[str]) -> dict[str, str]:
        headers = {"Access-Control-Allow-Private-Network": "true"}
        if origin:
            headers["Access-Control-Allow-Origin"] = self.resolve_allow_origin(origin)
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers


class PrivateNetworkAccessMiddleware:
    """Answers preflights and adds CORS/PNA headers to all other responses.

    Written as plain ASGI so that streamed bodies are forwarded untouched.
    """

    def __init__(self, app: ASGIApp, policy: OriginPolicy):
        self.app = app
        self.policy = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_headers = Headers(scope=scope)
        origin = request_headers.get("origin")

        if scope["method"] == "OPTIONS":
            if not self.policy.is_allowed_origin(origin):
                logger.info(f"Preflight from disallowed origin: {origin}")
            response = Response(
                status_code=204,
                headers=self.policy.preflight_headers(
                    origin, request_headers.get("access-control-request-headers")
                ),
            )
            await response(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.policy.response_headers(origin).items():
                    headers[name] = value
                if origin:
                    headers.add_vary_header("Origin")
            await send(message)

        await self.app(scope, receive, send_with_headers)
