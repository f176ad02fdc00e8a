import logging
from dataclasses import dataclass

from fastapi import Request, Response

from core.errors import UnexpectedError, error_response

logger = logging.getLogger(__name__)

ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOW_METHODS = "POST, OPTIONS"


@dataclass(frozen=True)
class CorsPolicy:
    """
    Origin allow-list built once at start-up and handed to the app factory.

    An origin is allowed if it is listed explicitly or ends with one of the
    trusted suffixes. Unknown origins get the first explicit origin back,
    which browsers will then refuse.
    """
    allowed_origins: tuple[str, ...]
    allowed_suffixes: tuple[str, ...] = ()
    allow_headers: str = ALLOW_HEADERS
    allow_methods: str = ALLOW_METHODS

    def is_allowed(self, origin: str) -> bool:
        if not origin:
            return False
        if origin in self.allowed_origins:
            return True
        return any(origin.endswith(suffix) for suffix in self.allowed_suffixes)

    def resolve_origin(self, origin: str | None) -> str:
        if origin and self.is_allowed(origin):
            return origin
        return self.allowed_origins[0] if self.allowed_origins else ""

    def headers_for(self, origin: str | None) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.resolve_origin(origin),
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }


def cors_middleware(policy: CorsPolicy):
    """
    Builds an HTTP middleware that answers preflight requests and stamps
    CORS headers on every other response.
    """
    async def apply_cors(request: Request, call_next):
        headers = policy.headers_for(request.headers.get("origin"))

        # Preflight never reaches the routers
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        try:
            response = await call_next(request)
        except Exception as e:
            # Faults that escaped every handler still answer with CORS headers
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {e}")
            return error_response(500, UnexpectedError.message, headers=headers)

        response.headers.update(headers)
        return response

    return apply_cors
