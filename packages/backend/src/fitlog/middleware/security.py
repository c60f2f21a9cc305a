"""Security headers middleware.

Learn: Adds standard security headers to every response:
- X-Content-Type-Options: no MIME sniffing of JSON bodies
- X-Frame-Options: the API is never framed
- Referrer-Policy: limits referrer leakage
- Cache-Control: no-store on anything that answered a credentialed
  request or issued a token, so shared caches never keep it
- Strict-Transport-Security: only on HTTPS connections
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, token_path_prefix: str = "/api/v1/tokens"):
        super().__init__(app)
        self.token_path_prefix = token_path_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"

        if "authorization" in request.headers or request.url.path.startswith(
            self.token_path_prefix
        ):
            response.headers["Cache-Control"] = "no-store"

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
