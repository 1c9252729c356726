"""
Session gate: every non-public request must carry a valid session token.

The token is read from the Authorization header (API clients) or the
httpOnly session cookie (web dashboard); the header takes precedence.
Verification is stateless (signature and expiry only).

On failure:
- browser navigation (Accept: text/html) is redirected to the dashboard
  login page (LOGIN_URL, served by the front end) and the stale cookie cleared
- everything else gets 401 {"error": ...}
"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from medinv.core.audit import AuditLog
from medinv.core.security import decode_access_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = ("/auth/login", "/health", "/deployment-mode", "/docs", "/redoc", "/openapi.json")


def is_public_path(path: str) -> bool:
    return any(path == public or path.startswith(public + "/") for public in PUBLIC_PATHS)


def extract_token(request: Request, cookie_name: str) -> str | None:
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return request.cookies.get(cookie_name)


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Rejects requests without a valid session before any route runs."""

    async def dispatch(self, request: Request, call_next):
        settings = request.app.state.settings
        if (
            request.method == "OPTIONS"
            or is_public_path(request.url.path)
            or request.url.path == settings.LOGIN_URL
        ):
            return await call_next(request)

        token = extract_token(request, settings.AUTH_COOKIE_NAME)
        claims = decode_access_token(token, settings) if token else None

        if claims is None:
            reason = "missing token" if not token else "invalid or expired token"
            client_ip = request.client.host if request.client else "unknown"
            AuditLog.log_session_rejected(request.url.path, client_ip, reason)
            return self._reject(request, settings, had_token=bool(token))

        request.state.session = claims
        return await call_next(request)

    @staticmethod
    def _reject(request: Request, settings, had_token: bool):
        if "text/html" in request.headers.get("accept", ""):
            response = RedirectResponse(url=settings.LOGIN_URL, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        else:
            response = JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Not authenticated"},
                headers={"WWW-Authenticate": "Bearer"},
            )
        if had_token:
            response.delete_cookie(settings.AUTH_COOKIE_NAME)
        return response
