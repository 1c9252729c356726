"""FastAPI dependencies: the shared Database, settings and the current session.

The Database and Settings are owned by the application factory and live on
app.state; routes never import a module-level pool.
"""
from fastapi import Request

from medinv.core.config import Settings
from medinv.core.exceptions import AuthenticationFailed
from medinv.db.database import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_session(request: Request) -> dict:
    """
    Claims of the verified session token.
    SessionAuthMiddleware has already rejected requests without one; this only
    guards routes that are reachable on public paths.
    """
    claims = getattr(request.state, "session", None)
    if not claims:
        raise AuthenticationFailed("Not authenticated")
    return claims
