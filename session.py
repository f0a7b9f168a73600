"""Shared-password session gate.

The session lives entirely in a signed cookie (Starlette's
SessionMiddleware): the server keeps no login state, the signature
makes the cookie tamper-evident and its timestamp makes it expire after
``Settings.session_max_age`` seconds.
"""

import secrets
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from config import Settings
from errors import ConfigurationError, Unauthorized
from logging_config import get_logger

logger = get_logger(__name__)

SESSION_COOKIE = "crm_session"
SESSION_FLAG = "authenticated"


def install_session_middleware(app: FastAPI, settings: Settings) -> None:
    if settings.session_secret_generated:
        logger.warning("SESSION_SECRET is not set; sessions will not survive a restart")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.cookie_secure,
    )


def check_credentials(settings: Settings, username: Optional[str], password: Optional[str]) -> bool:
    """Compare a login attempt with the configured pair.

    Raises:
        ConfigurationError: no username/password is configured
    """
    if not settings.credentials_configured:
        raise ConfigurationError("Server is not configured. Missing env vars.")
    if not isinstance(username, str) or not isinstance(password, str):
        return False
    user_ok = secrets.compare_digest(username.encode(), settings.admin_username.encode())
    pass_ok = secrets.compare_digest(password.encode(), settings.admin_password.encode())
    return user_ok and pass_ok


def login(request: Request) -> None:
    request.session.clear()
    request.session[SESSION_FLAG] = True


def logout(request: Request) -> None:
    request.session.clear()


def is_authenticated(request: Request) -> bool:
    return request.session.get(SESSION_FLAG) is True


# Dependency guarding every data endpoint
def require_session(request: Request) -> None:
    if not is_authenticated(request):
        raise Unauthorized()
