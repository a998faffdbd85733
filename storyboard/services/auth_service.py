"""
Storyboard Backend — Auth Service
==================================

What:  Single shared-secret editor login backed by the request session.
How:   Credentials are compared with the one configured account:
         - AUTH_PASSWORD_HASH set  → bcrypt.checkpw in a worker thread
         - otherwise               → constant-time compare with AUTH_PASSWORD
       On success the Starlette session (a signed cookie) gets
       `authenticated=True` and the username.
Who:   /api/auth routes; storyboard.dependencies.require_auth reads the flag.

There are no user accounts or roles. The caller cannot tell an unknown
username from a wrong password.
"""

import hmac
import logging
from typing import Any, Dict, MutableMapping, Optional

import bcrypt
from starlette.concurrency import run_in_threadpool

from storyboard.config import settings
from storyboard.exceptions import InvalidCredentialsError, ValidationError

logger = logging.getLogger(__name__)

SESSION_AUTH_KEY = "authenticated"
SESSION_USER_KEY = "username"


def hash_password(password: str) -> str:
    """Produce a bcrypt hash suitable for AUTH_PASSWORD_HASH."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _check_bcrypt(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in configuration
        logger.error("AUTH_PASSWORD_HASH is not a valid bcrypt hash")
        return False


class AuthService:

    async def verify_credentials(self, username: str, password: str) -> bool:
        """True when username and password match the configured account."""
        user_ok = hmac.compare_digest(
            username.encode("utf-8"), settings.auth_username.encode("utf-8")
        )
        if not user_ok:
            return False

        if settings.auth_password_hash:
            return await run_in_threadpool(
                _check_bcrypt, password, settings.auth_password_hash
            )

        return hmac.compare_digest(
            password.encode("utf-8"), settings.auth_password.encode("utf-8")
        )

    async def login(
        self,
        session: MutableMapping[str, Any],
        username: Optional[str],
        password: Optional[str],
    ) -> None:
        """
        Mark the session authenticated.

        Raises:
            ValidationError: username or password missing (→ 400)
            InvalidCredentialsError: credentials do not match (→ 401)
        """
        if not username or not password:
            raise ValidationError(message="Username and password are required")

        if not await self.verify_credentials(username, password):
            logger.warning("Failed login attempt for username '%s'", username)
            raise InvalidCredentialsError()

        session[SESSION_AUTH_KEY] = True
        session[SESSION_USER_KEY] = username
        logger.info("User '%s' logged in", username)

    def logout(self, session: MutableMapping[str, Any]) -> None:
        username = session.get(SESSION_USER_KEY)
        session.clear()
        if username:
            logger.info("User '%s' logged out", username)

    def is_authenticated(self, session: MutableMapping[str, Any]) -> bool:
        return bool(session.get(SESSION_AUTH_KEY))

    def status(self, session: MutableMapping[str, Any]) -> Dict[str, Any]:
        """{authenticated: bool, username?: str}"""
        if self.is_authenticated(session):
            return {"authenticated": True, "username": session.get(SESSION_USER_KEY)}
        return {"authenticated": False}


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
