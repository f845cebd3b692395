"""
Session authentication.

Logins happen elsewhere (OIDC or the password fallback); both leave a row in
the `sessions` table and a cookie holding its id. The cookie is signed as
`s:<sid>.<signature>`, where the signature is base64 HMAC-SHA256 of the sid
with SESSION_SECRET, padding stripped.
"""

import base64
import hashlib
import hmac
import logging
import secrets
from typing import Any, Optional
from urllib.parse import unquote

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.config import get_settings
from upleer.core.enums import UserRole
from upleer.dependencies import get_db
from upleer.models.base import utcnow
from upleer.models.session import Session
from upleer.models.user import User

logger = logging.getLogger(__name__)


def _signature(sid: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), sid.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii").rstrip("=")


def sign_session_id(sid: str, secret: str) -> str:
    return f"s:{sid}.{_signature(sid, secret)}"


def unsign_session_id(cookie_value: str, secret: str) -> Optional[str]:
    """Return the session id from a cookie value, or None if the signature is wrong."""
    value = unquote(cookie_value or "")
    if not value:
        return None

    if not value.startswith("s:"):
        # Unsigned ids are only trusted when no secret is configured
        return None if secret else value

    if not secret:
        return None

    sid, _, signature = value[2:].rpartition(".")
    if not sid or not signature:
        return None
    if not secrets.compare_digest(signature, _signature(sid, secret)):
        return None
    return sid


def user_id_from_session(sess: Any) -> Optional[str]:
    """Find the user id in either of the session layouts the login flows write."""
    if not isinstance(sess, dict):
        return None

    if sess.get("userId"):
        return str(sess["userId"])

    passport = sess.get("passport")
    passport_user = passport.get("user") if isinstance(passport, dict) else None
    claims = passport_user.get("claims") if isinstance(passport_user, dict) else None
    if isinstance(claims, dict) and claims.get("sub"):
        return str(claims["sub"])

    user = sess.get("user")
    if isinstance(user, dict) and user.get("id"):
        return str(user["id"])
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    settings = get_settings()
    unauthorized = HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    sid = unsign_session_id(cookie, settings.SESSION_SECRET) if cookie else None
    if not sid:
        raise unauthorized

    session = await db.get(Session, sid)
    if session is None or session.expire is None or session.expire <= utcnow():
        raise unauthorized

    user_id = user_id_from_session(session.sess)
    if not user_id:
        raise unauthorized

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Session %s points at unknown user %s", sid[:8], user_id)
        raise unauthorized
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
