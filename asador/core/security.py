"""
Session security
Password login and signed session cookies
"""

import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from fastapi import Request

from ..config import settings
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Session id used for every request while auth is disabled
LOCAL_SESSION_ID = "local"


class SecurityManager:
    """Security manager"""

    @property
    def auth_enabled(self) -> bool:
        return bool(settings.auth_password)

    def verify_password(self, password: str) -> bool:
        if not self.auth_enabled:
            return True
        return hmac.compare_digest(password.encode("utf-8"), settings.auth_password.encode("utf-8"))

    def create_session_token(self, session_id: str = None) -> str:
        """Create a signed session token"""
        now = datetime.now(timezone.utc)
        payload = {
            "authenticated": True,
            "sid": session_id or uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=settings.session_max_age_seconds),
        }
        return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)

    def decode_session_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid session: {e}")
        if not payload.get("authenticated") or not payload.get("sid"):
            raise AuthenticationError("Invalid session")
        return payload

    def session_id_from_request(self, request: Request) -> str:
        if not self.auth_enabled:
            return LOCAL_SESSION_ID
        token = request.cookies.get(settings.session_cookie_name)
        if not token:
            raise AuthenticationError()
        return self.decode_session_token(token)["sid"]


# Global security manager instance
security_manager = SecurityManager()


async def require_session(request: Request) -> str:
    """Dependency returning the caller's session id; raises AuthenticationError when missing"""
    return security_manager.session_id_from_request(request)
