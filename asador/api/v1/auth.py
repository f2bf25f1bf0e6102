"""
Auth routes
Password login with a signed session cookie
"""

from fastapi import APIRouter, Depends, Request, Response

from ...config import settings
from ...core.error_handler import create_success_response
from ...core.exceptions import AuthenticationError
from ...core.security import security_manager
from ...schemas.auth import LoginRequest, SessionInfo
from ...services.draft_sale import DraftRegistry
from ..deps import get_draft_registry

router = APIRouter()


@router.post("/login")
def login(req: LoginRequest, response: Response):
    """
    Exchange the register password for a session cookie

    With no password configured every caller is already authenticated and
    no cookie is issued.
    """
    if not security_manager.auth_enabled:
        return create_success_response(message="Authentication is disabled")

    if not security_manager.verify_password(req.password):
        raise AuthenticationError("Incorrect password")

    response.set_cookie(
        key=settings.session_cookie_name,
        value=security_manager.create_session_token(),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )
    return create_success_response(message="Logged in")


@router.post("/logout")
def logout(request: Request, response: Response,
           registry: DraftRegistry = Depends(get_draft_registry)):
    """End the session and drop its draft sale"""
    if security_manager.auth_enabled:
        try:
            session_id = security_manager.session_id_from_request(request)
        except AuthenticationError:
            session_id = None
        if session_id:
            registry.discard(session_id)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return create_success_response(message="Logged out")


@router.get("/session")
def get_session(request: Request):
    authenticated = True
    try:
        security_manager.session_id_from_request(request)
    except AuthenticationError:
        authenticated = False
    info = SessionInfo(authenticated=authenticated, auth_enabled=security_manager.auth_enabled)
    return create_success_response(data=info.model_dump())
