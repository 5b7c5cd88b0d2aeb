# daybook/routers/auth.py
# login / session restore / logout
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from daybook.auth.dependencies import SESSION_COOKIE, TOKEN_COOKIE, read_form
from daybook.auth.token_verifier import issue_token, verify_token
from daybook.config.settings import settings
from daybook.db.database import get_db
from daybook.models.users import User
from daybook.schemas.envelope import Envelope
from daybook.services.sessions import authenticate, close_session, open_session, rotate_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=True,
        samesite="strict",
    )


def _failure(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Envelope(success=False, error=message).model_dump(exclude_none=True),
    )


@router.post("/login", response_model=Envelope, response_model_exclude_none=True)
async def login(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    userName + password -> JWT cookie, session cookie and a fresh CSRF token.
    The CSRF token goes back in the body; every later data request posts it.
    """
    fields = await read_form(request)
    user_name = (fields.get("userName") or "").strip()
    password = (fields.get("password") or "").strip()
    if not user_name or not password:
        return _failure("Incomplete input", status.HTTP_400_BAD_REQUEST)

    user = authenticate(db, user_name, password)
    if user is None:
        logger.info("[auth] login failed user=%s", user_name)
        return _failure("Invalid user name or password", status.HTTP_401_UNAUTHORIZED)

    session = open_session(db, user.id)
    _set_cookie(response, TOKEN_COOKIE, issue_token(user.id, user.user_name), settings.jwt_lifetime_seconds)
    _set_cookie(response, SESSION_COOKIE, session.session_id, settings.session_lifetime_seconds)
    logger.info("[auth] login user_id=%s", user.id)
    return Envelope(success=True, userId=user.id, csrfToken=session.csrf_token)


@router.get("/auth", response_model=Envelope, response_model_exclude_none=True)
def restore(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Page reload: the token cookie is re-verified against the users table and
    the server-side session is replaced (new session id, new CSRF token).
    """
    token = request.cookies.get(TOKEN_COOKIE)
    if not token:
        return _failure("token not found", status.HTTP_401_UNAUTHORIZED)

    payload = verify_token(token)
    if payload is None:
        return _failure("invalid token", status.HTTP_401_UNAUTHORIZED)

    user = (
        db.execute(
            select(User).where(User.id == payload["userId"], User.user_name == payload["userName"])
        )
        .scalars()
        .first()
    )
    if user is None:
        return _failure("User not found", status.HTTP_401_UNAUTHORIZED)

    session = rotate_session(db, request.cookies.get(SESSION_COOKIE), user.id)
    _set_cookie(response, SESSION_COOKIE, session.session_id, settings.session_lifetime_seconds)
    return Envelope(success=True, userId=user.id, csrfToken=session.csrf_token)


@router.post("/logout", response_model=Envelope, response_model_exclude_none=True)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    close_session(db, request.cookies.get(SESSION_COOKIE))
    for key in (TOKEN_COOKIE, SESSION_COOKIE):
        response.delete_cookie(
            key,
            path="/",
            domain=settings.cookie_domain,
            secure=settings.cookie_secure,
            httponly=True,
            samesite="strict",
        )
    return Envelope(success=True)
