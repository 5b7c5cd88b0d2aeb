# daybook/services/sessions.py
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from daybook.config.settings import settings
from daybook.models.users import LoginSession, User
from daybook.services.forms import CsrfError, InvalidRequest

logger = logging.getLogger(__name__)


def _now() -> datetime:
    # stored naive, UTC
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def create_user(db: Session, user_name: str, password: str) -> User:
    user = User(user_name=user_name, password=generate_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, user_name: str, password: str) -> Optional[User]:
    user = db.execute(select(User).where(User.user_name == user_name)).scalars().first()
    if user is None or not check_password_hash(user.password, password):
        return None
    return user


def open_session(db: Session, user_id: int) -> LoginSession:
    """New session id + fresh CSRF token."""
    row = LoginSession(
        session_id=secrets.token_hex(32),
        user_id=user_id,
        csrf_token=secrets.token_hex(32),
        last_activity=_now(),
    )
    db.add(row)
    db.commit()
    return row


def rotate_session(db: Session, old_session_id: Optional[str], user_id: int) -> LoginSession:
    """Drop the old session (if any) and start a new one for the same user."""
    if old_session_id:
        db.execute(delete(LoginSession).where(LoginSession.session_id == old_session_id))
    return open_session(db, user_id)


def close_session(db: Session, session_id: Optional[str]) -> None:
    if not session_id:
        return
    db.execute(delete(LoginSession).where(LoginSession.session_id == session_id))
    db.commit()


def _is_expired(row: LoginSession, now: datetime) -> bool:
    return now - row.last_activity > timedelta(seconds=settings.session_lifetime_seconds)


def validate_session(db: Session, session_id: Optional[str], csrf_token: Optional[str], user_id: int) -> LoginSession:
    """
    Per-request check for every data endpoint:
      1) session exists and has not been idle longer than the lifetime
      2) csrfToken matches the session's token
      3) posted userId is the session's user
    On success the idle timer is reset.
    """
    if not session_id or not csrf_token:
        raise CsrfError("CSRF token mismatch")

    row = db.get(LoginSession, session_id)
    now = _now()
    if row is None:
        raise CsrfError("CSRF token mismatch")
    if _is_expired(row, now):
        db.delete(row)
        db.commit()
        raise CsrfError("session expired")
    if not secrets.compare_digest(row.csrf_token, csrf_token):
        raise CsrfError("CSRF token mismatch")
    if row.user_id != user_id:
        raise InvalidRequest("userId does not belong to this session")

    row.last_activity = now
    db.commit()
    return row


def purge_expired_sessions(db: Session) -> int:
    cutoff = _now() - timedelta(seconds=settings.session_lifetime_seconds)
    result = db.execute(delete(LoginSession).where(LoginSession.last_activity < cutoff))
    db.commit()
    removed = result.rowcount or 0
    logger.info("[sessions] purged expired sessions count=%d", removed)
    return removed
