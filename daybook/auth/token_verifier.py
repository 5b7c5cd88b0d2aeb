# daybook/auth/token_verifier.py
import logging
import time
from typing import Any, Dict, Optional

import jwt

from daybook.config.settings import settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"


def issue_token(user_id: int, user_name: str) -> str:
    payload = {
        "userName": user_name,
        "userId": user_id,
        "exp": int(time.time()) + settings.jwt_lifetime_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Login cookie verification:
    - HS256 signature / exp
    - userId and userName claims present
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[_ALGORITHM])
    except jwt.InvalidTokenError as e:
        logger.info("[auth] token rejected: %s", e)
        return None
    if payload.get("userId") is None or not payload.get("userName"):
        return None
    return payload
