# daybook/auth/dependencies.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from daybook.db.database import get_db
from daybook.services.forms import InvalidRequest, parse_form, require_int
from daybook.services.sessions import validate_session

SESSION_COOKIE = "session_id"
TOKEN_COOKIE = "token"


@dataclass
class FormContext:
    user_id: int
    fields: Dict[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


async def read_form(request: Request) -> Dict[str, Any]:
    form = await request.form()
    return parse_form(form.multi_items())


async def verified_form(
    request: Request,
    db: Session = Depends(get_db),
) -> FormContext:
    """
    Every data endpoint goes through here:
    - body must not be empty
    - userId must be numeric
    - session cookie + csrfToken must match the server-side session
    """
    fields = await read_form(request)
    if not fields:
        raise InvalidRequest("No data sent")

    user_id = require_int(fields.get("userId"))
    validate_session(
        db,
        request.cookies.get(SESSION_COOKIE),
        fields.get("csrfToken"),
        user_id,
    )
    return FormContext(user_id=user_id, fields=fields)
