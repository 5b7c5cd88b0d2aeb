# daybook/services/memos.py
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.orm import Session

from daybook.models.memo import Memo, MonthlyMemo
from daybook.services.forms import (
    InvalidRequest,
    require_int,
    require_text,
)
from daybook.services.records import get_owned

MEMO_FIELDS = ("name", "memo")


def save_memo(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = Memo(
        user_id=user_id,
        name=require_text(fields.get("name")),
        memo=require_text(fields.get("memo"), allow_empty=True),
        sort=require_int(fields.get("sort", "0")),
    )
    db.add(row)
    db.commit()
    return row.id


def update_memo_field(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    """`type` is "name" or "memo"; only that column changes."""
    field = fields.get("type")
    if field not in MEMO_FIELDS:
        raise InvalidRequest(f"unknown memo field: {field!r}")
    row = get_owned(db, Memo, user_id, require_int(fields.get("id")))
    setattr(row, field, require_text(fields.get(field), allow_empty=(field == "memo")))
    db.commit()


def save_monthly_memo(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = MonthlyMemo(
        user_id=user_id,
        date=require_text(fields.get("date")),
        memo=require_text(fields.get("memo"), allow_empty=True),
    )
    db.add(row)
    db.commit()
    return row.id


def update_monthly_memo(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    row = get_owned(db, MonthlyMemo, user_id, require_int(fields.get("id")))
    row.memo = require_text(fields.get("memo"), allow_empty=True)
    db.commit()
