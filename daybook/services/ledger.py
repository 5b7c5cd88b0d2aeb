# daybook/services/ledger.py
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.orm import Session

from daybook.models.health import SYMPTOM_FIELDS, Health
from daybook.models.money import Money
from daybook.services.forms import (
    flag,
    require_date,
    require_int,
    require_text,
)
from daybook.services.records import get_owned


def _money_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "date": require_date(fields.get("date")),
        "type": require_text(fields.get("type")),
        "category": require_text(fields.get("category")),
        "content": require_text(fields.get("content")),
        "amount": require_int(fields.get("amount")),
    }


def save_money(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = Money(user_id=user_id, **_money_values(fields))
    db.add(row)
    db.commit()
    return row.id


def update_money(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    row = get_owned(db, Money, user_id, require_int(fields.get("id")))
    for key, value in _money_values(fields).items():
        setattr(row, key, value)
    db.commit()


def _health_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = {
        "date": require_date(fields.get("date")),
        "up_time": require_text(fields.get("upTime"), allow_empty=True),
        "bed_time": require_text(fields.get("bedTime"), allow_empty=True),
        "body": require_text(fields.get("body"), allow_empty=True),
        "memo": require_text(fields.get("memo"), allow_empty=True),
    }
    for name in SYMPTOM_FIELDS:
        values[name] = flag(fields.get(name))
    return values


def save_health(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = Health(user_id=user_id, **_health_values(fields))
    db.add(row)
    db.commit()
    return row.id


def update_health(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    row = get_owned(db, Health, user_id, require_int(fields.get("id")))
    for key, value in _health_values(fields).items():
        setattr(row, key, value)
    db.commit()
