# daybook/services/records.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from daybook.models.health import Health
from daybook.models.memo import Memo, MonthlyMemo
from daybook.models.money import Money
from daybook.models.project import Project, Section
from daybook.models.todo import TimeTaken, Todo
from daybook.schemas.rows import ROW_SCHEMAS
from daybook.services.forms import InvalidRequest

logger = logging.getLogger(__name__)

# tableType -> model, for the fetch endpoint whitelist
FETCHABLE = {
    "todo": Todo,
    "timeTaken": TimeTaken,
    "money": Money,
    "health": Health,
    "project": Project,
    "section": Section,
    "memo": Memo,
    "monthlyMemo": MonthlyMemo,
}

# tableType -> model, for the delete endpoint whitelist
DELETABLE = {
    "todo": Todo,
    "money": Money,
    "health": Health,
    "project": Project,
    "section": Section,
    "memo": Memo,
}


def get_owned(db: Session, model, user_id: int, row_id: int):
    row = (
        db.execute(select(model).where(model.user_id == user_id, model.id == row_id))
        .scalars()
        .first()
    )
    if row is None:
        raise InvalidRequest(f"{model.__tablename__} {row_id} not found")
    return row


def fetch_rows(db: Session, user_id: int, table_type: str) -> List[Dict[str, Any]]:
    """Full row set of one kind for one user, as camelCase wire dicts (text unescaped)."""
    model = FETCHABLE.get(table_type)
    if model is None:
        raise InvalidRequest(f"Invalid tableType: {table_type!r}")

    rows = (
        db.execute(select(model).where(model.user_id == user_id).order_by(model.id.asc()))
        .scalars()
        .all()
    )
    schema = ROW_SCHEMAS[table_type]
    return [schema.model_validate(row).model_dump(by_alias=True, mode="json") for row in rows]


def delete_records(db: Session, user_id: int, table_type: str, ids: Sequence[int]) -> None:
    """
    Delete by id, with the same cascade the client mirrors locally:
      - todo: its time-taken rows go too
      - project: sections removed, todos unassigned (projectId/sectionId/sort = 0)
      - everything else: plain delete
    """
    model = DELETABLE.get(table_type)
    if model is None:
        raise InvalidRequest(f"Invalid tableType: {table_type!r}")

    for row_id in ids:
        db.execute(delete(model).where(model.user_id == user_id, model.id == row_id))

        if table_type == "todo":
            db.execute(
                delete(TimeTaken).where(TimeTaken.user_id == user_id, TimeTaken.todo_id == row_id)
            )
        elif table_type == "project":
            db.execute(
                delete(Section).where(Section.user_id == user_id, Section.project_id == row_id)
            )
            db.execute(
                update(Todo)
                .where(Todo.user_id == user_id, Todo.project_id == row_id)
                .values(project_id=0, section_id=0, sort=0)
            )

    db.commit()
    logger.info("[records] deleted table=%s user=%s ids=%s", table_type, user_id, list(ids))
