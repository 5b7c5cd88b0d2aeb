# daybook/services/todos.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from daybook.models.todo import TimeTaken, Todo
from daybook.services.forms import (
    InvalidRequest,
    require_date,
    require_int,
    require_text,
    sanitize,
)


def _todo_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the shared todo fields (save and update post the same set)."""
    return {
        "date": require_date(fields.get("date")),
        "time": require_text(fields.get("time"), allow_empty=True),
        "type": require_text(fields.get("type")),
        "project_id": require_int(fields.get("projectId")),
        "section_id": require_int(fields.get("sectionId")),
        "sort": require_int(fields.get("sort")),
        "content": require_text(fields.get("content")),
        "estimated": require_text(fields.get("estimated"), allow_empty=True),
        "memo": require_text(fields.get("memo"), allow_empty=True),
        "completed": require_int(fields.get("completed")) != 0,
    }


def _segments(fields: Dict[str, Any]) -> List[Tuple[str, str]]:
    raw = fields.get("timeTaken") or []
    if not isinstance(raw, list):
        raise InvalidRequest("timeTaken must be an array")
    segments = []
    for item in raw:
        if not isinstance(item, dict):
            raise InvalidRequest("timeTaken entries need start and end")
        segments.append((sanitize(item.get("start")), sanitize(item.get("end"))))
    return segments


def _insert_time_taken(db: Session, user_id: int, todo_id: int, day: str, segments) -> List[int]:
    rows = [
        TimeTaken(user_id=user_id, todo_id=todo_id, start=f"{day} {start}", end=f"{day} {end}")
        for start, end in segments
    ]
    db.add_all(rows)
    db.flush()
    return [row.id for row in rows]


def get_todo(db: Session, user_id: int, todo_id: int) -> Optional[Todo]:
    return (
        db.execute(select(Todo).where(Todo.user_id == user_id, Todo.id == todo_id))
        .scalars()
        .first()
    )


def save_todo(db: Session, user_id: int, fields: Dict[str, Any]) -> Tuple[int, List[int]]:
    """
    Insert the todo and its worked intervals in one transaction.
    Returns (todo id, time-taken ids in submitted order).
    """
    values = _todo_values(fields)
    segments = _segments(fields)

    todo = Todo(user_id=user_id, **values)
    db.add(todo)
    db.flush()
    time_taken_ids = _insert_time_taken(db, user_id, todo.id, values["date"].isoformat(), segments)
    db.commit()
    return todo.id, time_taken_ids


def update_todo(db: Session, user_id: int, fields: Dict[str, Any]) -> List[int]:
    """
    Overwrite the todo and replace ALL of its intervals.
    The returned ids are the only valid time-taken ids for this todo afterwards.
    """
    todo_id = require_int(fields.get("id"))
    values = _todo_values(fields)
    segments = _segments(fields)

    todo = get_todo(db, user_id, todo_id)
    if todo is None:
        raise InvalidRequest(f"todo {todo_id} not found")
    for key, value in values.items():
        setattr(todo, key, value)

    db.execute(
        delete(TimeTaken).where(TimeTaken.user_id == user_id, TimeTaken.todo_id == todo_id)
    )
    time_taken_ids = _insert_time_taken(db, user_id, todo_id, values["date"].isoformat(), segments)
    db.commit()
    return time_taken_ids


def set_completed(db: Session, user_id: int, todo_id: int, completed: int) -> None:
    todo = get_todo(db, user_id, todo_id)
    if todo is None:
        raise InvalidRequest(f"todo {todo_id} not found")
    todo.completed = completed != 0
    db.commit()
