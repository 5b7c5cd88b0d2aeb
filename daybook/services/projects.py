# daybook/services/projects.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from daybook.models.project import Project, Section
from daybook.models.todo import Todo
from daybook.services.records import get_owned
from daybook.services.forms import (
    InvalidRequest,
    require_int,
    require_text,
)

# fields the project update endpoint accepts in `type`
PROJECT_FIELDS = ("name", "end", "completed", "memo")


def _project_value(field: str, raw: Any):
    if field == "name":
        return require_text(raw)
    if field == "end":
        return require_text(raw, allow_empty=True) or "0000-00-00"
    if field == "completed":
        return require_int(raw) != 0
    return require_text(raw, allow_empty=True)


def save_project(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = Project(
        user_id=user_id,
        name=_project_value("name", fields.get("name")),
        end=_project_value("end", fields.get("end")),
        completed=_project_value("completed", fields.get("completed", "0")),
        memo=_project_value("memo", fields.get("memo")),
    )
    db.add(row)
    db.commit()
    return row.id


def update_project_field(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    """Single-field update: `type` names the field, the value sits under that name."""
    project_id = require_int(fields.get("id"))
    field = fields.get("type")
    if field not in PROJECT_FIELDS:
        raise InvalidRequest(f"unknown project field: {field!r}")

    row = get_owned(db, Project, user_id, project_id)
    setattr(row, field, _project_value(field, fields.get(field)))
    db.commit()


def save_section(db: Session, user_id: int, fields: Dict[str, Any]) -> int:
    row = Section(
        user_id=user_id,
        project_id=require_int(fields.get("projectId")),
        name=require_text(fields.get("name")),
        sort=require_int(fields.get("sort")),
        memo=require_text(fields.get("memo"), allow_empty=True),
    )
    db.add(row)
    db.commit()
    return row.id


def update_section(db: Session, user_id: int, fields: Dict[str, Any]) -> None:
    row = get_owned(db, Section, user_id, require_int(fields.get("id")))
    row.name = require_text(fields.get("name"))
    row.memo = require_text(fields.get("memo"), allow_empty=True)
    db.commit()


def apply_sort(
    db: Session,
    user_id: int,
    table_type: str,
    ids: List[Any],
    sorts: List[Any],
    section_ids: Optional[List[Any]] = None,
) -> None:
    """Bulk rewrite of sort (and sectionId for todos), all rows or none."""
    if len(ids) != len(sorts):
        raise InvalidRequest("id and sort must be the same length")

    if table_type == "section":
        for raw_id, raw_sort in zip(ids, sorts):
            db.execute(
                update(Section)
                .where(Section.user_id == user_id, Section.id == require_int(raw_id))
                .values(sort=require_int(raw_sort))
            )
    elif table_type == "todo":
        if section_ids is None or len(section_ids) != len(ids):
            raise InvalidRequest("sectionId must be the same length as id")
        for raw_id, raw_sort, raw_section in zip(ids, sorts, section_ids):
            db.execute(
                update(Todo)
                .where(Todo.user_id == user_id, Todo.id == require_int(raw_id))
                .values(sort=require_int(raw_sort), section_id=require_int(raw_section))
            )
    else:
        raise InvalidRequest(f"Invalid tableType: {table_type!r}")
    db.commit()

