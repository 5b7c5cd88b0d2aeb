# daybook/models/todo.py
from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from daybook.db.database import Base


class Todo(Base):
    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    # 0 = not assigned to a project / section
    project_id: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    section_id: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    sort: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))

    content: Mapped[str] = mapped_column(Text, nullable=False)
    estimated: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("0"))
    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index("idx_todos_user_date", "user_id", "date"),
        Index("idx_todos_user_project", "user_id", "project_id", "section_id"),
    )


class TimeTaken(Base):
    """One worked interval of a todo. Rewritten wholesale on every todo update."""

    __tablename__ = "time_taken"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    todo_id: Mapped[int] = mapped_column(Integer, nullable=False)
    start: Mapped[str] = mapped_column(String(19), nullable=False)
    end: Mapped[str] = mapped_column(String(19), nullable=False)

    __table_args__ = (
        Index("idx_time_taken_user_todo", "user_id", "todo_id"),
    )
