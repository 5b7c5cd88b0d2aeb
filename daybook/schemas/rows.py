# daybook/schemas/rows.py
from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from daybook.services.forms import unescape


class _Row(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # stored text is HTML-escaped; rows leave the server readable
    @field_validator("*", mode="before")
    @classmethod
    def _unescape(cls, v: Any) -> Any:
        if isinstance(v, str):
            return unescape(v)
        return v


def _bit(v: Any) -> int:
    return 1 if v else 0


class TodoRow(_Row):
    id: int
    date: dt.date
    time: str
    type: str
    project_id: int
    section_id: int
    sort: int
    content: str
    estimated: str
    completed: int
    memo: str

    completed_bit = field_validator("completed", mode="before")(_bit)


class TimeTakenRow(_Row):
    id: int
    todo_id: int
    start: str
    end: str


class ProjectRow(_Row):
    id: int
    name: str
    end: str
    completed: int
    memo: str

    completed_bit = field_validator("completed", mode="before")(_bit)


class SectionRow(_Row):
    id: int
    project_id: int
    name: str
    sort: int
    memo: str


class MoneyRow(_Row):
    id: int
    date: dt.date
    type: str
    category: str
    amount: int
    content: str


class HealthRow(_Row):
    id: int
    date: dt.date
    up_time: str
    bed_time: str
    body: str
    headache: int
    stomach: int
    period: int
    sleepless: int
    cold: int
    nausea: int
    hayfever: int
    depression: int
    tired: int
    other: int
    memo: str

    flags_bit = field_validator(
        "headache", "stomach", "period", "sleepless", "cold",
        "nausea", "hayfever", "depression", "tired", "other",
        mode="before",
    )(_bit)


class MemoRow(_Row):
    id: int
    name: str
    memo: str
    sort: int


class MonthlyMemoRow(_Row):
    id: int
    date: str
    memo: str


ROW_SCHEMAS = {
    "todo": TodoRow,
    "timeTaken": TimeTakenRow,
    "project": ProjectRow,
    "section": SectionRow,
    "money": MoneyRow,
    "health": HealthRow,
    "memo": MemoRow,
    "monthlyMemo": MonthlyMemoRow,
}
