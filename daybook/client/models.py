# daybook/client/models.py
"""
Client-side records.

Every entity is a frozen pydantic model whose wire names are camelCase
(`projectId`, `timeTakenIds`, ...). Collections only ever hold these
immutable values; a change is a new instance built with `model_copy`.

`*Draft` models are the shapes posted to the store (the entity minus its id)
and carry the validation rules a record must pass before it is sent.
"""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _Wire(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _bit(v: Any) -> int:
    if isinstance(v, str):
        return 0 if v in ("", "0", "false") else 1
    return 1 if v else 0


def _non_empty(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("must not be empty")
    return v


def _iso_date(v: str) -> str:
    dt.date.fromisoformat(v)
    return v


class TodoType(str, Enum):
    WORK = "work"
    PRIVATE = "private"
    ROUTINE = "routine"


class MoneyType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


INCOME_CATEGORIES = ("salary", "side_income", "other")
EXPENSE_CATEGORIES = (
    "food", "daily_goods", "housing", "snacks", "transport", "social",
    "entertainment", "beauty", "subscription", "insurance", "medical", "other",
)

SYMPTOM_FLAGS = (
    "headache", "stomach", "period", "sleepless", "cold",
    "nausea", "hayfever", "depression", "tired", "other",
)

NO_DEADLINE = "0000-00-00"


# ---------- Todo / TimeTaken ----------
class _TodoFields(_Wire):
    date: str
    time: str = ""
    type: str = TodoType.WORK.value
    project_id: int = 0
    section_id: int = 0
    sort: int = 0
    content: str
    estimated: str = ""
    completed: int = 0
    memo: str = ""

    completed_bit = field_validator("completed", mode="before")(_bit)


class Todo(_TodoFields):
    id: int


class TimeSpan(_Wire):
    """Worked interval inside a todo's day; times of day, "HH:MM"."""
    start: str
    end: str


class TodoDraft(_TodoFields):
    time_taken: List[TimeSpan] = Field(default_factory=list)

    content_required = field_validator("content")(_non_empty)
    date_iso = field_validator("date")(_iso_date)

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str) -> str:
        return TodoType(v).value


class TimeTaken(_Wire):
    id: int
    todo_id: int
    start: str
    end: str


# ---------- Project / Section ----------
class _ProjectFields(_Wire):
    name: str
    end: str = NO_DEADLINE
    completed: int = 0
    memo: str = ""

    completed_bit = field_validator("completed", mode="before")(_bit)


class Project(_ProjectFields):
    id: int


class ProjectDraft(_ProjectFields):
    name_required = field_validator("name")(_non_empty)

    @field_validator("end")
    @classmethod
    def deadline(cls, v: str) -> str:
        if not v:
            return NO_DEADLINE
        return v if v == NO_DEADLINE else _iso_date(v)


class _SectionFields(_Wire):
    project_id: int
    name: str
    sort: int = 0
    memo: str = ""


class Section(_SectionFields):
    id: int


class SectionDraft(_SectionFields):
    name_required = field_validator("name")(_non_empty)


# ---------- Money ----------
class _MoneyFields(_Wire):
    date: str
    type: str
    category: str
    amount: int
    content: str


class Money(_MoneyFields):
    id: int


class MoneyDraft(_MoneyFields):
    content_required = field_validator("content")(_non_empty)
    date_iso = field_validator("date")(_iso_date)

    @model_validator(mode="after")
    def category_matches_type(self) -> "MoneyDraft":
        allowed = INCOME_CATEGORIES if MoneyType(self.type) is MoneyType.INCOME else EXPENSE_CATEGORIES
        if self.category not in allowed:
            raise ValueError(f"category {self.category!r} is not valid for {self.type}")
        if self.amount < 0:
            raise ValueError("amount must not be negative")
        return self


# ---------- Health ----------
class _HealthFields(_Wire):
    date: str
    up_time: str = ""
    bed_time: str = ""
    body: str = ""
    headache: int = 0
    stomach: int = 0
    period: int = 0
    sleepless: int = 0
    cold: int = 0
    nausea: int = 0
    hayfever: int = 0
    depression: int = 0
    tired: int = 0
    other: int = 0
    memo: str = ""

    flags_bit = field_validator(*SYMPTOM_FLAGS, mode="before")(_bit)


class Health(_HealthFields):
    id: int


class HealthDraft(_HealthFields):
    date_iso = field_validator("date")(_iso_date)


# ---------- Memo ----------
class _MemoFields(_Wire):
    name: str
    memo: str = ""
    sort: int = 0


class Memo(_MemoFields):
    id: int


class MemoDraft(_MemoFields):
    name_required = field_validator("name")(_non_empty)


class _MonthlyMemoFields(_Wire):
    date: str
    memo: str = ""


class MonthlyMemo(_MonthlyMemoFields):
    id: int


class MonthlyMemoDraft(_MonthlyMemoFields):
    date_required = field_validator("date")(_non_empty)


# ---------- kinds ----------
class EntityKind(str, Enum):
    """Value is the table type the store endpoints use."""
    TODO = "todo"
    TIME_TAKEN = "timeTaken"
    SECTION = "section"
    PROJECT = "project"
    MONEY = "money"
    HEALTH = "health"
    MEMO = "memo"
    MONTHLY_MEMO = "monthlyMemo"

    @property
    def model(self) -> Type[_Wire]:
        return _MODELS[self]

    @property
    def has_encoded_memo(self) -> bool:
        return self in (EntityKind.PROJECT, EntityKind.MEMO, EntityKind.MONTHLY_MEMO)


_MODELS: Dict[EntityKind, Type[_Wire]] = {
    EntityKind.TODO: Todo,
    EntityKind.TIME_TAKEN: TimeTaken,
    EntityKind.SECTION: Section,
    EntityKind.PROJECT: Project,
    EntityKind.MONEY: Money,
    EntityKind.HEALTH: Health,
    EntityKind.MEMO: Memo,
    EntityKind.MONTHLY_MEMO: MonthlyMemo,
}

DELETABLE_KINDS = (
    EntityKind.TODO,
    EntityKind.MONEY,
    EntityKind.HEALTH,
    EntityKind.PROJECT,
    EntityKind.SECTION,
    EntityKind.MEMO,
)


# ---------- wire envelopes ----------
class ResponseData(_Wire):
    success: bool
    error: Optional[str] = None
    id: Optional[int] = None
    ids: Optional[List[int]] = None
    time_taken_ids: Optional[List[int]] = None
    data: Optional[List[Dict[str, Any]]] = None
    user_id: Optional[int] = None
    csrf_token: Optional[str] = None


class Credentials(_Wire):
    user_id: int
    csrf_token: str

    def as_fields(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "csrfToken": self.csrf_token}
