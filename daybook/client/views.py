# daybook/client/views.py
# pure filters over collection snapshots; dates are compared as "YYYY-MM-DD" text
from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, List, Sequence, Union

DateLike = Union[dt.date, str]


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, dt.date) else value


def _day(item: Any, field: str) -> str:
    return str(getattr(item, field))[:10]


def _month_prefix(month: DateLike) -> str:
    return _iso(month)[:7]


def last_day_of_previous_month(month: DateLike) -> dt.date:
    first = dt.date.fromisoformat(_month_prefix(month) + "-01")
    return first - dt.timedelta(days=1)


def filter_month(items: Iterable[Any], month: DateLike, field: str = "date") -> List[Any]:
    prefix = _month_prefix(month)
    return [item for item in items if _day(item, field).startswith(prefix)]


def filter_day(items: Iterable[Any], day: DateLike, field: str = "date") -> List[Any]:
    target = _iso(day)[:10]
    return [item for item in items if _day(item, field) == target]


def filter_month_with_prior_last_day(items: Iterable[Any], month: DateLike, field: str = "date") -> List[Any]:
    """
    The month's items plus those dated on the last day of the previous
    month (a night's sleep on the 1st starts the evening before).
    """
    prefix = _month_prefix(month)
    prior = last_day_of_previous_month(month).isoformat()
    return [
        item for item in items
        if _day(item, field).startswith(prefix) or _day(item, field) == prior
    ]


def filter_year(items: Iterable[Any], year: Union[DateLike, int], field: str = "date") -> List[Any]:
    prefix = f"{year:04d}" if isinstance(year, int) else _iso(year)[:4]
    return [item for item in items if _day(item, field).startswith(prefix)]


def today_and_yesterday(items: Iterable[Any], today: dt.date, field: str = "date") -> List[Any]:
    wanted = {today.isoformat(), (today - dt.timedelta(days=1)).isoformat()}
    return [item for item in items if _day(item, field) in wanted]


def filter_by_search_words(
    items: Iterable[Any],
    words: Sequence[str],
    field: str = "content",
    use_every: bool = False,
) -> List[Any]:
    """Items whose `field` contains any (or, with use_every, all) of `words`."""
    words = [w for w in words if w]
    if not words:
        return list(items)
    match = all if use_every else any
    return [item for item in items if match(w in getattr(item, field) for w in words)]


def sort_by_date_desc(items: Iterable[Any], field: str = "date") -> List[Any]:
    return sorted(items, key=lambda item: (_day(item, field), item.id), reverse=True)
