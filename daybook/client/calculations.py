# daybook/client/calculations.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from daybook.client.models import Health, Money, MoneyType, TimeTaken


@dataclass
class Balance:
    income: int = 0
    expense: int = 0

    @property
    def balance(self) -> int:
        return self.income - self.expense

    def add(self, record: Money) -> None:
        if record.type == MoneyType.INCOME.value:
            self.income += record.amount
        else:
            self.expense += record.amount


@dataclass(frozen=True)
class SleepTime:
    date: str
    hours: float


def monthly_balance(records: Iterable[Money]) -> Balance:
    total = Balance()
    for record in records:
        total.add(record)
    return total


def daily_balances(records: Iterable[Money]) -> Dict[str, Balance]:
    days: Dict[str, Balance] = {}
    for record in records:
        days.setdefault(record.date, Balance()).add(record)
    return days


def _parse(value: str) -> Optional[dt.datetime]:
    if not value:
        return None
    try:
        return dt.datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def time_difference(start: str, end: str) -> Optional[dt.timedelta]:
    """end - start for "YYYY-MM-DD HH:MM[:SS]" strings; None if either is unreadable."""
    a, b = _parse(start), _parse(end)
    if a is None or b is None:
        return None
    return b - a


def sleep_durations(records: Iterable[Health]) -> List[SleepTime]:
    """
    Hours slept for each day: that day's wake-up time minus the bedtime
    recorded on the previous day. Days without both readings are skipped,
    so the first day of a range needs the previous day's record.
    """
    by_date = {r.date: r for r in records}
    result = []
    for day in sorted(by_date):
        previous = (dt.date.fromisoformat(day) - dt.timedelta(days=1)).isoformat()
        if previous not in by_date:
            continue
        slept = time_difference(by_date[previous].bed_time, by_date[day].up_time)
        if slept is None or slept <= dt.timedelta(0):
            continue
        result.append(SleepTime(date=day, hours=round(slept.total_seconds() / 3600, 2)))
    return result


def average_sleep(durations: Iterable[SleepTime]) -> float:
    hours = [d.hours for d in durations]
    if not hours:
        return 0.0
    return round(sum(hours) / len(hours), 2)


def total_time_taken(segments: Iterable[TimeTaken]) -> dt.timedelta:
    # an end of 00:00 marks an interval that is still running
    total = dt.timedelta(0)
    for segment in segments:
        if segment.end[11:16] == "00:00":
            continue
        diff = time_difference(segment.start, segment.end)
        if diff is not None and diff > dt.timedelta(0):
            total += diff
    return total


def average_body_weight(records: Iterable[Health]) -> float:
    readings = []
    for record in records:
        try:
            weight = float(record.body)
        except ValueError:
            continue
        if weight != 0:
            readings.append(weight)
    if not readings:
        return 0.0
    return round(sum(readings) / len(readings), 1)
