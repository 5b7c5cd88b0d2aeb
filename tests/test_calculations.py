from __future__ import annotations

import datetime as dt
import unittest

from daybook.client.calculations import (
    average_body_weight,
    average_sleep,
    daily_balances,
    monthly_balance,
    sleep_durations,
    time_difference,
    total_time_taken,
)
from daybook.client.models import Health, Money, TimeTaken


def money(id, date, type, amount):
    category = "salary" if type == "income" else "food"
    return Money(id=id, date=date, type=type, category=category, amount=amount, content="x")


class TestBalances(unittest.TestCase):
    def test_monthly_balance(self) -> None:
        total = monthly_balance([
            money(1, "2024-05-01", "income", 250000),
            money(2, "2024-05-02", "expense", 1200),
            money(3, "2024-05-02", "expense", 800),
        ])
        self.assertEqual((total.income, total.expense, total.balance), (250000, 2000, 248000))

    def test_daily_balances(self) -> None:
        days = daily_balances([
            money(1, "2024-05-01", "income", 1000),
            money(2, "2024-05-01", "expense", 300),
            money(3, "2024-05-02", "expense", 50),
        ])
        self.assertEqual(days["2024-05-01"].balance, 700)
        self.assertEqual(days["2024-05-02"].balance, -50)

    def test_empty(self) -> None:
        self.assertEqual(monthly_balance([]).balance, 0)
        self.assertEqual(daily_balances([]), {})


class TestSleep(unittest.TestCase):
    def test_sleep_uses_previous_days_bedtime(self) -> None:
        rows = [
            Health(id=1, date="2024-02-29", bed_time="2024-02-29 23:30"),
            Health(id=2, date="2024-03-01", up_time="2024-03-01 07:00", bed_time="2024-03-02 00:30"),
            Health(id=3, date="2024-03-02", up_time="2024-03-02 06:30"),
            Health(id=4, date="2024-03-05", up_time="2024-03-05 06:30"),
        ]
        durations = sleep_durations(rows)
        self.assertEqual([(d.date, d.hours) for d in durations], [("2024-03-01", 7.5), ("2024-03-02", 6.0)])
        self.assertEqual(average_sleep(durations), 6.75)

    def test_average_of_nothing(self) -> None:
        self.assertEqual(average_sleep([]), 0.0)

    def test_time_difference(self) -> None:
        self.assertEqual(time_difference("2024-03-01 23:00", "2024-03-02 06:00"), dt.timedelta(hours=7))
        self.assertIsNone(time_difference("", "2024-03-02 06:00"))


class TestTimeTaken(unittest.TestCase):
    def test_unfinished_intervals_are_ignored(self) -> None:
        spans = [
            TimeTaken(id=1, todo_id=1, start="2024-05-01 09:00", end="2024-05-01 10:15"),
            TimeTaken(id=2, todo_id=1, start="2024-05-01 13:00", end="2024-05-01 13:30"),
            TimeTaken(id=3, todo_id=1, start="2024-05-01 15:00", end="2024-05-01 00:00"),
        ]
        self.assertEqual(total_time_taken(spans), dt.timedelta(hours=1, minutes=45))


class TestBodyWeight(unittest.TestCase):
    def test_zero_and_blank_readings_are_skipped(self) -> None:
        rows = [
            Health(id=1, date="2024-05-01", body="60.2"),
            Health(id=2, date="2024-05-02", body="0"),
            Health(id=3, date="2024-05-03", body=""),
            Health(id=4, date="2024-05-04", body="59.8"),
        ]
        self.assertEqual(average_body_weight(rows), 60.0)
        self.assertEqual(average_body_weight([]), 0.0)


if __name__ == "__main__":
    unittest.main()
