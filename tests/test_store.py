from __future__ import annotations

import unittest

from daybook.client.models import EntityKind, Money, Section, Todo
from daybook.client.store import DerivedView, Store
from daybook.client.views import filter_month


def todo(id, **kw):
    base = dict(id=id, date="2024-05-01", content=f"task {id}")
    base.update(kw)
    return Todo(**base)


def money(id, date, amount=100):
    return Money(id=id, date=date, type="expense", category="food", amount=amount, content="lunch")


class TestEntityCollection(unittest.TestCase):
    def test_new_store_collections_are_empty_and_loading(self) -> None:
        store = Store()
        for kind in EntityKind:
            self.assertEqual(len(store[kind]), 0)
            self.assertTrue(store[kind].loading)

    def test_lookup_helpers(self) -> None:
        store = Store()
        with store.transaction() as tx:
            tx.extend(EntityKind.TODO, [todo(1, section_id=2), todo(2, section_id=3), todo(3, section_id=2)])
        todos = store[EntityKind.TODO]
        self.assertEqual(todos.ids(), [1, 2, 3])
        self.assertEqual(todos.get(2).section_id, 3)
        self.assertIsNone(todos.get(99))
        self.assertEqual([t.id for t in todos.where(section_id=2)], [1, 3])


class TestTransactions(unittest.TestCase):
    def test_changes_publish_together_and_notify_once(self) -> None:
        store = Store()
        seen = []
        store.subscribe(seen.append)
        with store.transaction() as tx:
            tx.append(EntityKind.TODO, todo(1, project_id=7))
            tx.append(EntityKind.SECTION, Section(id=4, project_id=7, name="a"))
            # nothing visible before the block ends
            self.assertEqual(len(store[EntityKind.TODO]), 0)
        self.assertEqual(len(store[EntityKind.TODO]), 1)
        self.assertEqual(seen, [{EntityKind.TODO, EntityKind.SECTION}])

    def test_exception_discards_everything(self) -> None:
        store = Store()
        with store.transaction() as tx:
            tx.append(EntityKind.TODO, todo(1))
        seen = []
        store.subscribe(seen.append)

        with self.assertRaises(RuntimeError):
            with store.transaction() as tx:
                tx.remove(EntityKind.TODO, [1])
                raise RuntimeError("boom")

        self.assertEqual(store[EntityKind.TODO].ids(), [1])
        self.assertEqual(seen, [])

    def test_unacknowledged_records_are_refused(self) -> None:
        store = Store()
        with self.assertRaises(ValueError):
            with store.transaction() as tx:
                tx.append(EntityKind.TODO, todo(0))
        self.assertEqual(len(store[EntityKind.TODO]), 0)

    def test_patch_keeps_other_fields_and_records(self) -> None:
        store = Store()
        with store.transaction() as tx:
            tx.extend(EntityKind.TODO, [todo(1, sort=0, memo="m"), todo(2, sort=1)])
        before = store[EntityKind.TODO].get(2)
        with store.transaction() as tx:
            self.assertTrue(tx.patch(EntityKind.TODO, 1, sort=5))
            self.assertFalse(tx.patch(EntityKind.TODO, 99, sort=5))
        patched = store[EntityKind.TODO].get(1)
        self.assertEqual(patched.sort, 5)
        self.assertEqual(patched.memo, "m")
        self.assertIs(store[EntityKind.TODO].get(2), before)

    def test_staged_reads_see_earlier_writes(self) -> None:
        store = Store()
        with store.transaction() as tx:
            tx.append(EntityKind.TODO, todo(1))
            tx.remove(EntityKind.TODO, [1])
            self.assertEqual(len(tx.view(EntityKind.TODO)), 0)
        self.assertEqual(len(store[EntityKind.TODO]), 0)

    def test_transactions_do_not_nest(self) -> None:
        store = Store()
        with self.assertRaises(RuntimeError):
            with store.transaction():
                with store.transaction():
                    pass

    def test_unsubscribe(self) -> None:
        store = Store()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        with store.transaction() as tx:
            tx.set_loading(EntityKind.MONEY, False)
        self.assertEqual(seen, [])
        self.assertFalse(store[EntityKind.MONEY].loading)


class TestDerivedView(unittest.TestCase):
    def test_recomputes_on_publish_and_reference_change(self) -> None:
        store = Store()
        view = DerivedView(store, EntityKind.MONEY, filter_month, "2024-05")
        self.assertEqual(view.value, [])

        with store.transaction() as tx:
            tx.extend(EntityKind.MONEY, [money(1, "2024-05-31"), money(2, "2024-06-01")])
        self.assertEqual([m.id for m in view.value], [1])

        view.set_reference("2024-06")
        self.assertEqual([m.id for m in view.value], [2])

    def test_other_kinds_do_not_trigger_recompute(self) -> None:
        store = Store()
        calls = []

        def fn(items, reference):
            calls.append(reference)
            return len(items)

        view = DerivedView(store, EntityKind.MONEY, fn, "2024-05")
        with store.transaction() as tx:
            tx.append(EntityKind.TODO, todo(1))
        self.assertEqual(len(calls), 1)
        view.close()

    def test_no_value_until_a_reference_is_set(self) -> None:
        store = Store()
        view = DerivedView(store, EntityKind.MONEY, filter_month)
        self.assertIsNone(view.value)

        with store.transaction() as tx:
            tx.append(EntityKind.MONEY, money(1, "2024-05-02"))
        self.assertIsNone(view.value)

        view.set_reference("2024-05")
        self.assertEqual([m.id for m in view.value], [1])
        view.close()


if __name__ == "__main__":
    unittest.main()
