from __future__ import annotations

import asyncio
import unittest

from daybook.client.models import EntityKind, Section, Todo
from daybook.client.reorder import (
    DragPhase,
    Rect,
    SectionReorderEngine,
    TaskReorderEngine,
    reindex,
)
from tests.stub_store import StubRemoteStore, make_client

PROJECT = 1
ROW = Rect(top=100, bottom=140)  # middle = 120


def task(id, section_id, sort, **kw):
    return Todo(id=id, date="2024-05-01", content=f"task {id}", project_id=PROJECT, section_id=section_id, sort=sort, **kw)


class ReorderTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.stub = StubRemoteStore()
        self.store, self.gateway, self.auth, self.mutations = make_client(self.stub)
        with self.store.transaction() as tx:
            tx.extend(EntityKind.SECTION, [
                Section(id=10, project_id=PROJECT, name="todo", sort=0),
                Section(id=20, project_id=PROJECT, name="doing", sort=1),
                Section(id=99, project_id=2, name="elsewhere", sort=0),
            ])
            tx.extend(EntityKind.TODO, [
                task(1, 10, 0, memo="keep me"),
                task(2, 10, 1),
                task(3, 10, 2),
                task(4, 20, 0),
                task(5, 20, 1),
                task(6, 0, 0),
            ])
        self.tasks = TaskReorderEngine(self.gateway, self.store, self.auth, PROJECT)
        self.sections = SectionReorderEngine(self.gateway, self.store, self.auth, PROJECT)

    async def asyncTearDown(self) -> None:
        await self.gateway.client.aclose()

    def order(self, section_id):
        todos = self.store[EntityKind.TODO].where(project_id=PROJECT, section_id=section_id)
        return [t.id for t in sorted(todos, key=lambda t: t.sort)]

    def sorts(self, section_id):
        todos = self.store[EntityKind.TODO].where(project_id=PROJECT, section_id=section_id)
        return sorted(t.sort for t in todos)


class TestReindex(unittest.TestCase):
    def test_sort_equals_position(self) -> None:
        items = [task(3, 10, 7), task(1, 10, 2), task(2, 10, 2)]
        self.assertEqual([(t.id, t.sort) for t in reindex(items)], [(3, 0), (1, 1), (2, 2)])


class TestSameGroupDrag(ReorderTestCase):
    async def test_midpoint_rule(self) -> None:
        self.assertTrue(self.tasks.begin_drag(1))
        # dragging down: still above the middle of task 2 -> no swap
        self.assertFalse(self.tasks.hover(2, 110, ROW))
        self.assertEqual(self.tasks.working_order, [1, 2, 3])
        self.assertTrue(self.tasks.hover(2, 125, ROW))
        self.assertEqual(self.tasks.working_order, [2, 1, 3])
        # dragging back up: below the middle of task 2 -> no swap
        self.assertFalse(self.tasks.hover(2, 130, ROW))
        self.assertTrue(self.tasks.hover(2, 115, ROW))
        self.assertEqual(self.tasks.working_order, [1, 2, 3])

    async def test_hover_is_local_only(self) -> None:
        self.tasks.begin_drag(1)
        self.tasks.hover(2, 130, ROW)
        self.tasks.hover(3, 130, ROW)
        self.assertEqual(self.stub.requests, [])
        self.assertEqual(self.order(10), [1, 2, 3])

    async def test_drop_commits_one_bulk_request_and_keeps_sort_contiguous(self) -> None:
        self.stub.reply("/sort", {"success": True})
        self.tasks.begin_drag(1)
        self.tasks.hover(2, 130, ROW)
        self.tasks.hover(3, 130, ROW)
        self.assertTrue(await self.tasks.drop())

        self.assertEqual(self.tasks.phase, DragPhase.IDLE)
        self.assertEqual(self.order(10), [2, 3, 1])
        self.assertEqual(self.sorts(10), [0, 1, 2])
        sent = self.stub.sent("/sort")
        self.assertEqual(len(sent), 1)
        self.assertEqual(sent[0]["tableType"], "todo")
        self.assertEqual(sent[0]["id"], ["2", "3", "1"])
        self.assertEqual(sent[0]["sort"], ["0", "1", "2"])
        self.assertEqual(sent[0]["sectionId"], ["10", "10", "10"])

    async def test_reconciliation_patches_only_ordering_fields(self) -> None:
        self.stub.reply("/sort", {"success": True})
        untouched = self.store[EntityKind.TODO].get(4)
        await self.tasks.move(1, 2)
        moved = self.store[EntityKind.TODO].get(1)
        self.assertEqual(moved.sort, 2)
        self.assertEqual(moved.memo, "keep me")
        self.assertEqual(moved.content, "task 1")
        self.assertIs(self.store[EntityKind.TODO].get(4), untouched)

    async def test_unchanged_drop_sends_nothing(self) -> None:
        self.tasks.begin_drag(2)
        self.assertTrue(await self.tasks.drop())
        self.assertEqual(self.stub.requests, [])
        self.assertEqual(self.tasks.phase, DragPhase.IDLE)

    async def test_failed_commit_leaves_store_alone(self) -> None:
        self.stub.reply("/sort", {"success": False, "error": "An error occurred"})
        self.assertFalse(await self.tasks.move(3, 0))
        self.assertEqual(self.order(10), [1, 2, 3])
        self.assertEqual(self.tasks.phase, DragPhase.IDLE)

    async def test_cancel(self) -> None:
        self.tasks.begin_drag(1)
        self.tasks.hover(2, 130, ROW)
        self.assertTrue(self.tasks.cancel())
        self.assertEqual(self.tasks.phase, DragPhase.IDLE)
        self.assertFalse(await self.tasks.drop())
        self.assertEqual(self.stub.requests, [])


class TestCrossGroupMove(ReorderTestCase):
    async def test_forward_move_lands_on_leading_edge(self) -> None:
        self.stub.reply("/sort", {"success": True})
        self.tasks.begin_drag(2)
        self.assertTrue(await self.tasks.enter_group(20))

        self.assertEqual(self.tasks.phase, DragPhase.DRAGGING)
        self.assertEqual(self.order(20), [2, 4, 5])
        self.assertEqual(self.order(10), [1, 3])
        self.assertEqual(self.sorts(20), [0, 1, 2])
        self.assertEqual(self.sorts(10), [0, 1])
        self.assertEqual(self.store[EntityKind.TODO].get(2).section_id, 20)
        self.assertEqual(self.tasks.working_order, [2, 4, 5])

        sent = self.stub.sent("/sort")
        self.assertEqual(len(sent), 1)
        self.assertEqual(sent[0]["id"], ["2", "4", "5", "1", "3"])
        self.assertEqual(sent[0]["sectionId"], ["20", "20", "20", "10", "10"])

    async def test_backward_move_lands_on_trailing_edge(self) -> None:
        self.stub.reply("/sort", {"success": True})
        self.tasks.begin_drag(6)
        self.assertTrue(await self.tasks.enter_group(10))
        self.assertEqual(self.order(10), [1, 2, 3, 6])
        self.assertEqual(self.order(0), [])

    async def test_hover_continues_after_cross_group_commit(self) -> None:
        self.stub.reply("/sort", {"success": True}, {"success": True})
        self.tasks.begin_drag(2)
        await self.tasks.enter_group(20)
        self.assertTrue(self.tasks.hover(4, 130, ROW))
        self.assertTrue(await self.tasks.drop())
        self.assertEqual(self.order(20), [4, 2, 5])
        self.assertEqual(len(self.stub.sent("/sort")), 2)

    async def test_one_shot_move_into_another_section(self) -> None:
        self.stub.reply("/sort", {"success": True})
        self.assertTrue(await self.tasks.move(5, 1, section_id=10))
        self.assertEqual(self.order(10), [1, 5, 2, 3])
        self.assertEqual(self.order(20), [4])

    async def test_task_of_a_deleted_section_enters_another_section(self) -> None:
        self.stub.reply("/delData", {"success": True})
        self.assertTrue(await self.mutations.delete_section(10))
        self.assertIsNone(self.store[EntityKind.SECTION].get(10))

        self.stub.reply("/sort", {"success": True})
        self.assertTrue(self.tasks.begin_drag(1))
        self.assertTrue(await self.tasks.enter_group(20))

        self.assertEqual(self.order(20), [1, 4, 5])
        self.assertEqual(self.order(10), [2, 3])
        sent = self.stub.sent("/sort")
        self.assertEqual(sent[0]["id"], ["1", "4", "5", "2", "3"])
        self.assertEqual(sent[0]["sectionId"], ["20", "20", "20", "10", "10"])

    async def test_one_shot_move_out_of_a_deleted_section(self) -> None:
        self.stub.reply("/delData", {"success": True})
        await self.mutations.delete_section(10)
        self.stub.reply("/sort", {"success": True})
        self.assertTrue(await self.tasks.move(3, 1, section_id=20))
        self.assertEqual(self.order(20), [4, 3, 5])
        self.assertEqual(self.order(10), [1, 2])

    async def test_unknown_section_is_refused(self) -> None:
        self.tasks.begin_drag(1)
        self.assertFalse(await self.tasks.enter_group(99))
        self.assertEqual(self.stub.requests, [])


class TestReentrancy(ReorderTestCase):
    async def test_second_commit_while_committing_is_ignored(self) -> None:
        self.stub.gate = asyncio.Event()
        self.stub.reply("/sort", {"success": True}, {"success": True})

        first = asyncio.create_task(self.tasks.move(1, 2))
        while not self.stub.requests:
            await asyncio.sleep(0)
        self.assertEqual(self.tasks.phase, DragPhase.COMMITTING)

        self.assertFalse(await self.tasks.move(3, 0))
        self.assertFalse(self.tasks.begin_drag(2))
        self.assertFalse(self.tasks.hover(2, 130, ROW))
        self.assertFalse(await self.tasks.drop())
        self.assertEqual(len(self.stub.sent("/sort")), 1)

        self.stub.gate.set()
        self.assertTrue(await first)
        self.assertEqual(self.tasks.phase, DragPhase.IDLE)
        self.assertEqual(self.order(10), [2, 3, 1])
        self.assertEqual(len(self.stub.sent("/sort")), 1)


class TestSectionReorder(ReorderTestCase):
    async def test_sections_reorder_within_their_project(self) -> None:
        self.stub.reply("/sort", {"success": True})
        self.sections.begin_drag(10)
        self.assertTrue(self.sections.hover(20, 130, ROW))
        self.assertTrue(await self.sections.drop())

        sent = self.stub.sent("/sort")[0]
        self.assertEqual(sent["tableType"], "section")
        self.assertEqual(sent["id"], ["20", "10"])
        self.assertNotIn("sectionId", sent)
        sections = self.store[EntityKind.SECTION]
        self.assertEqual((sections.get(20).sort, sections.get(10).sort), (0, 1))
        self.assertEqual(sections.get(99).sort, 0)

    async def test_section_from_another_project_is_refused(self) -> None:
        self.assertFalse(self.sections.begin_drag(99))
        self.assertEqual(self.sections.phase, DragPhase.IDLE)


if __name__ == "__main__":
    unittest.main()
