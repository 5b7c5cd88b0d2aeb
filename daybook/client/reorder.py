# daybook/client/reorder.py
"""
Drag-to-reorder for tasks (within and across sections) and sections.

Pointer events only move a local working order; the store is written by a
commit, which sends every affected sibling group as one bulk sort request
and, on success, patches `sort` (and `sectionId`) of exactly those rows.

    IDLE --begin_drag--> DRAGGING --drop / enter_group--> COMMITTING
    COMMITTING --response--> DRAGGING (gesture still live) | IDLE (after drop)

While COMMITTING every call that could start another commit is ignored and
returns False, so an engine never has two sort requests in flight.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from daybook.client.codec import PayloadError, build_sort_payload
from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import EntityKind
from daybook.client.session import AuthState
from daybook.client.store import Store

logger = logging.getLogger(__name__)

UNASSIGNED_SECTION = 0


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


@dataclass(frozen=True)
class Rect:
    """Vertical extent of the hovered element."""
    top: float
    bottom: float

    @property
    def middle(self) -> float:
        return (self.top + self.bottom) / 2


def reindex(items: Sequence[Any]) -> List[Any]:
    """sort = position, for every element, in order."""
    return [item if item.sort == i else item.model_copy(update={"sort": i}) for i, item in enumerate(items)]


def _ordered(items) -> List[Any]:
    return sorted(items, key=lambda item: (item.sort, item.id))


class _ReorderEngine:
    kind: EntityKind

    def __init__(self, gateway: RemoteStoreGateway, store: Store, auth: AuthState, project_id: int):
        self.gateway = gateway
        self.store = store
        self.auth = auth
        self.project_id = project_id
        self.phase = DragPhase.IDLE
        self._dragged_id: Optional[int] = None
        self._working: List[Any] = []

    # ---------- groups ----------
    def _group_of(self, item) -> int:
        raise NotImplementedError

    def _members(self, group: int) -> List[Any]:
        raise NotImplementedError

    def _reconciled(self, item) -> Dict[str, Any]:
        return {"sort": item.sort}

    def _payload(self, rows: List[Any]) -> Dict[str, Any]:
        return build_sort_payload(self.kind.value, [r.id for r in rows], [r.sort for r in rows])

    @property
    def working_order(self) -> List[int]:
        return [item.id for item in self._working]

    def _owned(self, item_id: int, operation: str):
        item = self.store[self.kind].get(item_id)
        if item is None or item.project_id != self.project_id:
            logger.error("[reorder] %s: %s %s is not in project %s", operation, self.kind.value, item_id, self.project_id)
            return None
        return item

    # ---------- gesture ----------
    def _busy(self, operation: str) -> bool:
        if self.phase is DragPhase.COMMITTING:
            logger.debug("[reorder] %s ignored while a commit is in flight", operation)
            return True
        return False

    def begin_drag(self, item_id: int) -> bool:
        if self._busy("begin_drag"):
            return False
        item = self._owned(item_id, "begin_drag")
        if item is None:
            return False
        self._dragged_id = item_id
        self._working = self._members(self._group_of(item))
        self.phase = DragPhase.DRAGGING
        return True

    def hover(self, target_id: int, pointer_y: float, rect: Rect) -> bool:
        """
        Same-group hover. The dragged element takes the target's place once
        the pointer crosses the target's midpoint in the drag direction.
        Local only; returns True if the working order changed.
        """
        if self._busy("hover") or self.phase is not DragPhase.DRAGGING:
            return False
        ids = self.working_order
        if target_id == self._dragged_id or target_id not in ids:
            return False

        drag_index = ids.index(self._dragged_id)
        hover_index = ids.index(target_id)
        if drag_index < hover_index and pointer_y < rect.middle:
            return False
        if drag_index > hover_index and pointer_y > rect.middle:
            return False

        dragged = self._working.pop(drag_index)
        self._working.insert(hover_index, dragged)
        return True

    async def drop(self) -> bool:
        """End of gesture: commit the working order if it differs from the store's."""
        if self._busy("drop") or self.phase is not DragPhase.DRAGGING:
            return False
        working = self._working
        dragged = self.store[self.kind].get(self._dragged_id)
        self._dragged_id = None
        self._working = []
        if dragged is None:
            self.phase = DragPhase.IDLE
            return False

        stored = [item.id for item in self._members(self._group_of(dragged))]
        if [item.id for item in working] == stored:
            self.phase = DragPhase.IDLE
            return True
        return await self._commit([reindex(working)], then=DragPhase.IDLE)

    def cancel(self) -> bool:
        if self._busy("cancel"):
            return False
        self._dragged_id = None
        self._working = []
        self.phase = DragPhase.IDLE
        return True

    async def move(self, item_id: int, target_index: int) -> bool:
        """One-shot reorder inside the item's own group."""
        if self._busy("move") or self.phase is not DragPhase.IDLE:
            return False
        item = self._owned(item_id, "move")
        if item is None:
            return False
        siblings = [m for m in self._members(self._group_of(item)) if m.id != item_id]
        target_index = max(0, min(target_index, len(siblings)))
        siblings.insert(target_index, item)
        return await self._commit([reindex(siblings)], then=DragPhase.IDLE)

    # ---------- commit ----------
    async def _commit(self, groups: List[List[Any]], then: DragPhase) -> bool:
        """
        One bulk sort request for every group in `groups`; on success only
        the sent rows are patched, and only in their ordering fields.
        """
        self.phase = DragPhase.COMMITTING
        try:
            credentials = self.auth.credentials
            if credentials is None:
                logger.error("[reorder] commit without credentials")
                return False
            rows = [item for group in groups for item in group]
            try:
                payload = self._payload(rows)
            except PayloadError as e:
                logger.error("[reorder] %s", e)
                return False

            result = await self.gateway.send(
                self.gateway.settings.sort_path, {**credentials.as_fields(), **payload}
            )
            if result is None:
                return False

            with self.store.transaction() as tx:
                for item in rows:
                    tx.patch(self.kind, item.id, **self._reconciled(item))
            logger.info("[reorder] %s sorted count=%d", self.kind.value, len(rows))
            return True
        finally:
            self.phase = then


class SectionReorderEngine(_ReorderEngine):
    """Sections of one project; the sibling group is the whole project."""

    kind = EntityKind.SECTION

    def _group_of(self, item) -> int:
        return item.project_id

    def _members(self, group: int) -> List[Any]:
        return _ordered(self.store[EntityKind.SECTION].where(project_id=group))


class TaskReorderEngine(_ReorderEngine):
    """
    Tasks of one project, grouped by section. Section 0 is the synthetic
    "unassigned" bucket and is ordered after every real section.
    """

    kind = EntityKind.TODO

    def _group_of(self, item) -> int:
        return item.section_id

    def _members(self, group: int) -> List[Any]:
        return _ordered(self.store[EntityKind.TODO].where(project_id=self.project_id, section_id=group))

    def _reconciled(self, item) -> Dict[str, Any]:
        return {"sort": item.sort, "section_id": item.section_id}

    def _payload(self, rows: List[Any]) -> Dict[str, Any]:
        return build_sort_payload(
            self.kind.value,
            [r.id for r in rows],
            [r.sort for r in rows],
            [r.section_id for r in rows],
        )

    def _group_order(self) -> List[int]:
        sections = _ordered(self.store[EntityKind.SECTION].where(project_id=self.project_id))
        return [s.id for s in sections] + [UNASSIGNED_SECTION]

    def _cross_group(self, item, section_id: int, target_index: Optional[int]) -> Optional[List[List[Any]]]:
        """Destination and source groups after moving `item` into `section_id`."""
        order = self._group_order()
        if section_id not in order:
            logger.error("[reorder] section %s is not in project %s", section_id, self.project_id)
            return None
        moved = item.model_copy(update={"section_id": section_id})
        source = [m for m in self._members(item.section_id) if m.id != item.id]
        destination = [m for m in self._members(section_id) if m.id != item.id]

        if target_index is None:
            # entering from an earlier group lands on the leading edge,
            # from a later group on the trailing edge; a task whose section
            # is gone counts as coming from an earlier group
            forward = item.section_id not in order or order.index(item.section_id) < order.index(section_id)
            target_index = 0 if forward else len(destination)
        target_index = max(0, min(target_index, len(destination)))
        destination.insert(target_index, moved)
        return [reindex(destination), reindex(source)]

    async def enter_group(self, section_id: int) -> bool:
        """
        The dragged task entered another section's drop area: moved there
        and committed at once. The gesture stays live afterwards.
        """
        if self._busy("enter_group") or self.phase is not DragPhase.DRAGGING:
            return False
        item = self.store[EntityKind.TODO].get(self._dragged_id)
        if item is None or item.section_id == section_id:
            return False
        groups = self._cross_group(item, section_id, None)
        if groups is None:
            return False

        self._working = groups[0]
        committed = await self._commit(groups, then=DragPhase.DRAGGING)
        # working order follows whatever group the task now lives in
        current = self.store[EntityKind.TODO].get(self._dragged_id)
        if current is not None:
            self._working = self._members(current.section_id)
        return committed

    async def move(self, item_id: int, target_index: int, section_id: Optional[int] = None) -> bool:
        if section_id is None:
            return await super().move(item_id, target_index)
        if self._busy("move") or self.phase is not DragPhase.IDLE:
            return False
        item = self._owned(item_id, "move")
        if item is None:
            return False
        if item.section_id == section_id:
            return await super().move(item_id, target_index)
        groups = self._cross_group(item, section_id, target_index)
        if groups is None:
            return False
        return await self._commit(groups, then=DragPhase.IDLE)
