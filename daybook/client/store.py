# daybook/client/store.py
"""
Entity collections.

One `EntityCollection` per kind, owned by a `Store`. Collections are
immutable snapshots; the only way to change them is a store transaction:

    with store.transaction() as tx:
        tx.remove(EntityKind.PROJECT, [7])
        tx.remove_where(EntityKind.SECTION, lambda s: s.project_id == 7)

Everything staged inside the block is published together when it exits
cleanly. If the block raises, nothing is published.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from daybook.client.models import EntityKind

logger = logging.getLogger(__name__)

Listener = Callable[[Set[EntityKind]], None]
Predicate = Callable[[Any], bool]


class EntityCollection:
    __slots__ = ("kind", "_items", "_loading")

    def __init__(self, kind: EntityKind, items: Iterable[Any] = (), loading: bool = True):
        self.kind = kind
        self._items: Tuple[Any, ...] = tuple(items)
        self._loading = loading

    @property
    def items(self) -> Tuple[Any, ...]:
        return self._items

    @property
    def loading(self) -> bool:
        return self._loading

    def get(self, item_id: int) -> Optional[Any]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def where(self, **fields: Any) -> List[Any]:
        return [
            item for item in self._items
            if all(getattr(item, name) == value for name, value in fields.items())
        ]

    def ids(self) -> List[int]:
        return [item.id for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"EntityCollection({self.kind.value}, n={len(self._items)}, loading={self._loading})"


class StoreTransaction:
    """Staged writes against a snapshot of the store's collections."""

    def __init__(self, current: Dict[EntityKind, EntityCollection]):
        self._current = current
        self.staged: Dict[EntityKind, EntityCollection] = {}

    def view(self, kind: EntityKind) -> EntityCollection:
        if kind in self.staged:
            return self.staged[kind]
        return self._current[kind]

    def _stage(self, kind: EntityKind, items: Optional[Iterable[Any]] = None, loading: Optional[bool] = None) -> None:
        base = self.view(kind)
        self.staged[kind] = EntityCollection(
            kind,
            base.items if items is None else items,
            base.loading if loading is None else loading,
        )

    def replace(self, kind: EntityKind, records: Iterable[Any]) -> None:
        self._stage(kind, items=list(records))

    def append(self, kind: EntityKind, record: Any) -> None:
        self.extend(kind, [record])

    def extend(self, kind: EntityKind, records: Iterable[Any]) -> None:
        records = list(records)
        for record in records:
            # id 0 means "not acknowledged yet" and never enters a collection
            if not record.id:
                raise ValueError(f"{kind.value} record without a store id")
        self._stage(kind, items=self.view(kind).items + tuple(records))

    def patch(self, kind: EntityKind, item_id: int, **fields: Any) -> bool:
        return self.patch_where(kind, lambda item: item.id == item_id, **fields) > 0

    def patch_where(self, kind: EntityKind, predicate: Predicate, **fields: Any) -> int:
        count = 0
        items = []
        for item in self.view(kind).items:
            if predicate(item):
                item = item.model_copy(update=fields)
                count += 1
            items.append(item)
        if count:
            self._stage(kind, items=items)
        return count

    def remove(self, kind: EntityKind, ids: Iterable[int]) -> int:
        doomed = set(ids)
        return self.remove_where(kind, lambda item: item.id in doomed)

    def remove_where(self, kind: EntityKind, predicate: Predicate) -> int:
        before = self.view(kind).items
        kept = [item for item in before if not predicate(item)]
        if len(kept) != len(before):
            self._stage(kind, items=kept)
        return len(before) - len(kept)

    def set_loading(self, kind: EntityKind, loading: bool) -> None:
        self._stage(kind, loading=loading)


class Store:
    def __init__(self):
        self._collections: Dict[EntityKind, EntityCollection] = {
            kind: EntityCollection(kind) for kind in EntityKind
        }
        self._listeners: List[Listener] = []
        self._in_transaction = False

    def __getitem__(self, kind: EntityKind) -> EntityCollection:
        return self._collections[kind]

    collection = __getitem__

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        if self._in_transaction:
            raise RuntimeError("store transactions do not nest")
        tx = StoreTransaction(self._collections)
        self._in_transaction = True
        try:
            yield tx
        finally:
            self._in_transaction = False

        if not tx.staged:
            return
        self._collections = {**self._collections, **tx.staged}
        changed = set(tx.staged)
        logger.debug("[store] published %s", sorted(kind.value for kind in changed))
        for listener in list(self._listeners):
            listener(changed)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class DerivedView:
    """
    `fn(items, reference)` kept up to date with one collection.
    The value is recomputed whenever that kind is published or the
    reference (a month, a day, search words, ...) changes.

    Until a reference is set the value stays None and `fn` is not called.
    """

    def __init__(self, store: Store, kind: EntityKind, fn: Callable[[Tuple[Any, ...], Any], Any], reference: Any = None):
        self._store = store
        self.kind = kind
        self._fn = fn
        self._reference = reference
        self._value = None
        self._recompute()
        self._unsubscribe = store.subscribe(self._on_publish)

    @property
    def value(self) -> Any:
        return self._value

    @property
    def reference(self) -> Any:
        return self._reference

    def set_reference(self, reference: Any) -> None:
        self._reference = reference
        self._recompute()

    def close(self) -> None:
        self._unsubscribe()

    def _on_publish(self, changed: Set[EntityKind]) -> None:
        if self.kind in changed:
            self._recompute()

    def _recompute(self) -> None:
        if self._reference is None:
            self._value = None
            return
        self._value = self._fn(self._store[self.kind].items, self._reference)
