# daybook/client/mutations.py
"""
Optimistic mutation engine.

Every operation follows the same path:

    validate draft -> build payload -> gateway.send -> (on a result) splice

Nothing touches a collection before the store has acknowledged the request,
and a rejected request leaves every collection exactly as it was. The splice
for one acknowledgement runs inside a single store transaction, so a
multi-collection change (project delete, todo update) is published at once.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from daybook.client.codec import encode_memo
from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import (
    DELETABLE_KINDS,
    NO_DEADLINE,
    SYMPTOM_FLAGS,
    EntityKind,
    Health,
    HealthDraft,
    Memo,
    MemoDraft,
    Money,
    MoneyDraft,
    MonthlyMemo,
    MonthlyMemoDraft,
    Project,
    ProjectDraft,
    ResponseData,
    Section,
    SectionDraft,
    TimeTaken,
    Todo,
    TodoDraft,
)
from daybook.client.session import AuthState
from daybook.client.store import Store, StoreTransaction

logger = logging.getLogger(__name__)

Draft = Union[BaseModel, Mapping[str, Any]]

PROJECT_FIELDS = ("name", "end", "completed", "memo")
MEMO_FIELDS = ("name", "memo")


class MutationState(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass
class Mutation:
    operation: str
    kind: EntityKind
    state: MutationState = MutationState.PENDING
    reason: Optional[str] = None
    record_ids: List[int] = field(default_factory=list)


class AcknowledgementError(Exception):
    """The store said success but the body cannot be applied."""


class MutationEngine:
    def __init__(self, gateway: RemoteStoreGateway, store: Store, auth: AuthState, history_size: int = 100):
        self.gateway = gateway
        self.store = store
        self.auth = auth
        self.history: Deque[Mutation] = deque(maxlen=history_size)

    @property
    def pending(self) -> List[Mutation]:
        return [m for m in self.history if m.state is MutationState.PENDING]

    # ---------- plumbing ----------
    def _reject(self, mutation: Mutation, reason: str) -> None:
        mutation.state = MutationState.REJECTED
        mutation.reason = reason
        logger.error("[mutation] %s %s rejected: %s", mutation.operation, mutation.kind.value, reason)

    @staticmethod
    def _validate(model: Type[BaseModel], draft: Draft) -> Optional[BaseModel]:
        if isinstance(draft, model):
            return draft
        data = draft.model_dump() if isinstance(draft, BaseModel) else draft
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("[mutation] invalid %s: %s", model.__name__, e)
            return None

    async def _commit(
        self,
        operation: str,
        kind: EntityKind,
        endpoint: str,
        payload: Dict[str, Any],
        apply: Callable[[StoreTransaction, ResponseData], Any],
    ) -> Any:
        """
        Send one request and, on acknowledgement, run `apply` in a store
        transaction. Returns whatever `apply` returns, or None on rejection.
        """
        mutation = Mutation(operation=operation, kind=kind)
        self.history.append(mutation)

        credentials = self.auth.credentials
        if credentials is None:
            self._reject(mutation, "not signed in")
            return None

        result = await self.gateway.send(endpoint, {**credentials.as_fields(), **payload})
        if result is None:
            self._reject(mutation, "no result from the store")
            return None

        try:
            with self.store.transaction() as tx:
                applied = apply(tx, result)
        except (AcknowledgementError, ValueError) as e:
            # ValueError: the store refused a record (id 0, invalid fields)
            self._reject(mutation, str(e))
            return None

        mutation.state = MutationState.APPLIED
        if result.id:
            mutation.record_ids.append(result.id)
        return applied

    @staticmethod
    def _require_id(result: ResponseData) -> int:
        if not result.id:
            raise AcknowledgementError("create acknowledged without an id")
        return result.id

    @staticmethod
    def _fields(draft: BaseModel, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        return draft.model_dump(exclude=set(exclude))

    @staticmethod
    def _wire(draft: BaseModel, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        return draft.model_dump(by_alias=True, exclude=set(exclude))

    # ---------- generic create / update ----------
    async def _create(self, kind: EntityKind, draft: BaseModel, model: Type[BaseModel], payload: Dict[str, Any]):
        def apply(tx: StoreTransaction, result: ResponseData):
            record = model(id=self._require_id(result), **self._fields(draft))
            tx.append(kind, record)
            return record

        return await self._commit(
            f"create_{kind.value}", kind, self.gateway.endpoint_for(kind),
            {**payload, "action": "save"}, apply,
        )

    async def _update(self, kind: EntityKind, record_id: int, changes: Dict[str, Any], payload: Dict[str, Any]):
        if self.store[kind].get(record_id) is None:
            logger.error("[mutation] update_%s: unknown id %s", kind.value, record_id)
            return None

        def apply(tx: StoreTransaction, result: ResponseData):
            tx.patch(kind, record_id, **changes)
            return tx.view(kind).get(record_id)

        return await self._commit(
            f"update_{kind.value}", kind, self.gateway.endpoint_for(kind),
            {**payload, "action": "update", "id": record_id}, apply,
        )

    # ---------- todo ----------
    @staticmethod
    def _time_taken_rows(todo_id: int, day: str, draft: TodoDraft, ids: Optional[List[int]]) -> List[TimeTaken]:
        ids = ids or []
        if len(ids) != len(draft.time_taken):
            raise AcknowledgementError(
                f"expected {len(draft.time_taken)} timeTakenIds, got {len(ids)}"
            )
        if any(tt_id <= 0 for tt_id in ids):
            raise AcknowledgementError(f"timeTakenIds must be store ids, got {ids}")
        return [
            TimeTaken(id=tt_id, todo_id=todo_id, start=f"{day} {span.start}", end=f"{day} {span.end}")
            for tt_id, span in zip(ids, draft.time_taken)
        ]

    async def create_todo(self, draft: Draft) -> Optional[Todo]:
        draft = self._validate(TodoDraft, draft)
        if draft is None:
            return None

        def apply(tx: StoreTransaction, result: ResponseData) -> Todo:
            todo = Todo(id=self._require_id(result), **self._fields(draft, exclude=("time_taken",)))
            tx.append(EntityKind.TODO, todo)
            tx.extend(
                EntityKind.TIME_TAKEN,
                self._time_taken_rows(todo.id, todo.date, draft, result.time_taken_ids),
            )
            return todo

        return await self._commit(
            "create_todo", EntityKind.TODO, self.gateway.endpoint_for(EntityKind.TODO),
            {**self._wire(draft), "action": "save"}, apply,
        )

    async def update_todo(self, todo_id: int, draft: Draft) -> Optional[Todo]:
        """
        The todo is overwritten with the draft; its intervals are replaced
        wholesale by the ids the store hands back.
        """
        draft = self._validate(TodoDraft, draft)
        if draft is None:
            return None
        if self.store[EntityKind.TODO].get(todo_id) is None:
            logger.error("[mutation] update_todo: unknown id %s", todo_id)
            return None

        def apply(tx: StoreTransaction, result: ResponseData) -> Todo:
            rows = self._time_taken_rows(todo_id, draft.date, draft, result.time_taken_ids)
            tx.patch(EntityKind.TODO, todo_id, **self._fields(draft, exclude=("time_taken",)))
            tx.remove_where(EntityKind.TIME_TAKEN, lambda t: t.todo_id == todo_id)
            tx.extend(EntityKind.TIME_TAKEN, rows)
            return tx.view(EntityKind.TODO).get(todo_id)

        return await self._commit(
            "update_todo", EntityKind.TODO, self.gateway.endpoint_for(EntityKind.TODO),
            {**self._wire(draft), "action": "update", "id": todo_id}, apply,
        )

    async def toggle_todo_completed(self, todo_id: int) -> bool:
        todo = self.store[EntityKind.TODO].get(todo_id)
        if todo is None:
            logger.error("[mutation] toggle_todo_completed: unknown id %s", todo_id)
            return False
        completed = 0 if todo.completed else 1

        def apply(tx: StoreTransaction, result: ResponseData) -> bool:
            tx.patch(EntityKind.TODO, todo_id, completed=completed)
            return True

        applied = await self._commit(
            "toggle_todo_completed", EntityKind.TODO, self.gateway.settings.completed_path,
            {"id": todo_id, "completed": completed}, apply,
        )
        return bool(applied)

    # ---------- money / health ----------
    async def create_money(self, draft: Draft) -> Optional[Money]:
        draft = self._validate(MoneyDraft, draft)
        if draft is None:
            return None
        return await self._create(EntityKind.MONEY, draft, Money, self._wire(draft))

    async def update_money(self, money_id: int, draft: Draft) -> Optional[Money]:
        draft = self._validate(MoneyDraft, draft)
        if draft is None:
            return None
        return await self._update(EntityKind.MONEY, money_id, self._fields(draft), self._wire(draft))

    @classmethod
    def _health_payload(cls, draft: HealthDraft) -> Dict[str, Any]:
        # flags travel as true/false
        payload = cls._wire(draft)
        for name in SYMPTOM_FLAGS:
            payload[name] = bool(payload[name])
        return payload

    async def create_health(self, draft: Draft) -> Optional[Health]:
        draft = self._validate(HealthDraft, draft)
        if draft is None:
            return None
        return await self._create(EntityKind.HEALTH, draft, Health, self._health_payload(draft))

    async def update_health(self, health_id: int, draft: Draft) -> Optional[Health]:
        draft = self._validate(HealthDraft, draft)
        if draft is None:
            return None
        return await self._update(EntityKind.HEALTH, health_id, self._fields(draft), self._health_payload(draft))

    # ---------- project / section ----------
    async def create_section(self, draft: Draft) -> Optional[Section]:
        draft = self._validate(SectionDraft, draft)
        if draft is None:
            return None
        return await self._create(EntityKind.SECTION, draft, Section, self._wire(draft))

    async def update_section(self, section_id: int, name: str, memo: str = "") -> Optional[Section]:
        if not name or not name.strip():
            logger.error("[mutation] update_section: name must not be empty")
            return None
        changes = {"name": name, "memo": memo}
        return await self._update(EntityKind.SECTION, section_id, changes, dict(changes))

    async def create_project(self, draft: Draft) -> Optional[Project]:
        """The memo is kept readable locally and sent encoded."""
        draft = self._validate(ProjectDraft, draft)
        if draft is None:
            return None
        payload = {**self._wire(draft), "memo": encode_memo(draft.memo)}
        return await self._create(EntityKind.PROJECT, draft, Project, payload)

    async def update_project(self, project_id: int, field_name: str, value: Any) -> Optional[Project]:
        """Single-field update: name, end, completed or memo."""
        if field_name not in PROJECT_FIELDS:
            logger.error("[mutation] update_project: unknown field %r", field_name)
            return None
        if field_name == "name" and (not value or not str(value).strip()):
            logger.error("[mutation] update_project: name must not be empty")
            return None
        if field_name == "completed":
            value = 1 if value else 0
        elif field_name == "end":
            value = value or NO_DEADLINE

        wire_value = encode_memo(value) if field_name == "memo" else value
        return await self._update(
            EntityKind.PROJECT, project_id, {field_name: value},
            {"type": field_name, field_name: wire_value},
        )

    # ---------- memo ----------
    async def create_memo(self, draft: Draft) -> Optional[Memo]:
        draft = self._validate(MemoDraft, draft)
        if draft is None:
            return None
        payload = {**self._wire(draft), "memo": encode_memo(draft.memo)}
        return await self._create(EntityKind.MEMO, draft, Memo, payload)

    async def update_memo(self, memo_id: int, field_name: str, value: str) -> Optional[Memo]:
        if field_name not in MEMO_FIELDS:
            logger.error("[mutation] update_memo: unknown field %r", field_name)
            return None
        if field_name == "name" and (not value or not value.strip()):
            logger.error("[mutation] update_memo: name must not be empty")
            return None
        wire_value = encode_memo(value) if field_name == "memo" else value
        return await self._update(
            EntityKind.MEMO, memo_id, {field_name: value},
            {"type": field_name, field_name: wire_value},
        )

    async def save_monthly_memo(self, date: str, memo: str) -> Optional[MonthlyMemo]:
        draft = self._validate(MonthlyMemoDraft, {"date": date, "memo": memo})
        if draft is None:
            return None
        payload = {"date": draft.date, "memo": encode_memo(draft.memo)}
        return await self._create(EntityKind.MONTHLY_MEMO, draft, MonthlyMemo, payload)

    async def update_monthly_memo(self, monthly_memo_id: int, memo: str) -> Optional[MonthlyMemo]:
        return await self._update(
            EntityKind.MONTHLY_MEMO, monthly_memo_id, {"memo": memo}, {"memo": encode_memo(memo)},
        )

    # ---------- delete ----------
    async def delete(self, kind: EntityKind, ids: Union[int, Iterable[int]]) -> bool:
        """
        Remove records by id. Local fan-out mirrors the store:
          TODO    -> its TimeTaken rows go too
          PROJECT -> its sections go, its todos fall back to unassigned
        """
        if kind not in DELETABLE_KINDS:
            logger.error("[mutation] %s cannot be deleted", kind.value)
            return False
        ids = [ids] if isinstance(ids, int) else list(ids)
        if not ids:
            return False
        doomed = set(ids)

        def apply(tx: StoreTransaction, result: ResponseData) -> bool:
            tx.remove(kind, ids)
            if kind is EntityKind.TODO:
                tx.remove_where(EntityKind.TIME_TAKEN, lambda t: t.todo_id in doomed)
            elif kind is EntityKind.PROJECT:
                tx.remove_where(EntityKind.SECTION, lambda s: s.project_id in doomed)
                tx.patch_where(
                    EntityKind.TODO, lambda t: t.project_id in doomed,
                    project_id=0, section_id=0, sort=0,
                )
            return True

        payload = {"tableType": kind.value, "id": ids[0] if len(ids) == 1 else ids}
        applied = await self._commit(
            f"delete_{kind.value}", kind, self.gateway.settings.delete_path, payload, apply,
        )
        return bool(applied)

    async def delete_todo(self, ids) -> bool:
        return await self.delete(EntityKind.TODO, ids)

    async def delete_money(self, ids) -> bool:
        return await self.delete(EntityKind.MONEY, ids)

    async def delete_health(self, ids) -> bool:
        return await self.delete(EntityKind.HEALTH, ids)

    async def delete_section(self, ids) -> bool:
        return await self.delete(EntityKind.SECTION, ids)

    async def delete_project(self, ids) -> bool:
        return await self.delete(EntityKind.PROJECT, ids)

    async def delete_memo(self, ids) -> bool:
        return await self.delete(EntityKind.MEMO, ids)
