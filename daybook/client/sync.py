# daybook/client/sync.py
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import httpx

from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import Credentials, EntityKind
from daybook.client.mutations import MutationEngine
from daybook.client.reorder import SectionReorderEngine, TaskReorderEngine
from daybook.client.session import AuthState, SessionClient
from daybook.client.store import Store
from daybook.config.client_settings import ClientSettings

logger = logging.getLogger(__name__)


class SyncClient:
    """
    Everything the UI layer needs, wired once:

        sync = SyncClient()
        await sync.session.login("me", "secret")
        await sync.load_all()
        await sync.mutations.create_money({...})
        await sync.tasks(project_id=3).move(todo_id, 0, section_id=5)
    """

    def __init__(self, settings: Optional[ClientSettings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or ClientSettings()
        self.store = Store()
        self.auth = AuthState()
        self.gateway = RemoteStoreGateway(self.store, self.settings, client)
        self.session = SessionClient(self.gateway, self.auth)
        self.mutations = MutationEngine(self.gateway, self.store, self.auth)
        self._task_engines: Dict[int, TaskReorderEngine] = {}
        self._section_engines: Dict[int, SectionReorderEngine] = {}

    async def __aenter__(self) -> "SyncClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.gateway.aclose()

    @property
    def credentials(self) -> Optional[Credentials]:
        return self.auth.credentials

    def tasks(self, project_id: int) -> TaskReorderEngine:
        """One reorder engine per project board, reused across gestures."""
        if project_id not in self._task_engines:
            self._task_engines[project_id] = TaskReorderEngine(self.gateway, self.store, self.auth, project_id)
        return self._task_engines[project_id]

    def sections(self, project_id: int) -> SectionReorderEngine:
        if project_id not in self._section_engines:
            self._section_engines[project_id] = SectionReorderEngine(self.gateway, self.store, self.auth, project_id)
        return self._section_engines[project_id]

    async def load(self, kind: EntityKind) -> bool:
        if self.auth.credentials is None:
            logger.error("[sync] load %s without credentials", kind.value)
            return False
        return await self.gateway.fetch(kind, self.auth.credentials)

    async def load_all(self) -> Dict[EntityKind, bool]:
        """Fetch every collection concurrently; one failed kind does not stop the rest."""
        kinds = list(EntityKind)
        results = await asyncio.gather(*(self.load(kind) for kind in kinds))
        return dict(zip(kinds, results))
