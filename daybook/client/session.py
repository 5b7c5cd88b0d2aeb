# daybook/client/session.py
from __future__ import annotations

import logging
from typing import Optional

from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import Credentials

logger = logging.getLogger(__name__)


class AuthState:
    """Current credentials, shared by every engine that posts to the store."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self.credentials = credentials

    @property
    def signed_in(self) -> bool:
        return self.credentials is not None

    def clear(self) -> None:
        self.credentials = None


class SessionClient:
    """
    login    : userName + password -> credentials (cookies land in the jar)
    restore  : token cookie -> new session + new CSRF token
    logout   : server session and cookies dropped, credentials cleared
    """

    def __init__(self, gateway: RemoteStoreGateway, auth: AuthState):
        self.gateway = gateway
        self.auth = auth

    def _accept(self, user_id: Optional[int], csrf_token: Optional[str]) -> Optional[Credentials]:
        if user_id is None or not csrf_token:
            logger.error("[session] response without credentials")
            return None
        self.auth.credentials = Credentials(user_id=user_id, csrf_token=csrf_token)
        return self.auth.credentials

    async def login(self, user_name: str, password: str) -> Optional[Credentials]:
        settings = self.gateway.settings
        result = await self.gateway.send(settings.login_path, {"userName": user_name, "password": password})
        if result is None:
            return None
        return self._accept(result.user_id, result.csrf_token)

    async def restore(self) -> Optional[Credentials]:
        result = await self.gateway.get(self.gateway.settings.auth_path)
        if result is None:
            return None
        return self._accept(result.user_id, result.csrf_token)

    async def logout(self) -> bool:
        result = await self.gateway.send(self.gateway.settings.logout_path, {})
        self.auth.clear()
        return result is not None
