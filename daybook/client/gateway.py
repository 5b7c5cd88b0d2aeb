# daybook/client/gateway.py
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError

from daybook.client.codec import decode_memo, flatten_payload
from daybook.client.models import Credentials, EntityKind, ResponseData
from daybook.client.store import Store
from daybook.config.client_settings import ClientSettings

logger = logging.getLogger(__name__)

# kind -> ClientSettings attribute holding its save/update endpoint
_ENTITY_PATHS = {
    EntityKind.TODO: "todo_path",
    EntityKind.SECTION: "section_path",
    EntityKind.PROJECT: "project_path",
    EntityKind.MONEY: "money_path",
    EntityKind.HEALTH: "health_path",
    EntityKind.MEMO: "memo_path",
    EntityKind.MONTHLY_MEMO: "monthly_memo_path",
}


class RemoteStoreGateway:
    """
    The only component that talks to the remote store.

    - send(): one form-encoded POST, returns the decoded envelope or None.
      Transport errors, HTTP errors, bodies that are not an envelope and
      {success: false} are all the same outcome: None (and a log line).
    - fetch(): loads a whole collection and always clears its loading flag.

    The httpx client's cookie jar carries the session cookie.
    """

    def __init__(
        self,
        store: Store,
        settings: Optional[ClientSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.store = store
        self.settings = settings or ClientSettings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout,
        )

    def endpoint_for(self, kind: EntityKind) -> str:
        return getattr(self.settings, _ENTITY_PATHS[kind])

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Optional[ResponseData]:
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
            result = ResponseData.model_validate(response.json())
        except (httpx.HTTPError, httpx.InvalidURL, RuntimeError) as e:
            # RuntimeError: the client has already been closed
            logger.error("[gateway] %s request failed: %s", endpoint, e)
            return None
        except ValueError as e:
            # JSONDecodeError / ValidationError
            logger.error("[gateway] %s returned an unreadable body: %s", endpoint, e)
            return None

        if not result.success:
            logger.error("[gateway] %s rejected: %s", endpoint, result.error)
            return None
        return result

    async def send(self, endpoint: str, payload: Mapping[str, Any]) -> Optional[ResponseData]:
        return await self._request("POST", endpoint, data=flatten_payload(payload))

    async def get(self, endpoint: str) -> Optional[ResponseData]:
        """GET variant, used for session restore."""
        return await self._request("GET", endpoint)

    async def fetch(self, kind: EntityKind, credentials: Credentials) -> bool:
        """
        Replace the whole collection of `kind` with the store's rows.
        The collection's loading flag ends up False whatever happens.
        """
        payload: Dict[str, Any] = {**credentials.as_fields(), "tableType": kind.value}
        try:
            result = await self.send(self.settings.fetch_path, payload)
            if result is None:
                return False
            try:
                records = [kind.model.model_validate(row) for row in result.data or []]
            except ValidationError as e:
                logger.error("[gateway] %s rows did not validate: %s", kind.value, e)
                return False
            if kind.has_encoded_memo:
                records = [r.model_copy(update={"memo": decode_memo(r.memo)}) for r in records]

            with self.store.transaction() as tx:
                tx.replace(kind, records)
                tx.set_loading(kind, False)
            logger.info("[gateway] fetched %s count=%d", kind.value, len(records))
            return True
        finally:
            if self.store[kind].loading:
                with self.store.transaction() as tx:
                    tx.set_loading(kind, False)
