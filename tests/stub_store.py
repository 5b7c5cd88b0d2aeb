# scripted remote store for client tests (httpx.MockTransport)
from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qsl

import httpx

from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import Credentials
from daybook.client.mutations import MutationEngine
from daybook.client.session import AuthState
from daybook.client.store import Store
from daybook.config.client_settings import ClientSettings
from daybook.services.forms import parse_form

Reply = Union[Dict[str, Any], httpx.Response, Callable[[Dict[str, Any]], Any]]

CREDENTIALS = Credentials(user_id=1, csrf_token="csrf-token")


class StubRemoteStore:
    """
    Answers each path with the next queued reply (a JSON body, a ready
    response or a callable taking the parsed form). Every request is kept
    in `requests` as (path, parsed form).
    """

    def __init__(self):
        self.replies: Dict[str, List[Reply]] = {}
        self.requests: List[Tuple[str, Dict[str, Any]]] = []
        self.gate: Optional[asyncio.Event] = None

    def reply(self, path: str, *bodies: Reply) -> None:
        self.replies.setdefault(path, []).extend(bodies)

    def sent(self, path: str) -> List[Dict[str, Any]]:
        return [form for p, form in self.requests if p == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = request.content.decode()
        form = parse_form(parse_qsl(body, keep_blank_values=True))
        self.requests.append((request.url.path, form))
        if self.gate is not None:
            await self.gate.wait()

        queue = self.replies.get(request.url.path) or []
        if not queue:
            return httpx.Response(404, json={"success": False, "error": "no reply scripted"})
        reply = queue.pop(0)
        if callable(reply):
            reply = reply(form)
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


def make_client(stub: StubRemoteStore, signed_in: bool = True):
    """(store, gateway, auth, engine) wired to `stub`."""
    settings = ClientSettings(api_base_url="https://store.test")
    http = httpx.AsyncClient(transport=httpx.MockTransport(stub.handler), base_url=settings.api_base_url)
    store = Store()
    gateway = RemoteStoreGateway(store, settings, http)
    auth = AuthState(CREDENTIALS if signed_in else None)
    return store, gateway, auth, MutationEngine(gateway, store, auth)
