# Lookup Tables MCP Server
# File: tests/conftest.py
# Version: v1

"""Shared fixtures: a fake authenticator and an httpx.MockTransport-backed Transport."""

from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from lookup_tables_mcp.transport import Transport

BASE_URL = "https://api.example.com/odata4/"


class FakeAuthenticator:
    """Hands out a fixed token and records the scopes it was asked for."""

    def __init__(self, token: str = "test-token") -> None:
        self.token = token
        self.scopes: List[str] = []

    async def get_access_token(self, scope: str) -> str:
        self.scopes.append(scope)
        return self.token


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator()


@pytest.fixture
def make_transport(authenticator: FakeAuthenticator) -> Callable[..., Transport]:
    """Build a Transport whose HTTP calls are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> Transport:
        http_client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
        )
        return Transport(
            base_url=BASE_URL,
            authenticator=authenticator,
            scope="table.Read project/Global",
            http_client=http_client,
        )

    return _make
