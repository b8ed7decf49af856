# Lookup Tables MCP Server
# File: transport.py
# Version: v1

"""Authenticated HTTP access to the lookup tables OData API.

Every request made by the client goes through :class:`Transport`: it attaches
a bearer token for the configured scope, resolves relative paths against the
API base URI and turns any non-success status into :class:`TransportError`.
There is no retry at this layer.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from .auth import Authenticator
from .errors import TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Thin async wrapper around one ``httpx.AsyncClient`` bound to a base URI."""

    def __init__(
        self,
        base_url: str,
        authenticator: Authenticator,
        scope: str,
        timeout: float = 60.0,
        verify_tls: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.scope = scope
        self._authenticator = authenticator
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            verify=verify_tls,
        )

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        accept: str = "application/json",
        **kwargs: Any,
    ) -> httpx.Response:
        """Send an authenticated request and return the successful response.

        ``url`` may be relative to the base URI or absolute (as in
        ``@odata.nextLink``).
        """
        token = await self._authenticator.get_access_token(self.scope)

        headers: Dict[str, str] = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {token}"
        headers.setdefault("Accept", accept)

        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(
                f"Error calling lookup tables API at '{url}': {exc}",
                url=url,
            ) from exc

        if not response.is_success:
            body = response.text
            raise TransportError(
                f"{method} '{url}' failed (HTTP {response.status_code}). "
                f"Response snippet: {body[:500]}",
                status_code=response.status_code,
                body=body,
                url=url,
            )

        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def get_json(self, url: str) -> Any:
        """GET a JSON body; non-integer numbers are decoded as exact Decimals."""
        response = await self.get(url)
        try:
            return json.loads(response.content, parse_float=Decimal)
        except ValueError as exc:
            body = response.text
            raise TransportError(
                f"GET '{url}' returned a body that is not valid JSON. "
                f"Response snippet: {body[:500]}",
                status_code=response.status_code,
                body=body,
                url=url,
            ) from exc

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)
