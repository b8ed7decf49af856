# Lookup Tables MCP Server
# File: auth.py
# Version: v1

"""Access keys and OAuth2 token acquisition for the lookup tables API."""

from __future__ import annotations

import base64
import binascii
import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple

import httpx

from .errors import AuthenticationError, InvalidArgumentError


def odata_api_base_uri(domain: str) -> str:
    """Base URI of the OData API for a deployment domain, e.g. laserfiche.com."""
    return f"https://api.{domain.strip().strip('/')}/odata4/"


def oauth_token_uri(domain: str) -> str:
    return f"https://signin.{domain.strip().strip('/')}/oauth/Token"


class Authenticator(Protocol):
    """Anything that can produce a bearer token for a scope."""

    async def get_access_token(self, scope: str) -> str:
        ...


@dataclass(frozen=True)
class AccessKey:
    """Service app access key, distributed as base64-encoded JSON."""

    customer_id: str
    client_id: str
    domain: str
    jwk: Optional[Dict[str, Any]] = None

    @classmethod
    def from_base64(cls, encoded: Optional[str]) -> "AccessKey":
        if encoded is None or not encoded.strip():
            raise InvalidArgumentError("access_key")
        try:
            payload = json.loads(base64.b64decode(encoded.strip(), validate=True))
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise InvalidArgumentError(
                "access_key", f"Access key is not valid base64-encoded JSON: {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise InvalidArgumentError("access_key", "Access key must decode to a JSON object.")

        customer_id = payload.get("customerId")
        client_id = payload.get("clientId")
        domain = payload.get("domain")
        if not client_id or not domain:
            raise InvalidArgumentError(
                "access_key", "Access key must contain 'clientId' and 'domain'."
            )
        return cls(
            customer_id=str(customer_id or ""),
            client_id=str(client_id),
            domain=str(domain),
            jwk=payload.get("jwk"),
        )


@dataclass
class OAuthClient:
    """OAuth2 client-credentials flow against the deployment's token endpoint.

    Credentials are sent via HTTP Basic authentication
    (``client_id:service_principal_key``) and the body carries grant_type and
    the requested scope. Tokens are cached per scope until shortly before
    they expire.
    """

    access_key: AccessKey
    service_principal_key: str
    timeout: float = 30.0
    verify_tls: bool = True

    # Seconds subtracted from expires_in so we never send a token that is
    # about to lapse.
    expiry_margin: float = 60.0

    # Optional httpx transport for the token request (e.g. a proxy or mock).
    http_transport: Optional[httpx.AsyncBaseTransport] = None

    _tokens: Dict[str, Tuple[str, float]] = field(default_factory=dict, repr=False)

    @property
    def token_url(self) -> str:
        return oauth_token_uri(self.access_key.domain)

    async def get_access_token(self, scope: str) -> str:
        """Return a valid access token for ``scope``."""
        cached = self._tokens.get(scope)
        if cached is not None and cached[1] > time.monotonic():
            return cached[0]

        if not self.service_principal_key:
            raise InvalidArgumentError("service_principal_key")

        raw_credentials = f"{self.access_key.client_id}:{self.service_principal_key}"
        basic_token = base64.b64encode(raw_credentials.encode("utf-8")).decode("ascii")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": f"Basic {basic_token}",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_tls,
            transport=self.http_transport,
        ) as client:
            try:
                response = await client.post(
                    self.token_url,
                    data={"grant_type": "client_credentials", "scope": scope},
                    headers=headers,
                )
            except httpx.RequestError as exc:
                raise AuthenticationError(
                    f"Error calling token endpoint '{self.token_url}': {exc}",
                    url=self.token_url,
                ) from exc

        if not response.is_success:
            raise AuthenticationError(
                f"Failed to obtain access token from '{self.token_url}' "
                f"(HTTP {response.status_code}). Check SERVICE_PRINCIPAL_KEY and ACCESS_KEY.",
                status_code=response.status_code,
                body=response.text,
                url=self.token_url,
            )

        data: Dict[str, Any] = response.json()
        token = data.get("access_token")
        if not token:
            raise AuthenticationError(
                "OAuth token response did not contain 'access_token'",
                status_code=response.status_code,
                url=self.token_url,
            )

        try:
            expires_in = float(data.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        if expires_in > 0:
            expires_at = time.monotonic() + max(expires_in - self.expiry_margin, 0.0)
            self._tokens[scope] = (token, expires_at)

        return token
