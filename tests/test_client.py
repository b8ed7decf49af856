# Lookup Tables MCP Server
# File: tests/test_client.py
# Version: v1

"""Tests for the ODataApiClient facade against a mocked HTTP backend."""

from __future__ import annotations

import base64
import io
import json
from typing import List

import httpx
import pytest

from lookup_tables_mcp.client import ODataApiClient
from lookup_tables_mcp.errors import (
    InvalidArgumentError,
    LookupTablesError,
    TableNotFoundError,
    TransportError,
)

_EDM_XML = """<?xml version="1.0" encoding="utf-8"?>
<edmx:Edmx Version="4.0" xmlns:edmx="http://docs.oasis-open.org/odata/ns/edmx">
  <edmx:DataServices>
    <Schema Namespace="Tables" xmlns="http://docs.oasis-open.org/odata/ns/edm">
      <EntityType Name="T">
        <Key><PropertyRef Name="_key" /></Key>
        <Property Name="_key" Type="Edm.Int32" Nullable="false" />
        <Property Name="Name" Type="Edm.String" />
      </EntityType>
    </Schema>
  </edmx:DataServices>
</edmx:Edmx>
"""


@pytest.mark.asyncio
async def test_list_tables_keeps_entity_sets_in_order(make_transport) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/odata4/table"
        return httpx.Response(
            200,
            json={
                "value": [
                    {"name": "Zeta", "kind": "EntitySet", "url": "Zeta"},
                    {"name": "Fn", "kind": "FunctionImport"},
                    {"name": "Alpha", "kind": "EntitySet"},
                ]
            },
        )

    client = ODataApiClient(make_transport(handler))
    assert await client.list_tables() == ["Zeta", "Alpha"]


@pytest.mark.asyncio
async def test_get_schema_parses_metadata(make_transport) -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=_EDM_XML, headers={"Content-Type": "application/xml"})

    client = ODataApiClient(make_transport(handler))
    entities = await client.get_schema()

    assert seen[0].url.path == "/odata4/table/$metadata"
    assert seen[0].headers["Accept"] == "application/xml"
    assert entities["T"].key_name == "_key"
    assert entities["T"].column_names() == ["Name"]


@pytest.mark.asyncio
async def test_get_table_columns_unknown_table(make_transport) -> None:
    client = ODataApiClient(make_transport(lambda request: httpx.Response(200, text=_EDM_XML)))

    assert await client.get_table_columns("T") == ["Name"]
    with pytest.raises(TableNotFoundError):
        await client.get_table_columns("Missing")


@pytest.mark.asyncio
async def test_replace_all_rows_uploads_multipart_file(make_transport) -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={"taskId": "task-99"})

    client = ODataApiClient(make_transport(handler))
    content = io.BytesIO(b"Name,City\nAda,London\n")

    task_id = await client.replace_all_rows("My Table", "rows.csv", content)

    assert task_id == "task-99"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/odata4/table/My Table/ReplaceAllRowsAsync"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="file"; filename="rows.csv"' in body
    assert b"Ada,London" in body


@pytest.mark.asyncio
async def test_replace_all_rows_without_task_id_fails(make_transport) -> None:
    client = ODataApiClient(make_transport(lambda request: httpx.Response(200, json={})))

    with pytest.raises(LookupTablesError):
        await client.replace_all_rows("T", "rows.csv", b"Name\nAda\n")


@pytest.mark.asyncio
async def test_replace_all_rows_http_error(make_transport) -> None:
    client = ODataApiClient(
        make_transport(lambda request: httpx.Response(403, json={"title": "Forbidden"}))
    )

    with pytest.raises(TransportError) as excinfo:
        await client.replace_all_rows("T", "rows.csv", b"Name\nAda\n")

    assert excinfo.value.status_code == 403
    assert "Forbidden" in excinfo.value.body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "table_name, filename, content",
    [
        ("", "rows.csv", b"x"),
        ("T", " ", b"x"),
        ("T", "rows.csv", None),
    ],
)
async def test_replace_all_rows_validates_arguments(make_transport, table_name, filename, content) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    client = ODataApiClient(make_transport(handler))
    with pytest.raises(InvalidArgumentError):
        await client.replace_all_rows(table_name, filename, content)


@pytest.mark.asyncio
async def test_transport_wraps_network_errors(make_transport) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ODataApiClient(make_transport(handler))

    with pytest.raises(TransportError) as excinfo:
        await client.list_tables()

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_transport_requests_token_for_its_scope(make_transport, authenticator) -> None:
    client = ODataApiClient(make_transport(lambda request: httpx.Response(200, json={"value": []})))

    await client.list_tables()
    await client.list_tables()

    assert authenticator.scopes == ["table.Read project/Global"] * 2


def _access_key(domain: str = "example.com") -> str:
    payload = {"customerId": "1234", "clientId": "client-abc", "domain": domain}
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


@pytest.mark.asyncio
async def test_from_service_principal_key_targets_domain(authenticator) -> None:
    client = ODataApiClient.from_service_principal_key(
        "spk",
        _access_key("laserfiche.ca"),
        "table.Read project/Global",
        authenticator=authenticator,
    )
    async with client:
        assert client.transport.base_url == "https://api.laserfiche.ca/odata4/"
        assert client.transport.scope == "table.Read project/Global"


@pytest.mark.parametrize(
    "service_principal_key, access_key, scope",
    [
        ("spk", _access_key(), ""),
        (None, _access_key(), "table.Read"),
        ("spk", None, "table.Read"),
        ("spk", "not-base64!", "table.Read"),
    ],
)
def test_from_service_principal_key_validates(service_principal_key, access_key, scope) -> None:
    with pytest.raises(InvalidArgumentError):
        ODataApiClient.from_service_principal_key(service_principal_key, access_key, scope)
