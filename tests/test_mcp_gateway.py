import json

import pytest
from fastapi.testclient import TestClient

from mina_archive_mcp import mcp
from mina_archive_mcp.archive_api import ProtocolError
from mina_archive_mcp.config import get_default_config
from mina_archive_mcp.server import MCP_SERVER_VERSION, app
from mina_archive_mcp.tools import ToolExecutionError, ValidationError
from mina_archive_mcp.tools.validators import ADDRESS_REGEX

from conftest import NETWORK_STATE, VALID_ADDRESS


@pytest.fixture
def client():
    return TestClient(app)


def _call(client, rpc_id, name, arguments):
    return client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": rpc_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        },
    )


def test_mcp_list_tools(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 1
    tools = {tool["name"]: tool for tool in data["result"]["tools"]}
    assert set(tools) == {"query-actions", "query-events", "get-network-state"}
    events_schema = tools["query-events"]["inputSchema"]
    assert events_schema["required"] == ["address"]
    assert events_schema["properties"]["address"]["pattern"] == ADDRESS_REGEX.pattern
    assert events_schema["properties"]["status"]["enum"] == ["ALL", "PENDING", "CANONICAL"]
    assert "fromActionState" not in events_schema["properties"]
    assert "endActionState" in tools["query-actions"]["inputSchema"]["properties"]


def test_mcp_initialize(client):
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 10,
            "method": "initialize",
            "params": {"protocolVersion": "2025-03-26", "capabilities": {}},
        },
    )
    result = resp.json()["result"]
    assert result["protocolVersion"] == "2025-03-26"
    assert result["serverInfo"] == {"name": get_default_config().server_name, "version": MCP_SERVER_VERSION}
    assert result["capabilities"]["tools"]["listChanged"] is False


def test_call_tool_wraps_result_as_text(client, monkeypatch):
    async def fake_get_network_state(**_kwargs):
        return NETWORK_STATE

    monkeypatch.setattr(mcp.TOOL_REGISTRY["get-network-state"], "callable", fake_get_network_state)
    resp = _call(client, 2, "get-network-state", {})
    assert resp.status_code == 200
    content = resp.json()["result"]["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    assert json.loads(content[0]["text"]) == NETWORK_STATE
    assert content[0]["text"] == json.dumps(NETWORK_STATE, indent=2)


def test_call_tool_maps_camel_case_arguments(client, monkeypatch):
    seen = {}

    async def fake_query_actions(address, **kwargs):
        seen["address"] = address
        seen.update(kwargs)
        return {"actions": []}

    monkeypatch.setattr(mcp.TOOL_REGISTRY["query-actions"], "callable", fake_query_actions)
    resp = _call(
        client,
        3,
        "query-actions",
        {"address": VALID_ADDRESS, "tokenId": "t", "from": 1, "to": 2, "endActionState": "e"},
    )
    assert resp.status_code == 200
    assert seen == {"address": VALID_ADDRESS, "token_id": "t", "from_height": 1, "to": 2, "end_action_state": "e"}


def test_invalid_address_is_invalid_params(client, monkeypatch):
    calls = []

    class NoNetworkClient:
        async def query_events(self, filter_options):
            calls.append(filter_options)
            return []

    from mina_archive_mcp.tools import events as events_mod

    monkeypatch.setattr(events_mod, "get_default_client", lambda: NoNetworkClient())
    resp = _call(client, 4, "query-events", {"address": "not-an-address"})
    data = resp.json()
    assert data["error"]["code"] == -32602
    assert "Invalid Mina address format" in data["error"]["message"]
    assert data["error"]["data"] == {"field": "address"}
    assert calls == []


def test_invalid_status_is_invalid_params(client):
    resp = _call(client, 5, "query-events", {"address": VALID_ADDRESS, "status": "FINAL"})
    assert resp.json()["error"]["code"] == -32602


def test_unexpected_and_missing_arguments(client):
    resp = _call(client, 6, "query-events", {"address": VALID_ADDRESS, "limit": 5})
    assert resp.json()["error"]["code"] == -32602
    assert "limit" in resp.json()["error"]["message"]

    resp = _call(client, 7, "query-actions", {})
    assert resp.json()["error"]["code"] == -32602
    assert "address" in resp.json()["error"]["message"]


def test_graphql_error_surfaces_as_query_events_failure(client, monkeypatch):
    class ErrorClient:
        async def query_events(self, filter_options):
            raise ProtocolError("GraphQL error: Cannot query field \"bogus\"")

    from mina_archive_mcp.tools import events as events_mod

    monkeypatch.setattr(events_mod, "get_default_client", lambda: ErrorClient())
    resp = _call(client, 8, "query-events", {"address": VALID_ADDRESS})
    assert resp.status_code == 200
    data = resp.json()
    assert "result" not in data
    assert data["error"]["code"] == -32000
    assert "query events" in data["error"]["message"]
    assert data["error"]["data"] == {"operation": "query events"}
    metrics = client.get("/metrics").json()
    assert metrics["tool_error"] == {"query-events": 1}


def test_unknown_tool(client):
    resp = _call(client, 9, "drop-tables", {})
    assert resp.json()["error"]["code"] == -32602
    assert "Unknown tool" in resp.json()["error"]["message"]


def test_unknown_tool_names_do_not_grow_rate_limiter(client):
    from mina_archive_mcp import server

    for i in range(50):
        resp = _call(client, i, f"bogus-{i}", {})
        assert resp.json()["error"]["code"] == -32602
    assert server.rate_limiter._buckets == {}


def test_rate_limited_call_keeps_request_id(monkeypatch, client):
    from mina_archive_mcp import server

    class DenyLimiter:
        async def allow(self, _tool):
            return False

    monkeypatch.setattr(server, "rate_limiter", DenyLimiter())
    resp = _call(client, 7, "get-network-state", {})
    assert resp.status_code == 429
    assert resp.json() == {"jsonrpc": "2.0", "id": 7, "error": {"code": 429, "message": "Rate limit exceeded"}}


def test_mcp_unknown_method_returns_error(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 11, "method": "not_a_real_method"})
    assert resp.json()["error"]["code"] == -32601


def test_mcp_invalid_params_type(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 12, "method": "call_tool", "params": []})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_parse_error_invalid_json(client):
    resp = client.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


def test_mcp_missing_method_invalid_request(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 13})
    assert resp.json()["error"]["code"] == -32600


def test_mcp_initialized_notification_ignored(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 204
    assert resp.text == ""


@pytest.mark.asyncio
async def test_call_tool_direct_errors():
    with pytest.raises(mcp.UnknownToolError):
        await mcp.call_tool("nope")
    with pytest.raises(ValidationError):
        await mcp.call_tool("query-events", {"address": "bad"})
    assert issubclass(ToolExecutionError, RuntimeError)
