"""FastAPI application wiring the Mina archive tools to HTTP routes and an MCP gateway."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from mina_archive_mcp import mcp
from mina_archive_mcp.archive_api import get_default_client
from mina_archive_mcp.config import get_default_config
from mina_archive_mcp.metrics import default_metrics
from mina_archive_mcp.rate_limiter import PerKeyRateLimiter
from mina_archive_mcp.tools import (
    ToolExecutionError,
    ValidationError,
    get_network_state,
    query_actions,
    query_events,
)

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
MCP_SERVER_VERSION = APP_VERSION
TOOL_ERROR_CODE = -32000


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in ("tool", "request_id", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str, log_format: str) -> None:
    """Install a stderr handler on the root logger (JSON or plain text)."""
    handler = logging.StreamHandler()
    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )


_config = get_default_config()
configure_logging(_config.log_level, _config.log_format)
rate_limiter = PerKeyRateLimiter(
    rate_per_sec=_config.rate_limit_qps,
    per_tool=_config.per_tool_rate_limits,
)
HEALTH_STATUS = {"status": "ok"}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await get_default_client().aclose()


app = FastAPI(
    title="Mina Archive MCP Server",
    description="Mina archive node GraphQL queries exposed as LLM tools.",
    version=APP_VERSION,
    lifespan=lifespan,
)
app.state.config = _config


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


def _log_tool_result(
    tool_name: str,
    outcome: str,
    request_id: Optional[str] = None,
    *,
    error: Optional[str] = None,
) -> None:
    if outcome == "success":
        logger.info(
            "tool=%s outcome=success request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )
    else:
        logger.warning(
            "tool=%s outcome=%s error=%s request_id=%s",
            tool_name,
            outcome,
            error,
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": error},
        )
    default_metrics.record_tool(tool_name, outcome=outcome)


async def _enforce_rate_limit(tool_name: str, rpc_id: Any = None) -> Optional[JSONResponse]:
    allowed = await rate_limiter.allow(tool_name)
    if not allowed:
        logger.warning("tool=%s outcome=rate_limited", tool_name)
        default_metrics.incr_rate_limited()
        return JSONResponse(
            status_code=429,
            content=_jsonrpc_error_payload(rpc_id, 429, "Rate limit exceeded"),
        )
    return None


async def _run_route_tool(
    request: Request, tool_name: str, call: Callable[[], Awaitable[Dict[str, Any]]]
) -> JSONResponse:
    limited = await _enforce_rate_limit(tool_name)
    if limited:
        return limited
    request_id = getattr(request.state, "request_id", None)
    try:
        result = await call()
    except ValidationError as exc:
        _log_tool_result(tool_name, "validation_error", request_id, error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except ToolExecutionError as exc:
        _log_tool_result(tool_name, "tool_error", request_id, error=str(exc))
        return JSONResponse(status_code=502, content={"error": str(exc)})
    _log_tool_result(tool_name, "success", request_id)
    return JSONResponse(content=result)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.get("/tools/network_state")
async def network_state(request: Request) -> JSONResponse:
    """Proxy for the get-network-state tool."""
    return await _run_route_tool(request, "get-network-state", lambda: get_network_state())


@app.get("/tools/events/{address}")
async def events(
    address: str,
    request: Request,
    token_id: Optional[str] = Query(None, alias="tokenId"),
    status: Optional[str] = Query(None),
    to: Optional[int] = Query(None),
    from_height: Optional[int] = Query(None, alias="from"),
) -> JSONResponse:
    """Proxy for the query-events tool."""
    return await _run_route_tool(
        request,
        "query-events",
        lambda: query_events(address, token_id=token_id, status=status, to=to, from_height=from_height),
    )


@app.get("/tools/actions/{address}")
async def actions(
    address: str,
    request: Request,
    token_id: Optional[str] = Query(None, alias="tokenId"),
    status: Optional[str] = Query(None),
    to: Optional[int] = Query(None),
    from_height: Optional[int] = Query(None, alias="from"),
    from_action_state: Optional[str] = Query(None, alias="fromActionState"),
    end_action_state: Optional[str] = Query(None, alias="endActionState"),
) -> JSONResponse:
    """Proxy for the query-actions tool."""
    return await _run_route_tool(
        request,
        "query-actions",
        lambda: query_actions(
            address,
            token_id=token_id,
            status=status,
            to=to,
            from_height=from_height,
            from_action_state=from_action_state,
            end_action_state=end_action_state,
        ),
    )


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    Minimal JSON-RPC gateway for MCP clients.

    Supported methods:
      - initialize
      - list_tools / tools/list
      - call_tool / tools/call
      - notifications/initialized
    """
    request_id = getattr(request.state, "request_id", None)
    start_time = time.time()

    def _respond(
        payload: Dict[str, Any],
        status_code: int = 200,
        *,
        outcome: str,
        method_label: Optional[str] = None,
        tool_label: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> JSONResponse:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            tool_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "tool": tool_label, "error": error_code},
        )
        return JSONResponse(status_code=status_code, content=payload)

    try:
        body = await request.json()
    except ValueError:
        payload = _jsonrpc_error_payload(None, -32700, "Parse error")
        return _respond(payload, status_code=400, outcome="error", error_code=-32700)

    if not isinstance(body, dict):
        payload = _jsonrpc_error_payload(None, -32600, "Invalid request")
        return _respond(payload, status_code=400, outcome="error", error_code=-32600)

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
        return _respond(payload, outcome="error", method_label=method, error_code=-32602)

    if not method:
        payload = _jsonrpc_error_payload(rpc_id, -32600, "Invalid request")
        return _respond(payload, outcome="error", error_code=-32600)

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)
        result = {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": request.app.state.config.server_name, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}},
        }
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method in ("list_tools", "tools/list"):
        limited = await _enforce_rate_limit("list_tools", rpc_id)
        if limited:
            return limited
        result = {"tools": mcp.list_tools()}
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("tool") or params.get("name")
        tool_params = params.get("params")
        if tool_params is None:
            tool_params = params.get("arguments") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)
        if not isinstance(tool_params, dict):
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602)
        if tool_name not in mcp.TOOL_REGISTRY:
            # Unknown names never reach the rate limiter.
            payload = _jsonrpc_error_payload(rpc_id, -32602, f"Unknown tool: {tool_name}")
            return _respond(payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602)
        limited = await _enforce_rate_limit(tool_name, rpc_id)
        if limited:
            return limited
        try:
            result = await mcp.call_tool(tool_name, tool_params)
        except ValidationError as exc:
            _log_tool_result(tool_name, "validation_error", request_id, error=str(exc))
            payload = _jsonrpc_error_payload(rpc_id, -32602, str(exc), data={"field": exc.field})
            return _respond(payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602)
        except ToolExecutionError as exc:
            _log_tool_result(tool_name, "tool_error", request_id, error=str(exc))
            payload = _jsonrpc_error_payload(
                rpc_id, TOOL_ERROR_CODE, str(exc), data={"operation": exc.operation}
            )
            return _respond(
                payload, outcome="error", method_label=method, tool_label=tool_name, error_code=TOOL_ERROR_CODE
            )
        _log_tool_result(tool_name, "success", request_id)
        return _respond(
            _jsonrpc_success_payload(rpc_id, _wrap_tool_result(result)),
            outcome="success",
            method_label=method,
            tool_label=tool_name,
        )

    if method in ("notifications/initialized", "initialized"):
        # Notifications do not get a JSON-RPC response body.
        logger.debug("mcp initialized notification received request_id=%s", request_id)
        return Response(status_code=204)

    payload = _jsonrpc_error_payload(rpc_id, -32601, "Method not found")
    return _respond(payload, outcome="error", method_label=method, error_code=-32601)


# Run with: python -m mina_archive_mcp  (or uvicorn mina_archive_mcp.server:app)


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(
    rpc_id: Any, code: int, message: str, *, data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": rpc_id, "error": error}


def _wrap_tool_result(result: Any) -> Dict[str, Any]:
    """Render the full tool result as a single pretty-printed text block."""
    return {"content": [{"type": "text", "text": json.dumps(result, indent=2)}]}
