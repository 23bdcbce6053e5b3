"""MCP server setup for the ORDS Adapter."""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from .auth import TokenManager
from .config import Settings
from .openapi import CatalogLoader
from .service import AdapterService
from .tool_registry import OperationRegistry

logger = logging.getLogger(__name__)


async def build_server(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> tuple[FastMCP, object | None]:
    timeout = settings.adapter_http_timeout_seconds
    token_manager = TokenManager(
        token_url=settings.token_url,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        margin_seconds=settings.adapter_token_margin_seconds,
        timeout_seconds=timeout,
        transport=transport,
    )
    loader = CatalogLoader(
        settings.openapi_url,
        exclude=settings.catalog_exclude(),
        timeout_seconds=timeout,
        transport=transport,
    )
    registry = OperationRegistry(
        loader,
        token_manager,
        base_url=settings.base_url,
        schema=settings.working_schema,
        operation_allowlist=settings.operation_allowlist(),
        timeout_seconds=timeout,
        transport=transport,
    )
    service = AdapterService(registry)

    mcp = FastMCP(settings.service_name, instructions=_instructions())
    _attach_resources(mcp)
    app = _get_http_app(mcp, settings)
    _attach_healthcheck(app)

    await registry.synthesize()
    for operation_id, operation in registry.items():
        handler = _tool_handler(service, operation_id)
        mcp.tool(name=operation_id, description=operation.description)(handler)
        logger.info("Registered tool: %s", operation_id)

    logger.info("MCP server ready with %s dynamic tools", len(registry))
    return mcp, app


def _tool_handler(
    service: AdapterService, operation_id: str
) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def handler(
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        params: Optional[Dict[str, Union[str, int, float]]] = None,
        query: Optional[Dict[str, Union[str, int, float, bool]]] = None,
    ) -> Dict[str, Any]:
        payload = {"headers": headers, "body": body, "params": params, "query": query}
        result = await service.execute_tool(operation_id, payload)
        if "error" in result:
            raise ToolError(json.dumps(result))
        return result

    handler.__name__ = operation_id
    return handler


def _attach_resources(mcp: FastMCP) -> None:
    @mcp.resource("greeting://{name}")
    def greeting(name: str) -> str:
        return f"Hello, {name}!"


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions() -> str:
    return (
        "ORDS REST adapter. "
        "Each tool wraps one REST endpoint discovered from the ORDS open-api-catalog; "
        "pass path placeholders in params, query string values in query and JSON payloads in body."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.adapter_transport.lower()
    if transport in {"http"}:
        app = mcp.http_app(transport="http", stateless_http=True, json_response=True)
        _attach_cors(app)
        return app
    if transport in {"streamable-http", "streamablehttp"}:
        app = mcp.http_app(
            transport="streamable-http", stateless_http=True, json_response=True
        )
        _attach_cors(app)
        return app
    if transport in {"sse"}:
        app = mcp.http_app(transport="sse")
        _attach_cors(app)
        return app
    return None


def _attach_cors(app) -> None:  # type: ignore[no-untyped-def]
    from starlette.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
