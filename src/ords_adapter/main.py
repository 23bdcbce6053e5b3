"""CLI entry point for the ORDS MCP Adapter."""

from __future__ import annotations

import asyncio
import logging

import uvicorn

from .config import get_settings
from .errors import ConfigurationError
from .logging import configure_logging
from .server import build_server

logger = logging.getLogger(__name__)


async def _run() -> None:
    settings = get_settings()
    configure_logging(settings.adapter_log_level)

    try:
        settings.require_credentials()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    logger.info("Client ID and Client Secret are configured.")

    mcp, app = await build_server(settings)
    transport = settings.adapter_transport.lower()

    if transport in {"http", "streamable-http", "streamablehttp", "sse"}:
        if not app:
            raise RuntimeError(f"HTTP app unavailable for transport={transport}")
        config = uvicorn.Config(app, host=settings.adapter_host, port=settings.adapter_port)
        server = uvicorn.Server(config)
        await server.serve()
        return
    await mcp.run_stdio_async()


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
