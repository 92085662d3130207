"""Business Affairs MCP Server - Expose project context to AI assistants."""
import argparse
import asyncio
import logging
import sys
from typing import Any, Optional

import uvicorn
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from affairs_core.api.main import create_app
from affairs_core.config import Settings, get_settings
from affairs_core.context_store import ContextStore

from .dispatcher import Dispatcher, build_registry

logger = logging.getLogger("affairs-mcp")


def configure_logging(settings: Settings) -> None:
    """Send logs to stderr; stdout carries the protocol stream."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


class ToolCallFailed(Exception):
    """Carries an error envelope's text back through the MCP server."""


def create_server(dispatcher: Dispatcher, settings: Optional[Settings] = None) -> Server:
    """
    Build the MCP server bound to a dispatcher.

    Args:
        dispatcher: Dispatcher owning the registry and context store
        settings: Application settings (default: ``get_settings()``)
    """
    settings = settings or get_settings()
    app = Server(settings.server_name, version=settings.version)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available business-affairs tools."""
        return dispatcher.list_tools()

    # Argument checks happen in the dispatcher so callers get its error wording
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle MCP tool calls by delegating to the dispatcher."""
        result = await dispatcher.handle(name, arguments)
        if result.isError:
            # The server turns raised exceptions into isError results
            raise ToolCallFailed(result.content[0].text)
        return result.content

    return app


def create_http_server(store: ContextStore, settings: Settings) -> uvicorn.Server:
    """
    Build the uvicorn server for the read-only HTTP API over ``store``.

    Uvicorn logs through the root handler set up by ``configure_logging``,
    so stdout stays reserved for the MCP stream.
    """
    config = uvicorn.Config(
        create_app(store, settings),
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
    return uvicorn.Server(config)


async def main(settings: Optional[Settings] = None):
    """Run the MCP server over stdio until the client disconnects.

    With ``http_enabled`` the HTTP API is served from the same process and
    reads the same context store.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    store = ContextStore(activity_limit=settings.activity_log_limit)
    registry = build_registry()
    dispatcher = Dispatcher(registry, store, settings)
    app = create_server(dispatcher, settings)

    http_server = None
    http_task = None
    if settings.http_enabled:
        http_server = create_http_server(store, settings)
        http_task = asyncio.create_task(http_server.serve())
        logger.info(f"HTTP API listening on http://{settings.http_host}:{settings.http_port}")

    logger.info(f"{settings.service_name} v{settings.version} starting ({len(registry)} tools)")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    except Exception as e:
        logger.error(f"MCP server stopped on fatal error: {type(e).__name__}: {e}", exc_info=True)
        raise
    finally:
        if http_server is not None:
            http_server.should_exit = True
            await http_task
        logger.info("MCP server shut down")


def run():
    """Console entry point."""
    parser = argparse.ArgumentParser(prog="affairs-mcp", description="Business affairs MCP server (stdio)")
    parser.add_argument("--http", action="store_true", help="Also serve the read-only HTTP API")
    parser.add_argument("--host", help="HTTP API host (default: AFFAIRS_HTTP_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="HTTP API port (default: AFFAIRS_HTTP_PORT or 8000)")
    args = parser.parse_args()

    overrides = {}
    if args.http:
        overrides["http_enabled"] = True
    if args.host:
        overrides["http_host"] = args.host
    if args.port:
        overrides["http_port"] = args.port
    settings = get_settings().model_copy(update=overrides)

    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
