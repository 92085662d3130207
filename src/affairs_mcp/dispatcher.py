"""Operation registry and request dispatcher.

The dispatcher is the single error-containment point: every request comes
back as a ``CallToolResult`` envelope, whether the operation was unknown,
the arguments were rejected, the handler raised, or it timed out.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from mcp.types import CallToolResult, TextContent, Tool
from pydantic import BaseModel

from affairs_core.config import Settings
from affairs_core.context_store import ContextStore

from . import handlers, tools
from .validation import (
    InvalidArgumentsError,
    MissingArgumentsError,
    UnknownOperationError,
    validate_arguments,
)

logger = logging.getLogger("affairs-mcp.dispatcher")

Handler = Callable[[dict, ContextStore, Settings], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    """A registered tool: its public definition plus the handler that runs it."""

    tool: Tool
    handler: Handler

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def input_schema(self) -> dict:
        return self.tool.inputSchema


class OperationRegistry:
    """Fixed, ordered mapping of operation name to operation.

    Built once at startup; there is no way to add or remove operations later.
    """

    def __init__(self, operations: list[Operation]):
        by_name: dict[str, Operation] = {}
        for operation in operations:
            if operation.name in by_name:
                raise ValueError(f"Duplicate operation name: {operation.name}")
            by_name[operation.name] = operation
        self._operations = by_name

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def describe(self) -> list[Tool]:
        """Tool definitions in registration order, for capability listing."""
        return [operation.tool for operation in self._operations.values()]

    def lookup(self, name: str) -> Operation:
        """
        Find an operation by name.

        Raises:
            UnknownOperationError: If nothing is registered under that name
        """
        operation = self._operations.get(name)
        if operation is None:
            raise UnknownOperationError(name)
        return operation


def build_registry(
    tool_list: Optional[list[Tool]] = None,
    handler_map: Optional[Mapping[str, Handler]] = None,
) -> OperationRegistry:
    """
    Pair every tool definition with its handler.

    Args:
        tool_list: Tool definitions (default: ``tools.get_tools()``)
        handler_map: Handlers by tool name (default: ``handlers.HANDLERS``)

    Raises:
        ValueError: If a tool has no handler or a handler has no tool
    """
    tool_list = tools.get_tools() if tool_list is None else tool_list
    handler_map = handlers.HANDLERS if handler_map is None else handler_map

    tool_names = {tool.name for tool in tool_list}
    missing = [tool.name for tool in tool_list if tool.name not in handler_map]
    orphaned = sorted(set(handler_map) - tool_names)
    if missing:
        raise ValueError(f"Tools without handlers: {', '.join(missing)}")
    if orphaned:
        raise ValueError(f"Handlers without tools: {', '.join(orphaned)}")

    return OperationRegistry([Operation(tool=tool, handler=handler_map[tool.name]) for tool in tool_list])


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def _serialize(result: Any) -> str:
    """Render a handler result as text."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json(indent=2)
    return json.dumps(result, indent=2, default=str)


class Dispatcher:
    """Resolve, validate and execute operations against one context store."""

    def __init__(self, registry: OperationRegistry, store: ContextStore, settings: Settings):
        self.registry = registry
        self.store = store
        self.settings = settings

    def list_tools(self) -> list[Tool]:
        return self.registry.describe()

    async def handle(self, name: str, arguments: Optional[Mapping[str, Any]]) -> CallToolResult:
        """
        Run one operation and wrap the outcome in an envelope.

        Args:
            name: Operation name
            arguments: Caller-supplied arguments (None is treated as empty)

        Returns:
            CallToolResult with a single text item; ``isError`` is set for
            unknown operations, rejected arguments, handler failures and
            timeouts
        """
        started = time.monotonic()
        arguments = dict(arguments) if isinstance(arguments, Mapping) else {}

        def _done(outcome: str, result: CallToolResult) -> CallToolResult:
            elapsed_ms = (time.monotonic() - started) * 1000
            log = logger.warning if result.isError else logger.info
            log(f"Tool call {name}: {outcome} ({elapsed_ms:.1f} ms)")
            return result

        try:
            operation = self.registry.lookup(name)
        except UnknownOperationError as e:
            return _done("unknown", _text_result(str(e), is_error=True))

        try:
            validate_arguments(arguments, operation.input_schema)
        except (MissingArgumentsError, InvalidArgumentsError) as e:
            return _done("invalid", _text_result(str(e), is_error=True))

        timeout = self.settings.handler_timeout_seconds
        try:
            result = await asyncio.wait_for(
                operation.handler(arguments, self.store, self.settings),
                timeout=timeout if timeout and timeout > 0 else None,
            )
        except asyncio.TimeoutError:
            return _done("timeout", _text_result(
                f"Error executing {name}: timed out after {timeout:g} seconds", is_error=True
            ))
        except Exception as e:
            logger.error(f"Error during {name} call: {type(e).__name__}: {e}", exc_info=True)
            return _done("error", _text_result(f"Error executing {name}: {e}", is_error=True))

        return _done("ok", _text_result(_serialize(result)))
