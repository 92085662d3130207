"""Tests for the operation registry and dispatcher.

Every dispatch returns an envelope; failures never propagate to the caller.
"""
import asyncio
import json
from datetime import timedelta

import pytest
from mcp.types import Tool

from affairs_core.config import Settings
from affairs_core.schemas import ProjectUpdate
from affairs_mcp.dispatcher import Dispatcher, OperationRegistry, Operation, build_registry
from affairs_mcp.tools import get_tools
from affairs_mcp.validation import UnknownOperationError

from .conftest import FIXED_NOW


def make_tool(name: str, required: list[str] = None) -> Tool:
    return Tool(
        name=name,
        description=f"Test tool {name}",
        inputSchema={
            "type": "object",
            "properties": {field: {"type": "string"} for field in required or []},
            "required": required or [],
        },
    )


def text_of(result) -> str:
    assert len(result.content) == 1
    return result.content[0].text


class TestRegistry:
    """Test registry construction and lookup."""

    def test_every_tool_has_a_handler(self):
        registry = build_registry()

        assert len(registry) == len(get_tools()) == 20
        assert [t.name for t in registry.describe()] == [t.name for t in get_tools()]

    def test_lookup_unknown_raises(self):
        with pytest.raises(UnknownOperationError, match="Unknown operation: nope"):
            build_registry().lookup("nope")

    def test_duplicate_names_rejected(self):
        async def handler(arguments, store, settings):
            return "ok"

        tool = make_tool("twice")
        with pytest.raises(ValueError, match="Duplicate operation name: twice"):
            OperationRegistry([Operation(tool, handler), Operation(tool, handler)])

    def test_tool_without_handler_rejected(self):
        with pytest.raises(ValueError, match="Tools without handlers: lonely"):
            build_registry([make_tool("lonely")], {})

    def test_handler_without_tool_rejected(self):
        async def handler(arguments, store, settings):
            return "ok"

        with pytest.raises(ValueError, match="Handlers without tools: orphan"):
            build_registry([], {"orphan": handler})


class TestDispatchErrors:
    """Test the error envelopes produced before and around handlers."""

    async def test_unknown_operation(self, dispatcher):
        result = await dispatcher.handle("delete_everything", {})

        assert result.isError
        assert text_of(result) == "Unknown operation: delete_everything"

    async def test_missing_required_argument(self, dispatcher):
        result = await dispatcher.handle("extract_tasks", {})

        assert result.isError
        assert text_of(result) == "Missing required arguments: text"

    async def test_missing_arguments_listed_together(self, dispatcher):
        result = await dispatcher.handle("update_task_status", {"taskId": "t1"})

        assert text_of(result) == "Missing required arguments: projectId, status"

    async def test_none_arguments_treated_as_empty(self, dispatcher):
        result = await dispatcher.handle("search_projects", None)

        assert text_of(result) == "Missing required arguments: query"

    async def test_wrong_shape_rejected(self, dispatcher):
        result = await dispatcher.handle("check_deadlines", {"daysAhead": "soon"})

        assert result.isError
        assert text_of(result).startswith("Invalid arguments: daysAhead: ")

    async def test_days_ahead_above_maximum_rejected(self, dispatcher):
        result = await dispatcher.handle("check_deadlines", {"daysAhead": 1e12})

        assert result.isError
        assert text_of(result).startswith("Invalid arguments: daysAhead: ")

    async def test_blank_stakeholder_rejected(self, dispatcher, store):
        result = await dispatcher.handle("create_project", {"name": "Acme Deal", "stakeholders": [""]})

        assert result.isError
        assert text_of(result).startswith("Invalid arguments: stakeholders.0: ")
        assert store.list_projects() == []

    async def test_blank_task_description_rejected(self, dispatcher, store):
        store.upsert_project("p1", ProjectUpdate(name="Acme Deal"))

        result = await dispatcher.handle("add_task", {"projectId": "p1", "description": ""})

        assert result.isError
        assert text_of(result).startswith("Invalid arguments: description: ")

    async def test_handler_failure_is_contained(self, dispatcher):
        result = await dispatcher.handle("add_note", {"projectId": "missing", "text": "hello"})

        assert result.isError
        assert text_of(result) == "Error executing add_note: Project missing not found"

    async def test_arbitrary_exception_is_contained(self, store, settings):
        async def explode(arguments, store, settings):
            raise RuntimeError("boom")

        dispatcher = Dispatcher(build_registry([make_tool("explode")], {"explode": explode}), store, settings)
        result = await dispatcher.handle("explode", {})

        assert result.isError
        assert text_of(result) == "Error executing explode: boom"

    async def test_slow_handler_times_out(self, store):
        async def stall(arguments, store, settings):
            await asyncio.sleep(5)
            return "too late"

        settings = Settings(_env_file=None, handler_timeout_seconds=0.05)
        dispatcher = Dispatcher(build_registry([make_tool("stall")], {"stall": stall}), store, settings)
        result = await dispatcher.handle("stall", {})

        assert result.isError
        assert text_of(result) == "Error executing stall: timed out after 0.05 seconds"


class TestDispatchSuccess:
    """Test successful dispatch."""

    async def test_handler_called_once_with_arguments(self, store, settings):
        calls = []

        async def record(arguments, store, settings):
            calls.append(arguments)
            return "recorded"

        dispatcher = Dispatcher(build_registry([make_tool("record", ["value"])], {"record": record}), store, settings)
        result = await dispatcher.handle("record", {"value": "x"})

        assert not result.isError
        assert text_of(result) == "recorded"
        assert calls == [{"value": "x"}]

    async def test_non_text_results_are_serialized(self, store, settings):
        async def structured(arguments, store, settings):
            return {"count": 2, "when": FIXED_NOW}

        dispatcher = Dispatcher(build_registry([make_tool("structured")], {"structured": structured}), store, settings)
        result = await dispatcher.handle("structured", {})

        assert json.loads(text_of(result)) == {"count": 2, "when": str(FIXED_NOW)}

    async def test_model_results_are_serialized(self, store, settings):
        async def project(arguments, store, settings):
            return store.upsert_project("p1", ProjectUpdate(name="Acme Deal"))

        dispatcher = Dispatcher(build_registry([make_tool("project")], {"project": project}), store, settings)
        result = await dispatcher.handle("project", {})

        assert json.loads(text_of(result))["name"] == "Acme Deal"

    async def test_upcoming_task_deadline_reported_once(self, dispatcher, store):
        store.upsert_project("P1", ProjectUpdate(name="Acme Deal"))
        tomorrow = (FIXED_NOW + timedelta(days=1)).strftime("%Y-%m-%d")

        added = await dispatcher.handle("add_task", {
            "projectId": "P1",
            "description": "Draft NDA",
            "priority": "urgent",
            "deadline": tomorrow,
        })
        assert not added.isError

        result = await dispatcher.handle("check_deadlines", {"daysAhead": 7})
        text = text_of(result)

        assert not result.isError
        assert text.count("Draft NDA") == 1
        assert "Overdue: 0" in text
        assert [d.description for d in store.get_upcoming_deadlines(7)] == ["Draft NDA"]
        assert store.get_overdue_deadlines() == []

    async def test_days_ahead_at_maximum_accepted(self, dispatcher):
        result = await dispatcher.handle("check_deadlines", {"daysAhead": 3650})

        assert not result.isError
        assert "No deadlines in range" in text_of(result)

    async def test_recent_activity_accepts_whole_number_float(self, dispatcher, store):
        store.upsert_project("p1", ProjectUpdate(name="Acme Deal"))
        store.add_note("p1", "first call")
        store.add_note("p1", "second call")

        result = await dispatcher.handle("get_recent_activity", {"limit": 2.0})

        assert not result.isError
        assert "Recent Activity (2)" in text_of(result)
