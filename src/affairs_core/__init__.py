"""Business affairs core - project context store and HTTP API.

Modules:
- config: Settings loaded from the environment
- models: Status, priority and category enums
- schemas: Pydantic records for projects and their children
- context_store: In-memory store shared by MCP handlers and the API
- state_machine: Task and risk status transitions
- dates: Due-date parsing for deadline windows
"""

__version__ = "1.0.0"
