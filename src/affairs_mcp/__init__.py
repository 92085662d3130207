"""Business Affairs MCP Server - Model Context Protocol integration.

This package exposes the business-affairs context store to AI assistants
as a fixed set of MCP tools.

Modules:
- server: stdio MCP server implementation
- dispatcher: Operation registry and error-contained request dispatch
- validation: Argument checks against tool input schemas
- tools: MCP tool definitions
- handlers: Tool implementation handlers
- extraction: Keyword-based task extraction from transcripts and emails
- formatters: Response formatting utilities
"""

__version__ = "1.0.0"

from . import formatters
from . import tools
from . import handlers

__all__ = ["formatters", "tools", "handlers", "__version__"]
