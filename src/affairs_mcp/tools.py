"""MCP tool definitions for business affairs workflow management.

This module is the single list of tools the server exposes. Every tool here
must have a handler of the same name in ``handlers.HANDLERS``; the registry
refuses to start otherwise.
"""

from mcp.types import Tool

from affairs_core.dates import MAX_DAYS_AHEAD

PRIORITIES = ["urgent", "high", "normal", "low"]
SEVERITIES = ["critical", "high", "medium", "low"]
CATEGORIES = ["legal", "financial", "operational", "commercial", "ip"]
TASK_STATUSES = ["pending", "completed"]


def _project_id(description: str = "Project ID") -> dict:
    return {"type": "string", "description": description}


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools, in display order."""
    return [
        # ============================================================================
        # Project Tools
        # ============================================================================
        Tool(
            name="create_project",
            description="Create a new project to organize deals, contracts, and tasks. "
                       "Returns the generated project ID - keep it for add_task, add_document, track_issue, etc. "
                       "An endDate also registers a project-completion deadline.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Project name"
                    },
                    "description": {
                        "type": "string",
                        "description": "Project description"
                    },
                    "stakeholders": {
                        "type": "array",
                        "items": {"type": "string", "minLength": 1},
                        "description": "List of stakeholder names"
                    },
                    "startDate": {
                        "type": "string",
                        "description": "Project start date (YYYY-MM-DD)"
                    },
                    "endDate": {
                        "type": "string",
                        "description": "Project end date (YYYY-MM-DD)"
                    }
                },
                "required": ["name"]
            }
        ),
        Tool(
            name="update_project",
            description="Update project details. Name and description replace the current values, "
                       "dates replace only the date given, financials merge by category, "
                       "and stakeholders are appended.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id("ID of the project to update"),
                    "name": {
                        "type": "string",
                        "description": "New project name"
                    },
                    "description": {
                        "type": "string",
                        "description": "New project description"
                    },
                    "startDate": {
                        "type": "string",
                        "description": "New start date (YYYY-MM-DD)"
                    },
                    "endDate": {
                        "type": "string",
                        "description": "New end date (YYYY-MM-DD)"
                    },
                    "financials": {
                        "type": "object",
                        "additionalProperties": {"type": "object"},
                        "description": "Budget snapshots keyed by category, e.g. {\"production\": {\"budget\": 50000}}"
                    },
                    "stakeholders": {
                        "type": "array",
                        "items": {"type": "string", "minLength": 1},
                        "description": "Stakeholder names to add"
                    }
                },
                "required": ["projectId"]
            }
        ),
        Tool(
            name="get_project",
            description="Get full project details: timeline, stakeholders, documents, tasks, risks and notes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id()
                },
                "required": ["projectId"]
            }
        ),
        Tool(
            name="list_projects",
            description="List all projects with their IDs. "
                       "Common pattern: list_projects() → get_project_summary(projectId=...) → add_task(...).",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="get_project_summary",
            description="Get comprehensive summary of a specific project: counts of documents, tasks, "
                       "risks, stakeholders and deadlines, plus recent notes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id()
                },
                "required": ["projectId"]
            }
        ),
        Tool(
            name="add_document",
            description="Attach a document (contract, agreement, memo) to a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id(),
                    "title": {
                        "type": "string",
                        "minLength": 1,
                        "description": "Document title"
                    },
                    "docType": {
                        "type": "string",
                        "description": "Document type (e.g. contract, nda, memo)"
                    },
                    "url": {
                        "type": "string",
                        "description": "Where the document lives"
                    },
                    "summary": {
                        "type": "string",
                        "description": "Short summary"
                    }
                },
                "required": ["projectId", "title"]
            }
        ),
        Tool(
            name="add_stakeholder",
            description="Add a stakeholder to a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id(),
                    "name": {
                        "type": "string",
                        "minLength": 1,
                        "description": "Stakeholder name"
                    },
                    "role": {
                        "type": "string",
                        "description": "Role on the project (default: Stakeholder)"
                    }
                },
                "required": ["projectId", "name"]
            }
        ),
        Tool(
            name="add_note",
            description="Add a free-text note to a project. Notes are searchable.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id(),
                    "text": {
                        "type": "string",
                        "description": "Note text"
                    }
                },
                "required": ["projectId", "text"]
            }
        ),
        # ============================================================================
        # Task Tools
        # ============================================================================
        Tool(
            name="add_task",
            description="Add a task to a project. A task with a deadline is also tracked by check_deadlines.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id(),
                    "description": {
                        "type": "string",
                        "minLength": 1,
                        "description": "What needs to be done"
                    },
                    "priority": {
                        "type": "string",
                        "enum": PRIORITIES,
                        "description": "Task priority (default: normal)"
                    },
                    "deadline": {
                        "type": "string",
                        "description": "Due date (YYYY-MM-DD)"
                    },
                    "assignee": {
                        "type": "string",
                        "description": "Person responsible"
                    }
                },
                "required": ["projectId", "description"]
            }
        ),
        Tool(
            name="update_task_status",
            description="Change a task's status. Tasks go from pending to completed; completed is final. "
                       "Completing a task also clears it from the overdue list.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id(),
                    "taskId": {
                        "type": "string",
                        "description": "Task ID"
                    },
                    "status": {
                        "type": "string",
                        "enum": TASK_STATUSES,
                        "description": "New status"
                    }
                },
                "required": ["projectId", "taskId", "status"]
            }
        ),
        Tool(
            name="extract_tasks",
            description="Extract actionable tasks from transcripts, emails, meetings, or any text. "
                       "Priority, deadline and assignee are inferred from the wording. "
                       "With a projectId of an existing project the tasks are also added to it.",
            inputSchema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "Text containing tasks (transcript, email, notes, etc.)"
                    },
                    "projectId": _project_id("Project ID to associate tasks with"),
                    "defaultPriority": {
                        "type": "string",
                        "enum": PRIORITIES,
                        "description": "Default priority for extracted tasks (default: normal)"
                    }
                },
                "required": ["text"]
            }
        ),
        # ============================================================================
        # Issue Tools
        # ============================================================================
        Tool(
            name="track_issue",
            description="Create and track an issue or follow-up item. "
                       "High and critical issues on a project appear in list_active_issues. "
                       "A dueDate registers a resolution deadline.",
            inputSchema={
                "type": "object",
                "properties": {
                    "description": {
                        "type": "string",
                        "minLength": 1,
                        "description": "Issue description"
                    },
                    "severity": {
                        "type": "string",
                        "enum": SEVERITIES,
                        "description": "Issue severity (default: medium)"
                    },
                    "category": {
                        "type": "string",
                        "enum": CATEGORIES,
                        "description": "Issue category"
                    },
                    "projectId": _project_id("Associated project"),
                    "dueDate": {
                        "type": "string",
                        "description": "Due date for resolution (YYYY-MM-DD)"
                    }
                },
                "required": ["description", "category"]
            }
        ),
        Tool(
            name="list_active_issues",
            description="List high and critical issues that are still active.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id("Filter by project (optional)")
                }
            }
        ),
        Tool(
            name="resolve_issue",
            description="Mark an active issue as resolved. "
                       "The risk record inside the project keeps its own status.",
            inputSchema={
                "type": "object",
                "properties": {
                    "issueId": {
                        "type": "string",
                        "description": "Issue ID (from list_active_issues)"
                    }
                },
                "required": ["issueId"]
            }
        ),
        # ============================================================================
        # Deadline Tools
        # ============================================================================
        Tool(
            name="add_deadline",
            description="Track a deadline. It may reference a project but does not have to.",
            inputSchema={
                "type": "object",
                "properties": {
                    "description": {
                        "type": "string",
                        "description": "What is due"
                    },
                    "date": {
                        "type": "string",
                        "description": "Due date (YYYY-MM-DD or ISO-8601 datetime)"
                    },
                    "projectId": _project_id("Related project (optional)")
                },
                "required": ["description", "date"]
            }
        ),
        Tool(
            name="check_deadlines",
            description="Check upcoming and overdue deadlines across all projects.",
            inputSchema={
                "type": "object",
                "properties": {
                    "daysAhead": {
                        "type": "number",
                        "minimum": 0,
                        "maximum": MAX_DAYS_AHEAD,
                        "description": "Number of days to look ahead (default: 7)"
                    },
                    "projectId": _project_id("Filter by specific project (optional)")
                }
            }
        ),
        # ============================================================================
        # Overview Tools
        # ============================================================================
        Tool(
            name="get_dashboard",
            description="Generate comprehensive dashboard with all active projects, tasks, and risks.",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="generate_followups",
            description="Generate follow-up list from pending tasks, active risks and upcoming deadlines.",
            inputSchema={
                "type": "object",
                "properties": {
                    "projectId": _project_id("Filter by project (optional)")
                }
            }
        ),
        Tool(
            name="search_projects",
            description="Search across all projects for specific terms. "
                       "Matches project names, document titles, task descriptions and notes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Search query"
                    }
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="get_recent_activity",
            description="Show the most recent project changes, newest first.",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Number of entries (default: 10)"
                    }
                }
            }
        ),
    ]
