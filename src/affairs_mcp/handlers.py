"""MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: arguments dict, the ContextStore, and Settings
- Return: the response text
- Raise on failure; the dispatcher turns exceptions into error envelopes
- Use formatters from the formatters module for consistent output

Tools with an optional ``projectId`` skip the project association when the
project does not exist. Tools where the project is mandatory raise
``ProjectNotFoundError``.
"""
import logging
from typing import Any, Optional

from affairs_core.config import Settings
from affairs_core.context_store import ContextStore, ProjectNotFoundError
from affairs_core.dates import add_days, parse_due_date
from affairs_core.models import (
    DeadlineKind,
    ESCALATED_SEVERITIES,
    RiskCategory,
    RiskSeverity,
    TaskPriority,
    TaskStatus,
)
from affairs_core.schemas import (
    DeadlineCreate,
    DocumentCreate,
    ProjectUpdate,
    RiskCreate,
    StakeholderCreate,
    TaskCreate,
    Timeline,
)

from . import extraction, formatters

logger = logging.getLogger("affairs-mcp.handlers")

DEFAULT_CHECK_DAYS = 7


def _project_name(store: ContextStore, project_id: Optional[str]) -> Optional[str]:
    project = store.get_project(project_id) if project_id else None
    return project.name if project else None


# ============================================================================
# Project Handlers
# ============================================================================

async def handle_create_project(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Create a project under a new id; an end date also becomes a completion deadline."""
    name = arguments["name"]
    description = arguments.get("description")
    stakeholders = arguments.get("stakeholders") or []
    start_date = arguments.get("startDate")
    end_date = arguments.get("endDate")

    project_id = store.generate_id()
    project = store.upsert_project(project_id, ProjectUpdate(
        name=name,
        description=description,
        stakeholders=[StakeholderCreate(name=s) for s in stakeholders],
        timeline=Timeline(start_date=start_date, end_date=end_date),
    ))

    if end_date:
        store.add_deadline(DeadlineCreate(
            description=f"{name} - Project completion",
            date=end_date,
            project_id=project_id,
            project=name,
            kind=DeadlineKind.PROJECT_COMPLETION,
        ))

    logger.info(f"Successfully created project {project_id}: {name}")

    lines = [formatters.banner("PROJECT CREATED"), "", f"Project ID: {project.id}", f"Name: {project.name}"]
    if description:
        lines.append(f"Description: {description}")
    if stakeholders:
        lines.append("Stakeholders:\n" + "\n".join(f"  • {s}" for s in stakeholders))
    if start_date:
        lines.append(f"Start Date: {start_date}")
    if end_date:
        lines.append(f"End Date: {end_date}")
    lines += [
        "",
        "✓ Project initialized and ready for:",
        "  • Document uploads",
        "  • Task management",
        "  • Risk tracking",
        "  • Deadline monitoring",
        "",
        formatters.RULE,
    ]
    return "\n".join(lines)


async def handle_update_project(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Apply a typed update to an existing project."""
    project_id = arguments["projectId"]
    if not store.has_project(project_id):
        raise ProjectNotFoundError(project_id)

    timeline = None
    if arguments.get("startDate") or arguments.get("endDate"):
        timeline = Timeline(start_date=arguments.get("startDate"), end_date=arguments.get("endDate"))

    project = store.upsert_project(project_id, ProjectUpdate(
        name=arguments.get("name"),
        description=arguments.get("description"),
        timeline=timeline,
        financials=arguments.get("financials"),
        stakeholders=[StakeholderCreate(name=s) for s in arguments.get("stakeholders") or []],
    ))
    logger.info(f"Successfully updated project {project_id}")

    return f"Updated project: {project.name or project_id}\n\n{formatters.format_project(project)}"


async def handle_get_project(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Full project details."""
    project_id = arguments["projectId"]
    project = store.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return formatters.format_project(project)


async def handle_list_projects(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """List projects in creation order."""
    projects = store.list_projects()
    if not projects:
        return "No projects yet. Use create_project(name=...) to start one."

    items_text = "\n".join(formatters.format_project_line(p) for p in projects)
    return f"Found {len(projects)} projects\n\n{items_text}"


async def handle_get_project_summary(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Statistics view of one project. An unknown id is reported in the text, not as an error."""
    project_id = arguments["projectId"]
    project = store.get_project(project_id)
    if project is None:
        return f"❌ Project {project_id} not found"

    summary = store.get_project_summary(project_id)
    return formatters.format_project_summary(summary, project)


async def handle_add_document(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Attach a document to a project."""
    project_id = arguments["projectId"]
    project = store.add_document(project_id, DocumentCreate(
        title=arguments["title"],
        doc_type=arguments.get("docType"),
        url=arguments.get("url"),
        summary=arguments.get("summary"),
    ))
    document = project.documents[-1]
    logger.info(f"Added document {document.id} to project {project_id}")

    return (f"Added document '{document.title}' to {project.name or project_id}\n"
            f"Document ID: {document.id}\n"
            f"Documents on project: {len(project.documents)}")


async def handle_add_stakeholder(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Add a stakeholder to a project."""
    project_id = arguments["projectId"]
    stakeholder = StakeholderCreate(name=arguments["name"], role=arguments.get("role") or "Stakeholder")
    project = store.add_stakeholder(project_id, stakeholder)

    return (f"Added {stakeholder.name} ({stakeholder.role}) to {project.name or project_id}\n"
            f"Stakeholders on project: {len(project.stakeholders)}")


async def handle_add_note(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Add a note to a project."""
    project_id = arguments["projectId"]
    project = store.add_note(project_id, arguments["text"])
    return f"Note added to {project.name or project_id} ({len(project.notes)} notes)"


# ============================================================================
# Task Handlers
# ============================================================================

async def handle_add_task(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Add a task to a project."""
    project_id = arguments["projectId"]
    task = store.add_task(project_id, TaskCreate(
        description=arguments["description"],
        priority=TaskPriority(arguments.get("priority") or TaskPriority.NORMAL),
        deadline=arguments.get("deadline"),
        assignee=arguments.get("assignee"),
    ))
    logger.info(f"Added task {task.id} to project {project_id}")

    tracked = "\n\n✓ Deadline tracked" if task.deadline else ""
    return f"Created task\n\n{formatters.format_task(task)}{tracked}"


async def handle_update_task_status(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Change a task's status."""
    task = store.update_task_status(arguments["projectId"], arguments["taskId"], TaskStatus(arguments["status"]))
    logger.info(f"Task {task.id} is now {task.status.value}")

    return (f"Updated task: {task.description}\n"
            f"Status: {task.status.value}\n"
            f"Updated at: {formatters.format_timestamp(task.updated_at)}")


async def handle_extract_tasks(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Extract tasks from free text and optionally file them under a project."""
    text = arguments["text"]
    project_id = arguments.get("projectId")
    default_priority = TaskPriority(arguments.get("defaultPriority") or TaskPriority.NORMAL)

    tasks = extraction.extract_tasks(text, default_priority)
    now = store.now()
    flagged = sum(1 for t in tasks if extraction.review_task(t, now))

    saved_note = ""
    if project_id:
        if store.has_project(project_id):
            for task in tasks:
                store.add_task(project_id, task)
            saved_note = f"\n✓ Tasks added to project {project_id}"
        else:
            logger.info(f"Project {project_id} not found; extracted tasks not stored")
            saved_note = f"\n⚠ Project {project_id} not found - tasks were not saved"

    speakers = extraction.extract_speakers(text) if extraction.is_transcript(text) else []
    speakers_line = f"\n  Speakers: {', '.join(speakers)}" if speakers else ""

    return (f"{formatters.format_task_list(tasks)}\n\n"
            f"📊 EXTRACTION SUMMARY:\n"
            f"  Total Tasks: {len(tasks)}\n"
            f"  Urgent: {sum(1 for t in tasks if t.priority == TaskPriority.URGENT)}\n"
            f"  With Deadlines: {sum(1 for t in tasks if t.deadline)}\n"
            f"  Assigned: {sum(1 for t in tasks if t.assignee)}\n"
            f"  Needing Review: {flagged}"
            f"{speakers_line}\n"
            f"{saved_note}")


# ============================================================================
# Issue Handlers
# ============================================================================

async def handle_track_issue(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Record an issue as a project risk (when the project exists) and track its due date."""
    description = arguments["description"]
    severity = RiskSeverity(arguments.get("severity") or RiskSeverity.MEDIUM)
    category = RiskCategory(arguments["category"])
    project_id = arguments.get("projectId")
    due_date = arguments.get("dueDate")

    risk = None
    if project_id and store.has_project(project_id):
        risk = store.add_risk(project_id, RiskCreate(
            title=description,
            description=description,
            severity=severity,
            category=category,
            due_date=due_date,
        ))
    elif project_id:
        logger.info(f"Project {project_id} not found; issue not attached")

    if due_date:
        store.add_deadline(DeadlineCreate(
            description=description,
            date=due_date,
            project_id=project_id,
            project=_project_name(store, project_id),
            kind=DeadlineKind.ISSUE_RESOLUTION,
        ))

    lines = [
        formatters.banner("ISSUE TRACKED"),
        "",
        f"Description: {description}",
        f"Severity: {severity.value.upper()}",
        f"Category: {category.value}",
        "Status: Active",
    ]
    if risk is not None:
        lines.append(f"Issue ID: {risk.id}")
    if project_id:
        lines.append(f"Project: {project_id}" + ("" if risk is not None else " (not found - issue not attached)"))
    if due_date:
        lines.append(f"Due Date: {due_date}")
    lines += ["", "✓ Issue logged and will be monitored"]
    if severity in ESCALATED_SEVERITIES:
        lines.append("\n🚨 High priority - requires immediate attention")
    lines += ["", formatters.RULE]
    return "\n".join(lines)


async def handle_list_active_issues(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Active high/critical issues, optionally for one project."""
    project_id = arguments.get("projectId")
    issues = store.get_active_issues()
    if project_id:
        issues = [i for i in issues if i.project_id == project_id]

    if not issues:
        return "No active issues."
    return f"Active Issues ({len(issues)}):\n\n" + "\n\n".join(formatters.format_issue(i) for i in issues)


async def handle_resolve_issue(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Mark an active issue resolved."""
    issue_id = arguments["issueId"]
    issue = store.resolve_issue(issue_id)
    if issue is None:
        raise LookupError(f"Issue {issue_id} not found")

    return (f"Resolved issue: {issue.title}\n"
            f"Resolved at: {formatters.format_timestamp(issue.resolved_at)}")


# ============================================================================
# Deadline Handlers
# ============================================================================

async def handle_add_deadline(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Track a standalone deadline."""
    project_id = arguments.get("projectId")
    deadline = store.add_deadline(DeadlineCreate(
        description=arguments["description"],
        date=arguments["date"],
        project_id=project_id,
        project=_project_name(store, project_id),
        kind=DeadlineKind.MANUAL,
    ))

    warning = ""
    if parse_due_date(deadline.date) is None:
        warning = "\n⚠ Date is not YYYY-MM-DD / ISO-8601; it will not appear in deadline checks"
    return f"Deadline added: {deadline.description} ({deadline.date})\nDeadline ID: {deadline.id}{warning}"


async def handle_check_deadlines(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Overdue and upcoming deadlines, optionally for one project."""
    days_ahead = arguments.get("daysAhead", DEFAULT_CHECK_DAYS)
    project_id = arguments.get("projectId")

    upcoming = store.get_upcoming_deadlines(days_ahead)
    overdue = store.get_overdue_deadlines()
    if project_id:
        upcoming = [d for d in upcoming if d.project_id == project_id]
        overdue = [d for d in overdue if d.project_id == project_id]

    now = store.now()
    week_end = add_days(now, 7)
    due_this_week = sum(1 for d in upcoming if parse_due_date(d.date) <= week_end)

    reminder = formatters.format_deadline_reminder(overdue + upcoming, now)
    footer = ("🚨 ACTION REQUIRED: Address overdue items immediately" if overdue
              else "✓ No overdue deadlines")

    return (f"{reminder}\n\n"
            f"📊 DEADLINE STATISTICS:\n"
            f"  Total Monitored: {len(overdue) + len(upcoming)}\n"
            f"  Overdue: {len(overdue)}\n"
            f"  Due This Week: {due_this_week}\n\n"
            f"{footer}")


# ============================================================================
# Overview Handlers
# ============================================================================

async def handle_get_dashboard(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Cross-project dashboard."""
    dashboard = store.get_dashboard(settings.dashboard_days_ahead)
    return formatters.format_dashboard(dashboard, settings.dashboard_days_ahead)


async def handle_generate_followups(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Follow-up list: urgent tasks, active risks, upcoming deadlines, other pending tasks."""
    project_id = arguments.get("projectId")

    pending = [
        t for p in store.list_projects() if not project_id or p.id == project_id
        for t in p.tasks if t.status == TaskStatus.PENDING
    ]
    urgent = [t for t in pending if t.priority == TaskPriority.URGENT]
    other = [t for t in pending if t.priority != TaskPriority.URGENT]

    issues = store.get_active_issues()
    deadlines = store.get_upcoming_deadlines(settings.followup_days_ahead)
    if project_id:
        issues = [i for i in issues if i.project_id == project_id]
        deadlines = [d for d in deadlines if d.project_id == project_id]

    def _section(lines: list[str]) -> str:
        return "\n".join(lines) or "  None"

    return f"""{formatters.banner("FOLLOW-UP LIST", f"Generated: {formatters.format_date(store.now())}")}

🔴 URGENT ACTIONS ({len(urgent)})
{_section([f"  • {t.description}" + (f" (Due: {t.deadline})" if t.deadline else "") for t in urgent])}

⚠️  ACTIVE RISKS ({len(issues)})
{_section([f"  • [{i.severity.value.upper()}] {i.title}" for i in issues[:5]])}

📅 UPCOMING DEADLINES ({len(deadlines)})
{_section([f"  • {d.description} - {d.date}" for d in deadlines[:5]])}

✓ PENDING TASKS ({len(other)})
{_section([f"  • [{t.priority.value.upper()}] {t.description}" for t in other[:10]])}

{formatters.RULE}"""


async def handle_search_projects(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Substring search across projects."""
    query = arguments["query"]
    results = store.search(query)
    logger.info(f"Search '{query}' returned {len(results)} results")
    return formatters.format_search_results(query, results)


async def handle_get_recent_activity(arguments: dict, store: ContextStore, settings: Settings) -> str:
    """Most recent activity entries."""
    limit = arguments.get("limit", 10)
    entries = store.get_recent_activity(limit)
    if not entries:
        return "No recent activity."
    return f"Recent Activity ({len(entries)}):\n" + "\n".join(formatters.format_activity(e) for e in entries)


# Tool name → handler. Must cover every tool in tools.get_tools().
HANDLERS: dict[str, Any] = {
    "create_project": handle_create_project,
    "update_project": handle_update_project,
    "get_project": handle_get_project,
    "list_projects": handle_list_projects,
    "get_project_summary": handle_get_project_summary,
    "add_document": handle_add_document,
    "add_stakeholder": handle_add_stakeholder,
    "add_note": handle_add_note,
    "add_task": handle_add_task,
    "update_task_status": handle_update_task_status,
    "extract_tasks": handle_extract_tasks,
    "track_issue": handle_track_issue,
    "list_active_issues": handle_list_active_issues,
    "resolve_issue": handle_resolve_issue,
    "add_deadline": handle_add_deadline,
    "check_deadlines": handle_check_deadlines,
    "get_dashboard": handle_get_dashboard,
    "generate_followups": handle_generate_followups,
    "search_projects": handle_search_projects,
    "get_recent_activity": handle_get_recent_activity,
}
