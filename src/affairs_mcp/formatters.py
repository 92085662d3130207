"""Shared formatting functions for MCP responses."""
from datetime import datetime
from typing import Optional

from affairs_core.dates import days_between, parse_due_date
from affairs_core.models import TaskPriority
from affairs_core.schemas import (
    ActiveIssue,
    ActivityEntry,
    DashboardSnapshot,
    Deadline,
    Project,
    ProjectSummary,
    SearchResult,
    Task,
    TaskCreate,
)

RULE = "═" * 39
THIN_RULE = "─" * 39

PRIORITY_HEADINGS = {
    TaskPriority.URGENT: "🔴 URGENT (Today)",
    TaskPriority.HIGH: "🟠 HIGH PRIORITY (This Week)",
    TaskPriority.NORMAL: "🟡 NORMAL PRIORITY",
    TaskPriority.LOW: "⚪ LOW PRIORITY",
}


def banner(title: str, *subtitles: str) -> str:
    """Boxed section title."""
    lines = [RULE, f"  {title}"] + [f"  {s}" for s in subtitles] + [RULE]
    return "\n".join(lines)


def format_date(value: Optional[datetime]) -> str:
    """Format a timestamp as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d") if value else "n/a"


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a timestamp as YYYY-MM-DD HH:MM (UTC)."""
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "n/a"


def format_project_line(project: Project) -> str:
    """Format a project as a compact one-liner for list views."""
    return (f"- **{project.name or '(unnamed)'}** ({project.id}) "
            f"tasks: {len(project.tasks)}, risks: {len(project.risks)}, "
            f"updated: {format_date(project.last_updated)}")


def format_task(task: Task) -> str:
    """Format a stored task for display."""
    deadline_info = f"\n  Deadline: {task.deadline}" if task.deadline else ""
    assignee_info = f"\n  Assigned to: {task.assignee}" if task.assignee else ""
    return (f"- [{task.status.value}] {task.description} ({task.priority.value})\n"
            f"  ID: {task.id}{deadline_info}{assignee_info}")


def format_project(project: Project) -> str:
    """Format a project with all of its child records."""
    desc_info = f"\nDescription: {project.description}" if project.description else ""
    timeline = project.timeline
    timeline_info = ""
    if timeline.start_date or timeline.end_date:
        timeline_info = f"\nTimeline: {timeline.start_date or '?'} → {timeline.end_date or '?'}"

    sections = [f"""**{project.name or '(unnamed)'}**
ID: {project.id}{desc_info}{timeline_info}
Created: {format_timestamp(project.created)}
Updated: {format_timestamp(project.last_updated)}"""]

    if project.stakeholders:
        sections.append("👥 STAKEHOLDERS\n" + "\n".join(f"- {s.name} ({s.role})" for s in project.stakeholders))
    if project.financials:
        sections.append("💰 FINANCIALS\n" + "\n".join(
            f"- {category}: {', '.join(f'{k}={v}' for k, v in snapshot.items())}"
            for category, snapshot in project.financials.items()
        ))
    if project.documents:
        sections.append("📄 DOCUMENTS\n" + "\n".join(
            f"- {d.title}" + (f" [{d.doc_type}]" if d.doc_type else "") + (f" {d.url}" if d.url else "")
            for d in project.documents
        ))
    if project.tasks:
        sections.append("✓ TASKS\n" + "\n".join(format_task(t) for t in project.tasks))
    if project.risks:
        sections.append("⚠️  RISKS\n" + "\n".join(
            f"- [{r.severity.value.upper()}] {r.title} ({r.status.value})" for r in project.risks
        ))
    if project.notes:
        sections.append("📝 NOTES\n" + "\n".join(f"- {format_date(n.timestamp)}: {n.text}" for n in project.notes))

    return "\n\n".join(sections)


def format_project_summary(summary: ProjectSummary, project: Project) -> str:
    """Format project statistics with stakeholders and the three latest notes."""
    stats = summary.stats
    text = f"""{banner("PROJECT SUMMARY")}

Project: {summary.name or '(unnamed)'}
ID: {summary.id}
Created: {format_date(summary.created)}
Last Updated: {format_date(summary.last_updated)}

📊 STATISTICS
  Documents: {stats.documents}
  Total Tasks: {stats.tasks}
  Active Tasks: {stats.active_tasks}
  Completed: {stats.completed_tasks}
  Risks: {stats.risks}
  Active Risks: {stats.active_risks}
  Stakeholders: {stats.stakeholders}
  Deadlines: {summary.deadlines}"""

    if project.stakeholders:
        text += "\n\n👥 STAKEHOLDERS\n" + "\n".join(f"  • {s.name} ({s.role})" for s in project.stakeholders)
    if project.notes:
        text += "\n\n📝 RECENT NOTES\n" + "\n".join(
            f"  • {format_date(n.timestamp)}: {n.text[:60]}{'...' if len(n.text) > 60 else ''}"
            for n in project.notes[-3:]
        )

    return f"{text}\n\n{RULE}"


def format_task_list(tasks: list[TaskCreate]) -> str:
    """Format tasks grouped by priority, most urgent first."""
    output = banner("ACTION ITEMS") + "\n\n"

    for priority, heading in PRIORITY_HEADINGS.items():
        group = [t for t in tasks if t.priority == priority]
        if not group:
            continue
        output += f"{heading}\n{THIN_RULE}\n"
        for idx, task in enumerate(group, start=1):
            output += f"{idx}. {task.description}\n"
            if task.deadline:
                output += f"   Deadline: {task.deadline}\n"
            if task.assignee:
                output += f"   Assigned to: {task.assignee}\n"
        output += "\n"

    output += f"{RULE}\nTOTAL TASKS: {len(tasks)}\n{RULE}"
    return output


def format_deadline_reminder(deadlines: list[Deadline], now: datetime) -> str:
    """Format deadlines bucketed into overdue, due today, this week and later."""
    buckets: dict[str, list[tuple[Deadline, int]]] = {"overdue": [], "today": [], "week": [], "later": []}
    for deadline in deadlines:
        due = parse_due_date(deadline.date)
        if due is None:
            continue
        days_until = days_between(now, due)
        if days_until < 0:
            buckets["overdue"].append((deadline, days_until))
        elif days_until == 0:
            buckets["today"].append((deadline, days_until))
        elif days_until <= 7:
            buckets["week"].append((deadline, days_until))
        else:
            buckets["later"].append((deadline, days_until))

    def _lines(items: list[tuple[Deadline, int]], suffix) -> str:
        out = ""
        for deadline, days_until in items:
            out += f"• {deadline.description}{suffix(days_until)}\n"
            if deadline.project:
                out += f"  Project: {deadline.project}\n"
        return out

    output = banner("DEADLINE REMINDERS") + "\n\n"
    sections = [
        ("🚨 OVERDUE", buckets["overdue"], lambda d: f" ({abs(d)} days overdue)"),
        ("🔴 DUE TODAY", buckets["today"], lambda d: ""),
        ("🟡 THIS WEEK", buckets["week"], lambda d: f" (in {d} days)"),
        ("🔵 LATER", buckets["later"], lambda d: f" (in {d} days)"),
    ]
    for heading, items, suffix in sections:
        if items:
            output += f"{heading}\n{THIN_RULE}\n{_lines(items, suffix)}\n"

    if not any(buckets.values()):
        output += "No deadlines in range\n\n"

    return output + RULE


def format_activity(entry: ActivityEntry) -> str:
    """Format an activity entry for display."""
    return f"  • {format_timestamp(entry.timestamp)}: {entry.summary}"


def format_dashboard(dashboard: DashboardSnapshot, upcoming_days: float) -> str:
    """Format the dashboard snapshot with an attention footer."""
    projects_text = "\n".join(
        f"  • {p.name or p.id} (Updated: {format_date(p.last_updated)})" for p in dashboard.projects.items
    ) or "  No active projects"
    activity_text = "\n".join(format_activity(a) for a in dashboard.recent_activity) or "  No recent activity"

    text = f"""{banner("BUSINESS AFFAIRS DASHBOARD")}

📁 PROJECTS ({dashboard.projects.total}, {dashboard.projects.active} active)
{projects_text}

✓ TASKS
  Total: {dashboard.tasks.total}
  Active: {dashboard.tasks.active}
  Completed: {dashboard.tasks.completed}

⚠️  RISKS
  Total: {dashboard.risks.total}
  Active: {dashboard.risks.active}

📅 DEADLINES
  Upcoming ({upcoming_days:g} days): {dashboard.deadlines.upcoming}
  Overdue: {dashboard.deadlines.overdue}

📊 RECENT ACTIVITY
{activity_text}

{RULE}
"""
    if dashboard.deadlines.overdue or dashboard.risks.active:
        text += "\n🚨 ATTENTION REQUIRED:\n"
        if dashboard.deadlines.overdue:
            text += f"  ⚠ {dashboard.deadlines.overdue} overdue deadline(s)\n"
        if dashboard.risks.active:
            text += f"  ⚠ {dashboard.risks.active} active risk(s)\n"
    else:
        text += "\n✓ All systems operational\n"
    return text


def format_issue(issue: ActiveIssue) -> str:
    """Format an active issue for display."""
    category_info = f" | {issue.category.value}" if issue.category else ""
    due_info = f"\n  Due: {issue.due_date}" if issue.due_date else ""
    return (f"- [{issue.severity.value.upper()}] {issue.title}{category_info}\n"
            f"  ID: {issue.id}\n"
            f"  Project: {issue.project or issue.project_id}\n"
            f"  Status: {issue.status.value}{due_info}")


def format_search_results(query: str, results: list[SearchResult]) -> str:
    """Format search hits, one block per matching field."""
    if results:
        body = "\n\n".join(
            f"{r.type.value.upper()}\n  Project: {r.project or r.project_id}\n  Match: {r.match}\n  {r.excerpt}"
            for r in results
        )
    else:
        body = "No results found"

    return f"""{banner("SEARCH RESULTS", f'Query: "{query}"')}

{body}

{THIN_RULE}
Total Results: {len(results)}
{RULE}"""
