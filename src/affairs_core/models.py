"""Enumerations shared by the context store, handlers and API."""
import enum


class TaskStatus(str, enum.Enum):
    """Task lifecycle status enum."""

    PENDING = "pending"  # Initial state
    COMPLETED = "completed"  # Terminal


class TaskPriority(str, enum.Enum):
    """Task priority enum, most urgent first."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class RiskSeverity(str, enum.Enum):
    """Risk severity enum, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskStatus(str, enum.Enum):
    """Lifecycle of a risk or active issue. One-way: active -> resolved."""

    ACTIVE = "active"
    RESOLVED = "resolved"


class RiskCategory(str, enum.Enum):
    """Business area a risk or tracked issue belongs to."""

    LEGAL = "legal"
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    COMMERCIAL = "commercial"
    IP = "ip"


class DeadlineKind(str, enum.Enum):
    """Where a deadline record came from."""

    TASK = "task"  # Copied from a task with a deadline
    PROJECT_COMPLETION = "project_completion"  # Project end date
    ISSUE_RESOLUTION = "issue_resolution"  # Due date of a tracked issue
    MANUAL = "manual"  # Added directly


class ActivityType(str, enum.Enum):
    """Activity log entry type, one per kind of project mutation."""

    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    DOCUMENT_ADDED = "document_added"
    TASK_ADDED = "task_added"
    TASK_STATUS_CHANGED = "task_status_changed"
    RISK_ADDED = "risk_added"
    STAKEHOLDER_ADDED = "stakeholder_added"
    NOTE_ADDED = "note_added"


class SearchResultType(str, enum.Enum):
    """Source of a search hit."""

    PROJECT = "project"
    DOCUMENT = "document"
    TASK = "task"
    NOTE = "note"


# Severities that promote a risk into the active-issues view
ESCALATED_SEVERITIES: frozenset[RiskSeverity] = frozenset({RiskSeverity.HIGH, RiskSeverity.CRITICAL})
