"""Pydantic schemas for project context records."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .models import (
    TaskStatus,
    TaskPriority,
    RiskSeverity,
    RiskStatus,
    RiskCategory,
    DeadlineKind,
    ActivityType,
    SearchResultType,
)


# Stakeholder / Timeline

class StakeholderCreate(BaseModel):
    """Schema for adding a stakeholder to a project."""

    name: str = Field(..., min_length=1)
    role: str = "Stakeholder"


class Stakeholder(StakeholderCreate):
    """Stakeholder attached to a project."""

    added_at: datetime


class Timeline(BaseModel):
    """Project start and end dates, kept as supplied."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None


# Document Schemas

class DocumentCreate(BaseModel):
    """Schema for attaching a document to a project."""

    title: str = Field(..., min_length=1)
    doc_type: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None


class Document(DocumentCreate):
    """Document record. Immutable once appended."""

    id: str
    added_at: datetime


# Task Schemas

class TaskCreate(BaseModel):
    """Schema for creating a task."""

    description: str = Field(..., min_length=1)
    priority: TaskPriority = TaskPriority.NORMAL
    deadline: Optional[str] = None
    assignee: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING


class Task(TaskCreate):
    """Task owned by exactly one project."""

    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None


# Risk Schemas

class RiskCreate(BaseModel):
    """Schema for recording a risk (or tracked issue)."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    severity: RiskSeverity = RiskSeverity.MEDIUM
    category: Optional[RiskCategory] = None
    status: RiskStatus = RiskStatus.ACTIVE
    due_date: Optional[str] = None


class Risk(RiskCreate):
    """Risk owned by exactly one project."""

    id: str
    identified_at: datetime
    resolved_at: Optional[datetime] = None


class ActiveIssue(Risk):
    """Denormalized copy of a high/critical risk.

    Carries its own status: resolving the issue does not change the risk
    it was copied from, and resolving the risk does not change the issue.
    """

    project_id: str
    project: Optional[str] = None
    type: str = "risk"


# Note Schemas

class Note(BaseModel):
    """Free-text note on a project."""

    text: str
    timestamp: datetime


# Project Schemas

class Project(BaseModel):
    """Project aggregate: the unit of work grouping all child records."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    stakeholders: list[Stakeholder] = Field(default_factory=list)
    timeline: Timeline = Field(default_factory=Timeline)
    financials: dict[str, dict[str, Any]] = Field(default_factory=dict)
    documents: list[Document] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    created: datetime
    last_updated: datetime


class ProjectUpdate(BaseModel):
    """Fields that may change through ``upsert_project``.

    Merge rules per field:
    - name, description: replace when given
    - timeline: each supplied date replaces the stored one
    - financials: merged by category key
    - stakeholders: appended

    Documents, tasks, risks and notes are not updatable here; they grow only
    through their own add operations.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    timeline: Optional[Timeline] = None
    financials: Optional[dict[str, dict[str, Any]]] = None
    stakeholders: Optional[list[StakeholderCreate]] = None


# Deadline Schemas

class DeadlineCreate(BaseModel):
    """Schema for adding a deadline. No project existence check is made."""

    description: str
    date: str
    id: Optional[str] = None
    project_id: Optional[str] = None
    project: Optional[str] = None
    status: Optional[TaskStatus] = None
    kind: DeadlineKind = DeadlineKind.MANUAL


class Deadline(DeadlineCreate):
    """Flat deadline record, independent of any project aggregate."""

    id: str
    added_at: datetime


# Activity / Search

class ActivityEntry(BaseModel):
    """One entry of the bounded activity log."""

    type: ActivityType
    project_id: Optional[str] = None
    timestamp: datetime
    summary: str


class SearchResult(BaseModel):
    """A single field match from ``ContextStore.search``."""

    type: SearchResultType
    project: Optional[str] = None
    project_id: str
    match: str
    excerpt: str


# Summary / Dashboard

class ProjectStats(BaseModel):
    """Per-project counts."""

    documents: int
    tasks: int
    active_tasks: int
    completed_tasks: int
    risks: int
    active_risks: int
    stakeholders: int


class ProjectSummary(BaseModel):
    """Identity fields plus statistics for one project."""

    id: str
    name: Optional[str] = None
    created: datetime
    last_updated: datetime
    stats: ProjectStats
    deadlines: int = Field(description="Deadlines referencing this project id")


class DashboardProject(BaseModel):
    """Compact project line on the dashboard."""

    id: str
    name: Optional[str] = None
    last_updated: datetime


class DashboardProjects(BaseModel):
    total: int
    active: int
    items: list[DashboardProject] = Field(default_factory=list)


class DashboardTasks(BaseModel):
    total: int
    active: int
    completed: int


class DashboardRisks(BaseModel):
    total: int
    active: int


class DashboardDeadlines(BaseModel):
    upcoming: int
    overdue: int


class DashboardSnapshot(BaseModel):
    """Cross-project aggregates for the dashboard view."""

    projects: DashboardProjects
    tasks: DashboardTasks
    risks: DashboardRisks
    deadlines: DashboardDeadlines
    recent_activity: list[ActivityEntry] = Field(default_factory=list)
