"""In-memory project context store.

Holds every piece of shared state handlers read and write:
- Project ledger (projects keyed by id, in creation order)
- Deadline index (flat list, queried by date window)
- Active issues (high/critical risks copied out of their projects)
- Activity log (bounded, newest first)

The store is created by the process entrypoint and passed explicitly to the
dispatcher, handlers and HTTP app. Nothing is persisted: state lives for the
lifetime of the process.
"""
import logging
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Optional, Union
from uuid import uuid4

from .dates import add_days, parse_due_date, utcnow
from .models import (
    ActivityType,
    DeadlineKind,
    ESCALATED_SEVERITIES,
    RiskStatus,
    SearchResultType,
    TaskStatus,
)
from .schemas import (
    ActiveIssue,
    ActivityEntry,
    DashboardDeadlines,
    DashboardProject,
    DashboardProjects,
    DashboardRisks,
    DashboardSnapshot,
    DashboardTasks,
    Deadline,
    DeadlineCreate,
    Document,
    DocumentCreate,
    Note,
    Project,
    ProjectStats,
    ProjectSummary,
    ProjectUpdate,
    Risk,
    RiskCreate,
    SearchResult,
    Stakeholder,
    StakeholderCreate,
    Task,
    TaskCreate,
)
from .state_machine import validate_transition

logger = logging.getLogger("affairs-core.context_store")

DEFAULT_ACTIVITY_LIMIT = 100
NOTE_EXCERPT_LENGTH = 100


class ContextStoreError(LookupError):
    """Base class for lookups that found no matching record."""


class ProjectNotFoundError(ContextStoreError):
    """Raised when a project id has no matching project."""

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id


class TaskNotFoundError(ContextStoreError):
    """Raised when a task id has no matching task in its project."""

    def __init__(self, project_id: str, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.project_id = project_id
        self.task_id = task_id


class ContextStore:
    """Process-local store of projects, deadlines, issues and activity.

    Public methods return copies, so callers never hold references into the
    store's internal state. Reads and writes share one re-entrant lock, since
    the HTTP API reads from its threadpool while MCP handlers write.
    """

    def __init__(
        self,
        activity_limit: int = DEFAULT_ACTIVITY_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._clock = clock or utcnow
        self._lock = threading.RLock()
        self._projects: dict[str, Project] = {}
        self._deadlines: list[Deadline] = []
        self._active_issues: list[ActiveIssue] = []
        self._activity: deque[ActivityEntry] = deque(maxlen=activity_limit)
        self.activity_limit = activity_limit

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    def _require_project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def _record(self, project: Project, activity_type: ActivityType, summary: str) -> None:
        """Refresh last_updated and append an activity entry."""
        now = self.now()
        project.last_updated = now
        self.log_activity(ActivityEntry(
            type=activity_type,
            project_id=project.id,
            timestamp=now,
            summary=summary,
        ))

    # ------------------------------------------------------------------
    # Project ledger
    # ------------------------------------------------------------------

    def upsert_project(self, project_id: str, update: Optional[ProjectUpdate] = None) -> Project:
        """
        Create or update a project.

        An unseen id creates an empty project first. The update is applied
        with the per-field merge rules documented on ``ProjectUpdate``.

        Args:
            project_id: Project id (kept for the lifetime of the project)
            update: Fields to change, or None to only touch the project

        Returns:
            Copy of the merged project
        """
        with self._lock:
            now = self.now()
            project = self._projects.get(project_id)
            created = project is None
            if created:
                project = Project(id=project_id, created=now, last_updated=now)
                self._projects[project_id] = project

            if update is not None:
                if update.name is not None:
                    project.name = update.name
                if update.description is not None:
                    project.description = update.description
                if update.timeline is not None:
                    if update.timeline.start_date is not None:
                        project.timeline.start_date = update.timeline.start_date
                    if update.timeline.end_date is not None:
                        project.timeline.end_date = update.timeline.end_date
                if update.financials:
                    project.financials.update(update.financials)
                for stakeholder in update.stakeholders or []:
                    project.stakeholders.append(Stakeholder(**stakeholder.model_dump(), added_at=now))

            if created:
                self._record(project, ActivityType.PROJECT_CREATED, f"Project {project.name or project_id} created")
                logger.info(f"Created project {project_id} ({project.name})")
            else:
                self._record(project, ActivityType.PROJECT_UPDATED, f"Project {project.name or project_id} updated")
                logger.debug(f"Updated project {project_id}")

            return project.model_copy(deep=True)

    def get_project(self, project_id: str) -> Optional[Project]:
        """Get a project by id, or None if it does not exist."""
        with self._lock:
            project = self._projects.get(project_id)
            return project.model_copy(deep=True) if project is not None else None

    def has_project(self, project_id: Optional[str]) -> bool:
        """Check whether a project exists."""
        return project_id is not None and project_id in self._projects

    def list_projects(self) -> list[Project]:
        """All projects in creation order."""
        with self._lock:
            return [p.model_copy(deep=True) for p in self._projects.values()]

    def add_document(self, project_id: str, document: DocumentCreate) -> Project:
        """
        Attach a document to a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            doc = Document(**document.model_dump(), id=self.generate_id(), added_at=self.now())
            project.documents.append(doc)
            self._record(project, ActivityType.DOCUMENT_ADDED, f"Document '{doc.title}' added to {project.name or project_id}")
            return project.model_copy(deep=True)

    def add_stakeholder(self, project_id: str, stakeholder: StakeholderCreate) -> Project:
        """
        Add a stakeholder to a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            project.stakeholders.append(Stakeholder(**stakeholder.model_dump(), added_at=self.now()))
            self._record(project, ActivityType.STAKEHOLDER_ADDED, f"Stakeholder {stakeholder.name} added to {project.name or project_id}")
            return project.model_copy(deep=True)

    def add_note(self, project_id: str, text: str) -> Project:
        """
        Append a note to a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            project.notes.append(Note(text=text, timestamp=self.now()))
            self._record(project, ActivityType.NOTE_ADDED, f"Note added to {project.name or project_id}")
            return project.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def add_task(self, project_id: str, task: TaskCreate) -> Task:
        """
        Add a task to a project.

        A task with a deadline also gets a deadline record sharing the
        task's id, carrying the project's id and name.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            new_task = Task(**task.model_dump(), id=self.generate_id(), created_at=self.now())
            project.tasks.append(new_task)
            self._record(project, ActivityType.TASK_ADDED, f"Task added to {project.name or project_id}: {new_task.description}")

            if new_task.deadline:
                self.add_deadline(DeadlineCreate(
                    id=new_task.id,
                    description=new_task.description,
                    date=new_task.deadline,
                    project_id=project_id,
                    project=project.name,
                    status=new_task.status,
                    kind=DeadlineKind.TASK,
                ))

            logger.debug(f"Added task {new_task.id} to project {project_id}")
            return new_task.model_copy(deep=True)

    def update_task_status(self, project_id: str, task_id: str, status: Union[TaskStatus, str]) -> Task:
        """
        Change a task's status.

        The deadline created for the task (if any) takes the same status, so
        a completed task no longer shows as overdue.

        Raises:
            ProjectNotFoundError: If the project does not exist
            TaskNotFoundError: If the project has no task with that id
            ValueError: If status is not a known task status
            StateTransitionError: If the transition is not allowed
        """
        new_status = TaskStatus(status)
        with self._lock:
            project = self._require_project(project_id)
            task = next((t for t in project.tasks if t.id == task_id), None)
            if task is None:
                raise TaskNotFoundError(project_id, task_id)

            validate_transition(task.status, new_status)
            task.status = new_status
            task.updated_at = self.now()

            for deadline in self._deadlines:
                if deadline.kind == DeadlineKind.TASK and deadline.id == task_id and deadline.project_id == project_id:
                    deadline.status = new_status

            self._record(project, ActivityType.TASK_STATUS_CHANGED, f"Task '{task.description}' marked {new_status.value}")
            return task.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Risks / active issues
    # ------------------------------------------------------------------

    def add_risk(self, project_id: str, risk: RiskCreate) -> Risk:
        """
        Record a risk on a project.

        High and critical risks are also copied into the active-issues list.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            new_risk = Risk(**risk.model_dump(), id=self.generate_id(), identified_at=self.now())
            project.risks.append(new_risk)
            self._record(project, ActivityType.RISK_ADDED, f"{new_risk.severity.value.capitalize()} risk added to {project.name or project_id}: {new_risk.title}")

            if new_risk.severity in ESCALATED_SEVERITIES:
                self._active_issues.append(ActiveIssue(
                    **new_risk.model_dump(),
                    project_id=project_id,
                    project=project.name,
                ))
                logger.info(f"Escalated {new_risk.severity.value} risk {new_risk.id} to active issues")

            return new_risk.model_copy(deep=True)

    def get_active_issues(self) -> list[ActiveIssue]:
        """Active issues that are still active."""
        with self._lock:
            return [i.model_copy(deep=True) for i in self._active_issues if i.status == RiskStatus.ACTIVE]

    def resolve_issue(self, issue_id: str) -> Optional[ActiveIssue]:
        """
        Mark an active issue resolved.

        Only the issue copy changes; the risk inside its project keeps its
        own status.

        Returns:
            The updated issue, or None if no issue has that id
        """
        with self._lock:
            issue = next((i for i in self._active_issues if i.id == issue_id), None)
            if issue is None:
                return None
            if issue.status != RiskStatus.RESOLVED:
                validate_transition(issue.status, RiskStatus.RESOLVED)
                issue.status = RiskStatus.RESOLVED
                issue.resolved_at = self.now()
                logger.info(f"Resolved issue {issue_id}")
            return issue.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Deadlines
    # ------------------------------------------------------------------

    def add_deadline(self, deadline: DeadlineCreate) -> Deadline:
        """Add a deadline. The project id, if any, is not checked."""
        with self._lock:
            data = deadline.model_dump()
            data["id"] = deadline.id or self.generate_id()
            new_deadline = Deadline(**data, added_at=self.now())
            self._deadlines.append(new_deadline)
            return new_deadline.model_copy(deep=True)

    def list_deadlines(self) -> list[Deadline]:
        """All deadlines in insertion order, whatever their date."""
        with self._lock:
            return [d.model_copy(deep=True) for d in self._deadlines]

    def get_upcoming_deadlines(self, days_ahead: float = 30) -> list[Deadline]:
        """Deadlines due between now and ``days_ahead`` days from now (inclusive), soonest first."""
        now = self.now()
        horizon = add_days(now, days_ahead)
        with self._lock:
            dated = [(parse_due_date(d.date), d) for d in self._deadlines]
            window = [(due, d) for due, d in dated if due is not None and now <= due <= horizon]
            window.sort(key=lambda pair: pair[0])
            return [d.model_copy(deep=True) for _, d in window]

    def get_overdue_deadlines(self) -> list[Deadline]:
        """Deadlines already past and not completed, oldest first."""
        now = self.now()
        with self._lock:
            dated = [(parse_due_date(d.date), d) for d in self._deadlines]
            overdue = [
                (due, d) for due, d in dated
                if due is not None and due < now and d.status != TaskStatus.COMPLETED
            ]
            overdue.sort(key=lambda pair: pair[0])
            return [d.model_copy(deep=True) for _, d in overdue]

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    def log_activity(self, entry: ActivityEntry) -> None:
        """Prepend an entry; the oldest entry drops off once the log is full."""
        with self._lock:
            self._activity.appendleft(entry)

    def get_recent_activity(self, limit: int = 10) -> list[ActivityEntry]:
        """Most recent ``limit`` entries, newest first. Whole-number floats are accepted."""
        limit = int(limit)
        if limit <= 0:
            return []
        with self._lock:
            return [e.model_copy() for e in list(self._activity)[:limit]]

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def search(self, query: str) -> list[SearchResult]:
        """
        Case-insensitive substring search across all projects.

        Scans project names, document titles, task descriptions and note
        text. Every matching field yields its own result. A blank query
        matches nothing.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []

        results: list[SearchResult] = []
        with self._lock:
            for project in self._projects.values():
                if project.name and needle in project.name.lower():
                    results.append(SearchResult(
                        type=SearchResultType.PROJECT,
                        project=project.name,
                        project_id=project.id,
                        match="Project name",
                        excerpt=project.name,
                    ))
                for doc in project.documents:
                    if needle in doc.title.lower():
                        results.append(SearchResult(
                            type=SearchResultType.DOCUMENT,
                            project=project.name,
                            project_id=project.id,
                            match="Document title",
                            excerpt=doc.title,
                        ))
                for task in project.tasks:
                    if needle in task.description.lower():
                        results.append(SearchResult(
                            type=SearchResultType.TASK,
                            project=project.name,
                            project_id=project.id,
                            match="Task description",
                            excerpt=task.description,
                        ))
                for note in project.notes:
                    if needle in note.text.lower():
                        results.append(SearchResult(
                            type=SearchResultType.NOTE,
                            project=project.name,
                            project_id=project.id,
                            match="Note",
                            excerpt=note.text[:NOTE_EXCERPT_LENGTH],
                        ))

        logger.debug(f"Search '{query}' matched {len(results)} fields")
        return results

    def get_project_summary(self, project_id: str) -> ProjectSummary:
        """
        Statistics for one project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        with self._lock:
            project = self._require_project(project_id)
            return ProjectSummary(
                id=project.id,
                name=project.name,
                created=project.created,
                last_updated=project.last_updated,
                stats=ProjectStats(
                    documents=len(project.documents),
                    tasks=len(project.tasks),
                    active_tasks=sum(1 for t in project.tasks if t.status == TaskStatus.PENDING),
                    completed_tasks=sum(1 for t in project.tasks if t.status == TaskStatus.COMPLETED),
                    risks=len(project.risks),
                    active_risks=sum(1 for r in project.risks if r.status == RiskStatus.ACTIVE),
                    stakeholders=len(project.stakeholders),
                ),
                deadlines=sum(1 for d in self._deadlines if d.project_id == project_id),
            )

    def get_dashboard(self, upcoming_days: float = 7) -> DashboardSnapshot:
        """
        Cross-project snapshot.

        A project is active when it has at least one pending task or one
        active risk.
        """
        with self._lock:
            projects = list(self._projects.values())
            tasks = [t for p in projects for t in p.tasks]
            risks = [r for p in projects for r in p.risks]
            active_projects = sum(
                1 for p in projects
                if any(t.status == TaskStatus.PENDING for t in p.tasks)
                or any(r.status == RiskStatus.ACTIVE for r in p.risks)
            )

            return DashboardSnapshot(
                projects=DashboardProjects(
                    total=len(projects),
                    active=active_projects,
                    items=[DashboardProject(id=p.id, name=p.name, last_updated=p.last_updated) for p in projects],
                ),
                tasks=DashboardTasks(
                    total=len(tasks),
                    active=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
                    completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
                ),
                risks=DashboardRisks(
                    total=len(risks),
                    active=sum(1 for r in risks if r.status == RiskStatus.ACTIVE),
                ),
                deadlines=DashboardDeadlines(
                    upcoming=len(self.get_upcoming_deadlines(upcoming_days)),
                    overdue=len(self.get_overdue_deadlines()),
                ),
                recent_activity=self.get_recent_activity(5),
            )

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def generate_id(self) -> str:
        """New random identifier (UUID4)."""
        return str(uuid4())

    def clear(self) -> None:
        """Drop all state."""
        with self._lock:
            self._projects.clear()
            self._deadlines.clear()
            self._active_issues.clear()
            self._activity.clear()
