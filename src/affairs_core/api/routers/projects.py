"""Projects API endpoints (read-only)."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ...context_store import ContextStore
from ...schemas import Project, ProjectSummary
from ..dependencies import get_store

logger = logging.getLogger("affairs-core.api.projects")

router = APIRouter(tags=["projects"])


@router.get("/", response_model=list[Project])
def list_projects(store: ContextStore = Depends(get_store)):
    """List all projects in creation order."""
    return store.list_projects()


@router.get("/{project_id}", response_model=Project)
def get_project(project_id: str, store: ContextStore = Depends(get_store)):
    """
    Get a specific project by ID, including its documents, tasks, risks
    and notes.
    """
    project = store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    return project


@router.get("/{project_id}/summary", response_model=ProjectSummary)
def get_project_summary(project_id: str, store: ContextStore = Depends(get_store)):
    """Get per-project statistics."""
    if not store.has_project(project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    return store.get_project_summary(project_id)
