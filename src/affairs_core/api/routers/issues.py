"""Active issue API endpoints."""
from fastapi import APIRouter, Depends

from ...context_store import ContextStore
from ...schemas import ActiveIssue
from ..dependencies import get_store

router = APIRouter(tags=["issues"])


@router.get("/issues", response_model=list[ActiveIssue])
def get_active_issues(store: ContextStore = Depends(get_store)):
    """High and critical issues that are still active."""
    return store.get_active_issues()
