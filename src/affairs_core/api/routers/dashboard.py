"""Dashboard and search API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...config import Settings
from ...context_store import ContextStore
from ...schemas import DashboardSnapshot, SearchResult
from ..dependencies import get_app_settings, get_store

logger = logging.getLogger("affairs-core.api.dashboard")

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardSnapshot)
def get_dashboard(
    store: ContextStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Cross-project counts plus the five most recent activity entries."""
    return store.get_dashboard(settings.dashboard_days_ahead)


@router.get("/search", response_model=list[SearchResult])
def search(
    q: Optional[str] = Query(None, description="Text to look for"),
    store: ContextStore = Depends(get_store),
):
    """
    Search project names, document titles, task descriptions and notes.

    - **q**: Case-insensitive substring (required)
    """
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail='Query parameter "q" is required')

    results = store.search(q)
    logger.info(f"Search '{q}' returned {len(results)} results")
    return results
