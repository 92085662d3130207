"""Deadline API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...config import Settings
from ...context_store import ContextStore
from ...dates import MAX_DAYS_AHEAD
from ...schemas import Deadline
from ..dependencies import get_app_settings, get_store

router = APIRouter(tags=["deadlines"])


@router.get("/deadlines", response_model=list[Deadline])
def get_deadlines(
    days: Optional[int] = Query(None, ge=0, le=MAX_DAYS_AHEAD, description="Days to look ahead (default 30)"),
    store: ContextStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Deadlines due within the next ``days`` days, soonest first."""
    return store.get_upcoming_deadlines(settings.default_days_ahead if days is None else days)


@router.get("/overdue", response_model=list[Deadline])
def get_overdue(store: ContextStore = Depends(get_store)):
    """Past-due deadlines that are not completed, oldest first."""
    return store.get_overdue_deadlines()


@router.get("/deadlines/all", response_model=list[Deadline])
def list_all_deadlines(store: ContextStore = Depends(get_store)):
    """Every tracked deadline in insertion order, including ones whose date cannot be placed on the calendar."""
    return store.list_deadlines()
