"""FastAPI dependencies."""
from fastapi import Request

from ..config import Settings
from ..context_store import ContextStore


def get_store(request: Request) -> ContextStore:
    """
    Dependency function to get the context store owned by the app.

    Returns:
        ContextStore: The store passed to ``create_app``
    """
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings
