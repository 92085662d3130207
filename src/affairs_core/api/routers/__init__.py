"""API routers for the business affairs API."""

from . import dashboard, deadlines, issues, projects

__all__ = ["dashboard", "deadlines", "issues", "projects"]
