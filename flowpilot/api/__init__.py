"""
API Package - Exports all API routers
"""

from flowpilot.api import auth, users, projects, tasks, audit, assistant

__all__ = ["auth", "users", "projects", "tasks", "audit", "assistant"]
