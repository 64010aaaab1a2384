"""
Models Package - Exports all database models for easy importing
"""

# Import all models to register them with SQLAlchemy Base
from flowpilot.models.user import User
from flowpilot.models.project import Project
from flowpilot.models.task import Task
from flowpilot.models.audit_log import (
    AuditLog,
    AuditAction,
    DOMAIN_ACTIONS,
    AUDIT_STATUS_SUCCESS,
    AUDIT_STATUS_FAILURE,
)

__all__ = [
    "User",
    "Project",
    "Task",
    "AuditLog",
    "AuditAction",
    "DOMAIN_ACTIONS",
    "AUDIT_STATUS_SUCCESS",
    "AUDIT_STATUS_FAILURE",
]
