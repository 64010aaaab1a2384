"""
Utilities Package - Helper functions and tools

This package contains:
- audit_logger.py: Audit log creation helpers
- search.py: Escaped LIKE patterns for search filters
"""

from flowpilot.utils.audit_logger import (
    create_audit_log,
    build_changes,
    log_project_create,
    log_project_update,
    log_project_delete,
    log_task_create,
    log_task_update,
    log_task_delete,
    log_user_login,
    log_user_logout,
    log_user_register,
    log_token_refresh,
)

# Export audit logging functions
__all__ = [
    "create_audit_log",
    "build_changes",
    "log_project_create",
    "log_project_update",
    "log_project_delete",
    "log_task_create",
    "log_task_update",
    "log_task_delete",
    "log_user_login",
    "log_user_logout",
    "log_user_register",
    "log_token_refresh",
]
