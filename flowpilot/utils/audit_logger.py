"""
Audit Logger Utility - Creates audit log entries for user actions
"""

from sqlalchemy.orm import Session
from typing import Optional, Dict, Any
from fastapi import Request
import json
import logging

from flowpilot.models import AuditLog, User, AuditAction, AUDIT_STATUS_SUCCESS, AUDIT_STATUS_FAILURE

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 255
DETAILS_MAX_LENGTH = 1024
DETAIL_VALUE_PREVIEW = 120  # Long strings inside details are cut to this before serializing

def _truncate(value: Optional[str], limit: int) -> Optional[str]:
    if value is None or len(value) <= limit:
        return value
    return value[: limit - 3] + "..."

def _client_ip(request: Optional[Request]) -> Optional[str]:
    if not request:
        return None
    # Check X-Forwarded-For header first (for proxies/load balancers)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()  # Take first IP if multiple
    return request.client.host if request.client else None

def _shorten(value: Any) -> Any:
    if isinstance(value, str) and len(value) > DETAIL_VALUE_PREVIEW:
        return value[:DETAIL_VALUE_PREVIEW] + "..."
    if isinstance(value, dict):
        return {key: _shorten(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_shorten(item) for item in value]
    return value

def serialize_details(details: Any) -> Optional[str]:
    """
    Audit details are stored as text; dicts and lists become JSON.

    JSON that does not fit the column is shortened value by value so it stays
    parseable. If it still does not fit, only a truncation marker is kept.
    """
    if details is None:
        return None
    if isinstance(details, str):
        return details
    text = json.dumps(details, default=str)
    if len(text) <= DETAILS_MAX_LENGTH:
        return text
    shortened = json.dumps(_shorten(details), default=str)
    if len(shortened) <= DETAILS_MAX_LENGTH:
        return shortened
    return json.dumps({"truncated": True, "length": len(text)})

def create_audit_log(
    db: Session,
    user: Optional[User],
    action: str,
    request: Optional[Request] = None,
    description: Optional[str] = None,
    details: Any = None,
    status: str = AUDIT_STATUS_SUCCESS,
) -> AuditLog:
    """
    Create audit log entry for user action.

    Args:
        db: Database session
        user: User who performed action, None for anonymous attempts
        action: Action name (one of AuditAction)
        request: FastAPI request object (for IP and user agent)
        description: Human-readable summary
        details: Extra context, a string or anything JSON serializable
        status: "success" or "failure"

    Returns:
        Created AuditLog object

    Example:
        create_audit_log(
            db=db,
            user=current_user,
            action=AuditAction.CREATE_TASK,
            request=request,
            description=f"Created task '{task.name}'",
            details={"taskId": str(task.id)},
        )
    """
    audit_log = AuditLog(
        user_id=user.id if user else None,
        action=action,
        description=_truncate(description, DESCRIPTION_MAX_LENGTH),
        details=_truncate(serialize_details(details), DETAILS_MAX_LENGTH),
        status=status,
        ip_address=_client_ip(request),
        user_agent=_truncate(request.headers.get("User-Agent"), 500) if request else None,
    )

    try:
        db.add(audit_log)
        db.commit()
        db.refresh(audit_log)  # Refresh to get generated ID and timestamp
        actor = user.email if user else "anonymous"
        logger.info(f"✅ Audit log created: {action} by {actor}")
        return audit_log
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create audit log: {str(e)}", exc_info=True)
        raise

def build_changes(old_data: Dict[str, Any], new_data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Only fields whose value actually changed, as {"field": {"old": .., "new": ..}}"""
    changes = {}
    for field, new_value in new_data.items():
        old_value = old_data.get(field)
        if old_value != new_value:
            changes[field] = {"old": old_value, "new": new_value}
    return changes

def log_project_create(db: Session, user: User, project: Any, request: Request) -> None:
    """Helper function to log project creation"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.CREATE_PROJECT,
        request=request,
        description=f"Created project '{project.name}'",
        details={"projectId": str(project.id), "name": project.name},
    )

def log_project_update(
    db: Session,
    user: User,
    project: Any,
    changes: Dict[str, Any],
    request: Request,
) -> None:
    """Helper function to log project updates with before/after data"""
    changed_fields = ", ".join(changes.keys())
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.UPDATE_PROJECT,
        request=request,
        description=f"Updated project '{project.name}' ({changed_fields})",
        details={"projectId": str(project.id), "changes": changes},
    )

def log_project_delete(db: Session, user: User, project_id: Any, name: str, request: Request) -> None:
    """Helper function to log project deletion"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.DELETE_PROJECT,
        request=request,
        description=f"Deleted project '{name}'",
        details={"projectId": str(project_id)},
    )

def log_task_create(db: Session, user: User, task: Any, request: Request) -> None:
    """Helper function to log task creation"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.CREATE_TASK,
        request=request,
        description=f"Created task '{task.name}'",
        details={"taskId": str(task.id), "projectId": str(task.project_id)},
    )

def log_task_update(
    db: Session,
    user: User,
    task: Any,
    changes: Dict[str, Any],
    request: Request,
) -> None:
    """Helper function to log task updates with before/after data"""
    changed_fields = ", ".join(changes.keys())
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.UPDATE_TASK,
        request=request,
        description=f"Updated task '{task.name}' ({changed_fields})",
        details={"taskId": str(task.id), "changes": changes},
    )

def log_task_delete(db: Session, user: User, task_id: Any, name: str, request: Request) -> None:
    """Helper function to log task deletion"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.DELETE_TASK,
        request=request,
        description=f"Deleted task '{name}'",
        details={"taskId": str(task_id)},
    )

def log_user_login(
    db: Session,
    user: Optional[User],
    email: str,
    request: Request,
    success: bool = True,
    duration_ms: Optional[float] = None,
) -> None:
    """Helper function to log login attempts"""
    if success:
        create_audit_log(
            db=db,
            user=user,
            action=AuditAction.LOGIN_SUCCESS,
            request=request,
            description=f"User {email} logged in",
            details={"durationMs": round(duration_ms, 2) if duration_ms is not None else None},
        )
    else:
        create_audit_log(
            db=db,
            user=user,  # Attached when the email exists but the password is wrong
            action=AuditAction.LOGIN_FAILED,
            request=request,
            description=f"Failed login attempt for {email}",
            status=AUDIT_STATUS_FAILURE,
        )

def log_user_logout(db: Session, user: User, request: Request) -> None:
    """Helper function to log user logout"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.LOGOUT,
        request=request,
        description=f"User {user.email} logged out",
    )

def log_user_register(db: Session, user: User, request: Request) -> None:
    """Helper function to log user registration"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.REGISTER,
        request=request,
        description=f"New user registered: {user.email}",
        details={"userId": str(user.id)},
    )

def log_token_refresh(db: Session, user: Optional[User], request: Request, success: bool = True) -> None:
    """Helper function to log refresh token usage"""
    create_audit_log(
        db=db,
        user=user,
        action=AuditAction.TOKEN_REFRESH_SUCCESS if success else AuditAction.TOKEN_REFRESH_FAILED,
        request=request,
        description="Token refreshed" if success else "Token refresh rejected",
        status=AUDIT_STATUS_SUCCESS if success else AUDIT_STATUS_FAILURE,
    )
