"""
Audit Log Model - Immutable record of user actions
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from flowpilot.database import Base

class AuditAction:
    """Action names written to audit_logs.action"""
    # Authentication
    REGISTER = "REGISTER"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    TOKEN_REFRESH_SUCCESS = "TOKEN_REFRESH_SUCCESS"
    TOKEN_REFRESH_FAILED = "TOKEN_REFRESH_FAILED"
    UPDATE_PROFILE = "UPDATE_PROFILE"

    # Projects
    CREATE_PROJECT = "CREATE_PROJECT"
    GET_ALL_PROJECTS = "GET_ALL_PROJECTS"
    GET_PROJECT = "GET_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"

    # Tasks
    CREATE_TASK = "CREATE_TASK"
    GET_ALL_TASKS = "GET_ALL_TASKS"
    GET_TASK = "GET_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"

    # AI assistant
    PREDICT_PROJECT = "PREDICT_PROJECT"
    OPTIMIZE_PROJECT = "OPTIMIZE_PROJECT"

# Actions shown in a user's activity feed
DOMAIN_ACTIONS = (
    AuditAction.CREATE_PROJECT,
    AuditAction.UPDATE_PROJECT,
    AuditAction.DELETE_PROJECT,
    AuditAction.CREATE_TASK,
    AuditAction.UPDATE_TASK,
    AuditAction.DELETE_TASK,
    AuditAction.PREDICT_PROJECT,
    AuditAction.OPTIMIZE_PROJECT,
)

AUDIT_STATUS_SUCCESS = "success"
AUDIT_STATUS_FAILURE = "failure"

class AuditLog(Base):
    """
    Audit log table - append-only, no update or delete endpoints exist.
    """
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # What
    action = Column(String(255), nullable=False, index=True)
    description = Column(String(255), nullable=True)
    details = Column(String(1024), nullable=True)
    status = Column(String(50), default=AUDIT_STATUS_SUCCESS, nullable=False)

    # When
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Who - nullable so failed logins for unknown emails are still recorded
    user_id = Column(
        "userId",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="NO ACTION"),
        nullable=True,
        index=True,
    )
    ip_address = Column(String(45), nullable=True)  # Long enough for IPv6
    user_agent = Column(String(500), nullable=True)

    user = relationship("User", back_populates="audit_logs")

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.user_id} at {self.created_at}>"
