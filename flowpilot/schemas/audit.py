"""
Audit Log Schemas - Pydantic models for audit log responses
"""

from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from flowpilot.schemas.base import CamelModel

class AuditUserSummary(CamelModel):
    """User snapshot embedded in audit log entries"""
    id: UUID
    name: str
    email: str

class AuditLogResponse(CamelModel):
    """Schema for audit log entries in responses"""
    id: UUID
    action: str
    description: Optional[str] = None
    details: Optional[str] = None
    status: str
    created_at: datetime
    user_id: Optional[UUID] = None
    user: Optional[AuditUserSummary] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

class AuditLogListResponse(CamelModel):
    """Schema for paginated audit log list"""
    logs: List[AuditLogResponse]
    total: int
    page: int
    limit: int

class AuditStatsResponse(CamelModel):
    """Schema for audit log statistics shown on the dashboard"""
    total_events: int
    events_today: int
    failed_logins: int
    active_users: int  # Distinct users with at least one entry
    actions: Dict[str, int]  # Count per action name
