"""
Schemas Package - Exports all Pydantic schemas
"""

from flowpilot.schemas.user import (
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
    TokenResponse,
    RefreshResponse,
)
from flowpilot.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
)
from flowpilot.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectDetailResponse,
)
from flowpilot.schemas.audit import (
    AuditLogResponse,
    AuditLogListResponse,
    AuditStatsResponse,
)
from flowpilot.schemas.assistant import (
    AssistantMetadata,
    AssistantRequest,
    AssistantResponse,
)

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    "TokenResponse",
    "RefreshResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectDetailResponse",
    "AuditLogResponse",
    "AuditLogListResponse",
    "AuditStatsResponse",
    "AssistantMetadata",
    "AssistantRequest",
    "AssistantResponse",
]
