"""
Task Schemas - Pydantic models for task operations
"""

from pydantic import Field, field_validator
from typing import Optional
from uuid import UUID

from flowpilot.schemas.base import CamelModel, clean_optional_text, clean_short_text

# DO NOT import from flowpilot.schemas here - causes circular import

def _validate_task_name(v):
    if not v or not v.strip():
        raise ValueError('Task name cannot be empty')
    if len(v.strip()) > 255:
        raise ValueError('Task name cannot exceed 255 characters')
    return v.strip()

class TaskBase(CamelModel):
    """Base schema with common task fields"""
    name: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None  # Person responsible, free text
    sprint: Optional[int] = Field(default=None, ge=0)

class TaskCreate(TaskBase):
    """Schema for creating new task"""
    project_id: UUID

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _validate_task_name(v)

    @field_validator('description')
    @classmethod
    def trim_text(cls, v):
        return clean_optional_text(v)

    @field_validator('assigned_to')
    @classmethod
    def validate_assigned_to(cls, v):
        return clean_short_text(v)

class TaskUpdate(CamelModel):
    """Schema for updating existing task - all fields optional"""
    name: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    sprint: Optional[int] = Field(default=None, ge=0)
    project_id: Optional[UUID] = None  # Move task to another project

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            return _validate_task_name(v)
        return v

    @field_validator('description')
    @classmethod
    def trim_text(cls, v):
        return clean_optional_text(v)

    @field_validator('assigned_to')
    @classmethod
    def validate_assigned_to(cls, v):
        return clean_short_text(v)

class TaskResponse(TaskBase):
    """Schema for task data in responses"""
    id: UUID
    project_id: UUID
