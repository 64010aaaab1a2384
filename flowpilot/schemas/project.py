"""
Project Schemas - Pydantic models for project operations
"""

from pydantic import Field, field_validator
from typing import Optional, List
from uuid import UUID

from flowpilot.schemas.base import CamelModel, clean_short_text
from flowpilot.schemas.task import TaskResponse

def _validate_project_name(v):
    if not v or not v.strip():
        raise ValueError('Project name cannot be empty')
    if len(v.strip()) > 255:
        raise ValueError('Project name cannot exceed 255 characters')
    return v.strip()

class ProjectFields(CamelModel):
    """Optional project metadata shared by create and update"""
    priority: Optional[str] = None
    backtech: Optional[str] = None
    fronttech: Optional[str] = None
    cloud_tech: Optional[str] = None
    sprints_quantity: Optional[int] = Field(default=None, ge=0)
    end_date: Optional[str] = None

    @field_validator('priority', 'end_date', mode='before')
    @classmethod
    def coerce_to_text(cls, v):
        """The assistant emits priority as an integer 1-5; store it as text"""
        return clean_short_text(v)

    @field_validator('backtech', 'fronttech', 'cloud_tech')
    @classmethod
    def trim_tech(cls, v):
        return clean_short_text(v)

class ProjectCreate(ProjectFields):
    """Schema for creating a project - only name is required"""
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _validate_project_name(v)

class ProjectUpdate(ProjectFields):
    """Schema for updating a project - all fields optional"""
    name: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            return _validate_project_name(v)
        return v

class ProjectResponse(ProjectFields):
    """Schema for project data in list responses"""
    id: UUID
    name: str
    task_count: int = 0

    @classmethod
    def from_project(cls, project, task_count: int) -> "ProjectResponse":
        return cls.model_validate(project).model_copy(update={"task_count": task_count})

class ProjectDetailResponse(ProjectResponse):
    """Single project including its tasks"""
    tasks: List[TaskResponse] = []

    @classmethod
    def from_project(cls, project, task_count: int = None) -> "ProjectDetailResponse":
        """Tasks come from the loaded relationship, so task_count defaults to its length"""
        response = cls.model_validate(project)
        count = len(response.tasks) if task_count is None else task_count
        return response.model_copy(update={"task_count": count})
