"""
Assistant Schemas - Request/response models for AI project planning
"""

from typing import Optional, List, Union
from uuid import UUID

from flowpilot.schemas.base import CamelModel
from flowpilot.schemas.project import ProjectDetailResponse

class AssistantRequest(CamelModel):
    """Body of POST /api/assistant/execute"""
    strategy: str  # "create", "predict" or "optimize"
    user_input: Optional[str] = None  # Project idea, required for "create"
    project_id: Optional[UUID] = None  # Target project, required for "predict"/"optimize"

class AssistantMetadata(CamelModel):
    tasks_added: int = 0
    tasks_removed: int = 0
    fields_updated: List[str] = []

class AssistantResponse(CamelModel):
    action: str
    project: Union[ProjectDetailResponse, List[ProjectDetailResponse]]
    metadata: AssistantMetadata
