"""
Assistant API - AI project planning endpoints
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List
import logging

from flowpilot.database import get_db
from flowpilot.schemas import AssistantMetadata, AssistantRequest, AssistantResponse, ProjectDetailResponse
from flowpilot.models import User
from flowpilot.core.dependencies import get_current_user, get_project_or_404
from flowpilot.assistant import StrategyFactory, get_text_generator
from flowpilot.utils.audit_logger import create_audit_log

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/strategies", response_model=List[str])
def get_strategies(current_user: User = Depends(get_current_user)):
    """Names accepted by POST /execute"""
    return StrategyFactory.available()

@router.post("/execute", response_model=AssistantResponse)
def execute_strategy(
    body: AssistantRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    generator=Depends(get_text_generator)
):
    """
    Run an assistant strategy.

    - create: needs userInput, saves the generated project(s)
    - predict: needs projectId, appends suggested tasks
    - optimize: needs projectId, replaces all tasks

    Raises:
        400: Unknown strategy, missing input or unusable model output
        404: Project not found
        502: Model unavailable or returned nothing
    """
    logger.info(f"➡️  Assistant '{body.strategy}' request from: {current_user.email}")

    strategy = StrategyFactory(generator, db).get_strategy(body.strategy)
    project = get_project_or_404(body.project_id, db) if body.project_id else None

    result = strategy.execute(user_input=body.user_input, project=project)

    metadata = AssistantMetadata(**result["metadata"])
    saved = result["project"] if isinstance(result["project"], list) else [result["project"]]
    for item in saved:
        create_audit_log(
            db=db,
            user=current_user,
            action=strategy.audit_action,
            request=request,
            description=f"Assistant {strategy.name} on project '{item.name}'",
            details={"projectId": str(item.id), **metadata.model_dump(by_alias=True)},
        )

    responses = [ProjectDetailResponse.from_project(item) for item in saved]
    logger.info(f"✅ Assistant '{strategy.name}' finished for {len(saved)} project(s)")

    return AssistantResponse(
        action=result["action"],
        project=responses if isinstance(result["project"], list) else responses[0],
        metadata=metadata,
    )
