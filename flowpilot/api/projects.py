"""
Projects API - CRUD endpoints for projects
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional, List
from uuid import UUID
import logging

from flowpilot.database import get_db
from flowpilot.schemas import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectDetailResponse,
    TaskResponse,
)
from flowpilot.models import Project, Task, User, AuditAction
from flowpilot.core.dependencies import get_current_user, get_project_or_404
from flowpilot.utils.search import LIKE_ESCAPE, contains_pattern
from flowpilot.utils.audit_logger import (
    create_audit_log,
    build_changes,
    log_project_create,
    log_project_update,
    log_project_delete,
)

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=ProjectDetailResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a new project. Only name is required.

    Raises:
        422: Empty name or negative sprintsQuantity
        500: Database error
    """
    logger.info(f"➡️  Create project '{project_data.name}' by {current_user.email}")

    project = Project(**project_data.model_dump())

    try:
        db.add(project)
        db.commit()
        db.refresh(project)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create project: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create project"
        )

    log_project_create(db=db, user=current_user, project=project, request=request)
    logger.info(f"✅ Project created: {project.id}")
    return ProjectDetailResponse.from_project(project)

@router.get("", response_model=List[ProjectResponse])
def get_projects(
    request: Request,
    priority: Optional[str] = Query(None, description="Filter by priority"),
    search: Optional[str] = Query(None, description="Case-insensitive name match"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List projects with their task counts"""
    logger.info(f"➡️  Get all projects request from: {current_user.email}")

    query = (
        db.query(Project, func.count(Task.id))
        .outerjoin(Task, Task.project_id == Project.id)
        .group_by(Project.id)
    )
    if priority:
        query = query.filter(Project.priority == priority)
    if search:
        query = query.filter(Project.name.ilike(contains_pattern(search), escape=LIKE_ESCAPE))

    rows = query.order_by(Project.name).all()

    create_audit_log(
        db=db,
        user=current_user,
        action=AuditAction.GET_ALL_PROJECTS,
        request=request,
        description="Get all projects",
    )
    logger.info(f"✅ Returning {len(rows)} projects")
    return [ProjectResponse.from_project(project, count) for project, count in rows]

@router.get("/{project_id}", response_model=ProjectDetailResponse)
def get_project(
    project_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get a project with its tasks.

    Raises:
        404: Project not found
    """
    logger.info(f"➡️  Get project {project_id} request from: {current_user.email}")

    project = get_project_or_404(project_id, db)

    create_audit_log(
        db=db,
        user=current_user,
        action=AuditAction.GET_PROJECT,
        request=request,
        description=f"Get project with id: {project_id}",
    )
    return ProjectDetailResponse.from_project(project)

@router.get("/{project_id}/tasks", response_model=List[TaskResponse])
def get_project_tasks(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tasks of one project ordered by sprint, then name"""
    logger.info(f"➡️  Get tasks of project {project_id} request from: {current_user.email}")

    get_project_or_404(project_id, db)
    tasks = (
        db.query(Task)
        .filter(Task.project_id == project_id)
        .order_by(Task.sprint, Task.name)
        .all()
    )
    return [TaskResponse.model_validate(task) for task in tasks]

@router.patch("/{project_id}", response_model=ProjectDetailResponse)
def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Partially update a project. Only provided fields change.

    Raises:
        404: Project not found
    """
    logger.info(f"➡️  Update project {project_id} request from: {current_user.email}")

    project = get_project_or_404(project_id, db)

    update_data = project_data.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        del update_data["name"]  # name is required on the row

    old_data = {field: getattr(project, field) for field in update_data}
    for field, value in update_data.items():
        setattr(project, field, value)
    changes = build_changes(old_data, update_data)

    try:
        db.commit()
        db.refresh(project)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to update project: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update project"
        )

    log_project_update(db=db, user=current_user, project=project, changes=changes, request=request)
    logger.info(f"✅ Project updated: {project_id}")
    return ProjectDetailResponse.from_project(project)

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a project and all of its tasks.

    Raises:
        404: Project not found
    """
    logger.info(f"➡️  Delete project {project_id} request from: {current_user.email}")

    project = get_project_or_404(project_id, db)
    name = project.name

    try:
        db.delete(project)  # Tasks go with it (delete-orphan cascade)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to delete project: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete project"
        )

    log_project_delete(db=db, user=current_user, project_id=project_id, name=name, request=request)
    logger.info(f"✅ Project deleted: {project_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
