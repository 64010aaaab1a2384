"""
Tasks API - CRUD endpoints for project tasks
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID
import logging

from flowpilot.database import get_db
from flowpilot.schemas import TaskCreate, TaskUpdate, TaskResponse
from flowpilot.models import Task, User, AuditAction
from flowpilot.core.dependencies import get_current_user, get_project_or_404
from flowpilot.utils.audit_logger import (
    create_audit_log,
    build_changes,
    log_task_create,
    log_task_update,
    log_task_delete,
)

logger = logging.getLogger(__name__)
router = APIRouter()

def get_task_or_404(task_id: UUID, db: Session) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        logger.warning(f"⚠️  Task {task_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return task

@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a task inside an existing project.

    Raises:
        404: Project not found
        500: Database error
    """
    logger.info(f"➡️  Create task '{task_data.name}' by {current_user.email}")

    get_project_or_404(task_data.project_id, db)
    task = Task(**task_data.model_dump())

    try:
        db.add(task)
        db.commit()
        db.refresh(task)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create task: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create task"
        )

    log_task_create(db=db, user=current_user, task=task, request=request)
    logger.info(f"✅ Task created: {task.id}")
    return TaskResponse.model_validate(task)

@router.get("", response_model=List[TaskResponse])
def get_tasks(
    request: Request,
    project_id: Optional[UUID] = Query(None, alias="projectId"),
    sprint: Optional[int] = Query(None, ge=0),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List tasks, optionally filtered by project, sprint or assignee"""
    logger.info(f"➡️  Get all tasks request from: {current_user.email}")

    query = db.query(Task)
    if project_id:
        query = query.filter(Task.project_id == project_id)
    if sprint is not None:
        query = query.filter(Task.sprint == sprint)
    if assigned_to:
        query = query.filter(Task.assigned_to == assigned_to)

    tasks = query.order_by(Task.sprint, Task.name).all()

    create_audit_log(
        db=db,
        user=current_user,
        action=AuditAction.GET_ALL_TASKS,
        request=request,
        description="Get all tasks",
    )
    logger.info(f"✅ Returning {len(tasks)} tasks")
    return [TaskResponse.model_validate(task) for task in tasks]

@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get a single task.

    Raises:
        404: Task not found
    """
    task = get_task_or_404(task_id, db)

    create_audit_log(
        db=db,
        user=current_user,
        action=AuditAction.GET_TASK,
        request=request,
        description=f"Get task with id: {task_id}",
    )
    return TaskResponse.model_validate(task)

@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: UUID,
    task_data: TaskUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Partially update a task. Setting projectId moves it to that project.

    Raises:
        404: Task or target project not found
    """
    logger.info(f"➡️  Update task {task_id} request from: {current_user.email}")

    task = get_task_or_404(task_id, db)

    update_data = task_data.model_dump(exclude_unset=True)
    for required in ("name", "project_id"):
        if required in update_data and update_data[required] is None:
            del update_data[required]
    if "project_id" in update_data and update_data["project_id"] != task.project_id:
        get_project_or_404(update_data["project_id"], db)

    old_data = {field: getattr(task, field) for field in update_data}
    for field, value in update_data.items():
        setattr(task, field, value)
    changes = build_changes(old_data, update_data)

    try:
        db.commit()
        db.refresh(task)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to update task: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update task"
        )

    log_task_update(db=db, user=current_user, task=task, changes=changes, request=request)
    logger.info(f"✅ Task updated: {task_id}")
    return TaskResponse.model_validate(task)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a task.

    Raises:
        404: Task not found
    """
    logger.info(f"➡️  Delete task {task_id} request from: {current_user.email}")

    task = get_task_or_404(task_id, db)
    name = task.name

    try:
        db.delete(task)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to delete task: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete task"
        )

    log_task_delete(db=db, user=current_user, task_id=task_id, name=name, request=request)
    logger.info(f"✅ Task deleted: {task_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
