"""
Users API - User listing and profile endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from flowpilot.database import get_db
from flowpilot.schemas import UserResponse, UserUpdate
from flowpilot.models import User, AuditAction
from flowpilot.core.dependencies import get_current_user
from flowpilot.utils.audit_logger import create_audit_log, build_changes

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[UserResponse])
def get_all_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get all users, newest first.

    Query parameters:
        - page: Page number
        - pageSize: Items per page (max 100)
    """
    logger.info(f"➡️  Get all users request from: {current_user.email}")

    offset = (page - 1) * page_size
    users = db.query(User).order_by(User.created_at.desc()).offset(offset).limit(page_size).all()

    logger.info(f"✅ Returning {len(users)} users")
    return [UserResponse.model_validate(user) for user in users]

@router.patch("/me", response_model=UserResponse)
def update_profile(
    user_data: UserUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update the current user's name, full name or email.

    Raises:
        409: Email already used by another account
    """
    logger.info(f"➡️  Profile update request from: {current_user.email}")

    update_data = user_data.model_dump(exclude_unset=True)

    new_email = update_data.get("email")
    if new_email and new_email != current_user.email:
        taken = db.query(User).filter(User.email == new_email, User.id != current_user.id).first()
        if taken:
            logger.warning(f"⚠️  Profile update rejected - email in use: {new_email}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered"
            )

    old_data = {field: getattr(current_user, field) for field in update_data}
    for field, value in update_data.items():
        setattr(current_user, field, value)
    changes = build_changes(old_data, update_data)

    try:
        db.commit()
        db.refresh(current_user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to update profile: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile"
        )

    create_audit_log(
        db=db,
        user=current_user,
        action=AuditAction.UPDATE_PROFILE,
        request=request,
        description=f"Updated profile ({', '.join(changes.keys())})",
        details={"changes": changes},
    )
    logger.info(f"✅ Profile updated: {current_user.email}")
    return UserResponse.model_validate(current_user)

@router.get("/{user_id}", response_model=UserResponse)
def get_user_by_id(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get user by ID.

    Raises:
        404: User not found
    """
    logger.info(f"➡️  Get user {user_id} request from: {current_user.email}")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️  User {user_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found"
        )

    return UserResponse.model_validate(user)
