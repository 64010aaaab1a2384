"""
FastAPI Dependencies - Reusable dependency injection functions
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from flowpilot.database import get_db
from flowpilot.core.security import decode_token
from flowpilot.models import User, Project

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme - expects "Authorization: Bearer <token>" header
security = HTTPBearer(auto_error=False)

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},  # Tell client to use Bearer auth
    )

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),  # Extract token from Authorization header
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get currently authenticated user from an access token.

    Process:
        1. Extract token from Authorization header
        2. Verify signature, expiration and that it is an access token
        3. Fetch user referenced by the "sub" claim

    Raises:
        HTTPException 401: If token missing, invalid, expired, or user not found

    Usage in endpoints:
        @router.get("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return {"user": current_user.email}
    """
    if credentials is None:
        logger.warning("⚠️  Request without bearer token")
        raise _unauthorized("Not authenticated")

    user_id = decode_token(credentials.credentials)  # Returns user ID or None
    if not user_id:
        logger.warning("⚠️  Invalid or expired token provided")
        raise _unauthorized("Invalid authentication credentials")

    try:
        user = db.query(User).filter(User.id == UUID(user_id)).first()
    except ValueError:
        user = None  # "sub" is not a UUID
    if not user:
        logger.warning(f"⚠️  Token valid but user {user_id} not found")
        raise _unauthorized("User not found")

    logger.debug(f"✅ Authenticated user: {user.email}")
    return user

def get_project_or_404(project_id: UUID, db: Session) -> Project:
    """Fetch a project by ID or raise 404 "Project not found" """
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        logger.warning(f"⚠️  Project {project_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return project
